"""
Host process for the inspector relay.
"""
