"""
Relay Exceptions

Error taxonomy for the inspector relay. Registry faults indicate misuse of the
connection lifecycle (a transport delivering the same lifecycle event twice)
and abort the handler for that event. NoAvailableTarget is user-visible and is
always converted into an ERROR event for consumers.
"""


class RelayError(Exception):
    """Base class for all relay errors."""


class ConnectionRegistryError(RelayError):
    """Raised when a connection lifecycle event violates registry invariants."""

    def __init__(self, group, connection_id: str, message: str):
        super().__init__(message)
        self.group = group
        self.connection_id = connection_id


class DuplicateConnection(ConnectionRegistryError):
    def __init__(self, group, connection_id: str):
        super().__init__(group, connection_id,
                         f"Tried to connect a {group.value} already added: {connection_id}")


class UnknownConnection(ConnectionRegistryError):
    def __init__(self, group, connection_id: str):
        super().__init__(group, connection_id,
                         f"Tried to disconnect a {group.value} that didn't exist: {connection_id}")


class NoAvailableTarget(RelayError):
    """Raised when a consumer request cannot be routed to any producer."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
