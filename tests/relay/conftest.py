"""
Test configuration and fixtures specific to relay module tests.
"""

import pytest

from host.modules.relay.relay_engine import RelayEngine


@pytest.fixture
def engine():
    """A fresh RelayEngine with no connections and empty state."""
    return RelayEngine()


@pytest.fixture
def sample_document():
    """A SET_DOCUMENT payload with two nodes and their styles."""
    return {
        "nodes": {
            "1": {"nodeId": 1, "nodeName": "BODY", "children": [2]},
            "2": {"nodeId": 2, "nodeName": "DIV", "children": []},
        },
        "styles": {
            "1": {"computedStyle": {"display": "block"}, "parentComputedStyle": {}},
            "2": {"computedStyle": {"color": "red"}, "parentComputedStyle": {"display": "block"}},
        },
    }
