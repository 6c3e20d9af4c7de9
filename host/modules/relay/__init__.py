"""
Relay Module

Bridges browser targets (producers) and inspector apps (consumers):
- ConnectionRegistry: live connections per group
- StateStore: last-known inspection state for late joiners
- RelayEngine: producer/consumer protocols and fan-out
- RelaySocketServer (socket_server): Socket.IO transport binding
"""

from .connection_registry import ConnectionGroup, ConnectionRegistry
from .exceptions import DuplicateConnection, NoAvailableTarget, UnknownConnection
from .message_types import IncomingMessageType
from .relay_engine import OutboundMessage, RelayEngine
from .state_store import StateSnapshot, StateStore

__all__ = [
    "ConnectionGroup",
    "ConnectionRegistry",
    "DuplicateConnection",
    "IncomingMessageType",
    "NoAvailableTarget",
    "OutboundMessage",
    "RelayEngine",
    "StateSnapshot",
    "StateStore",
    "UnknownConnection",
]
