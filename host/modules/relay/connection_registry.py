"""
Connection Registry

Tracks live Socket.IO connections for the two relay groups:
- producers: browser targets publishing inspection state
- consumers: inspector apps receiving that state

The registry only records membership; it is owned by the RelayEngine and is
never touched directly by transport handlers.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Tuple

from .exceptions import DuplicateConnection, UnknownConnection

logger = logging.getLogger(__name__)


class ConnectionGroup(str, Enum):
    PRODUCER = "producer"
    CONSUMER = "consumer"


@dataclass(frozen=True)
class ConnectionCounts:
    producers: int
    consumers: int


@dataclass(frozen=True)
class ConnectionChanged:
    """Emitted after every successful register/unregister."""
    group: ConnectionGroup
    connection_id: str
    connected: bool
    counts: ConnectionCounts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group": self.group.value,
            "connection_id": self.connection_id,
            "connected": self.connected,
            "producers": self.counts.producers,
            "consumers": self.counts.consumers,
        }

    def describe(self) -> str:
        status = "Connected to" if self.connected else "Disconnected from"
        return (f"{status} {self.group.value}: {self.connection_id} | "
                f"Total consumers: {self.counts.consumers} | "
                f"Total producers: {self.counts.producers}")


ConnectionListener = Callable[[ConnectionChanged], None]


class ConnectionRegistry:
    """
    Membership sets for producer and consumer connections.

    Registering an id twice in the same group, or removing an id that is not
    registered, is a lifecycle fault and raises instead of being ignored.
    """

    def __init__(self):
        # dicts keep registration order for deterministic fan-out
        self._members: Dict[ConnectionGroup, Dict[str, None]] = {
            ConnectionGroup.PRODUCER: {},
            ConnectionGroup.CONSUMER: {},
        }
        self._listeners: List[ConnectionListener] = []

    def add_listener(self, listener: ConnectionListener) -> None:
        self._listeners.append(listener)

    def register(self, group: ConnectionGroup, connection_id: str) -> ConnectionChanged:
        members = self._members[group]
        if connection_id in members:
            raise DuplicateConnection(group, connection_id)
        members[connection_id] = None
        return self._notify(group, connection_id, connected=True)

    def unregister(self, group: ConnectionGroup, connection_id: str) -> ConnectionChanged:
        members = self._members[group]
        if connection_id not in members:
            raise UnknownConnection(group, connection_id)
        del members[connection_id]
        return self._notify(group, connection_id, connected=False)

    def is_registered(self, group: ConnectionGroup, connection_id: str) -> bool:
        return connection_id in self._members[group]

    def members(self, group: ConnectionGroup) -> Tuple[str, ...]:
        return tuple(self._members[group])

    def count(self, group: ConnectionGroup) -> int:
        return len(self._members[group])

    def counts(self) -> ConnectionCounts:
        return ConnectionCounts(
            producers=self.count(ConnectionGroup.PRODUCER),
            consumers=self.count(ConnectionGroup.CONSUMER),
        )

    def _notify(self, group: ConnectionGroup, connection_id: str, connected: bool) -> ConnectionChanged:
        change = ConnectionChanged(group=group, connection_id=connection_id,
                                   connected=connected, counts=self.counts())
        for listener in self._listeners:
            try:
                listener(change)
            except Exception as e:
                logger.error(f"Connection listener failed for {change.to_dict()}: {e}", exc_info=True)
        return change
