"""
Relay Message Types

The vocabulary exchanged over the two channels. Incoming kinds flow from
producers (browser targets) through the relay to consumers (inspector apps);
the relay also synthesizes TARGET_CONNECTED, TARGET_DISCONNECTED and ERROR.
Outgoing kinds (consumer requests) are an open set and are never interpreted.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class IncomingMessageType(str, Enum):
    SET_DOCUMENT = "SET_DOCUMENT"
    SET_STYLES = "SET_STYLES"
    SET_INSPECTION_ROOT = "SET_INSPECTION_ROOT"
    TARGET_CONNECTED = "TARGET_CONNECTED"
    TARGET_DISCONNECTED = "TARGET_DISCONNECTED"
    ERROR = "ERROR"


# Kinds that change the shared snapshot. Everything else passes through.
STATE_MUTATING_TYPES = frozenset({
    IncomingMessageType.SET_DOCUMENT,
    IncomingMessageType.SET_STYLES,
    IncomingMessageType.SET_INSPECTION_ROOT,
})

NO_AVAILABLE_TARGETS_MESSAGE = "No available browser targets"


def parse_incoming_kind(kind: str) -> Optional[IncomingMessageType]:
    """Map a wire event name to its IncomingMessageType, or None if unrecognized."""
    try:
        return IncomingMessageType(kind)
    except ValueError:
        return None


@dataclass(frozen=True)
class Message:
    """A `{kind, data}` envelope as carried by either channel."""
    kind: str
    data: Optional[Any] = None
