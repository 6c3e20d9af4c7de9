"""
Shared State Store

Holds the last-known inspection state reported by the browser target:
the inspection root, the normalized node graph and the per-node styles
(computed style plus parent computed style). The store is a replay of every
accepted incoming event in arrival order, so a consumer that joins late can be
brought up to date from a single snapshot.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .message_types import IncomingMessageType, STATE_MUTATING_TYPES, parse_incoming_kind

logger = logging.getLogger(__name__)

NodeId = Any


@dataclass(frozen=True)
class StateSnapshot:
    inspection_root: Optional[NodeId] = None
    nodes: Dict[NodeId, Any] = field(default_factory=dict)
    styles: Dict[NodeId, Any] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return self.inspection_root is None and not self.nodes and not self.styles

    def to_document_payload(self) -> Dict[str, Any]:
        return {"styles": dict(self.styles), "nodes": dict(self.nodes)}

    def to_inspection_root_payload(self) -> Dict[str, Any]:
        return {"nodeId": self.inspection_root}


class StateStore:

    def __init__(self):
        self.inspection_root: Optional[NodeId] = None
        self.nodes: Dict[NodeId, Any] = {}
        self.styles: Dict[NodeId, Any] = {}

    def apply(self, kind: str, data: Optional[Any]) -> bool:
        """
        Apply an incoming event to the state.

        Args:
            kind: Wire name of the event
            data: Event payload as received from the producer

        Returns:
            True if the event changed the state, False for pass-through kinds
            and malformed payloads.
        """
        message_type = parse_incoming_kind(kind)
        if message_type not in STATE_MUTATING_TYPES:
            return False

        if not isinstance(data, dict):
            logger.warning(f"Ignoring {kind} with non-object payload: {type(data).__name__}")
            return False

        if message_type == IncomingMessageType.SET_DOCUMENT:
            # Full resync: both maps are replaced wholesale.
            self.nodes = _as_map(data.get("nodes"))
            self.styles = _as_map(data.get("styles"))
        elif message_type == IncomingMessageType.SET_STYLES:
            # Merge only. Styles of nodes that left the document are not pruned.
            self.styles = {**self.styles, **_as_map(data.get("styles"))}
        else:
            if "nodeId" in data:
                self.inspection_root = data["nodeId"]
            else:
                self.inspection_root = data.get("inspectionRoot")
        return True

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            inspection_root=self.inspection_root,
            nodes=dict(self.nodes),
            styles=dict(self.styles),
        )

    def reset(self) -> None:
        self.inspection_root = None
        self.nodes = {}
        self.styles = {}


def _as_map(value: Any) -> Dict[NodeId, Any]:
    if isinstance(value, dict):
        return dict(value)
    if value is not None:
        logger.warning(f"Expected an object keyed by node id, got {type(value).__name__}")
    return {}
