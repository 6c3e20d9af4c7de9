"""
Relay Engine

Routes messages between browser targets (producers) and inspector apps
(consumers) and keeps the shared inspection state in step with what the
producers report.

The engine is synchronous and is driven one event at a time by the
RelayEventLoop. Each operation returns the outbound messages to deliver, with
their targets already resolved against the registry, so an event only ever
reaches connections that were registered when it was processed.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .connection_registry import ConnectionChanged, ConnectionGroup, ConnectionRegistry
from .exceptions import NoAvailableTarget, UnknownConnection
from .message_types import IncomingMessageType, NO_AVAILABLE_TARGETS_MESSAGE
from .state_store import StateSnapshot, StateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutboundMessage:
    group: ConnectionGroup
    kind: str
    data: Optional[Any]
    targets: Tuple[str, ...]


class RelayEngine:
    """
    Owns the ConnectionRegistry and StateStore and implements the producer
    and consumer protocols on top of them.
    """

    def __init__(self, scope_errors_to_requester: bool = False):
        """
        Args:
            scope_errors_to_requester: Send the "no available targets" error
                only to the consumer that made the request instead of to every
                consumer.
        """
        self._registry = ConnectionRegistry()
        self._store = StateStore()
        self.scope_errors_to_requester = scope_errors_to_requester
        self._registry.add_listener(self._log_connection_change)

    # --- Producer protocol ---

    def producer_connected(self, connection_id: str) -> List[OutboundMessage]:
        self._registry.register(ConnectionGroup.PRODUCER, connection_id)
        return [self._to_consumers(IncomingMessageType.TARGET_CONNECTED.value)]

    def producer_message(self, connection_id: str, kind: str, data: Optional[Any]) -> List[OutboundMessage]:
        self._require_registered(ConnectionGroup.PRODUCER, connection_id)
        if self._store.apply(kind, data):
            logger.debug(f"State updated by {kind} from producer {connection_id}")
        return [self._to_consumers(kind, data)]

    def producer_disconnected(self, connection_id: str) -> List[OutboundMessage]:
        change = self._registry.unregister(ConnectionGroup.PRODUCER, connection_id)
        if change.counts.producers == 0:
            logger.info("Last browser target disconnected, resetting inspection state")
            self._store.reset()
        return [self._to_consumers(self.presence().value)]

    # --- Consumer protocol ---

    def consumer_connected(self, connection_id: str) -> List[OutboundMessage]:
        self._registry.register(ConnectionGroup.CONSUMER, connection_id)
        snapshot = self._store.snapshot()

        outbound = [self._to_consumers(self.presence().value)]
        if snapshot.inspection_root is not None:
            outbound.append(self._to_one(ConnectionGroup.CONSUMER, connection_id,
                                         IncomingMessageType.SET_INSPECTION_ROOT.value,
                                         snapshot.to_inspection_root_payload()))
        # Always replayed, even when empty, so the consumer can drop stale state.
        outbound.append(self._to_one(ConnectionGroup.CONSUMER, connection_id,
                                     IncomingMessageType.SET_DOCUMENT.value,
                                     snapshot.to_document_payload()))
        return outbound

    def consumer_request(self, connection_id: str, kind: str, data: Optional[Any]) -> List[OutboundMessage]:
        self._require_registered(ConnectionGroup.CONSUMER, connection_id)
        try:
            return [self._to_producers(kind, data)]
        except NoAvailableTarget as e:
            logger.warning(f"Dropping {kind} request from consumer {connection_id}: {e.message}")
            error_payload = {"message": e.message}
            if self.scope_errors_to_requester:
                return [self._to_one(ConnectionGroup.CONSUMER, connection_id,
                                     IncomingMessageType.ERROR.value, error_payload)]
            return [self._to_consumers(IncomingMessageType.ERROR.value, error_payload)]

    def consumer_disconnected(self, connection_id: str) -> List[OutboundMessage]:
        self._registry.unregister(ConnectionGroup.CONSUMER, connection_id)
        return []

    # --- Queries ---

    def presence(self) -> IncomingMessageType:
        if self._registry.count(ConnectionGroup.PRODUCER) > 0:
            return IncomingMessageType.TARGET_CONNECTED
        return IncomingMessageType.TARGET_DISCONNECTED

    def snapshot(self) -> StateSnapshot:
        return self._store.snapshot()

    def members(self, group: ConnectionGroup) -> Tuple[str, ...]:
        return self._registry.members(group)

    def status(self) -> Dict[str, Any]:
        counts = self._registry.counts()
        snapshot = self._store.snapshot()
        return {
            "presence": self.presence().value,
            "producers": counts.producers,
            "consumers": counts.consumers,
            "inspection_root": snapshot.inspection_root,
            "node_count": len(snapshot.nodes),
            "style_count": len(snapshot.styles),
        }

    # --- Helpers ---

    def _to_consumers(self, kind: str, data: Optional[Any] = None) -> OutboundMessage:
        return OutboundMessage(group=ConnectionGroup.CONSUMER, kind=kind, data=data,
                               targets=self._registry.members(ConnectionGroup.CONSUMER))

    def _to_producers(self, kind: str, data: Optional[Any]) -> OutboundMessage:
        producers = self._registry.members(ConnectionGroup.PRODUCER)
        if not producers:
            raise NoAvailableTarget(NO_AVAILABLE_TARGETS_MESSAGE)
        return OutboundMessage(group=ConnectionGroup.PRODUCER, kind=kind, data=data, targets=producers)

    @staticmethod
    def _to_one(group: ConnectionGroup, connection_id: str, kind: str, data: Optional[Any]) -> OutboundMessage:
        return OutboundMessage(group=group, kind=kind, data=data, targets=(connection_id,))

    def _require_registered(self, group: ConnectionGroup, connection_id: str) -> None:
        if not self._registry.is_registered(group, connection_id):
            raise UnknownConnection(group, connection_id)

    @staticmethod
    def _log_connection_change(change: ConnectionChanged) -> None:
        logger.info(change.describe(), extra={"connection_change": change.to_dict()})
