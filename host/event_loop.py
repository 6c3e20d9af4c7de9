"""
Relay's main event loop.

Serializes connection lifecycle events and messages from every Socket.IO
connection into a single queue and applies them to the RelayEngine one at a
time, delivering the resulting outbound messages before taking the next event.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

# Type hinting imports
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from host.modules.relay.socket_server import RelaySocketServer

from host.modules.relay.connection_registry import ConnectionGroup
from host.modules.relay.exceptions import ConnectionRegistryError
from host.modules.relay.message_types import Message
from host.modules.relay.relay_engine import OutboundMessage, RelayEngine
from host.observability import get_tracer

tracer = get_tracer(__name__)

logger = logging.getLogger(__name__)


class RelayAction(str, Enum):
    CONNECT = "connect"
    MESSAGE = "message"
    DISCONNECT = "disconnect"


@dataclass(frozen=True)
class RelayEvent:
    group: ConnectionGroup
    action: RelayAction
    connection_id: str
    message: Optional[Message] = None

    @classmethod
    def connect(cls, group: ConnectionGroup, connection_id: str) -> 'RelayEvent':
        return cls(group=group, action=RelayAction.CONNECT, connection_id=connection_id)

    @classmethod
    def disconnect(cls, group: ConnectionGroup, connection_id: str) -> 'RelayEvent':
        return cls(group=group, action=RelayAction.DISCONNECT, connection_id=connection_id)

    @classmethod
    def received(cls, group: ConnectionGroup, connection_id: str, kind: str, data: Optional[Any] = None) -> 'RelayEvent':
        return cls(group=group, action=RelayAction.MESSAGE, connection_id=connection_id,
                   message=Message(kind=kind, data=data))


def format_payload(data: Any, verbose: bool = False, truncate_length: int = 100) -> str:
    """Render a payload for the log, truncated unless verbose."""
    try:
        rendered = json.dumps(data, indent=2, default=str)
    except (TypeError, ValueError):
        rendered = repr(data)
    if verbose:
        return rendered
    return f"{rendered[:truncate_length]}..."


class RelayEventLoop:

    def __init__(self,
                 engine: RelayEngine,
                 transport: Optional['RelaySocketServer'] = None,
                 log_verbose: bool = False,
                 truncate_length: int = 100):
        self.running = False
        self.engine = engine
        self.transport = transport
        self.log_verbose = log_verbose
        self.truncate_length = truncate_length

        # None is the wake-up sentinel pushed by stop()
        self._event_queue: asyncio.Queue[Optional[RelayEvent]] = asyncio.Queue()

        logger.info("RelayEventLoop initialized.")

    def enqueue_event(self, event: RelayEvent) -> None:
        """Adds an event from a transport handler to the processing queue."""
        try:
            self._event_queue.put_nowait(event)
            logger.debug(f"Relay event enqueued: {event.group.value} {event.action.value} {event.connection_id}")
        except asyncio.QueueFull:
            logger.error("RelayEventLoop queue is full! Event dropped.")

    def queue_size(self) -> int:
        return self._event_queue.qsize()

    async def process_pending_events(self) -> int:
        """Processes every event currently queued. Returns how many were handled."""
        processed = 0
        while not self._event_queue.empty():
            event = self._event_queue.get_nowait()
            try:
                if event is not None:
                    await self._process_event(event)
                    processed += 1
            finally:
                self._event_queue.task_done()
        return processed

    async def _process_event(self, event: RelayEvent) -> None:
        with tracer.start_as_current_span(f"relay.{event.group.value}.{event.action.value}") as span:
            span.set_attribute("relay.connection_id", event.connection_id)
            if event.message:
                span.set_attribute("relay.kind", event.message.kind)

            try:
                outbound = self._apply(event)
            except ConnectionRegistryError as e:
                # Lifecycle fault: abort this event only, the relay keeps running.
                span.record_exception(e)
                logger.error(f"Aborting {event.action.value} from {event.group.value} {event.connection_id}: {e}")
                return

            span.set_attribute("relay.outbound_count", len(outbound))
            for message in outbound:
                await self._deliver(message)

    def _apply(self, event: RelayEvent) -> List[OutboundMessage]:
        engine = self.engine
        connection_id = event.connection_id
        if event.group == ConnectionGroup.PRODUCER:
            if event.action == RelayAction.CONNECT:
                return engine.producer_connected(connection_id)
            if event.action == RelayAction.DISCONNECT:
                return engine.producer_disconnected(connection_id)
            return engine.producer_message(connection_id, event.message.kind, event.message.data)

        if event.action == RelayAction.CONNECT:
            return engine.consumer_connected(connection_id)
        if event.action == RelayAction.DISCONNECT:
            return engine.consumer_disconnected(connection_id)
        return engine.consumer_request(connection_id, event.message.kind, event.message.data)

    async def _deliver(self, message: OutboundMessage) -> None:
        if message.group == ConnectionGroup.PRODUCER:
            request = {"type": message.kind, "data": message.data}
            logger.info(f"Forwarding request to {len(message.targets)} browser target(s):\n"
                        f"{format_payload(request, verbose=True)}")
        elif message.data is not None:
            logger.info(f"{message.kind} {format_payload(message.data, self.log_verbose, self.truncate_length)}")

        if not message.targets:
            return
        if self.transport is None:
            logger.error(f"No transport configured, dropping {message.kind} for {len(message.targets)} connection(s)")
            return
        try:
            await self.transport.deliver(message)
        except Exception as e:
            logger.error(f"Error delivering {message.kind} to {message.group.value}s {list(message.targets)}: {e}",
                         exc_info=True)

    # --- Main Loop ---
    async def run(self):
        """Runs the main event loop until stop() is called."""
        logger.info("Starting Relay Event Loop...")
        self.running = True

        while self.running:
            event = await self._event_queue.get()
            try:
                if event is not None:
                    await self._process_event(event)
            except Exception:
                logger.exception("Exception while processing relay event.")
            finally:
                self._event_queue.task_done()

        logger.info("Relay Event Loop finished.")

    def stop(self):
        """Signals the event loop to stop gracefully."""
        if self.running:
            self.running = False
            self._event_queue.put_nowait(None)
            logger.info("Stopping Relay Event Loop...")
        else:
            logger.info("Relay Event Loop already stopped or stopping.")
