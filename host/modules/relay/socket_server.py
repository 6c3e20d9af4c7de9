"""
Relay Socket.IO Server

Transport binding for the relay. Browser targets connect on the producer
namespace (default /browsers) and inspector apps on the consumer namespace
(default /apps). Every lifecycle event and message is handed to the
RelayEventLoop; nothing here touches relay state directly.

Also serves two JSON endpoints on the same aiohttp application:
- GET /health - liveness
- GET /status - connection counts, presence and snapshot summary
"""

import logging
import time
from typing import Any, Dict, List, Optional, Union

import socketio  # python-socketio
from aiohttp import web
from aiohttp.web import Request, Response

from host.event_loop import RelayEvent, RelayEventLoop
from .connection_registry import ConnectionGroup
from .relay_engine import OutboundMessage

logger = logging.getLogger(__name__)


class RelayNamespace(socketio.AsyncNamespace):
    """
    Catch-all namespace: every Socket.IO event received on it becomes a
    RelayEvent for the given connection group. The event name is the message
    kind and the first argument is its payload.
    """

    def __init__(self, namespace: str, group: ConnectionGroup, event_loop: RelayEventLoop):
        super().__init__(namespace)
        self.group = group
        self.event_loop = event_loop

    async def trigger_event(self, event: str, *args):
        if not args:
            logger.warning(f"Ignoring '{event}' on {self.namespace} without a session id")
            return None
        sid = args[0]

        if event == "connect":
            logger.debug(f"Socket connected on {self.namespace}: sid={sid}")
            self.event_loop.enqueue_event(RelayEvent.connect(self.group, sid))
        elif event == "disconnect":
            logger.debug(f"Socket disconnected from {self.namespace}: sid={sid}")
            self.event_loop.enqueue_event(RelayEvent.disconnect(self.group, sid))
        else:
            data = args[1] if len(args) > 1 else None
            self.event_loop.enqueue_event(RelayEvent.received(self.group, sid, event, data))
        return None


def parse_cors_origins(value: str) -> Union[str, List[str]]:
    """'*' allows any origin; anything else is a comma separated list."""
    value = value.strip()
    if value == "*":
        return value
    return [origin.strip() for origin in value.split(",") if origin.strip()]


class RelaySocketServer:

    def __init__(self,
                 event_loop: RelayEventLoop,
                 host: str = "0.0.0.0",
                 port: int = 8000,
                 producer_namespace: str = "/browsers",
                 consumer_namespace: str = "/apps",
                 cors_allowed_origins: str = "*"):
        self.event_loop = event_loop
        self.host = host
        self.port = port
        self.namespaces: Dict[ConnectionGroup, str] = {
            ConnectionGroup.PRODUCER: producer_namespace,
            ConnectionGroup.CONSUMER: consumer_namespace,
        }

        self.sio = socketio.AsyncServer(
            async_mode="aiohttp",
            cors_allowed_origins=parse_cors_origins(cors_allowed_origins),
            logger=False,
            engineio_logger=False,
        )
        self.app = web.Application()
        self.sio.attach(self.app)
        for group, namespace in self.namespaces.items():
            self.sio.register_namespace(RelayNamespace(namespace, group, event_loop))

        self.app.router.add_get("/health", self.handle_health)
        self.app.router.add_get("/status", self.handle_status)

        self.runner: Optional[web.AppRunner] = None
        self.site: Optional[web.TCPSite] = None
        self.start_time = time.time()

    async def deliver(self, message: OutboundMessage) -> None:
        """Emits the message to each of its targets on the group's namespace."""
        namespace = self.namespaces[message.group]
        for sid in message.targets:
            await self.sio.emit(message.kind, message.data, to=sid, namespace=namespace)

    async def start(self):
        """Start the Socket.IO/HTTP server."""
        try:
            self.runner = web.AppRunner(self.app)
            await self.runner.setup()

            self.site = web.TCPSite(self.runner, self.host, self.port)
            await self.site.start()

            logger.info(f"Relay server listening on http://{self.host}:{self.port}")
            logger.info(f"  Browser targets: {self.namespaces[ConnectionGroup.PRODUCER]}")
            logger.info(f"  Inspector apps:  {self.namespaces[ConnectionGroup.CONSUMER]}")
            logger.info(f"  GET http://{self.host}:{self.port}/status - Relay status")
        except Exception as e:
            logger.error(f"Failed to start relay server: {e}", exc_info=True)
            raise

    async def stop(self):
        """Stop the Socket.IO/HTTP server."""
        try:
            if self.site:
                await self.site.stop()
            if self.runner:
                await self.runner.cleanup()
            logger.info("Relay server stopped")
        except Exception as e:
            logger.error(f"Error stopping relay server: {e}", exc_info=True)

    def _json_response(self, data: Any, status: int = 200) -> Response:
        return web.json_response(
            data,
            status=status,
            headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": "GET, OPTIONS",
                "Access-Control-Allow-Headers": "Content-Type",
            },
        )

    async def handle_health(self, request: Request) -> Response:
        return self._json_response({"status": "ok"})

    async def handle_status(self, request: Request) -> Response:
        data = self.event_loop.engine.status()
        data["uptime_seconds"] = round(time.time() - self.start_time, 3)
        data["queued_events"] = self.event_loop.queue_size()
        return self._json_response(data)
