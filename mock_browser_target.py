"""
Mock Browser Target

Simulates a browser-side instrumentation agent connecting to the relay's
producer namespace. Publishes a small sample document, selects an inspection
root, then pushes a style update, and logs every request the inspector apps
send back through the relay.
"""

import argparse
import asyncio
import logging
from typing import Any, Dict, Optional

import socketio  # Use python-socketio for the client

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("MockBrowserTarget")


def build_sample_document() -> Dict[str, Any]:
    """A two-node document: <body> containing a <div>."""
    nodes = {
        "1": {"nodeId": 1, "nodeName": "BODY", "parentId": None, "children": [2]},
        "2": {"nodeId": 2, "nodeName": "DIV", "parentId": 1, "children": []},
    }
    styles = {
        "1": {"computedStyle": {"display": "block", "margin": "8px"}, "parentComputedStyle": {}},
        "2": {"computedStyle": {"display": "block", "color": "rgb(0, 0, 0)"},
              "parentComputedStyle": {"display": "block", "margin": "8px"}},
    }
    return {"nodes": nodes, "styles": styles}


def build_style_update(node_id: str, color: str) -> Dict[str, Any]:
    return {
        "styles": {
            node_id: {
                "computedStyle": {"display": "block", "color": color},
                "parentComputedStyle": {"display": "block", "margin": "8px"},
            }
        }
    }


def build_inspection_root(node_id: Optional[int]) -> Dict[str, Any]:
    return {"nodeId": node_id}


async def run_target(url: str, namespace: str = "/browsers", hold_seconds: float = 0):
    client = socketio.AsyncClient(logger=False, reconnection=True)

    @client.event(namespace=namespace)
    async def connect():
        logger.info(f"Connected to relay at {url}{namespace}")

    @client.event(namespace=namespace)
    async def disconnect(*args):
        logger.info("Disconnected from relay")

    @client.on("*", namespace=namespace)
    async def any_request(event, data=None):
        logger.info(f"Request from inspector app: type={event}, data={data}")

    await client.connect(url, namespaces=[namespace])
    try:
        await client.emit("SET_DOCUMENT", build_sample_document(), namespace=namespace)
        await client.emit("SET_INSPECTION_ROOT", build_inspection_root(2), namespace=namespace)
        await client.emit("SET_STYLES", build_style_update("2", "rgb(255, 0, 0)"), namespace=namespace)
        logger.info("Sample document, inspection root and style update published.")
        if hold_seconds > 0:
            await asyncio.sleep(hold_seconds)
        else:
            await client.wait()
    finally:
        await client.disconnect()


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="Connect a fake browser target to the relay.")
    parser.add_argument("--url", default="http://localhost:8000")
    parser.add_argument("--namespace", default="/browsers")
    parser.add_argument("--hold", type=float, default=0, help="Seconds to stay connected (0 = until interrupted)")
    args = parser.parse_args()
    try:
        asyncio.run(run_target(args.url, args.namespace, args.hold))
    except KeyboardInterrupt:
        logger.info("Mock browser target shutting down.")
