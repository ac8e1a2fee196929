"""
WebSocket MCP Handler.

Serves the MCP method table over a WebSocket: one JSON-RPC message (or batch)
per text frame, replies sent back as text frames.
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool

from upgrade_lens.infrastructure.config.settings import Settings
from upgrade_lens.infrastructure.mcp.dispatcher import McpDispatcher
from upgrade_lens.infrastructure.mcp.server import build_server

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/mcp")
async def websocket_mcp(websocket: WebSocket):
    """WebSocket endpoint for MCP sessions.

    Every connection gets its own dispatcher, registry and services, so the
    initialize handshake is per connection. Building the server and handling
    a message both run in the threadpool, so a long scan on one connection
    leaves the event loop free for the others.
    """
    await websocket.accept()

    settings: Settings = websocket.app.state.settings
    dispatcher = McpDispatcher(await run_in_threadpool(build_server, settings))
    logger.info("WebSocket session opened: client=%s", websocket.client)

    try:
        while True:
            raw = await websocket.receive_text()
            reply = await run_in_threadpool(dispatcher.handle, raw)
            if reply:
                await websocket.send_text(reply)
    except WebSocketDisconnect:
        logger.info("WebSocket session closed: client=%s", websocket.client)
