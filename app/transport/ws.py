# app/transport/ws.py
from __future__ import annotations

import ipaddress
import logging
from urllib.parse import urlparse

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.settings import get_settings
from app.domain.lifecycle.host import GameHost
from app.transport.dispatcher import dump_events
from app.transport.protocols import OutError

logger = logging.getLogger(__name__)

router = APIRouter()

LAN_DEV_PORT = 3000


def _is_private_ip(host: str) -> bool:
    """Return True if host is a private IP (192.168.x.x, 10.x.x.x, 172.16-31.x.x)."""
    try:
        ip = ipaddress.ip_address(host)
        return ip.is_private
    except ValueError:
        return False


async def _check_origin_or_close(websocket: WebSocket) -> bool:
    settings = get_settings()
    allowed = {o.strip() for o in settings.WS_ALLOWED_ORIGINS.split(",") if o.strip()}

    origin = websocket.headers.get("origin")
    if origin is None or origin in allowed:
        return True
    if settings.WS_ALLOW_LAN_ORIGINS:
        o = urlparse(origin)
        if _is_private_ip(o.hostname or "") and o.port == LAN_DEV_PORT:
            return True
    logger.info("Rejected websocket from origin %s", origin)
    await websocket.close(code=1008)
    return False


def _build_host(websocket: WebSocket, client_id: str) -> GameHost:
    settings = get_settings()
    state = websocket.app.state
    return GameHost(
        client_id=client_id,
        repo=state.repo,
        sync=state.sync,
        rules=state.rules,
        total_rounds=settings.TOTAL_ROUNDS,
        colors_per_round=settings.COLORS_PER_ROUND,
    )


@router.websocket("/ws/play/{client_id}")
async def ws_play(websocket: WebSocket, client_id: str):
    """
    One connection per player. The client id is chosen by the client and
    stays stable across reloads so an unfinished game can be resumed.
    """
    if not await _check_origin_or_close(websocket):
        return

    await websocket.accept()

    host = _build_host(websocket, client_id)
    for e in dump_events(await host.start()):
        await websocket.send_json(e)

    try:
        while True:
            try:
                raw = await websocket.receive_json()
            except ValueError:
                err = OutError(code="BAD_MESSAGE", message="Message is not valid JSON")
                await websocket.send_json(err.model_dump())
                continue

            for e in dump_events(await host.handle(raw)):
                await websocket.send_json(e)
    except WebSocketDisconnect:
        logger.debug("Client %s disconnected", client_id)
