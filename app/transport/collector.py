# app/transport/collector.py
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, HTTPException, Query, Request
from pydantic import ValidationError

from app.domain.analytics import compute_color_analytics, summarize_session
from app.store.models import GameSession
from app.util.timeutil import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["collector"])


@router.post("/game-results")
async def save_game_result(request: Request, payload: Dict[str, Any] = Body(...)):
    """
    Store one finished session. Only complete games are accepted.
    """
    if not payload.get("id") or not payload.get("game_state"):
        raise HTTPException(status_code=400, detail="Invalid game session data")

    try:
        session = GameSession.model_validate(payload)
    except ValidationError as e:
        logger.info("Rejected malformed session %s: %s", payload.get("id"), e)
        raise HTTPException(status_code=400, detail="Invalid game session data")

    if session.game_state.game_phase != "complete":
        raise HTTPException(status_code=400, detail="Game session is not complete")

    if session.completed_at is None:
        session = session.model_copy(update={"completed_at": utcnow()})

    await request.app.state.repo.save_result(session)
    logger.info("Stored game session %s", session.id)
    return {"success": True, "message": "Game session saved successfully", "session_id": session.id}


@router.get("/game-results")
async def list_game_results(
    request: Request,
    limit: int = Query(100, ge=1, le=1000),
    include_analytics: bool = False,
):
    repo = request.app.state.repo
    sessions = await repo.list_results(limit)
    out: Dict[str, Any] = {
        "results": [summarize_session(s) for s in sessions],
        "total": await repo.count_results(),
    }
    if include_analytics:
        out["analytics"] = compute_color_analytics(await repo.list_results())
    return out


@router.get("/analytics")
async def get_analytics(request: Request):
    sessions = await request.app.state.repo.list_results()
    return {
        "success": True,
        "data": compute_color_analytics(sessions),
        "generated_at": utcnow().isoformat(),
    }
