from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/clients")
async def list_clients(request: Request):
    """
    List clients with a saved game in progress (debug/admin).
    """
    repo = request.app.state.repo

    clients = []
    for client_id in await repo.list_client_ids():
        state = await repo.load_game_state(client_id)
        if state is None:
            continue
        cached = await repo.list_cached_sessions(client_id)
        clients.append(
            {
                "client_id": client_id,
                "phase": state.game_phase,
                "current_round": state.current_round,
                "total_rounds": state.total_rounds,
                "selections": len(state.round_history),
                "start_time": state.start_time.isoformat(),
                "finished_sessions": len(cached),
            }
        )

    return {"clients": clients}


@router.get("/clients/{client_id}/sessions")
async def list_client_sessions(client_id: str, request: Request):
    """Finished sessions cached locally for one client."""
    sessions = await request.app.state.repo.list_cached_sessions(client_id)
    return {"client_id": client_id, "sessions": [s.model_dump(mode="json") for s in sessions]}


@router.post("/clients/{client_id}/clear")
async def clear_client(client_id: str, request: Request):
    """
    Forget a client (debug/admin). Deletes its saved game and session cache.
    """
    repo = request.app.state.repo

    state = await repo.load_game_state(client_id)
    cached = await repo.list_cached_sessions(client_id)
    if state is None and not cached:
        raise HTTPException(status_code=404, detail="Client not found")

    await repo.clear_client(client_id)
    return {"ok": True, "client_id": client_id}
