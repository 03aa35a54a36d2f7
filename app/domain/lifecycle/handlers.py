# app/domain/lifecycle/handlers.py
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Iterable, Optional, Tuple

from app.domain.catalog.rounds import generate_all_rounds
from app.domain.game.handlers_common import DEFAULT_RULES, GameRules
from app.domain.game.handlers_reset import new_game_state
from app.domain.common.fsm import is_terminal
from app.domain.common.types import Intent
from app.store.models import DeviceInfo, GameState

logger = logging.getLogger(__name__)


def should_persist(state: GameState) -> bool:
    """
    A session still on round 1 with nothing picked is just the initial
    draw; it is not worth a write.
    """
    return state.current_round > 1 or state.game_phase != "selection" or bool(state.round_history)


async def resume_or_start(
    *,
    repo,
    client_id: str,
    total_rounds: int,
    colors_per_round: int,
    ts: datetime,
    rules: GameRules = DEFAULT_RULES,
) -> Tuple[GameState, bool]:
    """
    Resume the client's in-progress game, or start a new one.
    Finished games are never resumed. Returns (state, resumed).
    """
    saved = await repo.load_game_state(client_id)
    if saved is not None and not is_terminal(saved.game_phase):
        if not saved.all_rounds:
            saved.all_rounds = generate_all_rounds(
                saved.total_rounds, saved.colors_per_round, policy=rules.draw_policy, rng=rules.rng
            )
        logger.info("Resuming game for %s at round %d (%s)", client_id, saved.current_round, saved.game_phase)
        return saved, True

    if saved is not None:
        # finished games are not in progress any more
        await repo.clear_game_state(client_id)

    state = new_game_state(
        total_rounds=total_rounds,
        colors_per_round=colors_per_round,
        ts=ts,
        rules=rules,
    )
    return state, False


async def run_intents(
    *,
    repo,
    sync,
    client_id: str,
    state: GameState,
    device: DeviceInfo,
    intents: Iterable[Intent],
) -> Optional[asyncio.Task]:
    """
    Execute the side effects a transition asked for, in order.
    Writes are awaited; the sync push is left running in the background and
    its task returned.
    """
    task: Optional[asyncio.Task] = None
    for intent in intents:
        if intent == "persist":
            if should_persist(state):
                await repo.save_game_state(client_id, state)
        elif intent == "clear":
            await repo.clear_game_state(client_id)
        elif intent == "sync_if_complete":
            if sync is not None and state.game_phase == "complete":
                task = await sync.save_completed_game(client_id, state, device)
    return task
