# app/domain/game/handlers_reset.py
from __future__ import annotations

from datetime import datetime

from app.domain.catalog.rounds import generate_all_rounds
from app.domain.game.handlers_common import (
    DEFAULT_RULES,
    GameRules,
    Transition,
    colors_dump,
)
from app.store.models import GameState
from app.transport.protocols import InReset, OutGameReset


def new_game_state(
    *,
    total_rounds: int,
    colors_per_round: int,
    ts: datetime,
    rules: GameRules = DEFAULT_RULES,
) -> GameState:
    """Fresh session: every round drawn now, round 1 active."""
    return GameState(
        current_round=1,
        total_rounds=total_rounds,
        colors_per_round=colors_per_round,
        all_rounds=generate_all_rounds(
            total_rounds, colors_per_round, policy=rules.draw_policy, rng=rules.rng
        ),
        game_phase="selection",
        start_time=ts,
    )


def handle_reset(
    *, state: GameState, msg: InReset, ts: datetime, rules: GameRules = DEFAULT_RULES
) -> Transition:
    """Allowed from any phase. Keeps the session's round configuration."""
    new = new_game_state(
        total_rounds=state.total_rounds,
        colors_per_round=state.colors_per_round,
        ts=ts,
        rules=rules,
    )
    event = OutGameReset(total_rounds=new.total_rounds, colors=colors_dump(new.all_rounds[0]))
    return Transition(state=new, events=[event], intents=["clear"])
