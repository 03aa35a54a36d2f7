# app/domain/game/handlers_finale.py
from __future__ import annotations

from datetime import datetime
from typing import List

from app.domain.common.errors import BracketClosedError, BracketPickError
from app.domain.game.bracket import apply_pick
from app.domain.game.handlers_common import (
    DEFAULT_RULES,
    GameRules,
    Transition,
    bracket_events,
    colors_dump,
    reject,
    same_hex,
    set_phase,
)
from app.store.models import Color, GameState
from app.transport.protocols import (
    InBracketPick,
    InSetFinalRanking,
    OutGameComplete,
    OutgoingEvent,
    OutPhaseChanged,
)

RANKING_SIZE = 3


def _complete(state: GameState, top3: List[Color]) -> List[OutgoingEvent]:
    state.final_top3 = [c.model_copy(deep=True) for c in top3]
    set_phase(state, "complete")
    ranking = state.bracket.ranking if state.bracket is not None else []
    return [
        OutPhaseChanged(phase="complete"),
        OutGameComplete(final_top3=colors_dump(state.final_top3), ranking=colors_dump(ranking)),
    ]


def handle_bracket_pick(
    *, state: GameState, msg: InBracketPick, ts: datetime, rules: GameRules = DEFAULT_RULES
) -> Transition:
    """
    Winner of the current bracket match. The fourth pick fixes the ranking
    and completes the game with its top 3.
    """
    if state.game_phase != "finale":
        return reject(state, "BAD_PHASE", f"Cannot pick in phase {state.game_phase}")
    if state.bracket is None:
        return reject(state, "FINALE_BLOCKED", "Finale requires exactly 4 colors")

    try:
        bracket = apply_pick(state.bracket, msg.hex)
    except (BracketPickError, BracketClosedError) as e:
        return reject(state, e.code, str(e))

    new = state.model_copy(deep=True)
    new.bracket = bracket
    if not bracket.ranking:
        return Transition(state=new, events=bracket_events(new), intents=["persist"])

    events = _complete(new, bracket.ranking[:RANKING_SIZE])
    return Transition(state=new, events=events, intents=["persist", "sync_if_complete"])


def handle_set_final_ranking(
    *, state: GameState, msg: InSetFinalRanking, ts: datetime, rules: GameRules = DEFAULT_RULES
) -> Transition:
    """
    Fix the final top 3. Only a resolved bracket can be ranked, and the
    ranking must be its top 3 in order.
    """
    if state.game_phase != "finale":
        return reject(state, "BAD_PHASE", f"Cannot set a ranking in phase {state.game_phase}")
    if state.bracket is None:
        return reject(state, "FINALE_BLOCKED", "Finale requires exactly 4 colors")
    if not state.bracket.ranking:
        return reject(state, "BRACKET_OPEN", "Finish the bracket before ranking")
    if len(msg.hexes) != RANKING_SIZE:
        return reject(state, "BAD_RANKING", f"Ranking needs exactly {RANKING_SIZE} colors, got {len(msg.hexes)}")
    if len({(h or "").lower() for h in msg.hexes}) != RANKING_SIZE:
        return reject(state, "BAD_RANKING", "Ranking colors must be distinct")

    top3: List[Color] = []
    for h in msg.hexes:
        rec = next((c for c in state.favorites if same_hex(c.hex, h)), None)
        if rec is None:
            return reject(state, "UNKNOWN_COLOR", f"{h} is not a finalist")
        top3.append(rec)

    expected = state.bracket.ranking[:RANKING_SIZE]
    if not all(same_hex(a.hex, b.hex) for a, b in zip(top3, expected)):
        return reject(state, "BAD_RANKING", "Ranking must follow the bracket result")

    new = state.model_copy(deep=True)
    events = _complete(new, top3)
    return Transition(state=new, events=events, intents=["persist", "sync_if_complete"])
