# app/domain/game/handlers_common.py
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from app.domain.catalog.colors import get_most_selected_colors
from app.domain.common.errors import BracketSizeError, PhaseTransitionError
from app.domain.common.fsm import can_transition_phase
from app.domain.common.types import DrawPolicy, GamePhase, Intent
from app.domain.game.bracket import BRACKET_SIZE, bracket_stage, current_match, start_bracket
from app.store.models import Color, GameState, RoundResult
from app.transport.protocols import (
    OutBracketMatch,
    OutError,
    OutGameSnapshot,
    OutgoingEvent,
    OutPhaseChanged,
)

FAVORITES_MIN = 3


@dataclass
class GameRules:
    """Session-wide knobs the transitions need. Built from Settings by the host."""
    draw_policy: DrawPolicy = "balanced"
    favorites_phase: bool = False
    favorites_max: int = 8
    rng: Optional[random.Random] = None


DEFAULT_RULES = GameRules()


@dataclass
class Transition:
    """
    Outcome of one event: the next state, events for the player, and the
    side effects the host must run (persist, clear, sync_if_complete).
    """
    state: GameState
    events: List[OutgoingEvent] = field(default_factory=list)
    intents: List[Intent] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not any(isinstance(e, OutError) for e in self.events)


def reject(state: GameState, code: str, message: str) -> Transition:
    return Transition(state=state, events=[OutError(code=code, message=message)], intents=[])


def color_dump(c: Color) -> Dict[str, Any]:
    return c.model_dump(mode="json")


def colors_dump(colors: Sequence[Color]) -> List[Dict[str, Any]]:
    return [color_dump(c) for c in colors]


def same_hex(a: str, b: str) -> bool:
    return (a or "").lower() == (b or "").lower()


def set_phase(state: GameState, target: GamePhase) -> None:
    if not can_transition_phase(state.game_phase, target):
        raise PhaseTransitionError(state.game_phase, target)
    state.game_phase = target


def active_colors(state: GameState) -> List[Color]:
    """Offer set of the current round, as drawn at session start."""
    idx = state.current_round - 1
    if 0 <= idx < len(state.all_rounds):
        return state.all_rounds[idx]
    return []


def find_round_result(state: GameState, round_no: int) -> Optional[Tuple[int, RoundResult]]:
    for i, rr in enumerate(state.round_history):
        if rr.round == round_no:
            return i, rr
    return None


def find_selected(state: GameState, hex_value: str) -> Optional[Color]:
    for key, rec in state.selected_colors.items():
        if same_hex(key, hex_value):
            return rec
    return None


def top_selected(state: GameState, count: int) -> List[Color]:
    return get_most_selected_colors(state.selected_colors.values(), count)


def bracket_events(state: GameState) -> List[OutgoingEvent]:
    if state.bracket is None:
        return []
    match = current_match(state.bracket)
    if match is None:
        return []
    return [OutBracketMatch(stage=bracket_stage(state.bracket), colors=colors_dump(match))]


def enter_finale(state: GameState, favorites: List[Color]) -> List[OutgoingEvent]:
    """
    Move `state` (already a private copy) into the finale.
    The bracket runs on the top 4 favorites; any other count halts the
    finale with a FINALE_BLOCKED error until the game is reset.
    """
    state.favorites = [c.model_copy(deep=True) for c in favorites]
    set_phase(state, "finale")
    state.bracket = None

    events: List[OutgoingEvent] = [OutPhaseChanged(phase="finale")]
    candidates = get_most_selected_colors(state.favorites, BRACKET_SIZE)
    try:
        state.bracket = start_bracket(candidates)
    except BracketSizeError as e:
        events.append(OutError(code=e.code, message=str(e)))
        return events

    events.extend(bracket_events(state))
    return events


def build_snapshot(state: GameState) -> OutGameSnapshot:
    match: List[Dict[str, Any]] = []
    if state.bracket is not None:
        m = current_match(state.bracket)
        if m is not None:
            match = colors_dump(m)
    return OutGameSnapshot(
        state=state.model_dump(mode="json", exclude={"all_rounds"}),
        active_colors=colors_dump(active_colors(state)) if state.game_phase == "selection" else [],
        match=match,
    )
