# app/domain/game/handlers_selection.py
from __future__ import annotations

from datetime import datetime

from app.domain.game.handlers_common import (
    DEFAULT_RULES,
    FAVORITES_MIN,
    GameRules,
    Transition,
    active_colors,
    colors_dump,
    enter_finale,
    find_round_result,
    reject,
    same_hex,
    set_phase,
    top_selected,
)
from app.domain.game.bracket import BRACKET_SIZE
from app.store.models import GameState, RoundResult
from app.transport.protocols import (
    InNextRound,
    InPreviousRound,
    InSelectColor,
    OutColorSelected,
    OutFavoritesCandidates,
    OutPhaseChanged,
    OutRoundChanged,
)


def _round_changed(state: GameState) -> OutRoundChanged:
    found = find_round_result(state, state.current_round)
    return OutRoundChanged(
        round=state.current_round,
        total_rounds=state.total_rounds,
        colors=colors_dump(active_colors(state)),
        selected_hex=found[1].selected_color.hex if found else None,
    )


def handle_select_color(
    *, state: GameState, msg: InSelectColor, ts: datetime, rules: GameRules = DEFAULT_RULES
) -> Transition:
    """
    Record the player's pick for the current round.
    A second pick for the same round (re-pick, or after navigating back)
    overwrites the first one and rolls its count back. Does not advance.
    """
    if state.game_phase != "selection":
        return reject(state, "BAD_PHASE", f"Cannot select a color in phase {state.game_phase}")

    offer = active_colors(state)
    chosen = next((c for c in offer if same_hex(c.hex, msg.hex)), None)
    if chosen is None:
        return reject(state, "UNKNOWN_COLOR", f"{msg.hex} is not offered in round {state.current_round}")

    new = state.model_copy(deep=True)
    hex_key = chosen.hex
    found = find_round_result(new, new.current_round)
    previous_hex = found[1].selected_color.hex if found else None

    if previous_hex is not None and previous_hex != hex_key:
        rec = new.selected_colors.get(previous_hex)
        if rec is not None:
            rec.selection_count -= 1
            if rec.selection_count <= 0:
                del new.selected_colors[previous_hex]

    if previous_hex != hex_key:
        rec = new.selected_colors.get(hex_key)
        if rec is None:
            new.selected_colors[hex_key] = chosen.model_copy(update={"selection_count": 1}, deep=True)
        else:
            rec.selection_count += 1

    result = RoundResult(
        round=new.current_round,
        colors_shown=[c.model_copy(deep=True) for c in offer],
        selected_color=chosen.model_copy(deep=True),
        time_spent=msg.time_spent,
        timestamp=ts,
    )
    if found is not None:
        new.round_history[found[0]] = result
    else:
        new.round_history.append(result)
        new.round_history.sort(key=lambda rr: rr.round)

    event = OutColorSelected(
        round=new.current_round,
        hex=hex_key,
        selection_count=new.selected_colors[hex_key].selection_count,
    )
    return Transition(state=new, events=[event], intents=["persist"])


def handle_next_round(
    *, state: GameState, msg: InNextRound, ts: datetime, rules: GameRules = DEFAULT_RULES
) -> Transition:
    if state.game_phase != "selection":
        return reject(state, "BAD_PHASE", f"Cannot advance rounds in phase {state.game_phase}")

    if find_round_result(state, state.current_round) is None:
        return reject(state, "NO_SELECTION", f"Pick a color in round {state.current_round} first")

    new = state.model_copy(deep=True)

    if new.current_round < new.total_rounds:
        new.current_round += 1
        return Transition(state=new, events=[_round_changed(new)], intents=["persist"])

    # Last round played: leave the selection phase
    if rules.favorites_phase:
        set_phase(new, "favorites")
        events = [
            OutPhaseChanged(phase="favorites"),
            OutFavoritesCandidates(
                colors=colors_dump(top_selected(new, len(new.selected_colors))),
                min_count=FAVORITES_MIN,
                max_count=rules.favorites_max,
            ),
        ]
        return Transition(state=new, events=events, intents=["persist"])

    events = enter_finale(new, top_selected(new, BRACKET_SIZE))
    return Transition(state=new, events=events, intents=["persist"])


def handle_previous_round(
    *, state: GameState, msg: InPreviousRound, ts: datetime, rules: GameRules = DEFAULT_RULES
) -> Transition:
    """Step back one round. The stored offer set is replayed and history is kept."""
    if state.game_phase != "selection":
        return reject(state, "BAD_PHASE", f"Cannot go back in phase {state.game_phase}")
    if state.current_round <= 1:
        return reject(state, "BAD_ROUND", "Already at the first round")

    new = state.model_copy(deep=True)
    new.current_round -= 1
    return Transition(state=new, events=[_round_changed(new)], intents=["persist"])
