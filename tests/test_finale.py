from datetime import datetime, timezone

import pytest

from app.domain.catalog.colors import CURATED_COLORS, create_color
from app.domain.game.bracket import apply_pick
from app.domain.game.handlers import (
    handle_bracket_pick,
    handle_reset,
    handle_select_favorites,
    handle_set_final_ranking,
)
from app.domain.game.handlers_common import GameRules, enter_finale
from app.store.models import GameState
from app.transport.protocols import InBracketPick, InReset, InSelectFavorites, InSetFinalRanking

TS = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _selected(counts):
    """Selected colors in first-selected order with the given counts."""
    out = {}
    for entry, n in zip(CURATED_COLORS, counts):
        out[entry.hex] = create_color(entry).model_copy(update={"selection_count": n})
    return out


def _state(phase="selection", counts=(2, 1, 1, 1)):
    return GameState(
        total_rounds=5,
        colors_per_round=6,
        all_rounds=[[create_color(e) for e in CURATED_COLORS[i * 6:(i + 1) * 6]] for i in range(5)],
        selected_colors=_selected(counts),
        current_round=5,
        game_phase=phase,
        start_time=TS,
    )


def _finale_state(counts=(2, 1, 1, 1)):
    state = _state(counts=counts)
    enter_finale(state, list(state.selected_colors.values())[:4])
    return state


def _pick(state, hex_value):
    return handle_bracket_pick(state=state, msg=InBracketPick(hex=hex_value), ts=TS)


def test_full_bracket_completes_game_with_top3():
    state = _finale_state()
    cands = [c.hex for c in state.bracket.candidates]

    t = _pick(state, cands[0])
    assert t.intents == ["persist"]
    assert t.events[0].stage == "semi2"
    t = _pick(t.state, cands[3])
    assert t.events[0].stage == "final"
    t = _pick(t.state, cands[3])
    assert t.events[0].stage == "third"
    t = _pick(t.state, cands[1])

    new = t.state
    assert new.game_phase == "complete"
    assert [c.hex for c in new.bracket.ranking] == [cands[3], cands[0], cands[1], cands[2]]
    assert [c.hex for c in new.final_top3] == [cands[3], cands[0], cands[1]]
    assert t.intents == ["persist", "sync_if_complete"]
    assert [e.type for e in t.events] == ["phase_changed", "game_complete"]
    assert len(t.events[1].ranking) == 4


def test_pick_outside_match_keeps_state():
    state = _finale_state()
    cands = [c.hex for c in state.bracket.candidates]
    t = _pick(state, cands[2])
    assert t.events[0].code == "BAD_PICK"
    assert t.state is state


def test_pick_after_completion_is_rejected_by_phase():
    state = _finale_state()
    cands = [c.hex for c in state.bracket.candidates]
    for h in (cands[0], cands[2], cands[0], cands[1]):
        state = _pick(state, h).state
    assert state.game_phase == "complete"
    t = _pick(state, cands[0])
    assert t.events[0].code == "BAD_PHASE"


def test_blocked_finale_rejects_picks():
    state = _state(counts=(1, 1, 1))
    events = enter_finale(state, list(state.selected_colors.values()))
    assert state.game_phase == "finale"
    assert state.bracket is None
    assert events[-1].code == "FINALE_BLOCKED"

    t = _pick(state, CURATED_COLORS[0].hex)
    assert t.events[0].code == "FINALE_BLOCKED"
    assert t.state.game_phase == "finale"


def _resolved_state():
    """Finale with a fully picked bracket that has not been ranked yet."""
    state = _finale_state()
    c = [x.hex for x in state.bracket.candidates]
    # semis: c0, c3; final: c3; third place: c1
    for h in (c[0], c[3], c[3], c[1]):
        state.bracket = apply_pick(state.bracket, h)
    return state


def _rank(state, hexes):
    return handle_set_final_ranking(state=state, msg=InSetFinalRanking(hexes=hexes), ts=TS)


@pytest.mark.parametrize("n", [0, 1, 2, 4])
def test_ranking_of_wrong_length_is_rejected(n):
    state = _resolved_state()
    hexes = [c.hex for c in state.bracket.ranking][:n]
    t = _rank(state, hexes)
    assert t.events[0].code == "BAD_RANKING"
    assert t.state.game_phase == "finale"
    assert t.state.final_top3 == []


def test_ranking_must_be_distinct_finalists():
    state = _resolved_state()
    r = [c.hex for c in state.bracket.ranking]
    t = _rank(state, [r[0], r[0], r[1]])
    assert t.events[0].code == "BAD_RANKING"

    outsider = CURATED_COLORS[30].hex
    t = _rank(state, [r[0], r[1], outsider])
    assert t.events[0].code == "UNKNOWN_COLOR"


def test_ranking_cannot_complete_a_blocked_finale():
    state = _state(counts=(2, 2, 1))
    events = enter_finale(state, list(state.selected_colors.values()))
    assert events[-1].code == "FINALE_BLOCKED"

    t = _rank(state, [c.hex for c in state.favorites])
    assert t.events[0].code == "FINALE_BLOCKED"
    assert t.state.game_phase == "finale"
    assert t.state.final_top3 == []
    assert t.intents == []


def test_ranking_cannot_override_open_bracket():
    state = _finale_state()
    c = [x.hex for x in state.bracket.candidates]
    state = _pick(state, c[0]).state

    # c1 just lost semifinal 1
    t = _rank(state, [c[1], c[2], c[3]])
    assert t.events[0].code == "BRACKET_OPEN"
    assert t.state.game_phase == "finale"
    assert t.intents == []


def test_ranking_must_follow_bracket_result():
    state = _resolved_state()
    r = [c.hex for c in state.bracket.ranking]
    t = _rank(state, [r[1], r[0], r[2]])
    assert t.events[0].code == "BAD_RANKING"
    assert t.state.game_phase == "finale"


def test_set_final_ranking_completes_resolved_bracket():
    state = _resolved_state()
    r = [c.hex for c in state.bracket.ranking]
    t = _rank(state, [h.lower() for h in r[:3]])
    assert t.ok
    assert t.state.game_phase == "complete"
    assert [c.hex for c in t.state.final_top3] == r[:3]
    assert "sync_if_complete" in t.intents


def test_favorites_selection_bounds():
    state = _state(phase="favorites", counts=(3, 2, 2, 1, 1, 1))
    hexes = list(state.selected_colors)
    rules = GameRules(favorites_phase=True, favorites_max=5)

    t = handle_select_favorites(state=state, msg=InSelectFavorites(hexes=hexes[:2]), ts=TS, rules=rules)
    assert t.events[0].code == "BAD_FAVORITES"

    t = handle_select_favorites(state=state, msg=InSelectFavorites(hexes=hexes), ts=TS, rules=rules)
    assert t.events[0].code == "BAD_FAVORITES"

    t = handle_select_favorites(
        state=state, msg=InSelectFavorites(hexes=[hexes[0], hexes[0].lower(), hexes[1]]), ts=TS, rules=rules
    )
    assert t.events[0].code == "BAD_FAVORITES"

    t = handle_select_favorites(
        state=state, msg=InSelectFavorites(hexes=hexes[:2] + [CURATED_COLORS[40].hex]), ts=TS, rules=rules
    )
    assert t.events[0].code == "UNKNOWN_COLOR"


def test_favorites_open_bracket_on_top4():
    state = _state(phase="favorites", counts=(1, 3, 2, 1, 2))
    hexes = list(state.selected_colors)
    t = handle_select_favorites(state=state, msg=InSelectFavorites(hexes=hexes), ts=TS)
    assert t.ok
    assert t.state.game_phase == "finale"
    assert len(t.state.favorites) == 5
    assert [c.hex for c in t.state.bracket.candidates] == [hexes[1], hexes[2], hexes[4], hexes[0]]


def test_favorites_in_wrong_phase():
    state = _state()
    t = handle_select_favorites(
        state=state, msg=InSelectFavorites(hexes=list(state.selected_colors)), ts=TS
    )
    assert t.events[0].code == "BAD_PHASE"


@pytest.mark.parametrize("phase", ["selection", "favorites", "finale", "complete"])
def test_reset_from_any_phase(phase):
    state = _state(phase=phase)
    later = datetime(2026, 3, 2, tzinfo=timezone.utc)
    t = handle_reset(state=state, msg=InReset(), ts=later)
    new = t.state
    assert t.intents == ["clear"]
    assert new.current_round == 1
    assert new.game_phase == "selection"
    assert new.round_history == []
    assert new.selected_colors == {}
    assert new.favorites == []
    assert new.final_top3 == []
    assert new.bracket is None
    assert new.start_time == later
    assert len(new.all_rounds) == 5
    assert all(len(r) == 6 for r in new.all_rounds)
    # freshly drawn: no Color instance survives from the old session
    old_ids = {c.id for r in state.all_rounds for c in r}
    assert not old_ids & {c.id for r in new.all_rounds for c in r}
    assert all(c.selection_count == 0 for r in new.all_rounds for c in r)
    assert [c["id"] for c in t.events[0].colors] == [c.id for c in new.all_rounds[0]]
    assert t.events[0].type == "game_reset"
