import itertools

import pytest

from app.domain.catalog.colors import CURATED_COLORS, create_color
from app.domain.common.errors import BracketClosedError, BracketPickError, BracketSizeError
from app.domain.game.bracket import (
    apply_pick,
    bracket_stage,
    current_match,
    resolve_bracket,
    start_bracket,
)


def _four():
    return [create_color(e) for e in CURATED_COLORS[:4]]


def test_every_pick_sequence_yields_a_permutation():
    colors = _four()
    a, b, c, d = [x.hex for x in colors]
    seen = set()
    for s1, s2 in itertools.product((a, b), (c, d)):
        l1 = b if s1 == a else a
        l2 = d if s2 == c else c
        for final, third in itertools.product((s1, s2), (l1, l2)):
            ranking = resolve_bracket(colors, [s1, s2, final, third])
            hexes = [x.hex for x in ranking]
            assert sorted(hexes) == sorted([a, b, c, d])
            # the winner never lost a semifinal
            assert hexes[0] not in (l1, l2)
            assert hexes[0] == final
            assert hexes[2] == third
            seen.add(tuple(hexes))
    assert len(seen) == 16


@pytest.mark.parametrize("n", [0, 3, 5])
def test_wrong_candidate_count_is_rejected(n):
    colors = [create_color(e) for e in CURATED_COLORS[:n]]
    with pytest.raises(BracketSizeError) as exc:
        start_bracket(colors)
    assert exc.value.code == "FINALE_BLOCKED"
    assert exc.value.count == n


def test_duplicate_candidates_are_rejected():
    colors = _four()
    colors[3] = colors[0].model_copy()
    with pytest.raises(BracketSizeError):
        start_bracket(colors)


def test_stages_and_matches():
    colors = _four()
    b = start_bracket(colors)
    assert bracket_stage(b) == "semi1"
    assert [c.hex for c in current_match(b)] == [colors[0].hex, colors[1].hex]

    b2 = apply_pick(b, colors[1].hex.lower())
    # input untouched
    assert bracket_stage(b) == "semi1"
    assert bracket_stage(b2) == "semi2"
    assert [c.hex for c in current_match(b2)] == [colors[2].hex, colors[3].hex]

    b3 = apply_pick(b2, colors[2].hex)
    assert bracket_stage(b3) == "final"
    assert [c.hex for c in current_match(b3)] == [colors[1].hex, colors[2].hex]

    b4 = apply_pick(b3, colors[2].hex)
    assert bracket_stage(b4) == "third"
    assert [c.hex for c in current_match(b4)] == [colors[0].hex, colors[3].hex]

    b5 = apply_pick(b4, colors[3].hex)
    assert bracket_stage(b5) == "done"
    assert current_match(b5) is None
    assert [c.hex for c in b5.ranking] == [colors[2].hex, colors[1].hex, colors[3].hex, colors[0].hex]

    with pytest.raises(BracketClosedError):
        apply_pick(b5, colors[2].hex)


def test_pick_outside_current_match():
    colors = _four()
    b = start_bracket(colors)
    with pytest.raises(BracketPickError):
        apply_pick(b, colors[2].hex)


def test_resolve_needs_all_picks():
    colors = _four()
    with pytest.raises(BracketPickError):
        resolve_bracket(colors, [colors[0].hex, colors[2].hex])
