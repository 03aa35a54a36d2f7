# app/domain/game/bracket.py
from __future__ import annotations

from typing import List, Literal, Optional, Sequence, Tuple

from app.domain.common.errors import BracketClosedError, BracketPickError, BracketSizeError
from app.store.models import BracketState, Color

BRACKET_SIZE = 4

Stage = Literal["semi1", "semi2", "final", "third", "done"]


def start_bracket(candidates: Sequence[Color]) -> BracketState:
    if len(candidates) != BRACKET_SIZE:
        raise BracketSizeError(len(candidates), BRACKET_SIZE)
    if len({c.hex.lower() for c in candidates}) != BRACKET_SIZE:
        raise BracketSizeError(len({c.hex.lower() for c in candidates}), BRACKET_SIZE)
    return BracketState(candidates=[c.model_copy(deep=True) for c in candidates])


def bracket_stage(bracket: BracketState) -> Stage:
    if bracket.ranking:
        return "done"
    if len(bracket.semi_winners) == 0:
        return "semi1"
    if len(bracket.semi_winners) == 1:
        return "semi2"
    if bracket.final_winner is None:
        return "final"
    return "third"


def current_match(bracket: BracketState) -> Optional[Tuple[Color, Color]]:
    stage = bracket_stage(bracket)
    c = bracket.candidates
    if stage == "semi1":
        return c[0], c[1]
    if stage == "semi2":
        return c[2], c[3]
    if stage == "final":
        return bracket.semi_winners[0], bracket.semi_winners[1]
    if stage == "third":
        return bracket.semi_losers[0], bracket.semi_losers[1]
    return None


def _other(pair: Tuple[Color, Color], winner: Color) -> Color:
    return pair[1] if pair[0].hex == winner.hex else pair[0]


def apply_pick(bracket: BracketState, hex_value: str) -> BracketState:
    """
    Record the winner of the current match. Returns a new BracketState;
    the input is left untouched.
    """
    match = current_match(bracket)
    if match is None:
        raise BracketClosedError("Bracket already resolved")

    needle = (hex_value or "").lower()
    winner = next((c for c in match if c.hex.lower() == needle), None)
    if winner is None:
        raise BracketPickError(
            f"{hex_value} is not in the current match ({match[0].hex} vs {match[1].hex})"
        )
    loser = _other(match, winner)

    out = bracket.model_copy(deep=True)
    stage = bracket_stage(bracket)
    if stage in ("semi1", "semi2"):
        out.semi_winners.append(winner)
        out.semi_losers.append(loser)
    elif stage == "final":
        out.final_winner = winner
    else:
        out.third_place = winner
        runner_up = _other((out.semi_winners[0], out.semi_winners[1]), out.final_winner)
        out.ranking = [out.final_winner, runner_up, winner, loser]
    return out


def resolve_bracket(candidates: Sequence[Color], picks: Sequence[str]) -> List[Color]:
    """
    Run the full bracket: picks are the hex of each match winner, in order
    (semifinal 1, semifinal 2, final, third place).
    Returns [winner, runner-up, third, fourth].
    """
    bracket = start_bracket(candidates)
    for pick in picks:
        bracket = apply_pick(bracket, pick)
    if not bracket.ranking:
        raise BracketPickError(f"Bracket needs 4 picks, got {len(picks)}")
    return list(bracket.ranking)
