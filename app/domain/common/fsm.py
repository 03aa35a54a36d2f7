# app/domain/common/fsm.py
from __future__ import annotations

from app.domain.common.types import GamePhase


def can_transition_phase(current: GamePhase, target: GamePhase) -> bool:
    """
    Validate game phase transitions.
    Any phase may go back to "selection" (reset).
    """
    transitions: dict[GamePhase, list[GamePhase]] = {
        "selection": ["selection", "favorites", "finale"],
        "favorites": ["finale", "selection"],
        "finale": ["complete", "selection"],
        "complete": ["selection"],
    }
    return target in transitions.get(current, [])


def is_terminal(phase: GamePhase) -> bool:
    return phase == "complete"
