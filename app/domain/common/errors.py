# app/domain/common/errors.py
from __future__ import annotations


class ColorGameError(Exception):
    """Base class for game domain errors."""
    code = "GAME_ERROR"


class BracketSizeError(ColorGameError):
    """The finale bracket was handed a candidate count other than 4."""
    code = "FINALE_BLOCKED"

    def __init__(self, count: int, required: int = 4):
        self.count = count
        self.required = required
        super().__init__(f"Finale requires exactly {required} colors, got {count}")


class BracketPickError(ColorGameError):
    """A pick that is not one of the two colors in the current match."""
    code = "BAD_PICK"


class BracketClosedError(ColorGameError):
    """Pick submitted after the bracket was resolved."""
    code = "BRACKET_CLOSED"


class PhaseTransitionError(ColorGameError):
    """A phase change the game flow does not allow."""
    code = "BAD_PHASE"

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move from phase {current} to {target}")
