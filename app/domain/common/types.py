# app/domain/common/types.py
from __future__ import annotations

from typing import Literal

GamePhase = Literal["selection", "favorites", "finale", "complete"]
Category = Literal["warm", "cool", "neutral", "earth", "bright"]
DrawPolicy = Literal["balanced", "random"]

# Side effects a transition asks the host to run after it is applied
Intent = Literal["persist", "clear", "sync_if_complete"]

CATEGORIES: tuple[Category, ...] = ("warm", "cool", "neutral", "earth", "bright")
