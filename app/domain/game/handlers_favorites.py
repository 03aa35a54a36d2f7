# app/domain/game/handlers_favorites.py
from __future__ import annotations

from datetime import datetime
from typing import List

from app.domain.game.handlers_common import (
    DEFAULT_RULES,
    FAVORITES_MIN,
    GameRules,
    Transition,
    enter_finale,
    find_selected,
    reject,
)
from app.store.models import Color, GameState
from app.transport.protocols import InSelectFavorites


def handle_select_favorites(
    *, state: GameState, msg: InSelectFavorites, ts: datetime, rules: GameRules = DEFAULT_RULES
) -> Transition:
    """
    Narrow the selected colors to the player's favorites (3..favorites_max)
    and open the finale.
    """
    if state.game_phase != "favorites":
        return reject(state, "BAD_PHASE", f"Cannot pick favorites in phase {state.game_phase}")

    seen = set()
    hexes: List[str] = []
    for h in msg.hexes:
        key = (h or "").lower()
        if key and key not in seen:
            seen.add(key)
            hexes.append(h)

    if len(hexes) != len(msg.hexes):
        return reject(state, "BAD_FAVORITES", "Favorites must be distinct colors")
    if not (FAVORITES_MIN <= len(hexes) <= rules.favorites_max):
        return reject(
            state,
            "BAD_FAVORITES",
            f"Pick between {FAVORITES_MIN} and {rules.favorites_max} favorites, got {len(hexes)}",
        )

    favorites: List[Color] = []
    for h in hexes:
        rec = find_selected(state, h)
        if rec is None:
            return reject(state, "UNKNOWN_COLOR", f"{h} was never selected")
        favorites.append(rec)

    new = state.model_copy(deep=True)
    events = enter_finale(new, favorites)
    return Transition(state=new, events=events, intents=["persist"])
