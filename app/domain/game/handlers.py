# app/domain/game/handlers.py
from __future__ import annotations

from app.domain.game.handlers_selection import (
    handle_select_color,
    handle_next_round,
    handle_previous_round,
)
from app.domain.game.handlers_favorites import handle_select_favorites
from app.domain.game.handlers_finale import handle_bracket_pick, handle_set_final_ranking
from app.domain.game.handlers_reset import handle_reset, new_game_state

__all__ = [
    "handle_select_color",
    "handle_next_round",
    "handle_previous_round",
    "handle_select_favorites",
    "handle_bracket_pick",
    "handle_set_final_ranking",
    "handle_reset",
    "new_game_state",
]
