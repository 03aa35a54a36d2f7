from __future__ import annotations

from .handlers import (
    handle_select_color,
    handle_next_round,
    handle_previous_round,
    handle_select_favorites,
    handle_bracket_pick,
    handle_set_final_ranking,
    handle_reset,
    new_game_state,
)

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
