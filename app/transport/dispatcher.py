# app/transport/dispatcher.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from app.domain.game.handlers import (
    handle_bracket_pick,
    handle_next_round,
    handle_previous_round,
    handle_reset,
    handle_select_color,
    handle_select_favorites,
    handle_set_final_ranking,
)
from app.domain.game.handlers_common import DEFAULT_RULES, GameRules, Transition, build_snapshot
from app.store.models import GameState
from app.transport.protocols import (
    parse_incoming,
    OutError,
    OutgoingEvent,
    InHello,
    InSnapshot,
    InReset,
    InSelectColor,
    InNextRound,
    InPreviousRound,
    InSelectFavorites,
    InBracketPick,
    InSetFinalRanking,
)
from app.util.timeutil import utcnow

_HANDLERS = {
    InSelectColor: handle_select_color,
    InNextRound: handle_next_round,
    InPreviousRound: handle_previous_round,
    InSelectFavorites: handle_select_favorites,
    InBracketPick: handle_bracket_pick,
    InSetFinalRanking: handle_set_final_ranking,
    InReset: handle_reset,
}


def dispatch_event(
    *,
    state: GameState,
    raw: Dict[str, Any],
    ts: Optional[datetime] = None,
    rules: GameRules = DEFAULT_RULES,
) -> Transition:
    """
    Host calls this for every message.
    - Parses + validates raw JSON
    - Routes to the matching transition
    - Returns the Transition (next state, events, intents)
    NOTE: pure; no Redis and no network here.
    """
    try:
        msg = parse_incoming(raw)
    except (ValidationError, ValueError) as e:
        return Transition(state=state, events=[OutError(code="BAD_MESSAGE", message=str(e))])

    if isinstance(msg, InSnapshot):
        return Transition(state=state, events=[build_snapshot(state)])

    if isinstance(msg, InHello):
        # Device info is owned by the host; nothing changes in the game
        return Transition(state=state)

    handler = _HANDLERS.get(type(msg))
    if handler is None:
        err = OutError(code="NOT_IMPLEMENTED", message=f"Handler not implemented for type={msg.type}")
        return Transition(state=state, events=[err])

    return handler(state=state, msg=msg, ts=ts or utcnow(), rules=rules)


def dump_events(events: List[OutgoingEvent]) -> List[Dict[str, Any]]:
    """
    Convert pydantic events -> JSON dicts.
    """
    return [e.model_dump(mode="json") for e in events]
