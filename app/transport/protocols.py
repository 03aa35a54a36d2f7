# app/transport/protocols.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field, ValidationError
from pydantic_core import InitErrorDetails, PydanticCustomError

from app.domain.common.types import GamePhase
from app.store.models import ScreenSize


# =========================
# Incoming (Client -> Server)
# =========================

class InBase(BaseModel):
    type: str


# ---- Lifecycle ----

class InHello(InBase):
    """Device metadata, sent once after connecting. Attached to the finished session."""
    type: Literal["hello"] = "hello"
    user_agent: str = Field(default="unknown", max_length=512)
    screen_size: ScreenSize = Field(default_factory=ScreenSize)
    timezone: Optional[str] = Field(default=None, max_length=64)


class InSnapshot(InBase):
    type: Literal["snapshot"] = "snapshot"


class InReset(InBase):
    type: Literal["reset"] = "reset"


# ---- Selection rounds ----

class InSelectColor(InBase):
    type: Literal["select_color"] = "select_color"
    hex: str = Field(min_length=4, max_length=9)
    # Seconds the player spent on the round before choosing
    time_spent: float = Field(default=0.0, ge=0)


class InNextRound(InBase):
    type: Literal["next_round"] = "next_round"


class InPreviousRound(InBase):
    type: Literal["previous_round"] = "previous_round"


# ---- Favorites / finale ----

class InSelectFavorites(InBase):
    type: Literal["select_favorites"] = "select_favorites"
    hexes: List[str]


class InBracketPick(InBase):
    type: Literal["bracket_pick"] = "bracket_pick"
    hex: str = Field(min_length=4, max_length=9)


class InSetFinalRanking(InBase):
    """Lengths are checked by the game itself so a bad ranking is reported, not dropped."""
    type: Literal["set_final_ranking"] = "set_final_ranking"
    hexes: List[str]


IncomingMessage = Union[
    InHello,
    InSnapshot,
    InReset,
    InSelectColor,
    InNextRound,
    InPreviousRound,
    InSelectFavorites,
    InBracketPick,
    InSetFinalRanking,
]


# =========================
# Outgoing (Server -> Client)
# =========================

class OutBase(BaseModel):
    type: str


class OutError(OutBase):
    type: Literal["error"] = "error"
    code: str
    message: str


class OutHello(OutBase):
    type: Literal["hello"] = "hello"
    client_id: str
    resumed: bool = False


class OutGameSnapshot(OutBase):
    type: Literal["game_snapshot"] = "game_snapshot"
    state: Dict[str, Any]
    active_colors: List[Dict[str, Any]] = Field(default_factory=list)
    match: List[Dict[str, Any]] = Field(default_factory=list)


class OutColorSelected(OutBase):
    type: Literal["color_selected"] = "color_selected"
    round: int
    hex: str
    selection_count: int


class OutRoundChanged(OutBase):
    type: Literal["round_changed"] = "round_changed"
    round: int
    total_rounds: int
    colors: List[Dict[str, Any]]
    selected_hex: Optional[str] = None


class OutPhaseChanged(OutBase):
    type: Literal["phase_changed"] = "phase_changed"
    phase: GamePhase


class OutFavoritesCandidates(OutBase):
    type: Literal["favorites_candidates"] = "favorites_candidates"
    colors: List[Dict[str, Any]]
    min_count: int
    max_count: int


class OutBracketMatch(OutBase):
    type: Literal["bracket_match"] = "bracket_match"
    stage: Literal["semi1", "semi2", "final", "third"]
    colors: List[Dict[str, Any]]


class OutGameComplete(OutBase):
    type: Literal["game_complete"] = "game_complete"
    final_top3: List[Dict[str, Any]]
    ranking: List[Dict[str, Any]] = Field(default_factory=list)


class OutGameReset(OutBase):
    type: Literal["game_reset"] = "game_reset"
    total_rounds: int
    colors: List[Dict[str, Any]]


OutgoingEvent = Union[
    OutError,
    OutHello,
    OutGameSnapshot,
    OutColorSelected,
    OutRoundChanged,
    OutPhaseChanged,
    OutFavoritesCandidates,
    OutBracketMatch,
    OutGameComplete,
    OutGameReset,
]


# =========================
# Parser helpers
# =========================

_INCOMING_BY_TYPE = {
    "hello": InHello,
    "snapshot": InSnapshot,
    "reset": InReset,
    "select_color": InSelectColor,
    "next_round": InNextRound,
    "previous_round": InPreviousRound,
    "select_favorites": InSelectFavorites,
    "bracket_pick": InBracketPick,
    "set_final_ranking": InSetFinalRanking,
}


def _type_error(t: Any, template: str) -> ValidationError:
    return ValidationError.from_exception_data(
        title="IncomingMessage",
        line_errors=[
            InitErrorDetails(
                type=PydanticCustomError("message_type", template, {"t": str(t)}),
                loc=("type",),
                input=t,
            )
        ],
    )


def parse_incoming(payload: Dict[str, Any]) -> IncomingMessage:
    """
    Convert raw dict -> validated message model.
    Raises ValidationError if invalid.
    """
    t = payload.get("type")
    if not isinstance(t, str):
        raise _type_error(t, "Missing/invalid type")

    cls = _INCOMING_BY_TYPE.get(t)
    if cls is None:
        raise _type_error(t, "Unknown message type: {t}")

    return cls.model_validate(payload)
