from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from app.domain.common.types import Category, GamePhase


class HSL(BaseModel):
    h: int = Field(ge=0, le=360)
    s: int = Field(ge=0, le=100)
    l: int = Field(ge=0, le=100)


class RGB(BaseModel):
    r: int = Field(ge=0, le=255)
    g: int = Field(ge=0, le=255)
    b: int = Field(ge=0, le=255)


class Color(BaseModel):
    """
    One palette draw. `id` is unique per draw; two draws are the same
    palette entry when their `hex` matches.
    """
    id: str
    name: str = ""
    hex: str
    hsl: HSL
    rgb: RGB
    category: Optional[Category] = None
    selection_count: int = 0


class RoundResult(BaseModel):
    round: int = Field(ge=1)
    colors_shown: List[Color]
    selected_color: Color
    time_spent: float = Field(default=0.0, ge=0)
    timestamp: datetime


class BracketState(BaseModel):
    """
    Single-elimination finale over exactly 4 candidates.
    Matches: c0 vs c1, c2 vs c3, final between semi winners,
    third place between semi losers.
    """
    candidates: List[Color]
    semi_winners: List[Color] = Field(default_factory=list)
    semi_losers: List[Color] = Field(default_factory=list)
    final_winner: Optional[Color] = None
    third_place: Optional[Color] = None
    ranking: List[Color] = Field(default_factory=list)


class GameState(BaseModel):
    current_round: int = Field(default=1, ge=1)
    total_rounds: int = Field(default=5, ge=1)
    colors_per_round: int = Field(default=6, ge=1)
    all_rounds: List[List[Color]] = Field(default_factory=list)
    # hex -> cumulative record; insertion order is first-selected order
    selected_colors: Dict[str, Color] = Field(default_factory=dict)
    round_history: List[RoundResult] = Field(default_factory=list)
    favorites: List[Color] = Field(default_factory=list)
    final_top3: List[Color] = Field(default_factory=list)
    game_phase: GamePhase = "selection"
    start_time: datetime
    bracket: Optional[BracketState] = None


class ScreenSize(BaseModel):
    width: int = 0
    height: int = 0


class DeviceInfo(BaseModel):
    user_agent: str = "unknown"
    screen_size: ScreenSize = Field(default_factory=ScreenSize)
    timezone: Optional[str] = None


class LocationData(BaseModel):
    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    timezone: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class GameSession(BaseModel):
    id: str
    game_state: GameState
    user_agent: str = "unknown"
    screen_size: ScreenSize = Field(default_factory=ScreenSize)
    location: Optional[LocationData] = None
    completed_at: Optional[datetime] = None
