from __future__ import annotations

from typing import Literal

from pydantic import BaseModel
import os


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "y", "on")


class Settings(BaseModel):
    APP_NAME: str = "yummy-colors-server"

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    STATE_TTL_SEC: int = 60 * 60 * 24 * 30

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Dev
    LOG_LEVEL: str = "INFO"

    # WebSocket origin policy (comma-separated)
    WS_ALLOWED_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000,null"
    # Dev helper: allow any private LAN IP on port 3000
    WS_ALLOW_LAN_ORIGINS: bool = True

    # Game
    TOTAL_ROUNDS: int = 5
    COLORS_PER_ROUND: int = 6
    DRAW_POLICY: Literal["balanced", "random"] = "balanced"
    FAVORITES_PHASE: bool = False
    FAVORITES_MAX: int = 8

    # Sync / collector
    COLLECTOR_URL: str = "http://localhost:8000/api/game-results"
    SYNC_TIMEOUT_SEC: float = 10.0
    LOCATION_TIMEOUT_SEC: float = 5.0
    RESULTS_MAX: int = 10000


def get_settings() -> Settings:
    return Settings(
        APP_NAME=os.getenv("APP_NAME", "yummy-colors-server"),
        REDIS_URL=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        STATE_TTL_SEC=int(os.getenv("STATE_TTL_SEC", str(60 * 60 * 24 * 30))),
        HOST=os.getenv("HOST", "0.0.0.0"),
        PORT=int(os.getenv("PORT", "8000")),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),

        WS_ALLOWED_ORIGINS=os.getenv(
            "WS_ALLOWED_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000,null",
        ),
        WS_ALLOW_LAN_ORIGINS=_env_bool("WS_ALLOW_LAN_ORIGINS", "true"),

        TOTAL_ROUNDS=int(os.getenv("TOTAL_ROUNDS", "5")),
        COLORS_PER_ROUND=int(os.getenv("COLORS_PER_ROUND", "6")),
        DRAW_POLICY=os.getenv("DRAW_POLICY", "balanced"),
        FAVORITES_PHASE=_env_bool("FAVORITES_PHASE", "false"),
        FAVORITES_MAX=int(os.getenv("FAVORITES_MAX", "8")),

        COLLECTOR_URL=os.getenv("COLLECTOR_URL", "http://localhost:8000/api/game-results"),
        SYNC_TIMEOUT_SEC=float(os.getenv("SYNC_TIMEOUT_SEC", "10")),
        LOCATION_TIMEOUT_SEC=float(os.getenv("LOCATION_TIMEOUT_SEC", "5")),
        RESULTS_MAX=int(os.getenv("RESULTS_MAX", "10000")),
    )
