# app/store/redis_keys.py
from __future__ import annotations

from dataclasses import dataclass

PREFIX = "yummy-colors"


@dataclass(frozen=True)
class SK:
    """
    Session Key builder for one player's (client's) durable store.
    Two logical keys per client: the in-progress game and the local
    cache of finished sessions. Short-lived sync markers sit beside them.
    """
    client_id: str

    def game_state(self) -> str:
        return f"{PREFIX}:{self.client_id}:game-state"  # STRING GameState JSON

    def sessions(self) -> str:
        return f"{PREFIX}:{self.client_id}:sessions"  # LIST GameSession JSON

    def synced(self, start_time: str) -> str:
        return f"{PREFIX}:{self.client_id}:synced:{start_time}"  # STRING marker, one per finished session

    def all_client_keys(self) -> list[str]:
        return [self.game_state(), self.sessions()]

    @staticmethod
    def game_state_pattern() -> str:
        return f"{PREFIX}:*:game-state"

    @staticmethod
    def client_id_from_key(key: str) -> str:
        # "<prefix>:<client_id>:game-state"
        return key[len(PREFIX) + 1 : -len(":game-state")]


@dataclass(frozen=True)
class CK:
    """Collector keys: completed sessions received from clients."""

    def results(self) -> str:
        return f"{PREFIX}:results"  # HASH session_id -> GameSession JSON

    def results_index(self) -> str:
        return f"{PREFIX}:results:index"  # ZSET session_id scored by completed_at
