# app/store/redis_repo.py
from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import ValidationError
from redis.asyncio import Redis

from app.store.redis_keys import CK, SK
from app.store.models import GameSession, GameState

logger = logging.getLogger(__name__)


class RedisRepo:
    def __init__(
        self,
        r: Redis,
        state_ttl_sec: int = 60 * 60 * 24 * 30,
        max_cached_sessions: int = 50,
        results_max: int = 10000,
    ):
        self.r = r
        self.state_ttl_sec = state_ttl_sec
        self.max_cached_sessions = max_cached_sessions
        self.results_max = results_max

    def _dec(self, x):
        """Decode redis bytes -> str; pass through str/int/None safely."""
        if x is None:
            return None
        if isinstance(x, bytes):
            return x.decode("utf-8")
        return x

    # ----------------------------
    # In-progress game (one per client)
    # ----------------------------
    async def save_game_state(self, client_id: str, state: GameState) -> None:
        await self.r.set(SK(client_id).game_state(), state.model_dump_json(), ex=self.state_ttl_sec)

    async def load_game_state(self, client_id: str) -> Optional[GameState]:
        """
        Last saved state, or None.
        Unreadable data (bad JSON, bad timestamps, wrong shape) is logged,
        removed, and reported as no state.
        """
        key = SK(client_id).game_state()
        raw = await self.r.get(key)
        if not raw:
            return None
        try:
            return GameState.model_validate_json(self._dec(raw))
        except (ValidationError, ValueError) as e:
            logger.warning("Discarding unreadable game state for %s: %s", client_id, e)
            await self.r.delete(key)
            return None

    async def clear_game_state(self, client_id: str) -> None:
        await self.r.delete(SK(client_id).game_state())

    async def list_client_ids(self) -> List[str]:
        cursor = 0
        out: List[str] = []
        while True:
            cursor, keys = await self.r.scan(cursor=cursor, match=SK.game_state_pattern(), count=200)
            for k in keys:
                out.append(SK.client_id_from_key(self._dec(k)))
            if cursor == 0:
                break
        return sorted(set(out))

    # ----------------------------
    # Local cache of finished sessions
    # ----------------------------
    async def cache_session(self, client_id: str, session: GameSession) -> None:
        key = SK(client_id).sessions()
        pipe = self.r.pipeline()
        pipe.rpush(key, session.model_dump_json())
        pipe.ltrim(key, -self.max_cached_sessions, -1)
        pipe.expire(key, self.state_ttl_sec)
        await pipe.execute()

    async def list_cached_sessions(self, client_id: str) -> List[GameSession]:
        raw = await self.r.lrange(SK(client_id).sessions(), 0, -1)
        out: List[GameSession] = []
        for x in raw:
            try:
                out.append(GameSession.model_validate_json(self._dec(x)))
            except (ValidationError, ValueError) as e:
                logger.warning("Skipping unreadable cached session for %s: %s", client_id, e)
        return out

    async def claim_sync(self, client_id: str, start_time: str) -> bool:
        """
        True the first time a finished session (client + start time) is
        claimed for sync. The marker expires with the state TTL.
        """
        ok = await self.r.set(SK(client_id).synced(start_time), "1", nx=True, ex=self.state_ttl_sec)
        return bool(ok)

    async def clear_client(self, client_id: str) -> None:
        await self.r.delete(*SK(client_id).all_client_keys())

    # ----------------------------
    # Collector: completed sessions from all clients
    # ----------------------------
    async def save_result(self, session: GameSession) -> None:
        """Upsert by session id, indexed by completion time."""
        ck = CK()
        score = session.completed_at.timestamp() if session.completed_at else 0.0
        pipe = self.r.pipeline()
        pipe.hset(ck.results(), session.id, session.model_dump_json())
        pipe.zadd(ck.results_index(), {session.id: score})
        await pipe.execute()

        overflow = int(await self.r.zcard(ck.results_index())) - self.results_max
        if overflow > 0:
            oldest = await self.r.zrange(ck.results_index(), 0, overflow - 1)
            ids = [self._dec(x) for x in oldest]
            pipe = self.r.pipeline()
            pipe.zrem(ck.results_index(), *ids)
            pipe.hdel(ck.results(), *ids)
            await pipe.execute()

    async def list_results(self, limit: Optional[int] = None) -> List[GameSession]:
        """Most recent first."""
        ck = CK()
        end = -1 if limit is None else max(limit, 0) - 1
        if end == -1 and limit is not None:
            return []
        ids = await self.r.zrevrange(ck.results_index(), 0, end)
        if not ids:
            return []
        raw = await self.r.hmget(ck.results(), [self._dec(x) for x in ids])
        out: List[GameSession] = []
        for x in raw:
            if x is None:
                continue
            try:
                out.append(GameSession.model_validate_json(self._dec(x)))
            except (ValidationError, ValueError) as e:
                logger.warning("Skipping unreadable stored result: %s", e)
        return out

    async def count_results(self) -> int:
        return int(await self.r.zcard(CK().results_index()))
