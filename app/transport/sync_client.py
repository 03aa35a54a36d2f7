# app/transport/sync_client.py
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Optional, Set

import httpx
from redis.exceptions import RedisError

from app.store.models import DeviceInfo, GameSession, GameState
from app.transport.location import LocationProvider, lookup_location
from app.util.timeutil import utcnow

logger = logging.getLogger(__name__)


class SyncClient:
    """
    Best-effort push of finished sessions to the collector.

    The local copy (game state + cached session) is what makes a result
    durable; the HTTP push may fail, is never retried, and never raises
    into gameplay.
    """

    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        collector_url: str,
        repo,
        location_provider: Optional[LocationProvider] = None,
        location_timeout_sec: float = 5.0,
    ) -> None:
        self.http = http
        self.collector_url = collector_url
        self.repo = repo
        self.location_provider = location_provider
        self.location_timeout_sec = location_timeout_sec
        self._tasks: Set[asyncio.Task] = set()

    @staticmethod
    def session_key(state: GameState) -> str:
        return state.start_time.isoformat()

    @staticmethod
    def build_session(
        state: GameState,
        device: DeviceInfo,
        *,
        completed_at: Optional[datetime] = None,
    ) -> GameSession:
        return GameSession(
            id=uuid.uuid4().hex,
            game_state=state.model_copy(deep=True),
            user_agent=device.user_agent,
            screen_size=device.screen_size.model_copy(),
            completed_at=completed_at or utcnow(),
        )

    async def save_completed_game(
        self,
        client_id: str,
        state: GameState,
        device: DeviceInfo,
    ) -> Optional[asyncio.Task]:
        """
        Cache the finished session locally and schedule its transmission.
        Returns the background task, or None when nothing was sent
        (game not complete, or this session was already submitted).
        """
        if state.game_phase != "complete":
            return None

        key = self.session_key(state)
        try:
            first = await self.repo.claim_sync(client_id, key)
        except RedisError as e:
            logger.error("Could not record sync of %s:%s: %s", client_id, key, e)
            first = True
        if not first:
            logger.debug("Session %s:%s already submitted; skipping", client_id, key)
            return None

        session = self.build_session(state, device)
        try:
            await self.repo.cache_session(client_id, session)
        except RedisError as e:
            logger.error("Could not cache finished session %s locally: %s", session.id, e)

        task = asyncio.create_task(self._transmit(session, timezone=device.timezone))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _transmit(self, session: GameSession, *, timezone: Optional[str] = None) -> bool:
        location = await lookup_location(
            self.location_provider,
            timezone=timezone,
            timeout_sec=self.location_timeout_sec,
        )
        if location is not None:
            session = session.model_copy(update={"location": location})

        try:
            resp = await self.http.post(self.collector_url, json=session.model_dump(mode="json"))
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Collector rejected session %s: HTTP %s", session.id, e.response.status_code
            )
            return False
        except httpx.HTTPError as e:
            logger.warning("Failed to send session %s to collector: %s", session.id, e)
            return False

        logger.info("Session %s sent to collector", session.id)
        return True

    async def drain(self, timeout_sec: float = 5.0) -> None:
        """Give in-flight transmissions a chance to finish (shutdown)."""
        if not self._tasks:
            return
        _, pending = await asyncio.wait(set(self._tasks), timeout=timeout_sec)
        for t in pending:
            t.cancel()
