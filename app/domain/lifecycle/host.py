# app/domain/lifecycle/host.py
from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from app.domain.game.handlers_common import DEFAULT_RULES, GameRules, build_snapshot
from app.domain.lifecycle.handlers import resume_or_start, run_intents
from app.store.models import DeviceInfo, GameState
from app.transport.dispatcher import dispatch_event
from app.transport.protocols import InHello, OutError, OutgoingEvent, OutHello
from app.util.timeutil import utcnow


class GameHost:
    """
    Owns one player's session: the current GameState, the device info used
    for the finished session, and the side effects of every transition.
    Events are handled one at a time, in arrival order.
    """

    def __init__(
        self,
        *,
        client_id: str,
        repo,
        sync=None,
        rules: GameRules = DEFAULT_RULES,
        total_rounds: int = 5,
        colors_per_round: int = 6,
    ) -> None:
        self.client_id = client_id
        self.repo = repo
        self.sync = sync
        self.rules = rules
        self.total_rounds = total_rounds
        self.colors_per_round = colors_per_round
        self.device = DeviceInfo()
        self.state: Optional[GameState] = None
        self.last_sync_task: Optional[asyncio.Task] = None

    async def start(self, ts: Optional[datetime] = None) -> List[OutgoingEvent]:
        self.state, resumed = await resume_or_start(
            repo=self.repo,
            client_id=self.client_id,
            total_rounds=self.total_rounds,
            colors_per_round=self.colors_per_round,
            ts=ts or utcnow(),
            rules=self.rules,
        )
        return [OutHello(client_id=self.client_id, resumed=resumed), build_snapshot(self.state)]

    async def handle(self, raw: Dict[str, Any], ts: Optional[datetime] = None) -> List[OutgoingEvent]:
        if self.state is None:
            await self.start(ts)

        if isinstance(raw, dict) and raw.get("type") == "hello":
            try:
                hello = InHello.model_validate(raw)
            except ValidationError as e:
                return [OutError(code="BAD_MESSAGE", message=str(e))]
            self.device = DeviceInfo(
                user_agent=hello.user_agent,
                screen_size=hello.screen_size,
                timezone=hello.timezone,
            )
            return [build_snapshot(self.state)]

        if not isinstance(raw, dict):
            return [OutError(code="BAD_MESSAGE", message="Message must be a JSON object")]

        transition = dispatch_event(state=self.state, raw=raw, ts=ts, rules=self.rules)
        self.state = transition.state
        task = await run_intents(
            repo=self.repo,
            sync=self.sync,
            client_id=self.client_id,
            state=self.state,
            device=self.device,
            intents=transition.intents,
        )
        if task is not None:
            self.last_sync_task = task
        return transition.events
