"""Periodic expiry of overdue TimeBomb requests."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.orm import Session

from app.models.base import utcnow
from app.services.broadcaster import DomainEvent, EventBroadcaster
from app.services.song_requests import expire_overdue_time_bombs, expiry_events

logger = logging.getLogger(__name__)


class TimeBombSweeper:
    def __init__(
        self,
        *,
        session_factory: Callable[[], Session],
        broadcaster: EventBroadcaster,
        interval_seconds: int,
    ) -> None:
        self._session_factory = session_factory
        self._broadcaster = broadcaster
        self._interval_seconds = interval_seconds
        self._running = False
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        if self._running:
            logger.warning("TimeBomb sweeper already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info("TimeBomb sweeper started (interval=%ss)", self._interval_seconds)

    async def stop(self) -> None:
        self._running = False

        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("TimeBomb sweeper stopped")

    async def _run_loop(self) -> None:
        while self._running:
            try:
                await self.run_sweep()
            except Exception:
                logger.exception("Error during TimeBomb sweep")

            try:
                await asyncio.sleep(self._interval_seconds)
            except asyncio.CancelledError:
                break

    def _expire(self, now: datetime) -> list[DomainEvent]:
        db = self._session_factory()
        try:
            return expiry_events(expire_overdue_time_bombs(db, now), now)
        finally:
            db.close()

    async def run_sweep(self) -> int:
        """Expire overdue TimeBombs once and return how many were rejected.

        Database work runs in the default executor so the event loop keeps
        serving sockets and HTTP while the sweep is in progress.
        """
        loop = asyncio.get_running_loop()
        rejections = await loop.run_in_executor(None, self._expire, utcnow())
        for domain_event in rejections:
            await self._broadcaster.publish(domain_event)
        return len(rejections)

    @property
    def is_running(self) -> bool:
        return self._running
