from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .models import AttemptRow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttemptRecord:
    attempt_id: str
    user_id: str
    question_id: str
    section: str
    selected: int
    correct: int
    is_correct: bool
    latency_ms: int


def make_attempt_id(user_id: str, question_id: str, now_ms: int) -> str:
    return f"{user_id}-{question_id}-{now_ms}"


class AttemptRecorder(Protocol):
    async def record(self, attempt: AttemptRecord) -> None: ...


class SqlAttemptRecorder:
    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    async def record(self, attempt: AttemptRecord) -> None:
        async with self._sessionmaker() as s:
            s.add(
                AttemptRow(
                    attempt_id=attempt.attempt_id,
                    user_id=attempt.user_id,
                    question_id=attempt.question_id,
                    section=attempt.section,
                    selected=attempt.selected,
                    correct=attempt.correct,
                    is_correct=attempt.is_correct,
                    latency_ms=attempt.latency_ms,
                )
            )
            try:
                await s.commit()
            except IntegrityError:
                # same attempt delivered twice
                await s.rollback()
                logger.info("attempt_duplicate attempt_id=%s", attempt.attempt_id)


class BackgroundRecorder:
    """Runs attempt writes as detached tasks.

    ``submit`` never blocks and never raises; a failed write is logged and
    dropped. ``drain`` waits for the writes still in flight.
    """

    def __init__(self, recorder: AttemptRecorder) -> None:
        self._recorder = recorder
        self._tasks: set[asyncio.Task] = set()

    def submit(self, attempt: AttemptRecord) -> None:
        task = asyncio.create_task(self._record(attempt))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _record(self, attempt: AttemptRecord) -> None:
        try:
            await self._recorder.record(attempt)
        except Exception:
            logger.warning(
                "attempt_record_failed attempt_id=%s user_id=%s question_id=%s",
                attempt.attempt_id,
                attempt.user_id,
                attempt.question_id,
                exc_info=True,
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
