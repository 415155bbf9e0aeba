"""Turn-by-turn assessment flow.

Every inbound message runs through the same pipeline of steps against the
participant's stored ``Session``::

    start -> record -> dispatch

Each step either stops the pipeline (its reply is final for this message) or
lets the next one run. Recording an answer always continues into dispatch, so
one message can both grade the pending question and send the next one (or the
final score).

The session is written back once per message. The only exception is an
invalid answer, which leaves the stored session exactly as it was.
"""
from __future__ import annotations

import asyncio
import logging
import random
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable, Sequence

from .attempts import AttemptRecord, BackgroundRecorder, make_attempt_id
from .choices import parse_choice
from .messages import render_question, t
from .normalize import norm_command
from .questions import QuestionRepository
from .scorer import score
from .selector import Chooser, pick_next
from .session_store import DEFAULT_TTL_S, SessionStore
from .types import ASKING, IDLE, WAITING_ANSWER, Answer, Question, Session

logger = logging.getLogger(__name__)

CONTINUE = "continue"
STOP = "stop"


@dataclass
class Turn:
    user_id: str
    text: str
    session: Session
    now_ms: int
    replies: list[str] = field(default_factory=list)
    persist: bool = True
    questions: list[Question] | None = None
    attempts: list[AttemptRecord] = field(default_factory=list)


class KeyedLocks:
    """asyncio locks keyed by participant id; entries vanish once unused."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                self._locks.pop(key, None)

    def __len__(self) -> int:
        return len(self._locks)


class Conversation:
    def __init__(
        self,
        *,
        store: SessionStore,
        questions: QuestionRepository,
        recorder: BackgroundRecorder | None = None,
        sections: Sequence[str],
        start_commands: Sequence[str] = ("start", "test"),
        test_name: str = "Watson-Glaser",
        ttl_s: int = DEFAULT_TTL_S,
        rng: Chooser = random,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not sections:
            raise ValueError("at least one section is required")
        if not start_commands:
            raise ValueError("at least one start command is required")
        self._store = store
        self._questions = questions
        self._recorder = recorder
        self.sections = tuple(sections)
        self._start_commands = tuple(c.lower() for c in start_commands)
        self._test_name = test_name
        self._ttl_s = ttl_s
        self._rng = rng
        self._clock = clock
        self._locks = KeyedLocks()
        self._steps: tuple[Callable[[Turn], Awaitable[str]], ...] = (
            self._step_start,
            self._step_record,
            self._step_dispatch,
        )

    async def handle(self, user_id: str, text: str) -> list[str]:
        """Process one inbound message and return the replies to send, in order.

        Store and repository errors propagate; nothing is persisted in that case
        and no attempt is handed to the recorder.
        """
        async with self._locks.hold(user_id):
            session = await self._store.get(user_id) or Session()
            turn = Turn(
                user_id=user_id,
                text=text or "",
                session=session,
                now_ms=int(self._clock() * 1000),
            )
            for step in self._steps:
                if await step(turn) == STOP:
                    break
            if turn.persist:
                await self._store.set(user_id, turn.session, self._ttl_s)
            if self._recorder is not None:
                for attempt in turn.attempts:
                    self._recorder.submit(attempt)
            return turn.replies

    async def _all_questions(self, turn: Turn) -> list[Question]:
        if turn.questions is None:
            turn.questions = await self._questions.fetch_all()
        return turn.questions

    # ---------- steps ----------
    async def _step_start(self, turn: Turn) -> str:
        session = turn.session
        if session.state != IDLE:
            return CONTINUE
        if norm_command(turn.text) not in self._start_commands:
            turn.replies.append(
                t("idle_hint", start_command=self._start_commands[0], test_name=self._test_name)
            )
            return STOP
        session.reset()
        session.state = ASKING
        turn.replies.append(t("started", test_name=self._test_name))
        logger.info("test_started user_id=%s sections=%s", turn.user_id, len(self.sections))
        return STOP

    async def _step_record(self, turn: Turn) -> str:
        session = turn.session
        if session.state != WAITING_ANSWER:
            return CONTINUE
        q = session.current_question
        if q is None:
            logger.warning("pending_question_missing user_id=%s; resuming dispatch", turn.user_id)
            session.state = ASKING
            return CONTINUE

        selected = parse_choice(turn.text, len(q.options))
        if selected is None:
            turn.replies.append(t("invalid_choice", count=len(q.options)))
            turn.persist = False
            return STOP

        started_at = session.question_started_at or turn.now_ms
        latency_ms = max(0, turn.now_ms - started_at)
        answer = Answer(
            question_id=q.id,
            section=q.section,
            selected_index=selected,
            correct_index=q.correct,
            latency_ms=latency_ms,
        )
        session.answers.append(answer)
        logger.info(
            "answer_recorded user_id=%s question_id=%s section=%s selected=%s correct=%s latency_ms=%s",
            turn.user_id,
            q.id,
            q.section,
            selected,
            q.correct,
            latency_ms,
        )
        turn.attempts.append(
            AttemptRecord(
                attempt_id=make_attempt_id(turn.user_id, q.id, turn.now_ms),
                user_id=turn.user_id,
                question_id=q.id,
                section=q.section,
                selected=selected,
                correct=q.correct,
                is_correct=answer.is_correct,
                latency_ms=latency_ms,
            )
        )
        session.current_question = None
        session.question_started_at = None
        session.state = ASKING
        return CONTINUE

    async def _step_dispatch(self, turn: Turn) -> str:
        session = turn.session
        if session.state != ASKING:
            return CONTINUE

        questions = await self._all_questions(turn)
        if session.section_index >= len(self.sections):
            report = score(session.answers, self.sections, questions)
            turn.replies.append(report.render())
            logger.info(
                "test_completed user_id=%s correct=%s total=%s percentage=%s",
                turn.user_id,
                report.total_correct,
                report.total,
                report.percentage,
            )
            session.reset()
            return STOP

        section = self.sections[session.section_index]
        q = pick_next(questions, section, session.answered_ids(section), self._rng)
        if q is None:
            session.section_index += 1
            turn.replies.append(t("section_skipped", section=section))
            logger.info("section_skipped user_id=%s section=%s", turn.user_id, section)
            return STOP

        turn.replies.append(render_question(section, q))
        session.current_question = q
        session.question_started_at = turn.now_ms
        session.state = WAITING_ANSWER
        session.section_index += 1
        logger.info("question_sent user_id=%s section=%s question_id=%s", turn.user_id, section, q.id)
        return CONTINUE
