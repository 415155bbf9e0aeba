from __future__ import annotations

import json
import logging
from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .models import QuestionRow
from .normalize import norm_text
from .types import Question

logger = logging.getLogger(__name__)


class QuestionRepository(Protocol):
    async def fetch_all(self) -> list[Question]: ...


def _parse_options(raw: str | None) -> list[str] | None:
    if not raw:
        return None
    try:
        val = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(val, list) or not val:
        return None
    return [str(x) for x in val]


def row_to_question(row: QuestionRow) -> Question | None:
    options = _parse_options(row.options_json)
    if options is None:
        logger.warning("question_skipped id=%s reason=bad_options", row.id)
        return None
    try:
        return Question(
            id=row.id,
            section=row.section,
            stem=row.stem,
            options=tuple(options),
            correct=int(row.correct),
            passage=row.passage or None,
            rationale=row.rationale or None,
            difficulty=row.difficulty or "M",
        )
    except ValueError:
        logger.warning(
            "question_skipped id=%s reason=correct_out_of_range correct=%s options=%s",
            row.id,
            row.correct,
            len(options),
        )
        return None


class SqlQuestionRepository:
    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    async def fetch_all(self) -> list[Question]:
        async with self._sessionmaker() as s:
            rows = (await s.execute(select(QuestionRow).order_by(QuestionRow.id))).scalars().all()
        out: list[Question] = []
        for row in rows:
            q = row_to_question(row)
            if q is not None:
                out.append(q)
        return out


def item_to_row(item: dict) -> QuestionRow:
    return QuestionRow(
        id=norm_text(str(item["id"])),
        section=norm_text(str(item["section"])),
        stem=str(item["stem"]).strip(),
        passage=(item.get("passage") or None),
        options_json=json.dumps([str(o) for o in item["options"]], ensure_ascii=False),
        correct=int(item["correct"]),
        rationale=(item.get("rationale") or None),
        difficulty=str(item.get("difficulty") or "M"),
    )


async def replace_questions(s: AsyncSession, items: list[dict]) -> int:
    await s.execute(delete(QuestionRow))
    for item in items:
        s.add(item_to_row(item))
    await s.commit()
    return len(items)
