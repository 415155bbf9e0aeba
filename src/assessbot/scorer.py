from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .types import Answer, Question


@dataclass(frozen=True)
class SectionScore:
    section: str
    total: int
    correct: int
    wrong_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class ScoreReport:
    total_correct: int
    total: int
    percentage: int
    feedback_lines: tuple[str, ...] = ()
    by_section: tuple[SectionScore, ...] = field(default=())

    def render(self) -> str:
        text = f"✅ Test complete!\nScore: {self.total_correct}/{self.total} ({self.percentage}%)"
        if self.feedback_lines:
            text += "\n\nFeedback:\n" + "\n".join(self.feedback_lines)
        return text


def _percentage(correct: int, total: int) -> int:
    if not total:
        return 0
    # half-up: 1/8 -> 13 where round() gives 12
    return int(math.floor(100 * correct / total + 0.5))


def score(
    answers: Iterable[Answer],
    sections: Sequence[str],
    questions: Iterable[Question] = (),
) -> ScoreReport:
    """Summarize a finished run.

    Sections are reported in ``sections`` order; answers for sections that are
    not listed are ignored. ``questions`` is only consulted for the rationale of
    the first wrongly answered question of each section.
    """
    grouped: dict[str, list[Answer]] = {}
    for a in answers:
        grouped.setdefault(a.section, []).append(a)

    by_section: list[SectionScore] = []
    for section in sections:
        items = grouped.get(section)
        if not items:
            continue
        by_section.append(
            SectionScore(
                section=section,
                total=len(items),
                correct=sum(1 for a in items if a.is_correct),
                wrong_ids=tuple(a.question_id for a in items if not a.is_correct),
            )
        )

    total = sum(s.total for s in by_section)
    total_correct = sum(s.correct for s in by_section)

    rationale_by_id = {q.id: q.rationale for q in questions}
    feedback: list[str] = []
    for s in by_section:
        if not s.wrong_ids:
            continue
        rationale = (rationale_by_id.get(s.wrong_ids[0]) or "").strip()
        if rationale:
            feedback.append(f"• {s.section}: {rationale}")

    return ScoreReport(
        total_correct=total_correct,
        total=total,
        percentage=_percentage(total_correct, total),
        feedback_lines=tuple(feedback),
        by_section=tuple(by_section),
    )
