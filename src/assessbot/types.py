from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from typing import Any

IDLE = "IDLE"
ASKING = "ASKING"
WAITING_ANSWER = "WAITING_ANSWER"
STATES = (IDLE, ASKING, WAITING_ANSWER)


@dataclass(frozen=True)
class Question:
    id: str
    section: str
    stem: str
    options: tuple[str, ...]
    correct: int  # 1-based index into options
    passage: str | None = None
    rationale: str | None = None
    difficulty: str = "M"

    def __post_init__(self) -> None:
        if not self.options:
            raise ValueError(f"question {self.id}: options must not be empty")
        if not 1 <= self.correct <= len(self.options):
            raise ValueError(
                f"question {self.id}: correct={self.correct} outside 1..{len(self.options)}"
            )

    def to_dict(self) -> dict[str, Any]:
        out = dataclasses.asdict(self)
        out["options"] = list(self.options)
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Question":
        return cls(
            id=str(raw["id"]),
            section=str(raw["section"]),
            stem=str(raw["stem"]),
            options=tuple(str(o) for o in raw["options"]),
            correct=int(raw["correct"]),
            passage=raw.get("passage") or None,
            rationale=raw.get("rationale") or None,
            difficulty=raw.get("difficulty") or "M",
        )


@dataclass(frozen=True)
class Answer:
    question_id: str
    section: str
    selected_index: int
    correct_index: int
    latency_ms: int

    @property
    def is_correct(self) -> bool:
        return self.selected_index == self.correct_index

    def to_dict(self) -> dict[str, Any]:
        out = dataclasses.asdict(self)
        out["is_correct"] = self.is_correct
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Answer":
        return cls(
            question_id=str(raw["question_id"]),
            section=str(raw["section"]),
            selected_index=int(raw["selected_index"]),
            correct_index=int(raw["correct_index"]),
            latency_ms=int(raw.get("latency_ms", 0)),
        )


@dataclass
class Session:
    """Per-participant progress through one run of the assessment."""

    state: str = IDLE
    section_index: int = 0
    answers: list[Answer] = field(default_factory=list)
    current_question: Question | None = None
    question_started_at: int | None = None  # epoch ms

    def answered_ids(self, section: str) -> set[str]:
        return {a.question_id for a in self.answers if a.section == section}

    def reset(self) -> None:
        self.state = IDLE
        self.section_index = 0
        self.answers = []
        self.current_question = None
        self.question_started_at = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state,
            "section_index": self.section_index,
            "answers": [a.to_dict() for a in self.answers],
            "current_question": self.current_question.to_dict() if self.current_question else None,
            "question_started_at": self.question_started_at,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Session":
        state = raw.get("state") or IDLE
        if state not in STATES:
            raise ValueError(f"unknown session state {state!r}")
        section_index = int(raw.get("section_index") or 0)
        if section_index < 0:
            raise ValueError(f"negative section_index {section_index}")
        current = raw.get("current_question")
        started_at = raw.get("question_started_at")
        return cls(
            state=state,
            section_index=section_index,
            answers=[Answer.from_dict(a) for a in raw.get("answers") or []],
            current_question=Question.from_dict(current) if current else None,
            question_started_at=int(started_at) if started_at is not None else None,
        )

    @classmethod
    def from_json(cls, payload: str) -> "Session":
        raw = json.loads(payload)
        if not isinstance(raw, dict):
            raise ValueError("session payload must be a JSON object")
        return cls.from_dict(raw)
