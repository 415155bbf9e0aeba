from __future__ import annotations

import random
from typing import Iterable, Protocol, Sequence, TypeVar

from .types import Question

T = TypeVar("T")


class Chooser(Protocol):
    def choice(self, seq: Sequence[T]) -> T: ...


def pick_next(
    questions: Iterable[Question],
    section: str,
    asked_ids: set[str] | frozenset[str],
    rng: Chooser = random,
) -> Question | None:
    """Uniformly pick an unasked question of ``section``; None when the pool is empty."""
    pool = [q for q in questions if q.section == section and q.id not in asked_ids]
    if not pool:
        return None
    return rng.choice(pool)
