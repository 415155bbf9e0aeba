import random

from assessbot.selector import pick_next
from assessbot.types import Question


def _q(qid: str, section: str) -> Question:
    return Question(id=qid, section=section, stem="?", options=("a", "b"), correct=1)


QUESTIONS = [
    _q("i1", "Inference"),
    _q("i2", "Inference"),
    _q("i3", "Inference"),
    _q("a1", "Assumptions"),
]


def test_pick_stays_in_section_and_skips_asked():
    rng = random.Random(7)
    for _ in range(200):
        q = pick_next(QUESTIONS, "Inference", {"i2"}, rng)
        assert q is not None
        assert q.section == "Inference"
        assert q.id != "i2"


def test_pick_returns_none_for_exhausted_pool():
    assert pick_next(QUESTIONS, "Assumptions", {"a1"}) is None
    assert pick_next(QUESTIONS, "Deduction", set()) is None
    assert pick_next([], "Inference", set()) is None


def test_pick_covers_whole_pool():
    rng = random.Random(1)
    seen = {pick_next(QUESTIONS, "Inference", set(), rng).id for _ in range(300)}
    assert seen == {"i1", "i2", "i3"}


def test_pick_uses_supplied_chooser():
    class Last:
        def choice(self, seq):
            return seq[-1]

    assert pick_next(QUESTIONS, "Inference", set(), Last()).id == "i3"
