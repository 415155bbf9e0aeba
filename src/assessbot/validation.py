from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from .normalize import norm_text


@dataclass(frozen=True)
class ValidationIssue:
    severity: str  # "error" | "warning"
    message: str
    question_id: str | None = None
    item_index: int | None = None


def iter_question_items(payload) -> list:
    if isinstance(payload, dict):
        items = payload.get("questions")
        if isinstance(items, list):
            return items
    if isinstance(payload, list):
        return payload
    return []


def _correct_index(raw) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    return None


def validate_question_bank(payload, sections: Sequence[str]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    items = iter_question_items(payload)
    if not items:
        issues.append(ValidationIssue("error", "question bank is empty or not a list"))
        return issues

    seen_ids: set[str] = set()
    per_section: dict[str, int] = {s: 0 for s in sections}
    for idx, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            issues.append(ValidationIssue("error", "question is not an object", None, idx))
            continue
        qid = norm_text(str(item.get("id") or ""))
        if not qid:
            issues.append(ValidationIssue("error", "missing id", None, idx))
        elif qid in seen_ids:
            issues.append(ValidationIssue("error", "duplicate id", qid, idx))
        else:
            seen_ids.add(qid)

        section = norm_text(str(item.get("section") or ""))
        if not section:
            issues.append(ValidationIssue("error", "missing section", qid or None, idx))
        elif section not in per_section:
            issues.append(
                ValidationIssue("warning", f"section {section!r} is not configured", qid or None, idx)
            )
        else:
            per_section[section] += 1

        if not norm_text(str(item.get("stem") or "")):
            issues.append(ValidationIssue("error", "missing stem", qid or None, idx))

        options = item.get("options")
        if not isinstance(options, list) or not options:
            issues.append(ValidationIssue("error", "options must be a non-empty list", qid or None, idx))
            continue
        if any(not norm_text(str(o)) for o in options):
            issues.append(ValidationIssue("warning", "blank option text", qid or None, idx))

        correct = _correct_index(item.get("correct"))
        if correct is None:
            issues.append(ValidationIssue("error", "correct must be an integer", qid or None, idx))
        elif not 1 <= correct <= len(options):
            issues.append(
                ValidationIssue(
                    "error",
                    f"correct={correct} outside 1..{len(options)}",
                    qid or None,
                    idx,
                )
            )

    for section, count in per_section.items():
        if count == 0:
            issues.append(
                ValidationIssue("warning", f"no questions for section {section!r}; it will be skipped")
            )
    return issues


def has_errors(issues: Iterable[ValidationIssue]) -> bool:
    return any(issue.severity == "error" for issue in issues)
