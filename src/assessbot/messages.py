from __future__ import annotations

from .types import Question

STRINGS: dict[str, str] = {
    "started": (
        "✅ {test_name} test started.\n"
        "You’ll get one question per section.\n"
        "Reply with the number of your chosen option. Send any message to get the first question."
    ),
    "idle_hint": "Send \"{start_command}\" to begin the {test_name} test.",
    "invalid_choice": "Please reply with a number 1–{count}.",
    "section_skipped": "Skipping {section} (no questions available). Send any message to continue.",
    "reply_range": "Reply with 1–{count}.",
}


def t(key: str, **kwargs: object) -> str:
    template = STRINGS.get(key, key)
    return template.format(**kwargs) if kwargs else template


def render_question(section: str, q: Question) -> str:
    parts = [f"🧠 Section: {section}"]
    if q.passage:
        parts.append(f"Passage:\n{q.passage}")
    parts.append(f"Question:\n{q.stem}")
    parts.append("\n".join(f"{i}) {opt}" for i, opt in enumerate(q.options, start=1)))
    parts.append(t("reply_range", count=len(q.options)))
    return "\n\n".join(parts)
