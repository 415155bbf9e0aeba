from __future__ import annotations
import re

from .normalize import norm_text

_LEADING_INT = re.compile(r"^[+-]?\d+")

def parse_choice(user_input: str, option_count: int) -> int | None:
    """Return the 1-based option picked by ``user_input`` or None.

    Accepts a leading integer ("2", " 2 ", "2)", "2. because...") and rejects
    anything out of ``1..option_count``.
    """
    if option_count < 1:
        return None
    raw = norm_text(user_input or "")
    if not raw:
        return None
    match = _LEADING_INT.match(raw)
    if not match:
        return None
    idx = int(match.group(0))
    if 1 <= idx <= option_count:
        return idx
    return None
