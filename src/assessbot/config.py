from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

load_dotenv()

DEFAULT_SECTIONS = ("Inference", "Assumptions", "Deduction", "Interpretation", "Arguments")
DEFAULT_START_COMMANDS = ("start", "test")

def _split_csv_ints(s: str) -> List[int]:
    out = []
    for part in (s or "").split(","):
        part = part.strip()
        if part:
            out.append(int(part))
    return out

def _split_csv(s: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    parts = tuple(p.strip() for p in (s or "").split(",") if p.strip())
    return parts or default

@dataclass(frozen=True)
class Settings:
    bot_token: str
    database_url: str
    admin_ids: List[int] = field(default_factory=list)
    session_store: str = "memory"  # memory|redis
    redis_url: str = "redis://localhost:6379/0"
    session_ttl_s: int = 3600
    sections: tuple[str, ...] = DEFAULT_SECTIONS
    start_commands: tuple[str, ...] = DEFAULT_START_COMMANDS
    test_name: str = "Watson-Glaser"

def load_settings() -> Settings:
    load_dotenv()
    bot_token = os.getenv("BOT_TOKEN")
    if not bot_token:
        raise RuntimeError("BOT_TOKEN is required")

    admin_ids = _split_csv_ints(os.getenv("ADMIN_IDS", ""))
    database_url = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./data/app.db")

    session_store = os.getenv("SESSION_STORE", "memory").strip().lower()
    if session_store not in {"memory", "redis"}:
        raise RuntimeError("SESSION_STORE must be memory or redis")
    redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0").strip()

    raw_ttl = os.getenv("SESSION_TTL_S", "3600").strip()
    try:
        session_ttl_s = int(raw_ttl)
    except ValueError:
        raise RuntimeError("SESSION_TTL_S must be an integer") from None
    if session_ttl_s <= 0:
        raise RuntimeError("SESSION_TTL_S must be positive")

    sections = _split_csv(os.getenv("SECTIONS"), DEFAULT_SECTIONS)
    if len(set(sections)) != len(sections):
        raise RuntimeError("SECTIONS must not contain duplicates")
    start_commands = tuple(
        c.lower() for c in _split_csv(os.getenv("START_COMMANDS"), DEFAULT_START_COMMANDS)
    )

    return Settings(
        bot_token=bot_token,
        database_url=database_url,
        admin_ids=admin_ids,
        session_store=session_store,
        redis_url=redis_url,
        session_ttl_s=session_ttl_s,
        sections=sections,
        start_commands=start_commands,
        test_name=os.getenv("TEST_NAME", "Watson-Glaser").strip() or "Watson-Glaser",
    )
