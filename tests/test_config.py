import pytest

from assessbot.config import DEFAULT_SECTIONS, load_settings

ENV_KEYS = (
    "BOT_TOKEN", "ADMIN_IDS", "DATABASE_URL", "SESSION_STORE", "REDIS_URL",
    "SESSION_TTL_S", "SECTIONS", "START_COMMANDS", "TEST_NAME",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("BOT_TOKEN", "123:abc")


def test_defaults():
    settings = load_settings()
    assert settings.session_store == "memory"
    assert settings.session_ttl_s == 3600
    assert settings.sections == DEFAULT_SECTIONS
    assert settings.start_commands == ("start", "test")
    assert settings.admin_ids == []


def test_overrides(monkeypatch):
    monkeypatch.setenv("SESSION_STORE", "Redis")
    monkeypatch.setenv("SESSION_TTL_S", "60")
    monkeypatch.setenv("SECTIONS", "Logic, Numbers ,")
    monkeypatch.setenv("START_COMMANDS", "Go,Begin")
    monkeypatch.setenv("ADMIN_IDS", "1, 2")
    settings = load_settings()
    assert settings.session_store == "redis"
    assert settings.session_ttl_s == 60
    assert settings.sections == ("Logic", "Numbers")
    assert settings.start_commands == ("go", "begin")
    assert settings.admin_ids == [1, 2]


@pytest.mark.parametrize(
    "key,value",
    [
        ("SESSION_STORE", "postgres"),
        ("SESSION_TTL_S", "0"),
        ("SESSION_TTL_S", "soon"),
        ("SECTIONS", "A,B,A"),
    ],
)
def test_invalid_values(monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(RuntimeError):
        load_settings()


def test_bot_token_required(monkeypatch):
    monkeypatch.delenv("BOT_TOKEN")
    with pytest.raises(RuntimeError):
        load_settings()
