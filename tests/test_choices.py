import pytest

from assessbot.choices import parse_choice
from assessbot.normalize import norm_command


@pytest.mark.parametrize(
    "text,expected",
    [
        ("1", 1),
        (" 3 ", 3),
        ("2)", 2),
        ("2. I think", 2),
        ("４", 4),
        ("+2", 2),
    ],
)
def test_parse_choice_accepts_leading_integer(text, expected):
    assert parse_choice(text, 4) == expected


@pytest.mark.parametrize("text", ["0", "5", "-1", "", "   ", "B", "one", "x2"])
def test_parse_choice_rejects(text):
    assert parse_choice(text, 4) is None


def test_parse_choice_without_options():
    assert parse_choice("1", 0) is None


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Start", "start"),
        ("  TEST ", "test"),
        ("/start", "start"),
        ("/START@quiz_bot", "start"),
        ("start now", "start now"),
    ],
)
def test_norm_command(text, expected):
    assert norm_command(text) == expected
