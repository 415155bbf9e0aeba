import asyncio
import json

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from assessbot.questions import SqlQuestionRepository
from tools import import_questions, validate_questions

SECTIONS = "Inference,Assumptions"


def _write(tmp_path, payload) -> str:
    path = tmp_path / "questions.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def _bank():
    return {
        "questions": [
            {"id": "i1", "section": "Inference", "stem": "S", "options": ["a", "b"], "correct": 2},
            {"id": "a1", "section": "Assumptions", "stem": "S", "options": ["a"], "correct": 1,
             "rationale": "R"},
        ]
    }


def test_validate_ok(tmp_path, capsys):
    path = _write(tmp_path, _bank())
    assert validate_questions.main(["--questions", path, "--sections", SECTIONS]) == 0
    assert capsys.readouterr().out.strip().endswith("OK")


def test_validate_reports_errors(tmp_path, capsys):
    bank = _bank()
    bank["questions"][0]["correct"] = 9
    path = _write(tmp_path, bank)
    assert validate_questions.main(["--questions", path, "--sections", SECTIONS]) == 1
    assert "ERROR: i1: correct=9 outside 1..2" in capsys.readouterr().out


def test_validate_missing_file(tmp_path):
    assert validate_questions.main(["--questions", str(tmp_path / "nope.json")]) == 1


def test_import_loads_questions(tmp_path, monkeypatch, capsys):
    db_url = f"sqlite+aiosqlite:///{tmp_path / 'app.db'}"
    monkeypatch.setenv("BOT_TOKEN", "123:abc")
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setenv("SECTIONS", SECTIONS)
    path = _write(tmp_path, _bank())

    assert asyncio.run(import_questions.main(path)) == 0
    assert "Imported 2 questions." in capsys.readouterr().out

    async def _fetch():
        engine = create_async_engine(db_url)
        questions = await SqlQuestionRepository(async_sessionmaker(engine)).fetch_all()
        await engine.dispose()
        return questions

    questions = asyncio.run(_fetch())
    assert sorted(q.id for q in questions) == ["a1", "i1"]


def test_import_refuses_invalid_bank(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("BOT_TOKEN", "123:abc")
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'app.db'}")
    monkeypatch.setenv("SECTIONS", SECTIONS)
    path = _write(tmp_path, {"questions": [{"id": "x"}]})

    assert asyncio.run(import_questions.main(path)) == 1
    assert "Aborted" in capsys.readouterr().out
    assert not (tmp_path / "app.db").exists()
