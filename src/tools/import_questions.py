import asyncio, json, sys
from assessbot.config import load_settings
from assessbot.db import ensure_schema, make_engine, make_sessionmaker
from assessbot.questions import replace_questions
from assessbot.validation import has_errors, iter_question_items, validate_question_bank

async def main(path: str) -> int:
    settings = load_settings()
    data = json.loads(open(path, "r", encoding="utf-8").read())
    issues = validate_question_bank(data, settings.sections)
    for issue in issues:
        where = issue.question_id or (f"#{issue.item_index}" if issue.item_index else "bank")
        print(f"{issue.severity.upper()}: {where}: {issue.message}")
    if has_errors(issues):
        print("Aborted: fix the errors above first.")
        return 1

    engine = make_engine(settings)
    await ensure_schema(engine)
    Session = make_sessionmaker(engine)
    async with Session() as s:
        count = await replace_questions(s, iter_question_items(data))
    await engine.dispose()
    print(f"Imported {count} questions.")
    return 0

if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python -m tools.import_questions data/questions.json")
        raise SystemExit(2)
    raise SystemExit(asyncio.run(main(sys.argv[1])))
