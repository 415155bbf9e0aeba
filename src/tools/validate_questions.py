import argparse
import json
import sys

from assessbot.config import DEFAULT_SECTIONS
from assessbot.validation import has_errors, validate_question_bank

def _load_json(path: str):
    return json.loads(open(path, "r", encoding="utf-8").read())

def validate(questions_path: str, sections: tuple[str, ...]) -> int:
    try:
        payload = _load_json(questions_path)
    except (OSError, ValueError) as e:
        print(f"ERROR: {questions_path}: {e}")
        return 1
    issues = validate_question_bank(payload, sections)
    for issue in issues:
        where = issue.question_id or (f"#{issue.item_index}" if issue.item_index else "bank")
        print(f"{issue.severity.upper()}: {where}: {issue.message}")
    if has_errors(issues):
        return 1
    print("OK")
    return 0

def main(argv: list[str]) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--questions", default="data/questions.json")
    parser.add_argument(
        "--sections",
        default=",".join(DEFAULT_SECTIONS),
        help="comma-separated section names in test order",
    )
    args = parser.parse_args(argv)
    sections = tuple(s.strip() for s in args.sections.split(",") if s.strip())
    return validate(args.questions, sections)

if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
