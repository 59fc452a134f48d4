"""Command-line entry point for seeding the question catalog.

Loads a JSON array of questions shaped like
``{"chapter": 1, "question": "...", "A": "...", "B": "...", "C": "...",
"D": "...", "answer": "..."}`` into the database. Each answer must equal one
of its four options.

Usage:
    python main.py questions.json [--replace]
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from pydantic import ValidationError

from core.database import SessionLocal, check_connection, init_db
from core.exceptions import ConfigurationError
from core.logging_config import setup_logging
from schemas.question import QuestionCreate
from utils.question_manager import QuestionManager

logger = logging.getLogger(__name__)


def load_question_file(path: Path) -> List[QuestionCreate]:
    """Read and validate a question file.

    Args:
        path: Path to a JSON file holding a list of questions.

    Returns:
        Validated questions in file order.

    Raises:
        ValueError: If the file is not a JSON list or a question is invalid.
    """
    with path.open(encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array of questions")

    questions = []
    for index, item in enumerate(data):
        try:
            questions.append(QuestionCreate.model_validate(item))
        except ValidationError as e:
            raise ValueError(f"Question #{index + 1} in {path} is invalid: {e}") from e
    return questions


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Import quiz questions.")
    parser.add_argument("path", type=Path, help="JSON file with a list of questions")
    parser.add_argument(
        "--replace",
        action="store_true",
        help="delete the existing catalog before importing",
    )
    args = parser.parse_args(argv)

    setup_logging()
    try:
        questions = load_question_file(args.path)
    except (OSError, ValueError) as e:
        logger.error("%s", e)
        return 1

    try:
        check_connection()
    except ConfigurationError:
        return 1
    init_db()

    db = SessionLocal()
    try:
        count = QuestionManager(db).import_questions(questions, replace=args.replace)
    finally:
        db.close()
    print(f"Imported {count} questions from {args.path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
