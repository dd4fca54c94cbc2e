"""Print every curriculum with the content counts of its lessons.

Usage::

    python -m scripts.check_lessons
    python -m scripts.check_lessons --curriculum-id <uuid>

Handy to spot lessons imported with empty or half-filled collections before
running the structure alignment from the admin.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from sqlalchemy.exc import SQLAlchemyError

from app.crud.content import curriculum_crud
from app.db import session as session_module
from app.services.lesson_service import LessonService

logger = logging.getLogger(__name__)

COUNTED_COLLECTIONS = (
    ("key_phrases", "キーフレーズ数"),
    ("vocabulary_questions", "語彙問題数"),
    ("dialogues", "ダイアログ数"),
    ("application_practice", "応用問題数"),
)


def _length(value: Any) -> int:
    return len(value) if isinstance(value, list) else 0


def describe_lesson(lesson: Mapping[str, Any]) -> List[str]:
    lines = [f"  レッスン: {lesson.get('title')}"]
    for field, label in COUNTED_COLLECTIONS:
        lines.append(f"    {label}: {_length(lesson.get(field))}")

    key_phrases = lesson.get("key_phrases")
    if isinstance(key_phrases, list) and key_phrases:
        first = key_phrases[0]
        if isinstance(first, Mapping) and first.get("phrase"):
            lines.append(f"    最初のキーフレーズ: {first['phrase']} - {first.get('meaning')}")
        else:
            lines.append("    最初のキーフレーズ: データが不完全")
    return lines


def build_report(curriculums: Iterable[Any], lessons_by_curriculum: Mapping[str, List[Mapping[str, Any]]]) -> str:
    curriculums = list(curriculums)
    lines = ["=== カリキュラム一覧 ==="]
    for curriculum in curriculums:
        lines.append(f"ID: {curriculum.id}, タイトル: {curriculum.title}, 難易度: {curriculum.difficulty_level}")

    lines.append("")
    lines.append("=== 各カリキュラムのレッスン ===")
    for curriculum in curriculums:
        lines.append("")
        lines.append(f"--- {curriculum.title} のレッスン ---")
        lessons = lessons_by_curriculum.get(curriculum.id) or []
        if not lessons:
            lines.append("  レッスンなし")
            continue
        for lesson in lessons:
            lines.extend(describe_lesson(lesson))
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--curriculum-id", help="Limit the report to one curriculum")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)

    try:
        with session_module.SessionLocal() as db:
            curriculums = curriculum_crud.list_curriculums(db)
            if args.curriculum_id:
                curriculums = [c for c in curriculums if c.id == args.curriculum_id]
            service = LessonService(db)
            lessons = {c.id: service.get_stored_lessons(c.id) for c in curriculums}
    except SQLAlchemyError:
        logger.exception("Unable to read curriculums")
        return 1

    print(build_report(curriculums, lessons))
    return 0


if __name__ == "__main__":
    sys.exit(main())
