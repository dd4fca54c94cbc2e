"""Shape checks for lesson content collections.

Everything here is pure: lessons come in as plain mappings (a DB row turned
into a dict, or a raw JSON body) and reports come out. The migration
statements are PostgreSQL text for an operator to review and run by hand;
``apply_migration`` performs the same backfill in Python.
"""

from __future__ import annotations

import copy
import logging
import math
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from app.schemas.content.structure_schema import (
    CurriculumStructureSummary,
    MigrationSuggestion,
    StructureDiff,
    StructureValidation,
)

logger = logging.getLogger(__name__)

CANONICAL_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "order_index",
    "lesson_type",
    "difficulty",
    "estimated_minutes",
    "key_phrases",
    "vocabulary_questions",
    "dialogues",
    "objectives",
    "ai_conversation_system_prompt",
    "grammar_points_json",
    "pronunciation_focus",
    "application_practice",
    "metadata",
)

NESTED_FIELDS: Dict[str, tuple[str, ...]] = {
    "key_phrases": ("phrase", "meaning", "phonetic", "audio_url"),
    "vocabulary_questions": ("question", "options", "correct_answer", "explanation"),
    "dialogues": ("speaker", "text", "japanese", "audio"),
}

STRUCTURED_COLLECTIONS: tuple[str, ...] = tuple(NESTED_FIELDS)

_STANDARD_STRUCTURE: Dict[str, Any] = {
    "title": "",
    "description": "",
    "order_index": 0,
    "lesson_type": "conversation",
    "difficulty": "beginner",
    "estimated_minutes": 30,
    "key_phrases": [{"phrase": "", "meaning": "", "phonetic": "", "audio_url": None}],
    "vocabulary_questions": [{"question": "", "options": [], "correct_answer": 0, "explanation": ""}],
    "dialogues": [{"speaker": "", "text": "", "japanese": "", "audio": None}],
    "objectives": [],
    "ai_conversation_system_prompt": "",
    "grammar_points_json": [],
    "pronunciation_focus": None,
    "application_practice": [],
    "metadata": {},
}

COMMON_ISSUES_LIMIT = 5


def get_standard_structure() -> Dict[str, Any]:
    """Return a fresh copy of the canonical lesson record."""
    return copy.deepcopy(_STANDARD_STRUCTURE)


def _ensure_mapping(lesson: Any) -> Mapping[str, Any]:
    if not isinstance(lesson, Mapping):
        raise TypeError(f"lesson must be a mapping, got {type(lesson).__name__}")
    return lesson


def _items(lesson: Mapping[str, Any], field: str) -> List[Any]:
    value = lesson.get(field)
    return value if isinstance(value, list) else []


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _sql_literal(value: Any) -> str:
    return "'" + str(value).replace("'", "''") + "'"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def validate_lesson_structure(lesson: Mapping[str, Any]) -> StructureValidation:
    lesson = _ensure_mapping(lesson)
    issues: List[str] = []
    suggestions: List[str] = []

    for field in STRUCTURED_COLLECTIONS:
        value = lesson.get(field)
        if field in lesson and value is not None and not isinstance(value, list):
            issues.append(f"{field}: 配列またはnullである必要があります")

    for i, item in enumerate(_items(lesson, "key_phrases")):
        item = item if isinstance(item, Mapping) else {}
        if not item.get("phrase") or not item.get("meaning"):
            issues.append(f"key_phrases[{i}]: phrase と meaning は必須です")
        if not item.get("phonetic"):
            suggestions.append(f"key_phrases[{i}]: phonetic フィールドの追加を推奨")
        if "audio_url" not in item:
            suggestions.append(f"key_phrases[{i}]: audio_url フィールドの追加を推奨")

    for i, item in enumerate(_items(lesson, "vocabulary_questions")):
        item = item if isinstance(item, Mapping) else {}
        if not item.get("question"):
            issues.append(f"vocabulary_questions[{i}]: question は必須です")
        options = item.get("options")
        if not isinstance(options, list) or len(options) < 2:
            issues.append(f"vocabulary_questions[{i}]: options は2つ以上の配列である必要があります")
        if not _is_number(item.get("correct_answer")):
            issues.append(f"vocabulary_questions[{i}]: correct_answer は数値である必要があります")
        if not item.get("explanation"):
            suggestions.append(f"vocabulary_questions[{i}]: explanation の追加を推奨")

    for i, item in enumerate(_items(lesson, "dialogues")):
        item = item if isinstance(item, Mapping) else {}
        if not item.get("speaker") or not item.get("text"):
            issues.append(f"dialogues[{i}]: speaker と text は必須です")
        if not item.get("japanese"):
            suggestions.append(f"dialogues[{i}]: japanese フィールドの追加を推奨")
        if "audio" not in item:
            suggestions.append(f"dialogues[{i}]: audio フィールドの追加を推奨")

    return StructureValidation(is_valid=not issues, issues=issues, suggestions=suggestions)


# ---------------------------------------------------------------------------
# Diff against the canonical record
# ---------------------------------------------------------------------------
def analyze_structure_diff(lesson: Mapping[str, Any]) -> StructureDiff:
    """Compare *lesson* with the canonical field set.

    Nested fields are checked on the first item of each collection only, so a
    collection whose later items differ from the first is under-reported.
    """
    lesson = _ensure_mapping(lesson)

    missing = [field for field in CANONICAL_FIELDS if field not in lesson]
    extra = [field for field in lesson if field not in CANONICAL_FIELDS]

    differences: List[str] = []
    for collection, fields in NESTED_FIELDS.items():
        items = _items(lesson, collection)
        if not items or not isinstance(items[0], Mapping):
            continue
        first = items[0]
        for field in fields:
            if field not in first:
                differences.append(f"{collection}.{field} フィールドが不足")

    return StructureDiff(missing_fields=missing, extra_fields=extra, structure_differences=differences)


# ---------------------------------------------------------------------------
# Migration
# ---------------------------------------------------------------------------
def _key_phrase_needs_backfill(item: Mapping[str, Any]) -> bool:
    return item.get("phonetic") is None or "audio_url" not in item


def _vocabulary_needs_backfill(item: Mapping[str, Any]) -> bool:
    return item.get("explanation") is None


def _dialogue_needs_backfill(item: Mapping[str, Any]) -> bool:
    return item.get("japanese") is None or "audio" not in item


_BACKFILL_CHECKS = {
    "key_phrases": _key_phrase_needs_backfill,
    "vocabulary_questions": _vocabulary_needs_backfill,
    "dialogues": _dialogue_needs_backfill,
}

# Items that already carry the target fields are returned untouched, so the
# statements can be re-run safely.
_BACKFILL_SQL = {
    "key_phrases": (
        "CASE WHEN item->>'phonetic' IS NOT NULL AND item ? 'audio_url' THEN item "
        "ELSE item || jsonb_build_object("
        "'phonetic', COALESCE(item->>'phonetic', ''), "
        "'audio_url', COALESCE(item->'audio_url', 'null'::jsonb)) END"
    ),
    "vocabulary_questions": (
        "CASE WHEN item->>'explanation' IS NOT NULL THEN item "
        "ELSE item || jsonb_build_object('explanation', '') END"
    ),
    "dialogues": (
        "CASE WHEN item->>'japanese' IS NOT NULL AND item ? 'audio' THEN item "
        "ELSE item || jsonb_build_object("
        "'japanese', COALESCE(item->>'japanese', item->>'translation', ''), "
        "'audio', COALESCE(item->'audio', 'null'::jsonb)) END"
    ),
}


def _needs_backfill(lesson: Mapping[str, Any], collection: str) -> bool:
    check = _BACKFILL_CHECKS[collection]
    return any(isinstance(item, Mapping) and check(item) for item in _items(lesson, collection))


def _update_statement(collection: str, lesson_id: str) -> str:
    return (
        f"UPDATE lessons\n"
        f"SET {collection} = (\n"
        f"  SELECT jsonb_agg({_BACKFILL_SQL[collection]})\n"
        f"  FROM jsonb_array_elements({collection}) AS item\n"
        f")\n"
        f"WHERE id = {_sql_literal(lesson_id)};"
    )


def generate_migration_sql(lesson: Mapping[str, Any]) -> MigrationSuggestion:
    lesson = _ensure_mapping(lesson)
    lesson_id = str(lesson.get("id") or "LESSON_ID")

    statements = [
        _update_statement(collection, lesson_id)
        for collection in STRUCTURED_COLLECTIONS
        if _needs_backfill(lesson, collection)
    ]

    warnings: List[str] = []
    if not lesson.get("objectives"):
        warnings.append("objectives フィールドの追加を検討してください")
    if not lesson.get("ai_conversation_system_prompt"):
        warnings.append("ai_conversation_system_prompt の追加を検討してください")

    return MigrationSuggestion(sql_updates=statements, warnings=warnings)


def apply_migration(lesson: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy of *lesson* with the backfill applied.

    Only absent (or null) fields are filled; values already present are never
    overwritten, so applying it twice gives the same result as once.
    """
    migrated = copy.deepcopy(dict(_ensure_mapping(lesson)))

    for item in _items(migrated, "key_phrases"):
        if not isinstance(item, dict):
            continue
        if item.get("phonetic") is None:
            item["phonetic"] = ""
        item.setdefault("audio_url", None)

    for item in _items(migrated, "vocabulary_questions"):
        if isinstance(item, dict) and item.get("explanation") is None:
            item["explanation"] = ""

    for item in _items(migrated, "dialogues"):
        if not isinstance(item, dict):
            continue
        if item.get("japanese") is None:
            item["japanese"] = item.get("translation") or ""
        item.setdefault("audio", None)

    return migrated


def build_migration_script(
    curriculum_title: str,
    lessons: Sequence[Mapping[str, Any]],
    curriculum_id: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """Concatenate the statements of *lessons* into one reviewable script.

    The trailing query lets the operator check collection sizes once the
    statements ran; it targets the whole curriculum when *curriculum_id* is
    given, the selected lessons otherwise.
    """
    generated_at = generated_at or datetime.now(timezone.utc)
    blocks = [
        f"-- カリキュラム「{curriculum_title}」の構造標準化マイグレーション\n"
        f"-- 生成日時: {generated_at.isoformat()}\n"
        f"-- 対象レッスン数: {len(lessons)}"
    ]

    ids: List[str] = []
    for lesson in lessons:
        lesson_id = str(lesson.get("id") or "LESSON_ID")
        ids.append(lesson_id)
        suggestion = generate_migration_sql(lesson)
        header = f"-- {lesson.get('title') or '(untitled)'} ({lesson_id})"
        body = suggestion.sql_updates or ["-- no structural changes required"]
        notes = [f"-- WARNING: {warning}" for warning in suggestion.warnings]
        blocks.append("\n".join([header, *notes]) + "\n" + "\n\n".join(body))

    if curriculum_id:
        scope = f"WHERE curriculum_id = {_sql_literal(curriculum_id)}"
    else:
        scope = f"WHERE id IN ({', '.join(_sql_literal(i) for i in ids) or 'NULL'})"
    blocks.append(
        "-- 完了確認\n"
        "SELECT\n"
        "  title,\n"
        "  CASE WHEN key_phrases IS NOT NULL THEN jsonb_array_length(key_phrases) ELSE 0 END AS key_phrases_count,\n"
        "  CASE WHEN vocabulary_questions IS NOT NULL THEN jsonb_array_length(vocabulary_questions) ELSE 0 END AS vocab_count,\n"
        "  CASE WHEN dialogues IS NOT NULL THEN jsonb_array_length(dialogues) ELSE 0 END AS dialogues_count\n"
        "FROM lessons\n"
        f"{scope}\n"
        "ORDER BY order_index;"
    )

    return "\n\n".join(blocks)


# ---------------------------------------------------------------------------
# Curriculum aggregate
# ---------------------------------------------------------------------------
def analyze_curriculum_structure(
    curriculum_id: str, lessons: Iterable[Mapping[str, Any]]
) -> CurriculumStructureSummary:
    total = 0
    compliant = 0
    issue_counter: Counter[str] = Counter()

    for lesson in lessons:
        total += 1
        report = validate_lesson_structure(lesson)
        if report.is_valid:
            compliant += 1
        issue_counter.update(report.issues)

    # Half-up rounding: 12.5 % reads as 13 on the dashboard.
    compliance = math.floor(100 * compliant / total + 0.5) if total else 0
    common_issues = [
        f"{issue} ({count}件)" for issue, count in issue_counter.most_common(COMMON_ISSUES_LIMIT)
    ]
    logger.info(
        "Structure analysis for curriculum %s: %d/%d lessons compliant",
        curriculum_id,
        compliant,
        total,
    )

    return CurriculumStructureSummary(
        curriculum_id=curriculum_id,
        total_lessons=total,
        structure_compliance=compliance,
        common_issues=common_issues,
        migration_required=total - compliant,
    )
