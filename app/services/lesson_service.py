from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.content.curriculum_model import Curriculum
from app.models.content.lesson_model import Lesson
from app.models.progress.lesson_progress_model import LessonProgress
from app.schemas.content.generator_schema import GeneratedLesson
from app.schemas.content.lesson_schema import BulkItemResult, LessonStatsOut, LessonValidationOut
from app.services.lesson_normalizer import normalize_lesson, prepare_for_database
from app.utils.json_utils import dump_json, load_json_document

logger = logging.getLogger(__name__)

# Attribute name differs from the column name ("metadata" is reserved).
_ATTRIBUTE_FOR_FIELD = {"metadata": "metadata_"}
_FIELD_FOR_ATTRIBUTE = {attr: field for field, attr in _ATTRIBUTE_FOR_FIELD.items()}
_IDENTITY_FIELDS = ("id", "created_at", "updated_at")


@dataclass(slots=True)
class LessonServiceError(Exception):
    """Domain error raised by :class:`LessonService`; routers map it to HTTP."""

    code: str
    status_code: int = 400

    def __str__(self) -> str:  # pragma: no cover - human readable message
        return self.code


class LessonNotFoundError(LessonServiceError):
    def __init__(self, lesson_id: str):
        LessonServiceError.__init__(self, "lesson_not_found", 404)
        self.lesson_id = lesson_id


class LessonImportError(LessonServiceError):
    def __init__(self, code: str = "invalid_lesson_json"):
        LessonServiceError.__init__(self, code, 400)


def _writable_attributes() -> frozenset[str]:
    return frozenset(
        prop.key for prop in Lesson.__mapper__.column_attrs if prop.key not in _IDENTITY_FIELDS
    )


def lesson_to_dict(row: Lesson) -> Dict[str, Any]:
    """Raw stored values of *row*, keyed by column name."""
    data = {}
    for prop in Lesson.__mapper__.column_attrs:
        data[_FIELD_FOR_ATTRIBUTE.get(prop.key, prop.key)] = getattr(row, prop.key)
    return data


class LessonService:
    """CRUD and tooling around lessons; every read and write goes through the normalizer."""

    COPY_SUFFIX = " (コピー)"

    def __init__(self, db: Session):
        self.db = db
        self._writable = _writable_attributes()

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------
    def get_lessons(self, curriculum_id: Optional[str] = None) -> List[Dict[str, Any]]:
        query = (
            self.db.query(Lesson, Curriculum.title)
            .outerjoin(Curriculum, Lesson.curriculum_id == Curriculum.id)
            .order_by(Lesson.order_index.asc(), Lesson.created_at.asc())
        )
        if curriculum_id:
            query = query.filter(Lesson.curriculum_id == curriculum_id)

        lessons = []
        for row, curriculum_title in query.all():
            lesson = normalize_lesson(lesson_to_dict(row))
            lesson["curriculum_title"] = curriculum_title
            lessons.append(lesson)
        return lessons

    def get_stored_lessons(self, curriculum_id: str) -> List[Dict[str, Any]]:
        """Lessons of a curriculum exactly as stored, for structure analysis."""
        rows = (
            self.db.query(Lesson)
            .filter(Lesson.curriculum_id == curriculum_id)
            .order_by(Lesson.order_index.asc())
            .all()
        )
        return [lesson_to_dict(row) for row in rows]

    def get_lesson(self, lesson_id: str) -> Dict[str, Any]:
        return normalize_lesson(lesson_to_dict(self._get_row(lesson_id)))

    def search_lessons(self, query: str) -> List[Dict[str, Any]]:
        pattern = f"%{query.strip()}%"
        rows = (
            self.db.query(Lesson)
            .filter(or_(Lesson.title.ilike(pattern), Lesson.description.ilike(pattern)))
            .order_by(Lesson.order_index.asc())
            .all()
        )
        return [normalize_lesson(lesson_to_dict(row)) for row in rows]

    def get_lesson_stats(self, lesson_id: str) -> LessonStatsOut:
        self._get_row(lesson_id)
        records = (
            self.db.query(LessonProgress.status, LessonProgress.best_score, LessonProgress.attempts_count)
            .filter(LessonProgress.lesson_id == lesson_id)
            .all()
        )

        total = len(records)
        completed = sum(1 for status, _, _ in records if status == "completed")
        total_score = sum(score or 0 for _, score, _ in records)
        total_attempts = sum(attempts or 0 for _, _, attempts in records)

        return LessonStatsOut(
            completion_rate=(completed / total) * 100 if total else 0.0,
            average_score=total_score / total if total else 0.0,
            total_attempts=total_attempts,
        )

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------
    def create_lesson(self, lesson: Mapping[str, Any]) -> Dict[str, Any]:
        data = {k: v for k, v in lesson.items() if k not in _IDENTITY_FIELDS}
        data.setdefault("type", data.get("lesson_type") or "conversation")

        row = Lesson()
        self._assign(row, prepare_for_database(data))
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        logger.info("Lesson %s created (%s)", row.id, row.title)
        return normalize_lesson(lesson_to_dict(row))

    def update_lesson(self, lesson_id: str, changes: Mapping[str, Any]) -> Dict[str, Any]:
        row = self._get_row(lesson_id)
        data = {k: v for k, v in changes.items() if k not in _IDENTITY_FIELDS}

        self._assign(row, prepare_for_database(data, current_type=row.type or row.lesson_type))
        row.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(row)
        return normalize_lesson(lesson_to_dict(row))

    def delete_lesson(self, lesson_id: str) -> None:
        row = self._get_row(lesson_id)
        self.db.delete(row)
        self.db.commit()
        logger.info("Lesson %s deleted", lesson_id)

    def duplicate_lesson(self, lesson_id: str, new_title: Optional[str] = None) -> Dict[str, Any]:
        original = self.get_lesson(lesson_id)
        duplicate = {k: v for k, v in original.items() if k not in _IDENTITY_FIELDS}
        duplicate["title"] = new_title or f"{original['title']}{self.COPY_SUFFIX}"
        duplicate["is_active"] = False
        return self.create_lesson(duplicate)

    def reorder_lessons(self, lesson_ids: Sequence[str]) -> None:
        """Set ``order_index`` to each lesson's position in *lesson_ids*."""
        for index, lesson_id in enumerate(lesson_ids):
            row = self._get_row(lesson_id)
            row.order_index = index
            self.db.commit()

    def save_generated_lesson(self, generated: GeneratedLesson, curriculum_id: str) -> Dict[str, Any]:
        data = generated.model_dump()
        data["type"] = data.pop("lesson_type")
        data.update(curriculum_id=curriculum_id, is_active=True, order_index=0)
        return self.create_lesson(data)

    # ------------------------------------------------------------------
    # Bulk operations (sequential, best effort)
    # ------------------------------------------------------------------
    def bulk_update_lessons(
        self, updates: Iterable[Tuple[str, Mapping[str, Any]]]
    ) -> List[BulkItemResult]:
        """Apply each (id, changes) pair in turn.

        A failing item is rolled back on its own and reported; updates applied
        before it stay committed.
        """
        results = []
        for lesson_id, changes in updates:
            results.append(self._run_bulk_item(lesson_id, lambda: self.update_lesson(lesson_id, changes)))
        return results

    def bulk_delete_lessons(self, lesson_ids: Iterable[str]) -> List[BulkItemResult]:
        results = []
        for lesson_id in lesson_ids:
            results.append(self._run_bulk_item(lesson_id, lambda: self.delete_lesson(lesson_id)))
        return results

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------
    def export_lesson(self, lesson_id: str) -> str:
        return dump_json(self.get_lesson(lesson_id))

    def export_lessons(self, lesson_ids: Sequence[str]) -> str:
        return dump_json([self.get_lesson(lesson_id) for lesson_id in lesson_ids])

    def import_lesson(self, json_data: str, curriculum_id: Optional[str] = None) -> Dict[str, Any]:
        try:
            lesson = load_json_document(json_data)
        except ValueError as exc:
            logger.warning("Lesson import rejected: %s", exc)
            raise LessonImportError() from exc

        if not isinstance(lesson, dict):
            raise LessonImportError("lesson_json_must_be_object")
        if not str(lesson.get("title") or "").strip():
            raise LessonImportError("lesson_title_required")

        if curriculum_id:
            lesson["curriculum_id"] = curriculum_id
        return self.create_lesson(lesson)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    @staticmethod
    def validate_lesson(lesson: Mapping[str, Any]) -> LessonValidationOut:
        errors: List[str] = []
        warnings: List[str] = []

        if not str(lesson.get("title") or "").strip():
            errors.append("タイトルは必須です")
        if not (lesson.get("type") or lesson.get("lesson_type")):
            errors.append("レッスンタイプは必須です")
        if not lesson.get("difficulty"):
            errors.append("難易度は必須です")

        normalized = normalize_lesson(lesson)
        key_phrases = normalized["key_phrases"]
        dialogues = normalized["dialogues"]
        has_content = any(
            normalized[field] for field in ("key_phrases", "dialogues", "vocabulary_questions", "grammar_points")
        )
        if not has_content:
            warnings.append("レッスンにコンテンツが含まれていません")

        scenario = normalized["scenario"] or {}
        if (lesson.get("type") or lesson.get("lesson_type")) == "conversation" and not scenario.get("situation"):
            warnings.append("会話レッスンにはシナリオ設定を推奨します")

        for index, key_phrase in enumerate(key_phrases, start=1):
            if not str(key_phrase["phrase"]).strip():
                errors.append(f"キーフレーズ{index}のフレーズが空です")
            if not str(key_phrase["meaning"]).strip():
                warnings.append(f"キーフレーズ{index}の意味が空です")

        for index, dialogue in enumerate(dialogues, start=1):
            if not str(dialogue["text"]).strip():
                errors.append(f"ダイアログ{index}のテキストが空です")

        return LessonValidationOut(is_valid=not errors, errors=errors, warnings=warnings)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _get_row(self, lesson_id: str) -> Lesson:
        row = self.db.get(Lesson, lesson_id)
        if row is None:
            raise LessonNotFoundError(lesson_id)
        return row

    def _assign(self, row: Lesson, data: Mapping[str, Any]) -> None:
        for field, value in data.items():
            attribute = _ATTRIBUTE_FOR_FIELD.get(field, field)
            if attribute in self._writable:
                setattr(row, attribute, value)

    def _run_bulk_item(self, lesson_id: str, operation) -> BulkItemResult:
        try:
            operation()
        except LessonServiceError as exc:
            return BulkItemResult(id=lesson_id, ok=False, error=exc.code)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Bulk operation failed for lesson %s", lesson_id)
            return BulkItemResult(id=lesson_id, ok=False, error=exc.__class__.__name__)
        return BulkItemResult(id=lesson_id, ok=True)
