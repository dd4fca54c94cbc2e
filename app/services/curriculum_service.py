from __future__ import annotations

import logging
import mimetypes
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from sqlalchemy.orm import Session

from app.core.constants import get_category_label, get_difficulty_label
from app.crud.content import curriculum_crud
from app.models.content.curriculum_model import Curriculum
from app.schemas.content.curriculum_schema import (
    CurriculumCreate,
    CurriculumOption,
    CurriculumOut,
    CurriculumUpdate,
)
from app.schemas.content.structure_schema import (
    CurriculumStructureOut,
    LessonStructureReport,
    MigrationScriptOut,
)
from app.services import lesson_structure_analyzer as analyzer
from app.services.lesson_service import LessonService
from app.services.storage_service import StorageClient, StorageError

logger = logging.getLogger(__name__)

COVER_FOLDER = "curriculum-images"


@dataclass(slots=True)
class CurriculumNotFoundError(Exception):
    code: str = "curriculum_not_found"
    status_code: int = 404

    def __str__(self) -> str:  # pragma: no cover - human readable message
        return self.code


@dataclass(slots=True)
class CoverImage:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def extension(self) -> str:
        _, dot, suffix = self.filename.rpartition(".")
        if dot and suffix:
            return suffix
        guessed = mimetypes.guess_extension(self.content_type or "")
        return guessed.lstrip(".") if guessed else "bin"


class CurriculumService:
    """Curriculum CRUD, cover images and the structure-alignment report."""

    def __init__(
        self,
        db: Session,
        storage: Optional[StorageClient] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.db = db
        self.storage = storage or StorageClient()
        self._clock = clock

    # ----- Public API -----
    def list_curriculums(self) -> List[CurriculumOut]:
        counts = curriculum_crud.count_lessons_by_curriculum(self.db)
        return [
            self.to_out(curriculum, counts.get(curriculum.id, 0))
            for curriculum in curriculum_crud.list_curriculums(self.db)
        ]

    def list_options(self) -> List[CurriculumOption]:
        """Title-ordered (id, title) pairs for pickers."""
        return [
            CurriculumOption.model_validate(curriculum)
            for curriculum in curriculum_crud.list_curriculums(self.db, order_by_title=True)
        ]

    def get_curriculum(self, curriculum_id: str) -> Curriculum:
        curriculum = curriculum_crud.get_curriculum(self.db, curriculum_id)
        if curriculum is None:
            raise CurriculumNotFoundError()
        return curriculum

    def create_curriculum(self, payload: CurriculumCreate, image: Optional[CoverImage] = None) -> Curriculum:
        """Insert the row, then try to attach *image*.

        The cover is uploaded once the id exists; if the upload fails the
        curriculum is kept without image and the failure is only logged.
        """
        curriculum = curriculum_crud.create_curriculum(self.db, payload.model_dump())
        logger.info("Curriculum %s created (%s)", curriculum.id, curriculum.title)

        if image is not None:
            try:
                self.attach_cover(curriculum, image)
            except StorageError as exc:
                logger.error("Cover upload failed for curriculum %s: %s", curriculum.id, exc.code)
        return curriculum

    def update_curriculum(
        self, curriculum_id: str, payload: CurriculumUpdate, image: Optional[CoverImage] = None
    ) -> Curriculum:
        curriculum = self.get_curriculum(curriculum_id)
        curriculum = curriculum_crud.update_curriculum(self.db, curriculum, payload.model_dump(exclude_unset=True))
        if image is not None:
            try:
                self.attach_cover(curriculum, image)
            except StorageError as exc:
                logger.error("Cover upload failed for curriculum %s: %s", curriculum.id, exc.code)
        return curriculum

    def delete_curriculum(self, curriculum_id: str) -> None:
        curriculum = self.get_curriculum(curriculum_id)
        curriculum_crud.delete_curriculum(self.db, curriculum)
        logger.info("Curriculum %s deleted with its lessons", curriculum_id)

    def attach_cover(self, curriculum: Curriculum, image: CoverImage) -> Curriculum:
        """Upload *image* and point ``image_url`` at it. Raises ``StorageError``."""
        path = f"{COVER_FOLDER}/{curriculum.id}-{int(self._clock() * 1000)}.{image.extension}"
        self.storage.upload(path, image.content, image.content_type, upsert=True)
        public_url = self.storage.get_public_url(path)
        return curriculum_crud.update_curriculum(self.db, curriculum, {"image_url": public_url})

    def get_lessons(self, curriculum_id: str) -> List[dict]:
        self.get_curriculum(curriculum_id)
        return LessonService(self.db).get_lessons(curriculum_id)

    def structure_report(self, curriculum_id: str) -> CurriculumStructureOut:
        self.get_curriculum(curriculum_id)
        lessons = LessonService(self.db).get_stored_lessons(curriculum_id)

        reports = [
            LessonStructureReport(
                lesson_id=lesson["id"],
                title=lesson["title"],
                validation=analyzer.validate_lesson_structure(lesson),
                diff=analyzer.analyze_structure_diff(lesson),
                migration=analyzer.generate_migration_sql(lesson),
            )
            for lesson in lessons
        ]
        return CurriculumStructureOut(
            summary=analyzer.analyze_curriculum_structure(curriculum_id, lessons),
            lessons=reports,
        )

    def migration_script(self, curriculum_id: str, lesson_ids: Sequence[str]) -> MigrationScriptOut:
        curriculum = self.get_curriculum(curriculum_id)
        selected = set(lesson_ids)
        lessons = [
            lesson
            for lesson in LessonService(self.db).get_stored_lessons(curriculum_id)
            if lesson["id"] in selected
        ]
        script = analyzer.build_migration_script(curriculum.title, lessons, curriculum_id=curriculum_id)
        return MigrationScriptOut(script=script, lesson_count=len(lessons), curriculum_title=curriculum.title)

    # ----- Helpers -----
    @staticmethod
    def to_out(curriculum: Curriculum, lesson_count: int = 0) -> CurriculumOut:
        out = CurriculumOut.model_validate(curriculum)
        out.lesson_count = lesson_count
        out.difficulty_label = get_difficulty_label(curriculum.difficulty_level)
        out.category_label = get_category_label(curriculum.category) if curriculum.category else None
        return out
