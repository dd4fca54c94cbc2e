from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.content.curriculum_model import Curriculum
from app.models.content.lesson_model import Lesson


def list_curriculums(db: Session, *, order_by_title: bool = False) -> list[Curriculum]:
    query = db.query(Curriculum)
    if order_by_title:
        return query.order_by(Curriculum.title.asc()).all()
    return query.order_by(Curriculum.created_at.desc()).all()


def get_curriculum(db: Session, curriculum_id: str) -> Curriculum | None:
    return db.get(Curriculum, curriculum_id)


def create_curriculum(db: Session, data: Mapping[str, Any]) -> Curriculum:
    curriculum = Curriculum(**dict(data), image_url=None)
    db.add(curriculum)
    db.commit()
    db.refresh(curriculum)
    return curriculum


def update_curriculum(db: Session, curriculum: Curriculum, changes: Mapping[str, Any]) -> Curriculum:
    for field, value in changes.items():
        setattr(curriculum, field, value)
    curriculum.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(curriculum)
    return curriculum


def delete_curriculum(db: Session, curriculum: Curriculum) -> None:
    db.delete(curriculum)
    db.commit()


def count_lessons_by_curriculum(db: Session) -> dict[str, int]:
    rows = (
        db.query(Lesson.curriculum_id, func.count(Lesson.id))
        .filter(Lesson.curriculum_id.is_not(None))
        .group_by(Lesson.curriculum_id)
        .all()
    )
    return {curriculum_id: count for curriculum_id, count in rows}
