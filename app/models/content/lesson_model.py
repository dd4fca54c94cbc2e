from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base

if TYPE_CHECKING:
    from .curriculum_model import Curriculum


class Lesson(Base):
    """A lesson row.

    Content collections live in JSON columns. ``type``/``lesson_type`` and
    ``grammar_points``/``grammar_points_json`` are historical aliases that the
    write path keeps in sync (see ``app.services.lesson_normalizer``).
    """

    __tablename__ = "lessons"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    curriculum_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("curriculums.id", ondelete="CASCADE"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    lesson_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    difficulty: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    estimated_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=30, server_default="30")
    character_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    objectives: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    key_phrases: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    dialogues: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    vocabulary_questions: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    listening_exercises: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    application_practice: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    scenario: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    grammar_points: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    grammar_points_json: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    pronunciation_focus: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    # "metadata" is reserved on declarative classes.
    metadata_: Mapped[Optional[Any]] = mapped_column("metadata", JSON, nullable=True)

    ai_conversation_system_prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ai_conversation_display_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ai_conversation_display_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ai_conversation_voice_model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    curriculum: Mapped[Optional["Curriculum"]] = relationship(back_populates="lessons")

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Lesson(id={self.id}, title='{self.title}', type='{self.type}')>"
