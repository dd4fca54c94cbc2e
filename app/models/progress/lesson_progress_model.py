import uuid
from typing import Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base


class LessonProgress(Base):
    """Per-user progress on a lesson, written by the mobile app and read here for stats."""

    __tablename__ = "user_lesson_progress"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    lesson_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="in_progress")
    best_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    attempts_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
