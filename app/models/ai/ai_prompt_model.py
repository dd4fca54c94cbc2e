import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base


class LessonAIPrompt(Base):
    """Prompt used by an AI activity. ``lesson_id`` NULL marks the global default."""

    __tablename__ = "lesson_ai_prompts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    lesson_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("lessons.id", ondelete="CASCADE"), nullable=True, index=True
    )
    activity_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    prompt_category: Mapped[str] = mapped_column(String(50), nullable=False)
    # Plain text or a structured object; {placeholders} are resolved by the mobile app.
    prompt_content: Mapped[Any] = mapped_column(JSON, nullable=False)
    prompt_variables: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    ai_settings: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class AIGlobalSetting(Base):
    __tablename__ = "ai_global_settings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    setting_key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    setting_value: Mapped[Any] = mapped_column(JSON, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class AIFeedbackSetting(Base):
    __tablename__ = "ai_feedback_settings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    setting_name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    json_template: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    feedback_instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    hint_instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    session_evaluation_prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    session_evaluation_system_prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ai_settings: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )
