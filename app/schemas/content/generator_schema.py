from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.content.lesson_schema import LessonDifficulty


class GenerationInput(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    topic: str = Field(..., min_length=1, max_length=100)
    difficulty_level: LessonDifficulty = LessonDifficulty.BEGINNER
    key_words: List[str] = Field(default_factory=list)
    japanese_context: Optional[str] = None

    @field_validator("topic")
    @classmethod
    def _strip_topic(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("topic_required")
        return value


class TemplatePreset(BaseModel):
    name: str
    title: str
    description: str
    topic: str
    key_words: List[str]
    japanese_context: str


class GeneratedLesson(BaseModel):
    title: str
    description: str
    lesson_type: str = "conversation"
    difficulty: str
    estimated_minutes: int = 30
    key_phrases: List[Dict[str, Any]]
    vocabulary_questions: List[Dict[str, Any]]
    dialogues: List[Dict[str, Any]]
    application_practice: List[Dict[str, Any]]
    objectives: List[str]
    ai_conversation_system_prompt: str


class GeneratedLessonSaveIn(BaseModel):
    curriculum_id: str
    lesson: GeneratedLesson
