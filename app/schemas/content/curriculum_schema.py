from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.constants import CATEGORY_VALUES


def _check_category(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    if value not in CATEGORY_VALUES:
        raise ValueError("unknown_category")
    return value


class CurriculumCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    difficulty_level: int = Field(1, ge=1, le=9)
    category: Optional[str] = None
    is_active: bool = False

    @field_validator("category")
    @classmethod
    def _validate_category(cls, value: Optional[str]) -> Optional[str]:
        return _check_category(value)


class CurriculumUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    difficulty_level: Optional[int] = Field(None, ge=1, le=9)
    category: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("category")
    @classmethod
    def _validate_category(cls, value: Optional[str]) -> Optional[str]:
        return _check_category(value)


class CurriculumOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: Optional[str]
    difficulty_level: int
    category: Optional[str]
    image_url: Optional[str]
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    lesson_count: int = 0
    difficulty_label: Optional[str] = None
    category_label: Optional[str] = None


class CurriculumOption(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str


class DashboardStats(BaseModel):
    total_lessons: int
    active_lessons: int
    total_curriculums: int
    active_curriculums: int
