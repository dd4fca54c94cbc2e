from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class StructureValidation(BaseModel):
    is_valid: bool
    issues: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)


class StructureDiff(BaseModel):
    missing_fields: List[str] = Field(default_factory=list)
    extra_fields: List[str] = Field(default_factory=list)
    structure_differences: List[str] = Field(default_factory=list)


class MigrationSuggestion(BaseModel):
    sql_updates: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class CurriculumStructureSummary(BaseModel):
    curriculum_id: str
    total_lessons: int
    structure_compliance: int = Field(..., ge=0, le=100)
    common_issues: List[str] = Field(default_factory=list)
    migration_required: int


class LessonStructureReport(BaseModel):
    lesson_id: str
    title: str
    validation: StructureValidation
    diff: StructureDiff
    migration: MigrationSuggestion


class CurriculumStructureOut(BaseModel):
    summary: CurriculumStructureSummary
    lessons: List[LessonStructureReport]


class MigrationScriptIn(BaseModel):
    lesson_ids: List[str] = Field(..., min_length=1)


class MigrationScriptOut(BaseModel):
    script: str
    lesson_count: int
    curriculum_title: Optional[str] = None
