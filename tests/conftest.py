"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("SECRET_KEY", "secret-key")
os.environ.setdefault("SUPER_ADMIN_EMAILS", '["owner@example.com"]')

from app.db.base import Base
from app.models.ai.ai_prompt_model import AIFeedbackSetting, AIGlobalSetting, LessonAIPrompt
from app.models.content.course_model import Course, Module
from app.models.content.curriculum_model import Curriculum
from app.models.content.lesson_model import Lesson
from app.models.progress.lesson_progress_model import LessonProgress
from app.models.user.profile_model import Profile


# Ensure the app package is importable when tests run from the repo root.
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.append(str(BACKEND_ROOT))


TABLES = [
    Profile.__table__,
    Curriculum.__table__,
    Lesson.__table__,
    LessonProgress.__table__,
    Course.__table__,
    Module.__table__,
    LessonAIPrompt.__table__,
    AIGlobalSetting.__table__,
    AIFeedbackSetting.__table__,
]


@pytest.fixture()
def engine():
    engine = create_engine("sqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine, tables=TABLES)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine, tables=TABLES)
        engine.dispose()


@pytest.fixture()
def db_session(engine) -> Session:
    SessionLocal = sessionmaker(bind=engine, future=True)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
