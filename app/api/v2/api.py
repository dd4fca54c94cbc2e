# Fichier: app/api/v2/api.py
from fastapi import APIRouter
from .endpoints import (
    ai_settings_router,
    course_router,
    curriculum_router,
    dashboard_router,
    generator_router,
    lesson_router,
    profile_router,
    structure_router,
)

api_router = APIRouter()

api_router.include_router(dashboard_router.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(curriculum_router.router, prefix="/curriculums", tags=["Curriculums"])
api_router.include_router(lesson_router.router, prefix="/lessons", tags=["Lessons"])
api_router.include_router(structure_router.router, prefix="/structure", tags=["Structure"])
api_router.include_router(generator_router.router, prefix="/generator", tags=["Generator"])
api_router.include_router(ai_settings_router.router, prefix="/ai-settings", tags=["AI Settings"])
api_router.include_router(course_router.router, prefix="/courses", tags=["Courses"])
api_router.include_router(profile_router.router, prefix="/profiles", tags=["Profiles"])
