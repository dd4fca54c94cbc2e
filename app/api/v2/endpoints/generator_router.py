# Fichier: app/api/v2/endpoints/generator_router.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.v2.dependencies import get_db, require_profile
from app.models.user.profile_model import Profile
from app.schemas.content import generator_schema, lesson_schema
from app.services import lesson_templates
from app.services.auto_lesson_generator import AutoLessonGenerator
from app.services.curriculum_service import CurriculumNotFoundError, CurriculumService
from app.services.lesson_service import LessonService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/templates", response_model=List[generator_schema.TemplatePreset])
def list_templates(current_profile: Profile = Depends(require_profile)):
    return [AutoLessonGenerator.generate_from_template(name) for name in lesson_templates.list_presets()]


@router.get("/templates/{name}", response_model=generator_schema.TemplatePreset)
def get_template(
    name: str,
    title: Optional[str] = Query(None),
    topic: Optional[str] = Query(None),
    japanese_context: Optional[str] = Query(None),
    current_profile: Profile = Depends(require_profile),
):
    """Préremplissage du formulaire; un nom inconnu renvoie le modèle par défaut."""
    return AutoLessonGenerator.generate_from_template(
        name, title=title, topic=topic, japanese_context=japanese_context
    )


@router.post("/generate", response_model=generator_schema.GeneratedLesson)
def generate_lesson(
    data: generator_schema.GenerationInput,
    current_profile: Profile = Depends(require_profile),
):
    try:
        return AutoLessonGenerator().generate(data)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/save", response_model=lesson_schema.LessonOut, status_code=status.HTTP_201_CREATED)
def save_generated_lesson(
    payload: generator_schema.GeneratedLessonSaveIn,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    try:
        CurriculumService(db).get_curriculum(payload.curriculum_id)
        return LessonService(db).save_generated_lesson(payload.lesson, payload.curriculum_id)
    except CurriculumNotFoundError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Saving generated lesson failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="lesson_save_failed") from exc
