# Fichier: app/api/v2/endpoints/curriculum_router.py
import logging
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.v2.dependencies import get_db, require_profile
from app.models.user.profile_model import Profile
from app.schemas.content import curriculum_schema, lesson_schema, structure_schema
from app.services.curriculum_service import CoverImage, CurriculumNotFoundError, CurriculumService
from app.services.storage_service import StorageError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[curriculum_schema.CurriculumOut])
def list_curriculums(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    return CurriculumService(db).list_curriculums()


@router.get("/options", response_model=List[curriculum_schema.CurriculumOption])
def list_curriculum_options(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    """Paires (id, titre) triées par titre pour les sélecteurs."""
    return CurriculumService(db).list_options()


@router.post("", response_model=curriculum_schema.CurriculumOut, status_code=status.HTTP_201_CREATED)
def create_curriculum(
    curriculum_in: curriculum_schema.CurriculumCreate,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    try:
        curriculum = CurriculumService(db).create_curriculum(curriculum_in)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Curriculum creation failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="curriculum_save_failed") from exc
    return CurriculumService.to_out(curriculum)


@router.get("/{curriculum_id}", response_model=curriculum_schema.CurriculumOut)
def get_curriculum(
    curriculum_id: str,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    service = CurriculumService(db)
    try:
        curriculum = service.get_curriculum(curriculum_id)
    except CurriculumNotFoundError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    return CurriculumService.to_out(curriculum, len(curriculum.lessons))


@router.patch("/{curriculum_id}", response_model=curriculum_schema.CurriculumOut)
def update_curriculum(
    curriculum_id: str,
    curriculum_in: curriculum_schema.CurriculumUpdate,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    try:
        curriculum = CurriculumService(db).update_curriculum(curriculum_id, curriculum_in)
    except CurriculumNotFoundError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Curriculum %s update failed", curriculum_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="curriculum_save_failed") from exc
    return CurriculumService.to_out(curriculum, len(curriculum.lessons))


@router.delete("/{curriculum_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_curriculum(
    curriculum_id: str,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    try:
        CurriculumService(db).delete_curriculum(curriculum_id)
    except CurriculumNotFoundError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Curriculum %s deletion failed", curriculum_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="curriculum_delete_failed") from exc


@router.post("/{curriculum_id}/image", response_model=curriculum_schema.CurriculumOut)
async def upload_curriculum_image(
    curriculum_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    content = await file.read()
    image = CoverImage(
        filename=file.filename or "cover.bin",
        content=content,
        content_type=file.content_type or "application/octet-stream",
    )

    service = CurriculumService(db)
    try:
        curriculum = service.attach_cover(service.get_curriculum(curriculum_id), image)
    except CurriculumNotFoundError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except StorageError as exc:
        logger.error("Cover upload for curriculum %s failed: %s", curriculum_id, exc.code)
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Saving cover URL for curriculum %s failed", curriculum_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="curriculum_save_failed") from exc
    return CurriculumService.to_out(curriculum, len(curriculum.lessons))


@router.get("/{curriculum_id}/lessons", response_model=List[lesson_schema.LessonOut])
def list_curriculum_lessons(
    curriculum_id: str,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    try:
        return CurriculumService(db).get_lessons(curriculum_id)
    except CurriculumNotFoundError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc


@router.get("/{curriculum_id}/structure", response_model=structure_schema.CurriculumStructureOut)
def get_curriculum_structure(
    curriculum_id: str,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    """Conformité de chaque leçon au format standard, avec les migrations proposées."""
    try:
        return CurriculumService(db).structure_report(curriculum_id)
    except CurriculumNotFoundError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc


@router.post(
    "/{curriculum_id}/structure/migration-script",
    response_model=structure_schema.MigrationScriptOut,
)
def build_migration_script(
    curriculum_id: str,
    payload: structure_schema.MigrationScriptIn,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    try:
        return CurriculumService(db).migration_script(curriculum_id, payload.lesson_ids)
    except CurriculumNotFoundError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
