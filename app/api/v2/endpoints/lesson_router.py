# Fichier: app/api/v2/endpoints/lesson_router.py
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.v2.dependencies import get_db, require_profile
from app.models.user.profile_model import Profile
from app.schemas.content import lesson_schema
from app.services import lesson_form
from app.services.lesson_service import LessonService, LessonServiceError

logger = logging.getLogger(__name__)

router = APIRouter()


def _persistence_failure(db: Session, code: str) -> HTTPException:
    db.rollback()
    logger.exception("Lesson persistence failed (%s)", code)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=code)


@router.get("", response_model=List[lesson_schema.LessonOut])
def list_lessons(
    curriculum_id: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Recherche sur le titre ou la description"),
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    service = LessonService(db)
    if q and q.strip():
        lessons = service.search_lessons(q)
        if curriculum_id:
            lessons = [lesson for lesson in lessons if lesson.get("curriculum_id") == curriculum_id]
        return lessons
    return service.get_lessons(curriculum_id)


@router.post("", response_model=lesson_schema.LessonOut, status_code=status.HTTP_201_CREATED)
def create_lesson(
    lesson_in: lesson_schema.LessonCreate,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    try:
        return LessonService(db).create_lesson(lesson_in.model_dump(mode="json"))
    except SQLAlchemyError as exc:
        raise _persistence_failure(db, "lesson_save_failed") from exc


@router.post("/reorder", status_code=status.HTTP_204_NO_CONTENT)
def reorder_lessons(
    payload: lesson_schema.LessonReorderIn,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    try:
        LessonService(db).reorder_lessons(payload.lesson_ids)
    except LessonServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except SQLAlchemyError as exc:
        raise _persistence_failure(db, "lesson_reorder_failed") from exc


@router.post("/bulk-update", response_model=List[lesson_schema.BulkItemResult])
def bulk_update_lessons(
    payload: lesson_schema.LessonBulkUpdateIn,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    updates = [(item.id, item.changes.model_dump(mode="json", exclude_unset=True)) for item in payload.updates]
    return LessonService(db).bulk_update_lessons(updates)


@router.post("/bulk-delete", response_model=List[lesson_schema.BulkItemResult])
def bulk_delete_lessons(
    payload: lesson_schema.LessonIdsIn,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    return LessonService(db).bulk_delete_lessons(payload.ids)


@router.post("/validate", response_model=lesson_schema.LessonValidationOut)
def validate_lesson(
    lesson: Dict[str, Any] = Body(...),
    current_profile: Profile = Depends(require_profile),
):
    """Validation éditoriale d'une leçon (brouillon ou enregistrée)."""
    return LessonService.validate_lesson(lesson)


@router.post("/export")
def export_lessons(
    payload: lesson_schema.LessonIdsIn,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    try:
        return {"json": LessonService(db).export_lessons(payload.ids)}
    except LessonServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc


@router.post("/import", response_model=lesson_schema.LessonOut, status_code=status.HTTP_201_CREATED)
def import_lesson(
    payload: lesson_schema.LessonImportIn,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    try:
        return LessonService(db).import_lesson(payload.json_data, payload.curriculum_id)
    except LessonServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except SQLAlchemyError as exc:
        raise _persistence_failure(db, "lesson_import_failed") from exc


# ----- Formulaire d'édition -----
def _apply_form_action(payload: lesson_schema.LessonFormActionIn) -> Dict[str, Any]:
    if payload.action == "set":
        if not payload.field:
            raise ValueError("field_required")
        return lesson_form.update_field(payload.form, payload.field, payload.value)
    if not payload.collection:
        raise ValueError("collection_required")
    if payload.action == "add":
        return lesson_form.add_item(payload.form, payload.collection)
    if payload.index is None:
        raise ValueError("index_required")
    if payload.action == "update":
        return lesson_form.update_item(payload.form, payload.collection, payload.index, payload.field, payload.value)
    if payload.action == "remove":
        return lesson_form.remove_item(payload.form, payload.collection, payload.index)
    if payload.to_index is None:
        raise ValueError("to_index_required")
    return lesson_form.move_item(payload.form, payload.collection, payload.index, payload.to_index)


@router.get("/form", response_model=lesson_schema.LessonFormOut)
def get_new_lesson_form(
    curriculum_id: Optional[str] = Query(None),
    current_profile: Profile = Depends(require_profile),
):
    """Formulaire vierge pour une nouvelle leçon."""
    form = lesson_form.new_lesson_form({"curriculum_id": curriculum_id} if curriculum_id else None)
    return {"form": form, "errors": lesson_form.validate_form(form)}


@router.post("/form/apply", response_model=lesson_schema.LessonFormOut)
def apply_lesson_form_action(
    payload: lesson_schema.LessonFormActionIn,
    current_profile: Profile = Depends(require_profile),
):
    try:
        form = _apply_form_action(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="unknown_collection") from exc
    except (IndexError, TypeError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid_item_index") from exc
    return {"form": form, "errors": lesson_form.validate_form(form)}


@router.get("/{lesson_id}", response_model=lesson_schema.LessonOut)
def get_lesson(
    lesson_id: str,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    try:
        return LessonService(db).get_lesson(lesson_id)
    except LessonServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc


@router.patch("/{lesson_id}", response_model=lesson_schema.LessonOut)
def update_lesson(
    lesson_id: str,
    lesson_in: lesson_schema.LessonUpdate,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    changes = lesson_in.model_dump(mode="json", exclude_unset=True)
    try:
        return LessonService(db).update_lesson(lesson_id, changes)
    except LessonServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except SQLAlchemyError as exc:
        raise _persistence_failure(db, "lesson_save_failed") from exc


@router.delete("/{lesson_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_lesson(
    lesson_id: str,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    try:
        LessonService(db).delete_lesson(lesson_id)
    except LessonServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except SQLAlchemyError as exc:
        raise _persistence_failure(db, "lesson_delete_failed") from exc


@router.post("/{lesson_id}/duplicate", response_model=lesson_schema.LessonOut, status_code=status.HTTP_201_CREATED)
def duplicate_lesson(
    lesson_id: str,
    payload: Optional[lesson_schema.LessonDuplicateIn] = None,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    new_title = payload.new_title if payload else None
    try:
        return LessonService(db).duplicate_lesson(lesson_id, new_title)
    except LessonServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except SQLAlchemyError as exc:
        raise _persistence_failure(db, "lesson_duplicate_failed") from exc


@router.get("/{lesson_id}/stats", response_model=lesson_schema.LessonStatsOut)
def get_lesson_stats(
    lesson_id: str,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    try:
        return LessonService(db).get_lesson_stats(lesson_id)
    except LessonServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc


@router.get("/{lesson_id}/export")
def export_lesson(
    lesson_id: str,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    try:
        return {"json": LessonService(db).export_lesson(lesson_id)}
    except LessonServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
