# Fichier: app/api/v2/endpoints/course_router.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.v2.dependencies import get_db, require_profile
from app.crud.content import module_crud
from app.models.user.profile_model import Profile
from app.schemas.content.course_schema import ModuleOut

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/modules", response_model=List[ModuleOut])
def list_modules(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    return module_crud.list_modules(db)


@router.delete("/modules/{module_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_module(
    module_id: str,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    try:
        deleted = module_crud.delete_module(db, module_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Module %s deletion failed", module_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="module_delete_failed") from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="module_not_found")
