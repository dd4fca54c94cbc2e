# Fichier: app/api/v2/endpoints/profile_router.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.v2.dependencies import get_db, require_profile
from app.crud.user import profile_crud
from app.models.user.profile_model import Profile
from app.schemas.user.profile_schema import ProfileOut

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[ProfileOut])
def list_profiles(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    return profile_crud.list_profiles(db)


@router.delete("/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_profile(
    profile_id: str,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    if profile_id == current_profile.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="cannot_delete_self")
    try:
        deleted = profile_crud.delete_profile(db, profile_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Profile %s deletion failed", profile_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="profile_delete_failed") from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="profile_not_found")
