# Fichier: app/api/v2/endpoints/dashboard_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v2.dependencies import get_db, require_profile
from app.crud.content import dashboard_crud
from app.models.user.profile_model import Profile
from app.schemas.content.curriculum_schema import DashboardStats

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_profile),
):
    return dashboard_crud.get_dashboard_stats(db)
