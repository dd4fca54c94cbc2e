# Fichier: app/api/v2/endpoints/structure_router.py
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from app.api.v2.dependencies import require_profile
from app.models.user.profile_model import Profile
from app.schemas.content import structure_schema
from app.services import lesson_structure_analyzer as analyzer

router = APIRouter()


@router.post("/validate", response_model=structure_schema.StructureValidation)
def validate_structure(
    lesson: Dict[str, Any] = Body(...),
    current_profile: Profile = Depends(require_profile),
):
    return analyzer.validate_lesson_structure(lesson)


@router.post("/diff", response_model=structure_schema.StructureDiff)
def diff_structure(
    lesson: Dict[str, Any] = Body(...),
    current_profile: Profile = Depends(require_profile),
):
    return analyzer.analyze_structure_diff(lesson)


@router.post("/migration", response_model=structure_schema.MigrationSuggestion)
def suggest_migration(
    lesson: Dict[str, Any] = Body(...),
    current_profile: Profile = Depends(require_profile),
):
    return analyzer.generate_migration_sql(lesson)


@router.post("/apply-migration")
def apply_migration(
    lesson: Dict[str, Any] = Body(...),
    current_profile: Profile = Depends(require_profile),
):
    """Aperçu de la leçon une fois les champs manquants complétés."""
    return analyzer.apply_migration(lesson)


@router.get("/standard")
def get_standard_structure(current_profile: Profile = Depends(require_profile)):
    """Structure de référence attendue pour chaque leçon."""
    return analyzer.get_standard_structure()
