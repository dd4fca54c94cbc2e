# Fichier: app/api/v2/endpoints/ai_settings_router.py
"""Réglages IA (prompts globaux, réglages globaux, feedback).

Toutes les routes sont réservées aux super administrateurs.
"""
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.v2.dependencies import get_db, require_super_admin
from app.models.user.profile_model import Profile
from app.schemas.ai import ai_prompt_schema
from app.services.ai_prompt_service import AIPromptService, AIPromptServiceError

logger = logging.getLogger(__name__)

router = APIRouter()


def _save_failed(db: Session, what: str) -> HTTPException:
    db.rollback()
    logger.exception("AI settings update failed (%s)", what)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"{what}_save_failed")


@router.get("/prompts", response_model=List[ai_prompt_schema.AIPromptOut])
def list_global_prompts(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_super_admin),
):
    return AIPromptService(db).list_global_prompts()


@router.post("/prompts", response_model=ai_prompt_schema.AIPromptOut, status_code=status.HTTP_201_CREATED)
def create_global_prompt(
    payload: ai_prompt_schema.AIPromptCreate,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_super_admin),
):
    try:
        return AIPromptService(db).create_global_prompt(payload)
    except SQLAlchemyError as exc:
        raise _save_failed(db, "prompt") from exc


@router.patch("/prompts/{prompt_id}/content", response_model=ai_prompt_schema.AIPromptOut)
def update_prompt_content(
    prompt_id: str,
    payload: ai_prompt_schema.AIPromptContentUpdate,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_super_admin),
):
    try:
        return AIPromptService(db).update_prompt_content(prompt_id, payload.prompt_content)
    except AIPromptServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except SQLAlchemyError as exc:
        raise _save_failed(db, "prompt") from exc


@router.patch("/prompts/{prompt_id}/settings", response_model=ai_prompt_schema.AIPromptOut)
def update_prompt_settings(
    prompt_id: str,
    payload: ai_prompt_schema.AIPromptSettingsUpdate,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_super_admin),
):
    try:
        return AIPromptService(db).update_prompt_settings(prompt_id, payload.max_completion_tokens)
    except AIPromptServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except SQLAlchemyError as exc:
        raise _save_failed(db, "prompt") from exc


@router.post("/prompts/{prompt_id}/toggle", response_model=ai_prompt_schema.AIPromptOut)
def toggle_prompt(
    prompt_id: str,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_super_admin),
):
    try:
        return AIPromptService(db).toggle_prompt(prompt_id)
    except AIPromptServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except SQLAlchemyError as exc:
        raise _save_failed(db, "prompt") from exc


@router.delete("/prompts/{prompt_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_prompt(
    prompt_id: str,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_super_admin),
):
    try:
        AIPromptService(db).delete_prompt(prompt_id)
    except AIPromptServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except SQLAlchemyError as exc:
        raise _save_failed(db, "prompt") from exc


@router.get("/conversation-prompts", response_model=ai_prompt_schema.ConversationPromptsOut)
def list_conversation_prompts(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_super_admin),
):
    return ai_prompt_schema.ConversationPromptsOut(prompts=AIPromptService(db).list_activity_prompts())


@router.patch("/conversation-prompts/{prompt_id}", response_model=ai_prompt_schema.AIPromptOut)
def merge_conversation_prompt(
    prompt_id: str,
    changes: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_super_admin),
):
    """Fusionne les champs fournis dans le contenu structuré du prompt."""
    try:
        return AIPromptService(db).merge_prompt_content(prompt_id, changes)
    except AIPromptServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except SQLAlchemyError as exc:
        raise _save_failed(db, "prompt") from exc


@router.get("/global", response_model=Dict[str, Any])
def get_global_settings(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_super_admin),
):
    return AIPromptService(db).get_global_settings()


@router.put("/global/{setting_key}", response_model=Dict[str, Any])
def update_global_setting(
    setting_key: str,
    payload: ai_prompt_schema.AIGlobalSettingUpdate,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_super_admin),
):
    try:
        return AIPromptService(db).update_global_setting(setting_key, payload.setting_value)
    except AIPromptServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except SQLAlchemyError as exc:
        raise _save_failed(db, "setting") from exc


@router.get("/feedback", response_model=List[ai_prompt_schema.AIFeedbackSettingOut])
def list_feedback_settings(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_super_admin),
):
    return AIPromptService(db).list_feedback_settings()


@router.put(
    "/feedback/{setting_name}/session-evaluation",
    response_model=ai_prompt_schema.AIFeedbackSettingOut,
)
def update_session_evaluation(
    setting_name: str,
    payload: ai_prompt_schema.SessionEvaluationUpdate,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(require_super_admin),
):
    try:
        return AIPromptService(db).update_session_evaluation(
            payload.session_evaluation_prompt,
            payload.session_evaluation_system_prompt,
            setting_name=setting_name,
        )
    except AIPromptServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
    except SQLAlchemyError as exc:
        raise _save_failed(db, "feedback_setting") from exc
