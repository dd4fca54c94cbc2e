from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.ai.ai_prompt_model import AIFeedbackSetting, AIGlobalSetting, LessonAIPrompt
from app.schemas.ai.ai_prompt_schema import AIPromptCreate, AIPromptOut, AISettings, ResponseFormat
from app.utils.json_utils import parse_json_field

logger = logging.getLogger(__name__)

CONVERSATION_ACTIVITY = "ai_conversation"
DEFAULT_FEEDBACK_SETTING = "default_ai_conversation"

# Conversation replies are free text and kept short; other activities answer in JSON.
CONVERSATION_MAX_TOKENS = 300


@dataclass(slots=True)
class AIPromptServiceError(Exception):
    code: str
    status_code: int = 400

    def __str__(self) -> str:  # pragma: no cover - human readable message
        return self.code


class AIPromptNotFoundError(AIPromptServiceError):
    def __init__(self, code: str = "ai_prompt_not_found"):
        AIPromptServiceError.__init__(self, code, 404)


def coerce_max_tokens(raw: Union[int, str, None], default: Optional[int] = None) -> int:
    """Integer token budget from an editor field; blank, junk or non-positive values give the default."""
    fallback = default or settings.DEFAULT_AI_MAX_COMPLETION_TOKENS
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return fallback
    return value if value > 0 else fallback


def _validated_settings(raw: Any, prompt_id: str) -> Optional[AISettings]:
    if not raw:
        return None
    try:
        return AISettings.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Ignoring malformed ai_settings on prompt %s: %s", prompt_id, exc.errors())
        return None


def prompt_to_out(row: LessonAIPrompt) -> AIPromptOut:
    return AIPromptOut(
        id=row.id,
        lesson_id=row.lesson_id,
        activity_type=row.activity_type,
        prompt_category=row.prompt_category,
        prompt_content=row.prompt_content,
        prompt_variables=row.prompt_variables if isinstance(row.prompt_variables, dict) else {},
        ai_settings=_validated_settings(row.ai_settings, row.id),
        version=row.version,
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class AIPromptService:
    """Global AI prompt, global setting and feedback setting management."""

    def __init__(self, db: Session):
        self.db = db

    # ----- Prompts -----
    def list_global_prompts(self) -> List[AIPromptOut]:
        rows = (
            self.db.query(LessonAIPrompt)
            .filter(LessonAIPrompt.lesson_id.is_(None))
            .order_by(LessonAIPrompt.activity_type.asc(), LessonAIPrompt.prompt_category.asc())
            .all()
        )
        return [prompt_to_out(row) for row in rows]

    def list_activity_prompts(self, activity_type: str = CONVERSATION_ACTIVITY) -> List[AIPromptOut]:
        """Prompts of one activity, the global default first."""
        rows = (
            self.db.query(LessonAIPrompt)
            .filter(LessonAIPrompt.activity_type == activity_type)
            .order_by(LessonAIPrompt.lesson_id.is_(None).desc(), LessonAIPrompt.lesson_id.asc())
            .all()
        )
        return [prompt_to_out(row) for row in rows]

    def create_global_prompt(self, payload: AIPromptCreate) -> AIPromptOut:
        row = LessonAIPrompt(
            lesson_id=None,
            activity_type=payload.activity_type,
            prompt_category=payload.prompt_category,
            prompt_content=parse_json_field(payload.prompt_content),
            prompt_variables={},
            ai_settings={},
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        logger.info("Global prompt %s created for %s/%s", row.id, row.activity_type, row.prompt_category)
        return prompt_to_out(row)

    def update_prompt_content(self, prompt_id: str, raw_content: str) -> AIPromptOut:
        row = self._get_prompt(prompt_id)
        row.prompt_content = parse_json_field(raw_content)
        return self._save(row)

    def merge_prompt_content(self, prompt_id: str, changes: Mapping[str, Any]) -> AIPromptOut:
        """Overlay *changes* on a structured (object) prompt content."""
        row = self._get_prompt(prompt_id)
        current = row.prompt_content if isinstance(row.prompt_content, dict) else {}
        row.prompt_content = {**current, **changes}
        return self._save(row)

    def update_prompt_settings(self, prompt_id: str, max_completion_tokens: Union[int, str, None]) -> AIPromptOut:
        """Store the token budget; response format and fallback depend on the activity."""
        row = self._get_prompt(prompt_id)
        if row.activity_type == CONVERSATION_ACTIVITY:
            response_format, fallback = "text", CONVERSATION_MAX_TOKENS
        else:
            response_format, fallback = "json_object", None
        ai_settings = AISettings(
            max_completion_tokens=coerce_max_tokens(max_completion_tokens, fallback),
            response_format=ResponseFormat(type=response_format),
        )
        row.ai_settings = ai_settings.model_dump()
        return self._save(row)

    def toggle_prompt(self, prompt_id: str) -> AIPromptOut:
        row = self._get_prompt(prompt_id)
        row.is_active = not row.is_active
        return self._save(row)

    def delete_prompt(self, prompt_id: str) -> None:
        row = self._get_prompt(prompt_id)
        self.db.delete(row)
        self.db.commit()
        logger.info("Prompt %s deleted", prompt_id)

    # ----- Global settings -----
    def get_global_settings(self) -> Dict[str, Any]:
        rows = (
            self.db.query(AIGlobalSetting)
            .filter(AIGlobalSetting.is_active.is_(True))
            .order_by(AIGlobalSetting.setting_key.asc())
            .all()
        )
        return {row.setting_key: row.setting_value for row in rows}

    def update_global_setting(self, setting_key: str, value: Any) -> Dict[str, Any]:
        row = self.db.query(AIGlobalSetting).filter(AIGlobalSetting.setting_key == setting_key).first()
        if row is None:
            raise AIPromptNotFoundError("ai_setting_not_found")

        row.setting_value = parse_json_field(value)
        row.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        return {row.setting_key: row.setting_value}

    # ----- Feedback settings -----
    def list_feedback_settings(self) -> List[AIFeedbackSetting]:
        return self.db.query(AIFeedbackSetting).order_by(AIFeedbackSetting.setting_name.asc()).all()

    def update_session_evaluation(
        self,
        prompt: str,
        system_prompt: str,
        setting_name: str = DEFAULT_FEEDBACK_SETTING,
    ) -> AIFeedbackSetting:
        row = (
            self.db.query(AIFeedbackSetting)
            .filter(AIFeedbackSetting.setting_name == setting_name)
            .first()
        )
        if row is None:
            raise AIPromptNotFoundError("feedback_setting_not_found")

        row.session_evaluation_prompt = prompt
        row.session_evaluation_system_prompt = system_prompt
        row.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(row)
        return row

    # ----- Helpers -----
    def _get_prompt(self, prompt_id: str) -> LessonAIPrompt:
        row = self.db.get(LessonAIPrompt, prompt_id)
        if row is None:
            raise AIPromptNotFoundError()
        return row

    def _save(self, row: LessonAIPrompt) -> AIPromptOut:
        row.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(row)
        return prompt_to_out(row)
