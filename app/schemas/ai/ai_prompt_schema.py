from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ResponseFormat(BaseModel):
    type: Literal["json_object", "text"] = "json_object"


class AISettings(BaseModel):
    """Settings forwarded to the completion call of an AI activity."""

    model_config = ConfigDict(extra="allow")

    max_completion_tokens: int = Field(800, gt=0)
    response_format: ResponseFormat = Field(default_factory=ResponseFormat)


class AIPromptCreate(BaseModel):
    activity_type: str = Field(..., min_length=1)
    prompt_category: str = Field(..., min_length=1)
    # Raw editor text: JSON is parsed when valid, otherwise stored as-is.
    prompt_content: str = ""


class AIPromptContentUpdate(BaseModel):
    prompt_content: str


class AIPromptSettingsUpdate(BaseModel):
    max_completion_tokens: Optional[Union[int, str]] = None


class AIPromptOut(BaseModel):
    id: str
    lesson_id: Optional[str]
    activity_type: str
    prompt_category: str
    prompt_content: Any
    prompt_variables: Dict[str, Any] = Field(default_factory=dict)
    ai_settings: Optional[AISettings] = None
    version: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AIGlobalSettingUpdate(BaseModel):
    setting_value: Any


class AIFeedbackSettingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    setting_name: str
    description: Optional[str] = None
    json_template: Any = None
    feedback_instructions: Optional[str] = None
    hint_instructions: Optional[str] = None
    session_evaluation_prompt: Optional[str] = None
    session_evaluation_system_prompt: Optional[str] = None
    is_active: bool


class SessionEvaluationUpdate(BaseModel):
    session_evaluation_prompt: str
    session_evaluation_system_prompt: str


class ConversationPromptsOut(BaseModel):
    prompts: List[AIPromptOut]
