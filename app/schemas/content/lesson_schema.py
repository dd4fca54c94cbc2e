from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LessonType(str, Enum):
    CONVERSATION = "conversation"
    PRONUNCIATION = "pronunciation"
    VOCABULARY = "vocabulary"
    GRAMMAR = "grammar"
    REVIEW = "review"


class LessonDifficulty(str, Enum):
    BEGINNER = "beginner"
    ELEMENTARY = "elementary"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


# --- Contenu des colonnes JSON ---
# Extra keys are kept: audio/TTS tooling adds its own metadata to items.


class KeyPhrase(BaseModel):
    model_config = ConfigDict(extra="allow")

    phrase: str = ""
    meaning: str = ""
    phonetic: Optional[str] = None
    audio_url: Optional[str] = None
    usage: Optional[str] = None
    examples: List[str] = Field(default_factory=list)
    emotion: Optional[str] = None
    voice: Optional[str] = None
    tts_model: Optional[str] = None


class Dialogue(BaseModel):
    model_config = ConfigDict(extra="allow")

    speaker: str = "ai"
    text: str = ""
    japanese: Optional[str] = None
    audio_url: Optional[str] = None
    emotion: Optional[str] = None
    voice: Optional[str] = None
    tts_model: Optional[str] = None


class VocabularyQuestion(BaseModel):
    model_config = ConfigDict(extra="allow")

    question: str = ""
    options: List[str] = Field(default_factory=list)
    correct_answer: int = 0
    explanation: Optional[str] = None
    audio_url: Optional[str] = None
    difficulty: Optional[str] = None

    @model_validator(mode="after")
    def _check_correct_answer(self) -> "VocabularyQuestion":
        if self.options and not 0 <= self.correct_answer < len(self.options):
            raise ValueError("correct_answer_out_of_range")
        return self


class GrammarPoint(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = ""
    explanation: str = ""
    structure: str = ""
    examples: List[str] = Field(default_factory=list)
    commonMistakes: List[str] = Field(default_factory=list)


class ApplicationExercise(BaseModel):
    model_config = ConfigDict(extra="allow")

    prompt: str = ""
    syntax_hint: Optional[str] = None
    sample_answer: Optional[str] = None
    task: Optional[str] = None
    hints: List[str] = Field(default_factory=list)
    sample_responses: List[str] = Field(default_factory=list)
    evaluation_criteria: List[str] = Field(default_factory=list)


class ConversationScenario(BaseModel):
    model_config = ConfigDict(extra="allow")

    situation: str = ""
    location: Optional[str] = None
    ai_role: Optional[str] = None
    user_role: Optional[str] = None
    context: Optional[str] = None
    suggested_topics: List[str] = Field(default_factory=list)


class PronunciationFocus(BaseModel):
    model_config = ConfigDict(extra="allow")

    targetSounds: List[str] = Field(default_factory=list)
    words: List[str] = Field(default_factory=list)
    sentences: List[str] = Field(default_factory=list)
    tips: Optional[List[str]] = None


# --- Entrées / sorties de l'API ---


class LessonBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    curriculum_id: Optional[str] = None
    type: LessonType = LessonType.CONVERSATION
    difficulty: LessonDifficulty = LessonDifficulty.BEGINNER
    estimated_minutes: int = Field(30, ge=1)
    character_id: Optional[str] = None
    order_index: int = Field(0, ge=0)
    is_active: bool = True

    objectives: Optional[List[str]] = None
    key_phrases: Optional[List[KeyPhrase]] = None
    dialogues: Optional[List[Dialogue]] = None
    vocabulary_questions: Optional[List[VocabularyQuestion]] = None
    listening_exercises: Optional[List[Dict[str, Any]]] = None
    application_practice: Optional[List[ApplicationExercise]] = None
    grammar_points: Optional[List[GrammarPoint]] = None
    scenario: Optional[ConversationScenario] = None
    pronunciation_focus: Optional[PronunciationFocus] = None
    metadata: Optional[Dict[str, Any]] = None

    ai_conversation_system_prompt: Optional[str] = None
    ai_conversation_display_name: Optional[str] = None
    ai_conversation_display_description: Optional[str] = None
    ai_conversation_voice_model: Optional[str] = None


class LessonCreate(LessonBase):
    pass


class LessonUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    curriculum_id: Optional[str] = None
    type: Optional[LessonType] = None
    difficulty: Optional[LessonDifficulty] = None
    estimated_minutes: Optional[int] = Field(None, ge=1)
    character_id: Optional[str] = None
    order_index: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None

    objectives: Optional[List[str]] = None
    key_phrases: Optional[List[KeyPhrase]] = None
    dialogues: Optional[List[Dialogue]] = None
    vocabulary_questions: Optional[List[VocabularyQuestion]] = None
    listening_exercises: Optional[List[Dict[str, Any]]] = None
    application_practice: Optional[List[ApplicationExercise]] = None
    grammar_points: Optional[List[GrammarPoint]] = None
    scenario: Optional[ConversationScenario] = None
    pronunciation_focus: Optional[PronunciationFocus] = None
    metadata: Optional[Dict[str, Any]] = None

    ai_conversation_system_prompt: Optional[str] = None
    ai_conversation_display_name: Optional[str] = None
    ai_conversation_display_description: Optional[str] = None
    ai_conversation_voice_model: Optional[str] = None


class LessonOut(BaseModel):
    """Lesson in its canonical read shape: collections are always lists."""

    model_config = ConfigDict(extra="allow")

    id: str
    curriculum_id: Optional[str] = None
    curriculum_title: Optional[str] = None
    title: str
    description: Optional[str] = None
    type: str
    difficulty: Optional[str] = None
    estimated_minutes: Optional[int] = None
    character_id: Optional[str] = None
    order_index: int = 0
    is_active: bool = True

    objectives: List[Any] = Field(default_factory=list)
    key_phrases: List[Dict[str, Any]] = Field(default_factory=list)
    dialogues: List[Dict[str, Any]] = Field(default_factory=list)
    vocabulary_questions: List[Dict[str, Any]] = Field(default_factory=list)
    listening_exercises: List[Any] = Field(default_factory=list)
    application_practice: List[Any] = Field(default_factory=list)
    grammar_points: List[Any] = Field(default_factory=list)
    scenario: Optional[Dict[str, Any]] = None
    pronunciation_focus: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None

    ai_conversation_system_prompt: Optional[str] = None
    ai_conversation_display_name: Optional[str] = None
    ai_conversation_display_description: Optional[str] = None
    ai_conversation_voice_model: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LessonDuplicateIn(BaseModel):
    new_title: Optional[str] = Field(None, min_length=1, max_length=255)


class LessonReorderIn(BaseModel):
    lesson_ids: List[str] = Field(..., min_length=1)


class LessonBulkUpdateItem(BaseModel):
    id: str
    changes: LessonUpdate


class LessonBulkUpdateIn(BaseModel):
    updates: List[LessonBulkUpdateItem]


class LessonIdsIn(BaseModel):
    ids: List[str]


class BulkItemResult(BaseModel):
    id: str
    ok: bool
    error: Optional[str] = None


class LessonValidationOut(BaseModel):
    is_valid: bool
    errors: List[str]
    warnings: List[str]


class LessonFormActionIn(BaseModel):
    """One edit applied to the editor form; ``collection`` is required for every action but ``set``."""

    form: Dict[str, Any]
    action: Literal["set", "add", "update", "remove", "move"]
    collection: Optional[str] = None
    field: Optional[str] = None
    index: Optional[int] = Field(None, ge=0)
    to_index: Optional[int] = Field(None, ge=0)
    value: Any = None


class LessonFormOut(BaseModel):
    form: Dict[str, Any]
    errors: List[str]


class LessonStatsOut(BaseModel):
    completion_rate: float
    average_score: float
    total_attempts: int


class LessonImportIn(BaseModel):
    json_data: str = Field(..., min_length=1)
    curriculum_id: Optional[str] = None
