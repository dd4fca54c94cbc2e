"""Utility helpers for test factories."""

from __future__ import annotations

from app.core.security import get_password_hash
from app.models.ai.ai_prompt_model import AIFeedbackSetting, AIGlobalSetting, LessonAIPrompt
from app.models.content.course_model import Course, Module
from app.models.content.curriculum_model import Curriculum
from app.models.content.lesson_model import Lesson
from app.models.progress.lesson_progress_model import LessonProgress
from app.models.user.profile_model import Profile


def _persist(db, instance):
    db.add(instance)
    db.commit()
    db.refresh(instance)
    return instance


def create_profile(db, *, password: str | None = None, **kwargs) -> Profile:
    defaults = {
        "email": "user@example.com",
        "display_name": "User",
        "role": "user",
    }
    defaults.update(kwargs)
    if password is not None:
        defaults["hashed_password"] = get_password_hash(password)
    return _persist(db, Profile(**defaults))


def create_curriculum(db, **kwargs) -> Curriculum:
    defaults = {
        "title": "美容室の英会話",
        "description": "Basic salon English",
        "difficulty_level": 1,
        "category": "haircut",
        "is_active": True,
    }
    defaults.update(kwargs)
    return _persist(db, Curriculum(**defaults))


def standard_key_phrase(**kwargs) -> dict:
    phrase = {
        "phrase": "How would you like your hair cut?",
        "meaning": "どのようにカットしますか？",
        "phonetic": "",
        "audio_url": None,
        "examples": [],
    }
    phrase.update(kwargs)
    return phrase


def standard_dialogue(**kwargs) -> dict:
    dialogue = {"speaker": "staff", "text": "Welcome!", "japanese": "いらっしゃいませ", "audio": None}
    dialogue.update(kwargs)
    return dialogue


def standard_question(**kwargs) -> dict:
    question = {
        "question": "'cut' の意味は？",
        "options": ["切る", "染める", "洗う", "乾かす"],
        "correct_answer": 0,
        "explanation": "",
    }
    question.update(kwargs)
    return question


def create_lesson(db, curriculum: Curriculum | None = None, **kwargs) -> Lesson:
    defaults = {
        "curriculum_id": curriculum.id if curriculum else None,
        "title": "カットの注文",
        "description": "Taking a haircut order",
        "type": "conversation",
        "lesson_type": "conversation",
        "difficulty": "beginner",
        "order_index": 0,
        "is_active": True,
        "objectives": ["Ask about the cut"],
        "key_phrases": [standard_key_phrase()],
        "dialogues": [standard_dialogue()],
        "vocabulary_questions": [standard_question()],
        "grammar_points": None,
        "scenario": {"situation": "At the salon", "setting": "Reception"},
    }
    defaults.update(kwargs)
    return _persist(db, Lesson(**defaults))


def create_progress(db, lesson: Lesson, **kwargs) -> LessonProgress:
    defaults = {"lesson_id": lesson.id, "user_id": "learner-1", "status": "in_progress", "best_score": 0, "attempts_count": 1}
    defaults.update(kwargs)
    return _persist(db, LessonProgress(**defaults))


def create_course_with_modules(db, titles: list[str] | None = None, **kwargs) -> Course:
    course = Course(title=kwargs.pop("title", "Salon English"), description=kwargs.pop("description", None), **kwargs)
    for index, title in enumerate(titles or ["Greeting", "Consultation"], start=1):
        course.modules.append(Module(title=title, order_number=index))
    return _persist(db, course)


def create_prompt(db, **kwargs) -> LessonAIPrompt:
    defaults = {
        "lesson_id": None,
        "activity_type": "ai_conversation",
        "prompt_category": "system_prompt",
        "prompt_content": {"instructions": "Be friendly"},
        "prompt_variables": {},
        "ai_settings": {"max_completion_tokens": 800, "response_format": {"type": "json_object"}},
    }
    defaults.update(kwargs)
    return _persist(db, LessonAIPrompt(**defaults))


def create_global_setting(db, key: str, value, **kwargs) -> AIGlobalSetting:
    return _persist(db, AIGlobalSetting(setting_key=key, setting_value=value, **kwargs))


def create_feedback_setting(db, name: str = "default_ai_conversation", **kwargs) -> AIFeedbackSetting:
    defaults = {"setting_name": name, "description": "Default conversation feedback"}
    defaults.update(kwargs)
    return _persist(db, AIFeedbackSetting(**defaults))
