"""Déclare l'ensemble des modèles SQLAlchemy pour que ``Base.metadata`` les connaisse."""

from app.db.base_class import Base

# Contenu pédagogique
from app.models.content.curriculum_model import Curriculum
from app.models.content.lesson_model import Lesson
from app.models.content.course_model import Course, Module

# Utilisateurs et progression
from app.models.user.profile_model import Profile
from app.models.progress.lesson_progress_model import LessonProgress

# Configuration IA
from app.models.ai.ai_prompt_model import AIFeedbackSetting, AIGlobalSetting, LessonAIPrompt

__all__ = [
    "Base",
    "Curriculum",
    "Lesson",
    "Course",
    "Module",
    "Profile",
    "LessonProgress",
    "LessonAIPrompt",
    "AIGlobalSetting",
    "AIFeedbackSetting",
]
