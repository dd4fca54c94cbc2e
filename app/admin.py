"""Centralised configuration for the SQLAdmin back-office."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from markupsafe import Markup, escape
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker
from starlette.requests import Request
from starlette.responses import Response
from sqladmin import Admin, BaseView, ModelView, expose
from sqladmin.authentication import AuthenticationBackend, login_required

from app.api.v2.dependencies import is_super_admin
from app.core.constants import get_category_label, get_difficulty_label
from app.core.security import verify_password
from app.crud.user import profile_crud
from app.db.session import SessionLocal, async_engine
from app.models.ai.ai_prompt_model import AIFeedbackSetting, AIGlobalSetting, LessonAIPrompt
from app.models.content.course_model import Course, Module
from app.models.content.curriculum_model import Curriculum
from app.models.content.lesson_model import Lesson
from app.models.user.profile_model import Profile

logger = logging.getLogger(__name__)

TEMPLATES_DIR = str(Path(__file__).resolve().parent / "templates")

_ASYNC_SESSION_FACTORY = async_sessionmaker(async_engine, expire_on_commit=False)


def _json_preview(value: Any, *, max_chars: int = 160) -> Markup:
    """Render JSON content as a trimmed <pre> block for the admin."""
    if value in (None, "", [], {}):
        return Markup("<span style='color:#9ca3af;'>-</span>")

    if isinstance(value, (dict, list)):
        text = json.dumps(value, ensure_ascii=False, indent=2, default=str)
    else:
        text = str(value)

    if len(text) > max_chars:
        text = text[:max_chars] + "…"

    return Markup(
        "<pre style='max-width:520px; white-space:pre-wrap; margin:0; font-size:12px;'>{}</pre>"
    ).format(escape(text))


def _json_full(value: Any) -> Markup:
    return _json_preview(value, max_chars=20000)


def _count_label(items: Any) -> str:
    return str(len(items)) if isinstance(items, list) else "0"


async def _collect_dashboard_metrics() -> dict[str, Any]:
    async with _ASYNC_SESSION_FACTORY() as session:
        total_lessons = await session.scalar(select(func.count(Lesson.id))) or 0
        active_lessons = await session.scalar(
            select(func.count(Lesson.id)).where(Lesson.is_active.is_(True))
        ) or 0
        total_curriculums = await session.scalar(select(func.count(Curriculum.id))) or 0
        active_curriculums = await session.scalar(
            select(func.count(Curriculum.id)).where(Curriculum.is_active.is_(True))
        ) or 0
        total_profiles = await session.scalar(select(func.count(Profile.id))) or 0

    return {
        "summary": [
            {
                "title": "レッスン",
                "icon": "fa-solid fa-book-open",
                "value": total_lessons,
                "subtitle": f"{active_lessons} 公開中",
            },
            {
                "title": "カリキュラム",
                "icon": "fa-solid fa-layer-group",
                "value": total_curriculums,
                "subtitle": f"{active_curriculums} 公開中",
            },
            {
                "title": "ユーザー",
                "icon": "fa-solid fa-users",
                "value": total_profiles,
                "subtitle": "プロフィール",
            },
        ],
    }


async def _render_dashboard(request: Request, templates) -> Response:
    context = await _collect_dashboard_metrics()
    context.update({"request": request, "title": "ダッシュボード", "subtitle": "コンテンツの概要"})
    return await templates.TemplateResponse(request, "sqladmin/dashboard.html", context)


class AdminAuth(AuthenticationBackend):
    """Back-office login: profile email + password, super admins only."""

    async def login(self, request: Request) -> bool:
        form = await request.form()
        email = str(form.get("username") or "")
        password = str(form.get("password") or "")

        with SessionLocal() as db:
            profile = profile_crud.get_profile_by_email(db, email) if email else None

        if profile is None or not profile.hashed_password:
            return False
        if not is_super_admin(profile) or not verify_password(password, profile.hashed_password):
            logger.info("Back-office login refused for %s", email)
            return False

        request.session.update({"token": "admin_logged_in", "profile_id": profile.id})
        return True

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        return "token" in request.session


class DashboardView(BaseView):
    name = "ダッシュボード"
    icon = "fa-solid fa-gauge-high"

    @expose("/dashboard", methods=["GET"], identity="dashboard")
    async def dashboard(self, request: Request) -> Response:
        return await _render_dashboard(request, self.templates)


class BackOfficeAdmin(Admin):
    @login_required
    async def index(self, request: Request) -> Response:
        return await _render_dashboard(request, self.templates)


class CurriculumAdmin(ModelView, model=Curriculum):
    name = "カリキュラム"
    name_plural = "カリキュラム"
    icon = "fa-solid fa-layer-group"
    category = "コンテンツ"
    column_list = [
        Curriculum.title,
        Curriculum.category,
        Curriculum.difficulty_level,
        Curriculum.is_active,
        Curriculum.created_at,
    ]
    column_searchable_list = [Curriculum.title, Curriculum.description]
    column_sortable_list = [Curriculum.title, Curriculum.difficulty_level, Curriculum.created_at]
    column_default_sort = [(Curriculum.created_at, True)]
    column_formatters = {
        Curriculum.category: lambda m, _: get_category_label(m.category) if m.category else "-",
        Curriculum.difficulty_level: lambda m, _: get_difficulty_label(m.difficulty_level),
    }
    form_excluded_columns = ["lessons", "created_at", "updated_at"]
    can_export = True


class LessonAdmin(ModelView, model=Lesson):
    name = "レッスン"
    name_plural = "レッスン"
    icon = "fa-solid fa-book-open"
    category = "コンテンツ"
    column_list = [
        Lesson.title,
        Lesson.curriculum,
        Lesson.type,
        Lesson.difficulty,
        Lesson.order_index,
        Lesson.is_active,
        Lesson.key_phrases,
    ]
    column_searchable_list = [Lesson.title, Lesson.description]
    column_sortable_list = [Lesson.title, Lesson.order_index, Lesson.created_at]
    column_default_sort = [(Lesson.order_index, False)]
    column_labels = {Lesson.key_phrases: "キーフレーズ数"}
    column_formatters = {
        Lesson.key_phrases: lambda m, _: _count_label(m.key_phrases),
    }
    column_formatters_detail = {
        Lesson.key_phrases: lambda m, _: _json_full(m.key_phrases),
        Lesson.dialogues: lambda m, _: _json_full(m.dialogues),
        Lesson.vocabulary_questions: lambda m, _: _json_full(m.vocabulary_questions),
        Lesson.application_practice: lambda m, _: _json_full(m.application_practice),
        Lesson.scenario: lambda m, _: _json_full(m.scenario),
    }
    form_ajax_refs = {"curriculum": {"fields": ("title",)}}
    form_excluded_columns = ["created_at", "updated_at"]
    can_export = True
    page_size = 50


class CourseAdmin(ModelView, model=Course):
    name = "コース"
    name_plural = "コース"
    icon = "fa-solid fa-graduation-cap"
    category = "コンテンツ"
    column_list = [Course.title, Course.is_active, Course.created_at]
    column_searchable_list = [Course.title]
    form_excluded_columns = ["modules", "created_at", "updated_at"]


class ModuleAdmin(ModelView, model=Module):
    name = "モジュール"
    name_plural = "モジュール"
    icon = "fa-solid fa-cubes"
    category = "コンテンツ"
    column_list = [Module.course, Module.title, Module.order_number, Module.is_active]
    column_searchable_list = [Module.title]
    column_default_sort = [(Module.order_number, False)]
    form_ajax_refs = {"course": {"fields": ("title",)}}
    form_excluded_columns = ["created_at", "updated_at"]


class ProfileAdmin(ModelView, model=Profile):
    name = "プロフィール"
    name_plural = "プロフィール"
    icon = "fa-solid fa-user"
    category = "ユーザー"
    column_list = [
        Profile.email,
        Profile.display_name,
        Profile.role,
        Profile.current_level,
        Profile.total_xp,
        Profile.created_at,
    ]
    column_searchable_list = [Profile.email, Profile.display_name]
    column_sortable_list = [Profile.created_at, Profile.total_xp]
    column_default_sort = [(Profile.created_at, True)]
    column_details_exclude_list = [Profile.hashed_password]
    form_excluded_columns = ["hashed_password", "created_at", "updated_at"]
    can_export = True
    page_size = 50


class LessonAIPromptAdmin(ModelView, model=LessonAIPrompt):
    name = "AIプロンプト"
    name_plural = "AIプロンプト"
    icon = "fa-solid fa-robot"
    category = "AI設定"
    column_list = [
        LessonAIPrompt.activity_type,
        LessonAIPrompt.prompt_category,
        LessonAIPrompt.lesson_id,
        LessonAIPrompt.version,
        LessonAIPrompt.is_active,
        LessonAIPrompt.updated_at,
    ]
    column_formatters_detail = {
        LessonAIPrompt.prompt_content: lambda m, _: _json_full(m.prompt_content),
        LessonAIPrompt.ai_settings: lambda m, _: _json_full(m.ai_settings),
    }


class AIGlobalSettingAdmin(ModelView, model=AIGlobalSetting):
    name = "AIグローバル設定"
    name_plural = "AIグローバル設定"
    icon = "fa-solid fa-sliders"
    category = "AI設定"
    column_list = [AIGlobalSetting.setting_key, AIGlobalSetting.setting_value, AIGlobalSetting.is_active]
    column_formatters = {
        AIGlobalSetting.setting_value: lambda m, _: _json_preview(m.setting_value),
    }


class AIFeedbackSettingAdmin(ModelView, model=AIFeedbackSetting):
    name = "AIフィードバック設定"
    name_plural = "AIフィードバック設定"
    icon = "fa-solid fa-comment-dots"
    category = "AI設定"
    column_list = [AIFeedbackSetting.setting_name, AIFeedbackSetting.description, AIFeedbackSetting.is_active]
    column_formatters_detail = {
        AIFeedbackSetting.json_template: lambda m, _: _json_full(m.json_template),
    }


MODEL_VIEWS = (
    CurriculumAdmin,
    LessonAdmin,
    CourseAdmin,
    ModuleAdmin,
    ProfileAdmin,
    LessonAIPromptAdmin,
    AIGlobalSettingAdmin,
    AIFeedbackSettingAdmin,
)


def setup_admin(app, secret_key: str) -> BackOfficeAdmin:
    admin = BackOfficeAdmin(
        app,
        async_engine,
        authentication_backend=AdminAuth(secret_key=secret_key),
        base_url="/admin",
        templates_dir=TEMPLATES_DIR,
    )
    admin.add_view(DashboardView)
    for view in MODEL_VIEWS:
        admin.add_view(view)
    return admin
