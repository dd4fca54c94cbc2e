from __future__ import annotations

import json

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from app.api.v2.endpoints import (
    ai_settings_router,
    course_router,
    curriculum_router,
    dashboard_router,
    generator_router,
    lesson_router,
    profile_router,
    structure_router,
)
from app.models.content.course_model import Module
from app.models.content.lesson_model import Lesson
from app.models.user.profile_model import Profile
from app.schemas.ai.ai_prompt_schema import AIGlobalSettingUpdate, AIPromptSettingsUpdate
from app.schemas.content.generator_schema import GeneratedLessonSaveIn, GenerationInput
from app.schemas.content.lesson_schema import (
    LessonBulkUpdateIn,
    LessonCreate,
    LessonDuplicateIn,
    LessonFormActionIn,
    LessonIdsIn,
    LessonImportIn,
    LessonReorderIn,
    LessonUpdate,
)
from app.schemas.content.structure_schema import MigrationScriptIn
from tests.utils import (
    create_course_with_modules,
    create_curriculum,
    create_global_setting,
    create_lesson,
    create_profile,
    create_prompt,
)


@pytest.fixture()
def editor(db_session):
    return create_profile(db_session, email="editor@example.com")


@pytest.fixture()
def owner(db_session):
    return create_profile(db_session, email="owner@example.com", display_name="Owner")


# ----- Lessons -----
def test_create_and_fetch_lesson(db_session, editor):
    curriculum = create_curriculum(db_session)
    created = lesson_router.create_lesson(
        LessonCreate(title="受付", curriculum_id=curriculum.id, key_phrases=[{"phrase": "Hello", "meaning": "こんにちは"}]),
        db=db_session,
        current_profile=editor,
    )

    fetched = lesson_router.get_lesson(created["id"], db=db_session, current_profile=editor)
    assert fetched["title"] == "受付"
    assert fetched["key_phrases"][0]["phrase"] == "Hello"


def test_missing_lesson_is_404(db_session, editor):
    with pytest.raises(HTTPException) as exc:
        lesson_router.get_lesson("missing", db=db_session, current_profile=editor)
    assert exc.value.status_code == 404
    assert exc.value.detail == "lesson_not_found"


def test_partial_update_keeps_other_fields(db_session, editor):
    lesson = create_lesson(db_session, create_curriculum(db_session))
    updated = lesson_router.update_lesson(
        lesson.id, LessonUpdate(title="新しいタイトル"), db=db_session, current_profile=editor
    )
    assert updated["title"] == "新しいタイトル"
    assert updated["description"] == "Taking a haircut order"


def test_list_lessons_with_search_and_curriculum_filter(db_session, editor):
    first = create_curriculum(db_session, title="First")
    second = create_curriculum(db_session, title="Second")
    create_lesson(db_session, first, title="Shampoo basics")
    create_lesson(db_session, second, title="Shampoo advanced")

    found = lesson_router.list_lessons(curriculum_id=first.id, q="shampoo", db=db_session, current_profile=editor)
    assert [lesson["title"] for lesson in found] == ["Shampoo basics"]

    all_of_second = lesson_router.list_lessons(curriculum_id=second.id, q=None, db=db_session, current_profile=editor)
    assert [lesson["title"] for lesson in all_of_second] == ["Shampoo advanced"]


def test_reorder_rejects_unknown_lesson(db_session, editor):
    lesson = create_lesson(db_session, create_curriculum(db_session))
    with pytest.raises(HTTPException) as exc:
        lesson_router.reorder_lessons(
            LessonReorderIn(lesson_ids=[lesson.id, "missing"]), db=db_session, current_profile=editor
        )
    assert exc.value.status_code == 404


def test_bulk_endpoints_report_each_item(db_session, editor):
    curriculum = create_curriculum(db_session)
    lesson = create_lesson(db_session, curriculum)

    results = lesson_router.bulk_update_lessons(
        LessonBulkUpdateIn(updates=[{"id": lesson.id, "changes": {"is_active": False}}, {"id": "missing", "changes": {}}]),
        db=db_session,
        current_profile=editor,
    )
    assert [(r.id, r.ok, r.error) for r in results] == [(lesson.id, True, None), ("missing", False, "lesson_not_found")]
    assert db_session.get(Lesson, lesson.id).is_active is False

    results = lesson_router.bulk_delete_lessons(LessonIdsIn(ids=[lesson.id]), db=db_session, current_profile=editor)
    assert results[0].ok is True
    assert db_session.query(Lesson).count() == 0


def test_bulk_update_validates_each_change_set():
    with pytest.raises(ValidationError):
        LessonBulkUpdateIn(updates=[{"id": "a", "changes": {"type": "bogus"}}])
    with pytest.raises(ValidationError):
        LessonBulkUpdateIn(updates=[{"id": "a", "changes": {"estimated_minutes": -5}}])


def test_bulk_update_type_change_goes_through_normalizer(db_session, editor):
    lesson = create_lesson(db_session, create_curriculum(db_session))

    results = lesson_router.bulk_update_lessons(
        LessonBulkUpdateIn(updates=[{"id": lesson.id, "changes": {"type": "grammar"}}]),
        db=db_session,
        current_profile=editor,
    )
    assert results[0].ok is True
    db_session.refresh(lesson)
    assert lesson.lesson_type == "grammar"
    assert lesson.scenario is None
    assert lesson.is_active is True


# ----- Editor form -----
def test_new_lesson_form_route(editor):
    out = lesson_router.get_new_lesson_form(curriculum_id="cur-1", current_profile=editor)
    assert out["form"]["curriculum_id"] == "cur-1"
    assert out["form"]["character_id"] == "sarah"
    assert "タイトルは必須です" in out["errors"]

    blank = lesson_router.get_new_lesson_form(curriculum_id=None, current_profile=editor)
    assert blank["form"]["curriculum_id"] == ""


def test_form_actions_return_updated_form_and_errors(editor):
    form = lesson_router.get_new_lesson_form(curriculum_id=None, current_profile=editor)["form"]

    out = lesson_router.apply_lesson_form_action(
        LessonFormActionIn(form=form, action="set", field="title", value="Salon"), current_profile=editor
    )
    out = lesson_router.apply_lesson_form_action(
        LessonFormActionIn(form=out["form"], action="add", collection="dialogues"), current_profile=editor
    )
    out = lesson_router.apply_lesson_form_action(
        LessonFormActionIn(form=out["form"], action="add", collection="dialogues"), current_profile=editor
    )
    out = lesson_router.apply_lesson_form_action(
        LessonFormActionIn(form=out["form"], action="update", collection="dialogues", index=1, field="text", value="Hi"),
        current_profile=editor,
    )
    out = lesson_router.apply_lesson_form_action(
        LessonFormActionIn(form=out["form"], action="move", collection="dialogues", index=1, to_index=0),
        current_profile=editor,
    )
    assert [d["text"] for d in out["form"]["dialogues"]] == ["Hi", ""]
    assert out["errors"] == []

    out = lesson_router.apply_lesson_form_action(
        LessonFormActionIn(form=out["form"], action="remove", collection="dialogues", index=0), current_profile=editor
    )
    assert [d["text"] for d in out["form"]["dialogues"]] == [""]
    assert form["title"] == ""


@pytest.mark.parametrize(
    ("payload", "detail"),
    [
        ({"action": "add", "collection": "scenario"}, "unknown_collection"),
        ({"action": "remove", "collection": "dialogues", "index": 3}, "invalid_item_index"),
        ({"action": "remove", "collection": "dialogues"}, "index_required"),
        ({"action": "add"}, "collection_required"),
        ({"action": "set"}, "field_required"),
        ({"action": "move", "collection": "dialogues", "index": 0}, "to_index_required"),
    ],
)
def test_form_action_errors(editor, payload, detail):
    with pytest.raises(HTTPException) as exc:
        lesson_router.apply_lesson_form_action(LessonFormActionIn(form={}, **payload), current_profile=editor)
    assert exc.value.status_code == 400
    assert exc.value.detail == detail


def test_duplicate_without_body(db_session, editor):
    lesson = create_lesson(db_session, create_curriculum(db_session))
    copy = lesson_router.duplicate_lesson(lesson.id, None, db=db_session, current_profile=editor)
    assert copy["id"] != lesson.id
    assert copy["title"] == "カットの注文 (コピー)"

    named = lesson_router.duplicate_lesson(
        lesson.id, LessonDuplicateIn(new_title="Copy"), db=db_session, current_profile=editor
    )
    assert named["title"] == "Copy"


def test_export_then_import(db_session, editor):
    curriculum = create_curriculum(db_session)
    lesson = create_lesson(db_session, curriculum)

    exported = lesson_router.export_lesson(lesson.id, db=db_session, current_profile=editor)
    assert json.loads(exported["json"])["title"] == "カットの注文"

    imported = lesson_router.import_lesson(
        LessonImportIn(json_data=exported["json"], curriculum_id=curriculum.id), db=db_session, current_profile=editor
    )
    assert imported["id"] != lesson.id
    assert db_session.query(Lesson).count() == 2


def test_import_rejects_invalid_json(db_session, editor):
    with pytest.raises(HTTPException) as exc:
        lesson_router.import_lesson(LessonImportIn(json_data="{oops"), db=db_session, current_profile=editor)
    assert exc.value.status_code == 400
    assert exc.value.detail == "invalid_lesson_json"


def test_bulk_export_fails_on_unknown_id(db_session, editor):
    with pytest.raises(HTTPException) as exc:
        lesson_router.export_lessons(LessonIdsIn(ids=["missing"]), db=db_session, current_profile=editor)
    assert exc.value.status_code == 404


def test_validate_draft(editor):
    result = lesson_router.validate_lesson({"title": "", "type": "conversation"}, current_profile=editor)
    assert result.is_valid is False
    assert result.errors


# ----- Curriculums -----
def test_curriculum_crud_through_router(db_session, editor):
    from app.schemas.content.curriculum_schema import CurriculumCreate, CurriculumUpdate

    created = curriculum_router.create_curriculum(
        CurriculumCreate(title="Color", category="coloring", difficulty_level=2), db=db_session, current_profile=editor
    )
    assert created.category_label == "カラーリング"
    assert created.lesson_count == 0

    updated = curriculum_router.update_curriculum(
        created.id, CurriculumUpdate(is_active=True), db=db_session, current_profile=editor
    )
    assert updated.is_active is True

    curriculum_router.delete_curriculum(created.id, db=db_session, current_profile=editor)
    with pytest.raises(HTTPException) as exc:
        curriculum_router.get_curriculum(created.id, db=db_session, current_profile=editor)
    assert exc.value.status_code == 404
    assert exc.value.detail == "curriculum_not_found"


def test_curriculum_structure_endpoints(db_session, editor):
    curriculum = create_curriculum(db_session)
    lesson = create_lesson(db_session, curriculum, dialogues=[{"speaker": "staff", "text": "Hi"}])

    report = curriculum_router.get_curriculum_structure(curriculum.id, db=db_session, current_profile=editor)
    assert report.summary.total_lessons == 1

    script = curriculum_router.build_migration_script(
        curriculum.id, MigrationScriptIn(lesson_ids=[lesson.id]), db=db_session, current_profile=editor
    )
    assert script.lesson_count == 1
    assert "SET dialogues" in script.script

    with pytest.raises(HTTPException) as exc:
        curriculum_router.list_curriculum_lessons("missing", db=db_session, current_profile=editor)
    assert exc.value.status_code == 404


# ----- Structure and generator -----
def test_structure_routes_are_pure(editor):
    draft = {"key_phrases": [{"phrase": "Hi", "meaning": "やあ"}]}
    assert structure_router.validate_structure(draft, current_profile=editor).is_valid is True
    assert structure_router.suggest_migration(draft, current_profile=editor).sql_updates
    migrated = structure_router.apply_migration(draft, current_profile=editor)
    assert migrated["key_phrases"][0]["audio_url"] is None
    assert "audio_url" not in draft["key_phrases"][0]


def test_standard_structure_route(editor):
    structure = structure_router.get_standard_structure(current_profile=editor)
    assert structure["lesson_type"] == "conversation"
    assert structure["key_phrases"][0]["audio_url"] is None

    structure["key_phrases"].clear()
    assert structure_router.get_standard_structure(current_profile=editor)["key_phrases"]


def test_generator_rejects_blank_topic(editor):
    with pytest.raises(HTTPException) as exc:
        generator_router.generate_lesson(GenerationInput(topic="   "), current_profile=editor)
    assert exc.value.status_code == 400
    assert exc.value.detail == "topic_required"


def test_generator_templates(editor):
    presets = generator_router.list_templates(current_profile=editor)
    assert {preset.name for preset in presets} >= {"自己紹介", "趣味について"}

    preset = generator_router.get_template(
        "unknown", title="Custom", topic=None, japanese_context=None, current_profile=editor
    )
    assert preset.name == "自己紹介"
    assert preset.title == "Custom"


def test_save_generated_lesson(db_session, editor):
    curriculum = create_curriculum(db_session)
    generated = generator_router.generate_lesson(GenerationInput(topic="趣味", key_words=["music"]), current_profile=editor)

    saved = generator_router.save_generated_lesson(
        GeneratedLessonSaveIn(curriculum_id=curriculum.id, lesson=generated), db=db_session, current_profile=editor
    )
    assert saved["curriculum_id"] == curriculum.id
    assert saved["key_phrases"]

    with pytest.raises(HTTPException) as exc:
        generator_router.save_generated_lesson(
            GeneratedLessonSaveIn(curriculum_id="missing", lesson=generated), db=db_session, current_profile=editor
        )
    assert exc.value.status_code == 404


# ----- Dashboard, modules, profiles -----
def test_dashboard_stats(db_session, editor):
    curriculum = create_curriculum(db_session)
    create_curriculum(db_session, title="Draft", is_active=False)
    create_lesson(db_session, curriculum)
    create_lesson(db_session, curriculum, is_active=False)

    stats = dashboard_router.get_dashboard_stats(db=db_session, current_profile=editor)
    assert stats.total_lessons == 2
    assert stats.active_lessons == 1
    assert stats.total_curriculums == 2
    assert stats.active_curriculums == 1


def test_modules_list_and_delete(db_session, editor):
    course = create_course_with_modules(db_session)
    modules = course_router.list_modules(db=db_session, current_profile=editor)
    assert [module.title for module in modules] == ["Greeting", "Consultation"]
    assert modules[0].course_title == "Salon English"

    course_router.delete_module(modules[0].id, db=db_session, current_profile=editor)
    assert db_session.query(Module).count() == 1

    with pytest.raises(HTTPException) as exc:
        course_router.delete_module(modules[0].id, db=db_session, current_profile=editor)
    assert exc.value.status_code == 404
    assert exc.value.detail == "module_not_found"


def test_profiles_delete(db_session, editor, owner):
    assert len(profile_router.list_profiles(db=db_session, current_profile=editor)) == 2

    with pytest.raises(HTTPException) as exc:
        profile_router.delete_profile(editor.id, db=db_session, current_profile=editor)
    assert exc.value.detail == "cannot_delete_self"

    profile_router.delete_profile(owner.id, db=db_session, current_profile=editor)
    assert db_session.get(Profile, owner.id) is None

    with pytest.raises(HTTPException) as exc:
        profile_router.delete_profile(owner.id, db=db_session, current_profile=editor)
    assert exc.value.status_code == 404


# ----- AI settings -----
def test_ai_prompt_routes(db_session, owner):
    prompt = create_prompt(db_session)

    updated = ai_settings_router.update_prompt_settings(
        prompt.id, AIPromptSettingsUpdate(max_completion_tokens="1200"), db=db_session, current_profile=owner
    )
    assert updated.ai_settings.max_completion_tokens == 1200

    merged = ai_settings_router.merge_conversation_prompt(
        prompt.id, {"tone": "polite"}, db=db_session, current_profile=owner
    )
    assert merged.prompt_content == {"instructions": "Be friendly", "tone": "polite"}

    with pytest.raises(HTTPException) as exc:
        ai_settings_router.toggle_prompt("missing", db=db_session, current_profile=owner)
    assert exc.value.status_code == 404
    assert exc.value.detail == "ai_prompt_not_found"


def test_global_settings_routes(db_session, owner):
    create_global_setting(db_session, "temperature", 0.7)

    assert ai_settings_router.get_global_settings(db=db_session, current_profile=owner) == {"temperature": 0.7}
    result = ai_settings_router.update_global_setting(
        "temperature", AIGlobalSettingUpdate(setting_value="0.2"), db=db_session, current_profile=owner
    )
    assert result["temperature"] == 0.2

    with pytest.raises(HTTPException) as exc:
        ai_settings_router.update_global_setting(
            "missing", AIGlobalSettingUpdate(setting_value=1), db=db_session, current_profile=owner
        )
    assert exc.value.detail == "ai_setting_not_found"
