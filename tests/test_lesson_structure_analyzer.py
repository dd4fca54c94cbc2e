from datetime import datetime, timezone

import pytest

from app.services import lesson_structure_analyzer as analyzer
from tests.utils import standard_dialogue, standard_key_phrase, standard_question


def _lesson(**kwargs) -> dict:
    lesson = {
        "id": "lesson-1",
        "title": "カットの注文",
        "key_phrases": [standard_key_phrase(phonetic="kʌt")],
        "vocabulary_questions": [standard_question(explanation="cut は「切る」")],
        "dialogues": [standard_dialogue()],
        "objectives": ["Order a haircut"],
        "ai_conversation_system_prompt": "You are a stylist.",
    }
    lesson.update(kwargs)
    return lesson


def test_standard_structure_is_a_fresh_copy():
    structure = analyzer.get_standard_structure()
    assert set(structure) == set(analyzer.CANONICAL_FIELDS)
    assert len(structure) == 15

    structure["key_phrases"].append({"phrase": "extra"})
    assert len(analyzer.get_standard_structure()["key_phrases"]) == 1


def test_valid_lesson_has_no_issues_or_suggestions():
    report = analyzer.validate_lesson_structure(_lesson())
    assert report.is_valid is True
    assert report.issues == []
    assert report.suggestions == []


def test_missing_audio_key_is_only_a_suggestion():
    phrase = {"phrase": "Hello", "meaning": "こんにちは", "phonetic": "həˈloʊ"}
    report = analyzer.validate_lesson_structure(_lesson(key_phrases=[phrase]))

    assert report.is_valid is True
    assert report.suggestions == ["key_phrases[0]: audio_url フィールドの追加を推奨"]


def test_null_audio_value_counts_as_present():
    report = analyzer.validate_lesson_structure(_lesson(dialogues=[standard_dialogue(audio=None)]))
    assert not any("audio" in suggestion for suggestion in report.suggestions)


def test_vocabulary_question_issues():
    question = {"question": "", "options": ["only one"], "correct_answer": "0"}
    report = analyzer.validate_lesson_structure(_lesson(vocabulary_questions=[question]))

    assert report.is_valid is False
    assert report.issues == [
        "vocabulary_questions[0]: question は必須です",
        "vocabulary_questions[0]: options は2つ以上の配列である必要があります",
        "vocabulary_questions[0]: correct_answer は数値である必要があります",
    ]
    assert "vocabulary_questions[0]: explanation の追加を推奨" in report.suggestions


def test_boolean_correct_answer_is_not_a_number():
    question = standard_question(correct_answer=True, explanation="x")
    report = analyzer.validate_lesson_structure(_lesson(vocabulary_questions=[question]))
    assert report.issues == ["vocabulary_questions[0]: correct_answer は数値である必要があります"]


def test_dialogue_without_speaker_is_an_issue():
    report = analyzer.validate_lesson_structure(_lesson(dialogues=[{"text": "Hi"}]))
    assert "dialogues[0]: speaker と text は必須です" in report.issues
    assert "dialogues[0]: japanese フィールドの追加を推奨" in report.suggestions
    assert "dialogues[0]: audio フィールドの追加を推奨" in report.suggestions


def test_collection_of_wrong_type_is_reported():
    report = analyzer.validate_lesson_structure(_lesson(key_phrases="Hello"))
    assert report.issues == ["key_phrases: 配列またはnullである必要があります"]

    report = analyzer.validate_lesson_structure(_lesson(key_phrases=None))
    assert report.is_valid is True


def test_validity_tracks_issues_only():
    lessons = [
        _lesson(),
        _lesson(key_phrases=[{"phrase": "Hi"}]),
        _lesson(dialogues=[{"speaker": "ai", "text": "Hi"}]),
        _lesson(vocabulary_questions=[{"question": "q", "options": [1, 2], "correct_answer": 1.5}]),
    ]
    for lesson in lessons:
        report = analyzer.validate_lesson_structure(lesson)
        assert report.is_valid is (report.issues == [])


def test_non_mapping_lesson_is_rejected():
    with pytest.raises(TypeError, match="list"):
        analyzer.validate_lesson_structure([])
    with pytest.raises(TypeError, match="str"):
        analyzer.analyze_structure_diff("lesson")


def test_diff_reports_missing_nested_fields_of_first_item():
    lesson = {
        "title": "t",
        "type": "conversation",
        "key_phrases": [{"phrase": "Hi", "meaning": "やあ"}, {"meaning": "only"}],
    }
    diff = analyzer.analyze_structure_diff(lesson)

    assert "key_phrases.phonetic フィールドが不足" in diff.structure_differences
    assert "key_phrases.audio_url フィールドが不足" in diff.structure_differences
    # Only the first item is inspected.
    assert "key_phrases.phrase フィールドが不足" not in diff.structure_differences
    assert diff.extra_fields == ["type"]
    assert "description" in diff.missing_fields
    assert "title" not in diff.missing_fields


def test_migration_statements_for_incomplete_collections():
    lesson = _lesson(
        key_phrases=[{"phrase": "Hi", "meaning": "やあ"}],
        dialogues=[{"speaker": "ai", "text": "Hi", "translation": "やあ"}],
        objectives=[],
        ai_conversation_system_prompt=None,
    )
    suggestion = analyzer.generate_migration_sql(lesson)

    assert len(suggestion.sql_updates) == 2
    key_phrase_sql, dialogue_sql = suggestion.sql_updates
    assert key_phrase_sql.startswith("UPDATE lessons\nSET key_phrases = (")
    assert "WHERE id = 'lesson-1';" in key_phrase_sql
    assert "item->>'translation'" in dialogue_sql
    assert suggestion.warnings == [
        "objectives フィールドの追加を検討してください",
        "ai_conversation_system_prompt の追加を検討してください",
    ]


def test_complete_lesson_needs_no_migration():
    suggestion = analyzer.generate_migration_sql(_lesson())
    assert suggestion.sql_updates == []
    assert suggestion.warnings == []


def test_migration_uses_placeholder_without_id():
    lesson = _lesson(vocabulary_questions=[{"question": "q", "options": [1, 2], "correct_answer": 0}])
    lesson.pop("id")
    suggestion = analyzer.generate_migration_sql(lesson)
    assert suggestion.sql_updates[0].endswith("WHERE id = 'LESSON_ID';")


def test_apply_migration_backfills_without_overwriting():
    lesson = _lesson(
        key_phrases=[{"phrase": "Hi", "meaning": "やあ"}, standard_key_phrase(phonetic="kʌt", audio_url="a.mp3")],
        vocabulary_questions=[{"question": "q", "options": [1, 2], "correct_answer": 0}],
        dialogues=[{"speaker": "ai", "text": "Hi", "translation": "やあ"}],
    )
    migrated = analyzer.apply_migration(lesson)

    assert migrated["key_phrases"][0] == {"phrase": "Hi", "meaning": "やあ", "phonetic": "", "audio_url": None}
    assert migrated["key_phrases"][1]["phonetic"] == "kʌt"
    assert migrated["key_phrases"][1]["audio_url"] == "a.mp3"
    assert migrated["vocabulary_questions"][0]["explanation"] == ""
    assert migrated["dialogues"][0]["japanese"] == "やあ"
    assert migrated["dialogues"][0]["audio"] is None
    # The input is left untouched.
    assert "phonetic" not in lesson["key_phrases"][0]


def test_apply_migration_is_idempotent():
    lesson = _lesson(
        key_phrases=[{"phrase": "Hi", "meaning": "やあ"}],
        dialogues=[{"speaker": "ai", "text": "Hi"}],
    )
    once = analyzer.apply_migration(lesson)
    twice = analyzer.apply_migration(once)

    assert once == twice
    assert analyzer.generate_migration_sql(once).sql_updates == []


def test_build_migration_script_scoped_to_curriculum():
    lessons = [
        _lesson(key_phrases=[{"phrase": "Hi", "meaning": "やあ"}]),
        _lesson(id="lesson-2", title="完了済み"),
    ]
    script = analyzer.build_migration_script(
        "美容室の英会話",
        lessons,
        curriculum_id="cur-1",
        generated_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )

    assert script.startswith("-- カリキュラム「美容室の英会話」の構造標準化マイグレーション")
    assert "-- 生成日時: 2024-01-01T00:00:00+00:00" in script
    assert "-- 対象レッスン数: 2" in script
    assert "-- no structural changes required" in script
    assert "WHERE curriculum_id = 'cur-1'" in script
    assert script.rstrip().endswith("ORDER BY order_index;")


def test_build_migration_script_scoped_to_lessons():
    script = analyzer.build_migration_script("C", [_lesson(objectives=None)])
    assert "WHERE id IN ('lesson-1')" in script
    assert "-- WARNING: objectives フィールドの追加を検討してください" in script


def test_curriculum_compliance_rounds_and_counts():
    broken = _lesson(dialogues=[{"text": "no speaker"}])
    lessons = [_lesson(id=f"ok-{i}") for i in range(7)] + [dict(broken, id=f"ko-{i}") for i in range(3)]

    summary = analyzer.analyze_curriculum_structure("cur-1", lessons)

    assert summary.total_lessons == 10
    assert summary.structure_compliance == 70
    assert summary.migration_required == 3
    assert summary.common_issues == ["dialogues[0]: speaker と text は必須です (3件)"]


def test_curriculum_compliance_rounds_half_up():
    lessons = [_lesson()] + [_lesson(dialogues=[{"text": "x"}]) for _ in range(7)]
    summary = analyzer.analyze_curriculum_structure("cur-1", lessons)
    assert summary.structure_compliance == 13


def test_common_issues_are_capped_at_five():
    lessons = [
        _lesson(key_phrases=[{"phrase": "x"} for _ in range(index + 1)])
        for index in range(7)
    ]
    summary = analyzer.analyze_curriculum_structure("cur-1", lessons)
    assert len(summary.common_issues) == 5
    assert summary.common_issues[0] == "key_phrases[0]: phrase と meaning は必須です (7件)"


def test_empty_curriculum():
    summary = analyzer.analyze_curriculum_structure("cur-1", [])
    assert summary.total_lessons == 0
    assert summary.structure_compliance == 0
    assert summary.migration_required == 0
