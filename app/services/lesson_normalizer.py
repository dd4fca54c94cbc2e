"""Translation between stored lesson rows and the canonical lesson shape.

Stored rows carry aliases accumulated as the schema evolved
(``type``/``lesson_type``, ``grammar_points``/``grammar_points_json``,
``translation``/``japanese``, ``hint``/``explanation``...). They are resolved
here and nowhere else: ``normalize_lesson`` on the way out of the database,
``prepare_for_database`` on the way in.

Read-side helpers never raise on malformed nested data; junk degrades to an
empty list (collections) or ``None`` (single objects).
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

# Collections that are stored as NULL when empty and read back as [].
COLLECTION_FIELDS: Tuple[str, ...] = (
    "objectives",
    "key_phrases",
    "dialogues",
    "vocabulary_questions",
    "listening_exercises",
    "application_practice",
    "grammar_points",
)

CONVERSATION = "conversation"


def _mappings(value: Any) -> List[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _copy_optional(
    source: Mapping[str, Any], target: Dict[str, Any], field: str, *aliases: str
) -> None:
    """Copy the first non-null of *field*/*aliases*; keep the key (as None) if only null ones exist."""
    keys = (field, *aliases)
    for key in keys:
        if source.get(key) is not None:
            target[field] = source[key]
            return
    if any(key in source for key in keys):
        target[field] = None


def _string_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


# ---------------------------------------------------------------------------
# Read side
# ---------------------------------------------------------------------------
def normalize_key_phrases(value: Any) -> List[Dict[str, Any]]:
    phrases = []
    for item in _mappings(value):
        phrase = {k: v for k, v in item.items() if k not in ("phonetic", "pronunciation")}
        phrase["phrase"] = item.get("phrase") or ""
        phrase["meaning"] = item.get("meaning") or ""
        _copy_optional(item, phrase, "phonetic", "pronunciation")
        phrase["examples"] = _string_list(item.get("examples"))
        phrases.append(phrase)
    return phrases


def normalize_dialogues(value: Any) -> List[Dict[str, Any]]:
    dialogues = []
    for item in _mappings(value):
        dialogue = {k: v for k, v in item.items() if k not in ("translation", "japanese")}
        dialogue["speaker"] = item.get("speaker") or "ai"
        dialogue["text"] = item.get("text") or ""
        _copy_optional(item, dialogue, "japanese", "translation")
        dialogues.append(dialogue)
    return dialogues


def _clamp_answer(answer: Any, option_count: int) -> int:
    if isinstance(answer, bool) or not isinstance(answer, int):
        return 0
    return answer if 0 <= answer < option_count else 0


def normalize_vocabulary_questions(value: Any) -> List[Dict[str, Any]]:
    questions = []
    for item in _mappings(value):
        question = {k: v for k, v in item.items() if k not in ("word", "hint", "meaning", "explanation")}
        question["question"] = item.get("question") or item.get("word") or ""
        options = _string_list(item.get("options"))
        question["options"] = options
        question["correct_answer"] = _clamp_answer(item.get("correct_answer"), len(options))
        _copy_optional(item, question, "explanation", "hint", "meaning")
        questions.append(question)
    return questions


def normalize_pronunciation_focus(value: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(value, Mapping):
        return None
    return {
        "targetSounds": _string_list(value.get("targetSounds")),
        "words": _string_list(value.get("words")),
        "sentences": _string_list(value.get("sentences")),
        "tips": _string_list(value.get("tips")),
    }


def normalize_lesson(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Canonical in-memory view of a stored lesson row."""
    lesson = dict(data)
    lesson["type"] = data.get("type") or data.get("lesson_type") or CONVERSATION
    lesson["grammar_points"] = _string_list(data.get("grammar_points") or data.get("grammar_points_json"))
    lesson["key_phrases"] = normalize_key_phrases(data.get("key_phrases"))
    lesson["dialogues"] = normalize_dialogues(data.get("dialogues"))
    lesson["vocabulary_questions"] = normalize_vocabulary_questions(data.get("vocabulary_questions"))
    lesson["pronunciation_focus"] = normalize_pronunciation_focus(data.get("pronunciation_focus"))

    for field in ("objectives", "listening_exercises", "application_practice"):
        lesson[field] = _string_list(data.get(field))

    scenario = data.get("scenario")
    lesson["scenario"] = dict(scenario) if isinstance(scenario, Mapping) else None
    return lesson


# ---------------------------------------------------------------------------
# Write side
# ---------------------------------------------------------------------------
def _pronunciation_is_empty(focus: Mapping[str, Any]) -> bool:
    return not any(focus.get(key) for key in ("targetSounds", "words", "sentences", "tips"))


def prepare_for_database(
    lesson: Mapping[str, Any], current_type: Optional[str] = None
) -> Dict[str, Any]:
    """Stored shape of a (possibly partial) lesson.

    *current_type* is the stored type of the row being updated; a partial
    update that does not touch ``type`` uses it to decide whether a scenario
    may be kept.
    """
    data = dict(lesson)

    if data.get("type"):
        data["lesson_type"] = data["type"]

    for field in COLLECTION_FIELDS:
        if isinstance(data.get(field), list) and not data[field]:
            data[field] = None

    if "grammar_points" in data:
        data["grammar_points_json"] = data["grammar_points"]

    focus = data.get("pronunciation_focus")
    if isinstance(focus, Mapping) and _pronunciation_is_empty(focus):
        data["pronunciation_focus"] = None

    # A scenario only lives on conversation lessons; switching the type away clears the stored one.
    effective_type = data.get("type") or current_type
    if effective_type != CONVERSATION and (data.get("scenario") or data.get("type")):
        data["scenario"] = None

    return data
