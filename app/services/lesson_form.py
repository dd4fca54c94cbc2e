"""Reducers for the lesson editor form.

The form state is a plain dict. Each reducer returns a new state and leaves its
input untouched, so a caller can keep the previous state around (undo, dirty
checks) without copying it first.
"""

from __future__ import annotations

import copy
from typing import Any, Callable, Dict, List, Mapping, Optional

FormState = Dict[str, Any]

_BLANK_ITEMS: Dict[str, Callable[[], Any]] = {
    "objectives": lambda: "",
    "key_phrases": lambda: {"phrase": "", "meaning": "", "phonetic": "", "examples": []},
    "dialogues": lambda: {"speaker": "AI", "text": "", "japanese": ""},
    "vocabulary_questions": lambda: {
        "question": "",
        "options": ["", "", "", ""],
        "correct_answer": 0,
        "explanation": "",
    },
    "application_practice": lambda: {"prompt": "", "syntax_hint": "", "sample_answer": ""},
    "grammar_points": lambda: {
        "name": "",
        "explanation": "",
        "structure": "",
        "examples": [],
        "commonMistakes": [],
    },
}

EDITABLE_COLLECTIONS = tuple(_BLANK_ITEMS)

# Collections that count as lesson content for validate_form.
_CONTENT_COLLECTIONS = (
    "key_phrases",
    "dialogues",
    "vocabulary_questions",
    "application_practice",
    "grammar_points",
)

_DEFAULT_FORM: FormState = {
    "title": "",
    "description": "",
    "curriculum_id": "",
    "type": "conversation",
    "difficulty": "beginner",
    "estimated_minutes": 30,
    "character_id": "sarah",
    "objectives": [],
    "key_phrases": [],
    "dialogues": [],
    "vocabulary_questions": [],
    "application_practice": [],
    "grammar_points": [],
    "is_active": True,
}


def _check_collection(collection: str) -> None:
    if collection not in _BLANK_ITEMS:
        raise KeyError(f"unknown lesson collection: {collection}")


def _items(form: Mapping[str, Any], collection: str) -> List[Any]:
    _check_collection(collection)
    return copy.deepcopy(list(form.get(collection) or []))


def new_lesson_form(initial: Optional[Mapping[str, Any]] = None) -> FormState:
    form = copy.deepcopy(_DEFAULT_FORM)
    if initial:
        form.update(copy.deepcopy(dict(initial)))
    return form


def update_field(form: Mapping[str, Any], field: str, value: Any) -> FormState:
    updated = copy.deepcopy(dict(form))
    updated[field] = value
    return updated


def add_item(form: Mapping[str, Any], collection: str) -> FormState:
    items = _items(form, collection)
    items.append(_BLANK_ITEMS[collection]())
    return update_field(form, collection, items)


def update_item(
    form: Mapping[str, Any], collection: str, index: int, field: Optional[str], value: Any
) -> FormState:
    """Set ``field`` of item *index*; objectives are plain strings, so pass ``field=None``."""
    items = _items(form, collection)
    if field is None:
        items[index] = value
    else:
        items[index] = {**items[index], field: value}
    return update_field(form, collection, items)


def remove_item(form: Mapping[str, Any], collection: str, index: int) -> FormState:
    items = _items(form, collection)
    del items[index]
    return update_field(form, collection, items)


def move_item(form: Mapping[str, Any], collection: str, from_index: int, to_index: int) -> FormState:
    items = _items(form, collection)
    item = items.pop(from_index)
    items.insert(to_index, item)
    return update_field(form, collection, items)


def validate_form(form: Mapping[str, Any]) -> List[str]:
    """Blocking errors for the submit button; empty when the form can be saved."""
    errors = []
    if not str(form.get("title") or "").strip():
        errors.append("タイトルは必須です")
    if not form.get("type"):
        errors.append("レッスンタイプを選択してください")
    if not form.get("difficulty"):
        errors.append("難易度を選択してください")
    if not any(form.get(collection) for collection in _CONTENT_COLLECTIONS):
        errors.append("少なくとも1つのコンテンツを追加してください")
    return errors
