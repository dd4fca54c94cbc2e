"""Static lookup tables shared by the dashboard: categories, difficulty levels
and the activity/prompt vocabularies used by the AI settings pages."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

# Same category values as the mobile app's lesson list screen.
CURRICULUM_CATEGORIES: List[Dict[str, str]] = [
    {"value": "haircut", "label": "カット"},
    {"value": "coloring", "label": "カラーリング"},
    {"value": "perm", "label": "パーマ"},
    {"value": "treatment", "label": "トリートメント"},
    {"value": "styling", "label": "スタイリング"},
    {"value": "shampoo", "label": "シャンプー"},
    {"value": "makeup", "label": "メイク"},
    {"value": "nail", "label": "ネイル"},
    {"value": "esthetics", "label": "エステ"},
    {"value": "reception", "label": "接客"},
]

CATEGORY_VALUES = tuple(category["value"] for category in CURRICULUM_CATEGORIES)


def get_category_label(value: str) -> str:
    for category in CURRICULUM_CATEGORIES:
        if category["value"] == value:
            return category["label"]
    return value


DIFFICULTY_LEVELS: Dict[str, Dict[str, Any]] = {
    "BEGINNER_1": {"value": 1, "label": "初級 Beginner", "display_name": "初級 Beginner", "color": "bg-green-100 text-green-800"},
    "BEGINNER_2": {"value": 2, "label": "初級 Intermediate", "display_name": "初級 Intermediate", "color": "bg-green-200 text-green-900"},
    "BEGINNER_3": {"value": 3, "label": "初級 Advanced", "display_name": "初級 Advanced", "color": "bg-green-300 text-green-900"},
    "INTERMEDIATE_1": {"value": 4, "label": "中級 Beginner", "display_name": "中級 Beginner", "color": "bg-yellow-100 text-yellow-800"},
    "INTERMEDIATE_2": {"value": 5, "label": "中級 Intermediate", "display_name": "中級 Intermediate", "color": "bg-yellow-200 text-yellow-900"},
    "INTERMEDIATE_3": {"value": 6, "label": "中級 Advanced", "display_name": "中級 Advanced", "color": "bg-yellow-300 text-yellow-900"},
    "ADVANCED_1": {"value": 7, "label": "上級 Beginner", "display_name": "上級 Beginner", "color": "bg-red-100 text-red-800"},
    "ADVANCED_2": {"value": 8, "label": "上級 Intermediate", "display_name": "上級 Intermediate", "color": "bg-red-200 text-red-900"},
    "ADVANCED_3": {"value": 9, "label": "上級 Advanced", "display_name": "上級 Advanced", "color": "bg-red-300 text-red-900"},
}

DIFFICULTY_OPTIONS = [
    {"value": level["value"], "label": level["label"]} for level in DIFFICULTY_LEVELS.values()
]


def get_difficulty_by_value(value: int) -> Optional[Dict[str, Any]]:
    for level in DIFFICULTY_LEVELS.values():
        if level["value"] == value:
            return level
    return None


def get_difficulty_label(value: int) -> str:
    level = get_difficulty_by_value(value)
    return level["label"] if level else "未設定"


def get_difficulty_display_name(value: int) -> str:
    level = get_difficulty_by_value(value)
    return level["display_name"] if level else "Unknown"


def get_difficulty_color(value: int) -> str:
    level = get_difficulty_by_value(value)
    return level["color"] if level else "bg-gray-100 text-gray-800"


ACTIVITY_TYPES: List[Dict[str, str]] = [
    {"value": "application_practice", "label": "応用練習"},
    {"value": "ai_conversation", "label": "AI会話実践"},
    {"value": "dialog_practice", "label": "対話練習"},
    {"value": "vocabulary_practice", "label": "語彙練習"},
    {"value": "pronunciation_practice", "label": "発音練習"},
]

PROMPT_CATEGORIES: List[Dict[str, str]] = [
    {"value": "system_prompt", "label": "システムプロンプト"},
    {"value": "evaluation_prompt", "label": "評価プロンプト"},
]

SUPER_ADMIN_ROLE = "super_admin"
