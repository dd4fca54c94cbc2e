from __future__ import annotations

import logging
import random
import re
from typing import Any, Dict, List, Optional

from app.schemas.content.generator_schema import GeneratedLesson, GenerationInput, TemplatePreset
from app.services import lesson_templates

logger = logging.getLogger(__name__)


class AutoLessonGenerator:
    """
    Builds a complete conversation lesson from a topic and a few optional hints.

    Content comes from the static tables of ``lesson_templates``. The only
    randomness is the choice of distractor options, drawn from ``rng``; without
    one, a generator seeded with the topic is used so the same input always
    yields the same lesson.
    """

    QUESTION_TARGET = 5
    DISTRACTOR_COUNT = 3
    STOP_WORDS = frozenset({"the", "and", "with", "that"})
    ESTIMATED_MINUTES = 30

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def generate(self, data: GenerationInput) -> GeneratedLesson:
        topic = (data.topic or "").strip()
        if not topic:
            raise ValueError("topic_required")

        rng = self._rng or random.Random(topic)
        key_phrases = self._key_phrases(topic)

        lesson = GeneratedLesson(
            title=data.title or f"Lesson: {topic}について話す",
            description=data.description
            or f"{topic}に関する基本的な表現を学びます。自分の経験や意見を英語で表現する方法を練習します。",
            lesson_type="conversation",
            difficulty=data.difficulty_level.value,
            estimated_minutes=self.ESTIMATED_MINUTES,
            key_phrases=key_phrases,
            vocabulary_questions=self._vocabulary_questions(topic, key_phrases, rng),
            dialogues=self._dialogues(topic, key_phrases),
            application_practice=self._application_practice(topic, key_phrases),
            objectives=self._objectives(topic),
            ai_conversation_system_prompt=self._ai_prompt(topic),
        )
        logger.info(
            "Generated lesson for topic '%s': %d phrases, %d questions",
            topic,
            len(lesson.key_phrases),
            len(lesson.vocabulary_questions),
        )
        return lesson

    @staticmethod
    def generate_from_template(name: str, **customizations: Any) -> TemplatePreset:
        """Prefill values for the generator form; unknown names use the self-introduction preset."""
        preset = lesson_templates.get_preset(name)
        preset.update({key: value for key, value in customizations.items() if value is not None and key != "name"})
        resolved_name = name if name in lesson_templates.PRESETS else lesson_templates.DEFAULT_PRESET
        return TemplatePreset(name=resolved_name, **preset)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _key_phrases(topic: str) -> List[Dict[str, Any]]:
        return [
            {
                "phrase": template["english"],
                "meaning": template["japanese"],
                "phonetic": template.get("phonetic", ""),
                "audio_url": None,
            }
            for template in lesson_templates.get_phrase_templates(topic)
        ]

    def _vocabulary_questions(
        self, topic: str, key_phrases: List[Dict[str, Any]], rng: random.Random
    ) -> List[Dict[str, Any]]:
        questions: List[Dict[str, Any]] = []

        for key_phrase in key_phrases[: self.QUESTION_TARGET]:
            target = self._content_word(key_phrase["phrase"])
            if not target:
                continue
            word = re.sub(r"[^\w]", "", target.lower())
            translation = lesson_templates.translate_word(word)
            questions.append(
                {
                    "question": word,
                    "options": [translation, *self._distractors(translation, rng)],
                    "correct_answer": 0,
                    "explanation": f"\"{target}\" は「{translation}」を意味します。",
                }
            )

        common_words = lesson_templates.get_common_words(topic)
        while len(questions) < self.QUESTION_TARGET:
            entry = common_words[len(questions) % len(common_words)]
            questions.append(
                {
                    "question": entry["english"],
                    "options": [entry["japanese"], *self._distractors(entry["japanese"], rng)],
                    "correct_answer": 0,
                    "explanation": f"\"{entry['english']}\" は「{entry['japanese']}」を意味します。",
                }
            )

        return questions

    def _content_word(self, phrase: str) -> Optional[str]:
        for word in phrase.split(" "):
            if len(word) > 3 and word.lower() not in self.STOP_WORDS:
                return word
        return None

    def _distractors(self, correct: str, rng: random.Random) -> List[str]:
        pool = [word for word in lesson_templates.DISTRACTOR_POOL if word != correct]
        return rng.sample(pool, self.DISTRACTOR_COUNT)

    @staticmethod
    def _dialogues(topic: str, key_phrases: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        first = key_phrases[0] if key_phrases else {}
        second = key_phrases[1] if len(key_phrases) > 1 else {}

        turns = [
            ("AI", f"Tell me about your {topic.lower()}.", f"あなたの{topic}について教えてください。"),
            (
                "User",
                first.get("phrase") or f"I enjoy {topic.lower()}.",
                first.get("meaning") or f"私は{topic}を楽しんでいます。",
            ),
            ("AI", "That sounds interesting! Can you tell me more?", "それは興味深いですね！もっと教えてもらえますか？"),
            (
                "User",
                second.get("phrase") or "It makes me happy.",
                second.get("meaning") or "それは私を幸せにします。",
            ),
        ]
        return [
            {"speaker": speaker, "text": text, "japanese": japanese, "audio": None}
            for speaker, text, japanese in turns
        ]

    @staticmethod
    def _application_practice(topic: str, key_phrases: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        practices = []
        for index, pattern in enumerate(lesson_templates.get_application_patterns(topic)):
            sample = (
                key_phrases[index % len(key_phrases)]["phrase"]
                if key_phrases
                else f"I like {topic.lower()}."
            )
            practices.append(
                {
                    "prompt": pattern["prompt"].replace("{topic}", topic),
                    "syntax_hint": pattern["syntax_hint"],
                    "sample_answer": sample,
                }
            )
        return practices

    @staticmethod
    def _objectives(topic: str) -> List[str]:
        return [
            f"{topic}について基本的な表現ができる",
            "自分の経験や意見を簡潔に伝えることができる",
            f"{topic}に関する質問に答えることができる",
            "相手の話に適切に反応することができる",
        ]

    @staticmethod
    def _ai_prompt(topic: str) -> str:
        return (
            f"あなたは親しみやすい英語の先生です。生徒と{topic}について会話をしてください。\n"
            "\n"
            "以下の点を心がけてください：\n"
            f"- 生徒の{topic}に関する話に興味を示す\n"
            "- 簡単な質問をして会話を続ける\n"
            "- 生徒の英語レベルに合わせて話す\n"
            "- 励ましの言葉をかける\n"
            "- 自然な会話の流れを作る\n"
            "\n"
            "生徒が答えに困った時は、ヒントを出したり、例を示したりしてサポートしてください。"
        )
