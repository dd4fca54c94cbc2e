"""Curated lookup tables used by the auto lesson generator.

Tables are keyed by topic name as typed in the generator form (Japanese). Every
lookup falls back to the ``default`` entry for topics it does not know.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, TypeVar

DEFAULT_TOPIC = "default"

PHRASE_TEMPLATES: Dict[str, List[Dict[str, str]]] = {
    "趣味": [
        {"english": "I like playing sports.", "japanese": "私はスポーツをするのが好きです。", "phonetic": "/aɪ laɪk ˈpleɪɪŋ spɔːrts/"},
        {"english": "My hobby is reading.", "japanese": "私の趣味は読書です。", "phonetic": "/maɪ ˈhɑbi ɪz ˈridɪŋ/"},
        {"english": "I enjoy listening to music.", "japanese": "私は音楽を聴くのを楽しんでいます。", "phonetic": "/aɪ ɪnˈdʒɔɪ ˈlɪsənɪŋ tu ˈmjuzɪk/"},
    ],
    "家族": [
        {"english": "I have two brothers.", "japanese": "私には兄弟が2人います。", "phonetic": "/aɪ hæv tu ˈbrʌðərz/"},
        {"english": "My family is very close.", "japanese": "私の家族はとても仲が良いです。", "phonetic": "/maɪ ˈfæməli ɪz ˈveri kloʊs/"},
        {"english": "I live with my parents.", "japanese": "私は両親と住んでいます。", "phonetic": "/aɪ lɪv wɪð maɪ ˈpɛrənts/"},
    ],
    "仕事": [
        {"english": "I work as a teacher.", "japanese": "私は教師として働いています。", "phonetic": "/aɪ wɜrk æz ə ˈtiʧər/"},
        {"english": "My job is interesting.", "japanese": "私の仕事は興味深いです。", "phonetic": "/maɪ dʒɑb ɪz ˈɪntrəstɪŋ/"},
        {"english": "I start work at 9 AM.", "japanese": "私は午前9時に仕事を始めます。", "phonetic": "/aɪ stɑrt wɜrk æt naɪn eɪ ɛm/"},
    ],
    "食べ物": [
        {"english": "I love Japanese food.", "japanese": "私は日本料理が大好きです。", "phonetic": "/aɪ lʌv ˌdʒæpəˈniz fud/"},
        {"english": "My favorite dish is sushi.", "japanese": "私の好きな料理は寿司です。", "phonetic": "/maɪ ˈfeɪvərɪt dɪʃ ɪz ˈsuʃi/"},
        {"english": "I cook dinner every day.", "japanese": "私は毎日夕食を作ります。", "phonetic": "/aɪ kʊk ˈdɪnər ˈɛvri deɪ/"},
    ],
    DEFAULT_TOPIC: [
        {"english": "I am interested in this topic.", "japanese": "私はこのトピックに興味があります。", "phonetic": "/aɪ æm ˈɪntrəstəd ɪn ðɪs ˈtɑpɪk/"},
        {"english": "Let me tell you about it.", "japanese": "それについてお話しします。", "phonetic": "/lɛt mi tɛl ju əˈbaʊt ɪt/"},
        {"english": "This is important to me.", "japanese": "これは私にとって重要です。", "phonetic": "/ðɪs ɪz ɪmˈpɔrtənt tu mi/"},
    ],
}

# ``{topic}`` in a prompt is replaced by the topic name.
APPLICATION_PATTERNS: Dict[str, List[Dict[str, str]]] = {
    "趣味": [
        {"prompt": "新しい友人にあなたの{topic}について詳しく説明してください。", "syntax_hint": "I enjoy + [動詞+ing] + because + [理由]"},
        {"prompt": "相手の{topic}について質問し、会話を続けてください。", "syntax_hint": "What kind of + [名詞] + do you like? How often + [疑問文]?"},
        {"prompt": "友人に一緒に{topic}を楽しむよう誘ってください。", "syntax_hint": "Would you like to + [動詞] + with me? How about + [提案]?"},
    ],
    "家族": [
        {"prompt": "あなたの{topic}について新しい同僚に紹介してください。", "syntax_hint": "I have + [数] + [家族構成] + who + [説明]"},
        {"prompt": "家族の写真を見せながら、それぞれについて説明してください。", "syntax_hint": "This is my + [関係] + [名前]. He/She + [特徴・職業]"},
        {"prompt": "家族との思い出について友人に話してください。", "syntax_hint": "We used to + [動詞] + together. My favorite memory is + [思い出]"},
    ],
    "仕事": [
        {"prompt": "パーティーで初対面の人にあなたの{topic}について説明してください。", "syntax_hint": "I work as + [職業] + at + [会社]. My job involves + [業務内容]"},
        {"prompt": "仕事の大変さと楽しさについて友人に話してください。", "syntax_hint": "Sometimes it's + [形容詞] + but I enjoy + [楽しい部分]"},
        {"prompt": "転職を考えている友人にアドバイスをしてください。", "syntax_hint": "You should + [アドバイス]. It's important to + [重要なこと]"},
    ],
    DEFAULT_TOPIC: [
        {"prompt": "{topic}について相手に詳しく説明してください。", "syntax_hint": "Let me tell you about + [話題]. It's + [説明]"},
        {"prompt": "相手の意見や経験について質問してください。", "syntax_hint": "What do you think about + [話題]? Have you ever + [経験]?"},
        {"prompt": "あなたの意見や感想を述べてください。", "syntax_hint": "In my opinion, + [意見]. I think + [考え]"},
    ],
}

COMMON_WORDS: Dict[str, List[Dict[str, str]]] = {
    "趣味": [
        {"english": "hobby", "japanese": "趣味"},
        {"english": "enjoy", "japanese": "楽しむ"},
        {"english": "interesting", "japanese": "興味深い"},
        {"english": "fun", "japanese": "楽しい"},
        {"english": "activity", "japanese": "活動"},
    ],
    "家族": [
        {"english": "family", "japanese": "家族"},
        {"english": "parents", "japanese": "両親"},
        {"english": "brother", "japanese": "兄弟"},
        {"english": "sister", "japanese": "姉妹"},
        {"english": "close", "japanese": "親しい"},
    ],
    DEFAULT_TOPIC: [
        {"english": "like", "japanese": "好き"},
        {"english": "good", "japanese": "良い"},
        {"english": "important", "japanese": "重要な"},
        {"english": "happy", "japanese": "幸せな"},
        {"english": "nice", "japanese": "素晴らしい"},
    ],
}

TRANSLATIONS: Dict[str, str] = {
    "like": "好き",
    "love": "愛する",
    "enjoy": "楽しむ",
    "interesting": "興味深い",
    "family": "家族",
    "work": "働く",
    "hobby": "趣味",
    "music": "音楽",
    "food": "食べ物",
    "important": "重要な",
    "happy": "幸せな",
    "playing": "遊ぶ",
    "reading": "読書",
    "listening": "聞く",
    "cooking": "料理",
}

DISTRACTOR_POOL: tuple[str, ...] = (
    "美しい", "難しい", "簡単な", "大きな", "小さな", "新しい", "古い",
    "速い", "遅い", "高い", "安い", "良い", "悪い",
)

DEFAULT_PRESET = "自己紹介"

PRESETS: Dict[str, Dict[str, object]] = {
    "自己紹介": {
        "title": "Lesson: 自己紹介をする",
        "description": "初対面の人に自分について紹介する基本的な表現を学びます",
        "topic": "自己紹介",
        "key_words": ["名前", "出身", "職業", "趣味"],
        "japanese_context": "新しい人と会った時の基本的な自己紹介",
    },
    "趣味について": {
        "title": "Lesson: 趣味について話す",
        "description": "自分の趣味や好きなことについて話す表現を学びます",
        "topic": "趣味",
        "key_words": ["好き", "楽しむ", "スポーツ", "音楽", "読書"],
        "japanese_context": "自分の興味や趣味について相手に伝える",
    },
    "家族について": {
        "title": "Lesson: 家族について話す",
        "description": "家族構成や家族との関係について話す表現を学びます",
        "topic": "家族",
        "key_words": ["家族", "両親", "兄弟", "姉妹", "仲良し"],
        "japanese_context": "自分の家族について紹介する",
    },
    "仕事について": {
        "title": "Lesson: 仕事について話す",
        "description": "自分の職業や仕事内容について話す表現を学びます",
        "topic": "仕事",
        "key_words": ["職業", "会社", "働く", "同僚", "やりがい"],
        "japanese_context": "自分の仕事について説明する",
    },
}

T = TypeVar("T")


def _lookup(table: Mapping[str, T], topic: str) -> T:
    return table.get(topic, table[DEFAULT_TOPIC])


def get_phrase_templates(topic: str) -> List[Dict[str, str]]:
    return [dict(entry) for entry in _lookup(PHRASE_TEMPLATES, topic)]


def get_application_patterns(topic: str) -> List[Dict[str, str]]:
    return [dict(entry) for entry in _lookup(APPLICATION_PATTERNS, topic)]


def get_common_words(topic: str) -> List[Dict[str, str]]:
    return [dict(entry) for entry in _lookup(COMMON_WORDS, topic)]


def translate_word(word: str) -> str:
    """Japanese gloss for *word*, or the word itself when the dictionary lacks it."""
    return TRANSLATIONS.get(word.lower(), word)


def get_preset(name: str) -> Dict[str, object]:
    preset = PRESETS.get(name) or PRESETS[DEFAULT_PRESET]
    data = dict(preset)
    data["key_words"] = list(preset["key_words"])  # type: ignore[arg-type]
    return data


def list_presets() -> List[str]:
    return list(PRESETS)
