"""
Небольшой статический словарь: определения, синонимы и части речи.

Покрытие намеренно крошечное; для остальных слов возвращаются
шаблонное определение и эвристическая часть речи по окончанию.
"""

from typing import Dict, List, Optional, Tuple

from .stemmer import IRREGULAR_VERBS, WORD_PATTERNS

DEFINITIONS: Dict[str, str] = {
    'technology': 'The application of scientific knowledge for practical purposes, especially in industry.',
    'learning': 'The acquisition of knowledge or skills through experience, study, or being taught.',
    'communication': 'The imparting or exchanging of information or ideas.',
    'energy': 'Power derived from the utilization of physical or chemical resources.',
    'development': 'The process of developing or being developed.',
}

SYNONYMS: Dict[str, List[str]] = {
    'technology': ['tech', 'innovation', 'advancement'],
    'learning': ['education', 'study', 'training'],
    'communication': ['interaction', 'correspondence', 'exchange'],
    'energy': ['power', 'force', 'strength'],
    'development': ['growth', 'progress', 'advancement'],
}

PARTS_OF_SPEECH: Dict[str, str] = {
    'technology': 'noun',
    'learning': 'noun/verb',
    'communication': 'noun',
    'energy': 'noun',
    'development': 'noun',
}

DEFAULT_PART_OF_SPEECH = 'noun'

# Порядок важен: первое совпавшее окончание определяет часть речи
_SUFFIX_PARTS_OF_SPEECH: List[Tuple[str, str]] = [
    ('ADVERBS', 'adverb'),
    ('PRESENT_PARTICIPLE', 'verb'),
    ('PAST_TENSE', 'verb'),
    ('NOUNS', 'noun'),
]


class Lexicon:
    """Справочник определений, синонимов и частей речи."""

    def __init__(self, definitions: Optional[Dict[str, str]] = None,
                 synonyms: Optional[Dict[str, List[str]]] = None,
                 parts_of_speech: Optional[Dict[str, str]] = None):
        self.definitions = DEFINITIONS if definitions is None else definitions
        self.synonyms = SYNONYMS if synonyms is None else synonyms
        self.parts_of_speech = PARTS_OF_SPEECH if parts_of_speech is None else parts_of_speech

    def definition(self, word: str) -> str:
        return self.definitions.get(
            word.lower(), f'Definition for "{word}" - a word used in various contexts.'
        )

    def synonyms_for(self, word: str) -> List[str]:
        return list(self.synonyms.get(word.lower(), []))

    def part_of_speech(self, word: str) -> str:
        """
        Определяет часть речи слова.

        Сначала статическая таблица, затем формы неправильных глаголов,
        затем окончания; по умолчанию 'noun'.

        Args:
            word: Слово

        Returns:
            Часть речи; составные значения разделены '/' (например 'noun/verb')
        """
        lower_word = word.lower()
        if lower_word in self.parts_of_speech:
            return self.parts_of_speech[lower_word]
        if lower_word in IRREGULAR_VERBS:
            return 'verb'
        for pattern_name, pos in _SUFFIX_PARTS_OF_SPEECH:
            if WORD_PATTERNS[pattern_name].search(lower_word):
                return pos
        return DEFAULT_PART_OF_SPEECH

    def matches_part_of_speech(self, word: str, wanted: Tuple[str, ...]) -> bool:
        """True если хотя бы одна часть речи слова есть среди wanted."""
        if not wanted:
            return True
        wanted_lower = {w.lower() for w in wanted}
        return any(pos in wanted_lower for pos in self.part_of_speech(word).split('/'))
