"""
Компонент для токенизации английского текста.

Отвечает за очистку текста, разбивку на предложения и слова,
валидацию формы слова и фильтрацию стоп-слов.
"""

import re
from typing import Dict, List, Optional

from bs4 import BeautifulSoup

from ..interfaces.engine import TokenizerInterface


STOP_WORDS = frozenset([
    # Артикли
    'a', 'an', 'the',
    # Предлоги
    'in', 'on', 'at', 'by', 'for', 'with', 'without', 'to', 'from', 'of', 'about',
    'under', 'over', 'through', 'between', 'among', 'during', 'before', 'after',
    'above', 'below', 'up', 'down', 'into', 'onto', 'upon', 'within', 'against',
    # Союзы
    'and', 'or', 'but', 'nor', 'so', 'yet', 'because', 'although', 'while',
    'since', 'unless', 'until', 'if', 'when', 'where', 'why', 'how',
    # Местоимения
    'i', 'you', 'he', 'she', 'it', 'we', 'they', 'me', 'him', 'her', 'us', 'them',
    'my', 'your', 'his', 'its', 'our', 'their', 'mine', 'yours', 'ours',
    'this', 'that', 'these', 'those', 'who', 'whom', 'whose', 'which', 'what',
    # Вспомогательные глаголы
    'am', 'is', 'are', 'was', 'were', 'be', 'been', 'being',
    'have', 'has', 'had', 'do', 'does', 'did', 'will', 'would',
    'shall', 'should', 'may', 'might', 'can', 'could', 'must',
    # Частые наречия
    'not', 'no', 'yes', 'very', 'too', 'just', 'only', 'also',
    'here', 'there', 'now', 'then', 'today', 'tomorrow', 'yesterday',
    'always', 'never', 'sometimes', 'often', 'usually', 'again',
    # Числительные и кванторы
    'one', 'two', 'three', 'four', 'five', 'six', 'seven', 'eight', 'nine', 'ten',
    'first', 'second', 'third', 'last', 'next', 'another', 'other', 'some', 'many',
    'few', 'more', 'most', 'less', 'all', 'any', 'each', 'every', 'both', 'either',
])

# Всё, кроме символов слова, пробелов и апострофа, плюс подчёркивание
PUNCTUATION = re.compile(r"[^\w\s']|_", re.ASCII)
EXTRA_WHITESPACE = re.compile(r'\s+')
SENTENCE_BOUNDARY = re.compile(r'[.!?]+')
VALID_WORD = re.compile(r"^[a-z][a-z']*[a-z]$|^[a-z]$")
CONTRACTION = re.compile(r"^(n't|'re|'ve|'ll|'d|'s|'m)$", re.IGNORECASE)
LEADING_TRAILING_QUOTES = re.compile(r'^[\'"]|[\'"]$')
TRAILING_PUNCTUATION = re.compile(r'[.,;:!?]$')
VOWEL_GROUP = re.compile(r'[aeiouy]+')

# Пороги индекса удобочитаемости Флеша
EASY_READING_SCORE = 70
MEDIUM_READING_SCORE = 50


def is_stop_word(word: str) -> bool:
    """Проверяет, является ли слово стоп-словом (без учёта регистра)."""
    return word.lower() in STOP_WORDS


def strip_markup(text: str) -> str:
    """Снимает HTML-разметку, если она похожа на присутствующую в тексте."""
    if '<' not in text or '>' not in text:
        return text
    soup = BeautifulSoup(text, 'html.parser')
    return soup.get_text(separator=' ')


class Tokenizer(TokenizerInterface):
    """Токенизатор английского текста."""

    def __init__(self, min_length: int = 2, include_stopwords: bool = False,
                 strip_html: bool = True):
        """
        Инициализирует токенизатор.

        Args:
            min_length: Минимальная длина токена по умолчанию
            include_stopwords: Оставлять ли стоп-слова по умолчанию
            strip_html: Снимать ли HTML-разметку перед очисткой
        """
        self.min_length = min_length
        self.include_stopwords = include_stopwords
        self.strip_html = strip_html

    def clean_text(self, text: str) -> str:
        """
        Очищает текст: снимает разметку, приводит к нижнему регистру,
        заменяет пунктуацию (кроме апострофов) пробелами и схлопывает пробелы.

        Args:
            text: Исходный текст

        Returns:
            Очищенный текст
        """
        if not text:
            return ''
        if self.strip_html:
            text = strip_markup(text)
        text = text.lower()
        text = PUNCTUATION.sub(' ', text)
        return EXTRA_WHITESPACE.sub(' ', text).strip()

    def split_into_sentences(self, text: str) -> List[str]:
        """
        Наивно разбивает текст на предложения по сериям '.', '!' и '?'.

        Сокращения вроде "Dr." не обрабатываются особо.

        Args:
            text: Исходный текст

        Returns:
            Список непустых предложений без крайних пробелов
        """
        if not text:
            return []
        sentences = (s.strip() for s in SENTENCE_BOUNDARY.split(text))
        return [s for s in sentences if s]

    def clean_word(self, word: str) -> str:
        """Снимает крайние кавычки и завершающую пунктуацию с кандидата."""
        word = LEADING_TRAILING_QUOTES.sub('', word)
        word = TRAILING_PUNCTUATION.sub('', word)
        return word.strip()

    def is_valid_word(self, word: str, min_length: int, include_stopwords: bool) -> bool:
        """
        Проверяет кандидата на соответствие форме слова.

        Args:
            word: Кандидат в нижнем регистре
            min_length: Минимальная длина
            include_stopwords: Пропускать ли стоп-слова

        Returns:
            True если кандидат является токеном
        """
        if len(word) < min_length:
            return False
        if CONTRACTION.match(word):
            return False
        if not VALID_WORD.match(word):
            return False
        if not include_stopwords and word in STOP_WORDS:
            return False
        return True

    def extract_words(self, text: str, include_stopwords: Optional[bool] = None,
                      min_length: Optional[int] = None) -> List[str]:
        """
        Извлекает токены из текста.

        Args:
            text: Исходный текст
            include_stopwords: Оставлять ли стоп-слова (None = настройка экземпляра)
            min_length: Минимальная длина (None = настройка экземпляра)

        Returns:
            Список токенов в порядке появления
        """
        if include_stopwords is None:
            include_stopwords = self.include_stopwords
        if min_length is None:
            min_length = self.min_length

        words: List[str] = []
        for sentence in self.split_into_sentences(self.clean_text(text)):
            for candidate in sentence.split():
                word = self.clean_word(candidate)
                if self.is_valid_word(word, min_length, include_stopwords):
                    words.append(word)
        return words

    def extract_sentences(self, text: str) -> List[Dict]:
        """
        Возвращает предложения очищенного текста со списком слов и позицией.

        Args:
            text: Исходный текст

        Returns:
            Список словарей {'text', 'words', 'position', 'length'}
        """
        sentences = []
        for index, sentence in enumerate(self.split_into_sentences(self.clean_text(text))):
            raw_words = sentence.split()
            sentences.append({
                'text': sentence,
                'words': [self.clean_word(w) for w in raw_words],
                'position': index,
                'length': len(raw_words),
            })
        return sentences

    @staticmethod
    def get_word_context(sentence: str, word_index: int, window: int = 3) -> str:
        """
        Возвращает окно слов вокруг слова с индексом word_index.

        Args:
            sentence: Предложение
            word_index: Индекс слова в предложении
            window: Число слов слева и справа

        Returns:
            Фрагмент предложения
        """
        words = sentence.split()
        start = max(0, word_index - window)
        end = min(len(words), word_index + window + 1)
        return ' '.join(words[start:end])

    def get_token_statistics(self, tokens: List[str]) -> dict:
        """
        Возвращает статистику по токенам.

        Args:
            tokens: Список токенов

        Returns:
            Словарь со статистикой
        """
        if not tokens:
            return {
                'total_tokens': 0,
                'unique_tokens': 0,
                'avg_length': 0.0,
                'length_distribution': {}
            }

        lengths = [len(t) for t in tokens]
        length_dist: Dict[int, int] = {}
        for length in lengths:
            length_dist[length] = length_dist.get(length, 0) + 1

        return {
            'total_tokens': len(tokens),
            'unique_tokens': len(set(tokens)),
            'avg_length': round(sum(lengths) / len(lengths), 1),
            'length_distribution': length_dist
        }

    @staticmethod
    def count_syllables(word: str) -> int:
        """
        Приблизительно считает слоги: группы гласных после отбрасывания
        конечной 'e'. Слова до трёх букв считаются односложными.
        """
        if len(word) <= 3:
            return 1
        word = word.lower()
        if word.endswith('e'):
            word = word[:-1]
        return len(VOWEL_GROUP.findall(word)) or 1

    def word_density(self, text: str, target_word: str) -> float:
        """
        Доля вхождений слова среди всех токенов текста (стоп-слова учитываются).

        Args:
            text: Исходный текст
            target_word: Слово

        Returns:
            Плотность от 0 до 1; 0.0 для текста без токенов
        """
        words = self.extract_words(text, include_stopwords=True)
        if not words:
            return 0.0
        target = target_word.lower()
        return sum(1 for w in words if w == target) / len(words)

    def analyze_complexity(self, text: str) -> Dict:
        """
        Оценивает сложность текста по индексу удобочитаемости Флеша.

        Предложения берутся из исходного текста (без разметки), слова
        через extract_words.

        Args:
            text: Исходный текст

        Returns:
            Словарь с ключами readability_score (0..100), difficulty
            ('easy', 'medium', 'hard'), avg_words_per_sentence,
            avg_syllables_per_word, complex_word_count (3+ слога),
            sentence_count, word_count, character_count
        """
        plain = strip_markup(text) if self.strip_html else text
        sentence_count = len(self.split_into_sentences(plain))
        words = self.extract_words(text)
        word_count = len(words)

        syllables = [self.count_syllables(w) for w in words]
        avg_words = word_count / max(sentence_count, 1)
        avg_syllables = sum(syllables) / max(word_count, 1)
        score = 206.835 - 1.015 * avg_words - 84.6 * avg_syllables

        if score >= EASY_READING_SCORE:
            difficulty = 'easy'
        elif score >= MEDIUM_READING_SCORE:
            difficulty = 'medium'
        else:
            difficulty = 'hard'

        return {
            'readability_score': max(0.0, min(100.0, score)),
            'difficulty': difficulty,
            'avg_words_per_sentence': avg_words,
            'avg_syllables_per_word': avg_syllables,
            'complex_word_count': sum(1 for s in syllables if s >= 3),
            'sentence_count': sentence_count,
            'word_count': word_count,
            'character_count': len(re.sub(r'\s+', '', text)),
        }
