"""
Компонент глубокого анализа слова с кэшированием.

Анализ строится по запросу и запоминается по слову в нижнем регистре.
Записи кэша неизменяемы и не устаревают сами; clear() очищает таблицу.
"""

import logging
import threading
from typing import Dict, List, Optional, Sequence

import numpy as np
from rapidfuzz.distance import Levenshtein

from ..errors import NotFoundError, ValidationError
from ..interfaces.engine import (
    ArticleOccurrence,
    Document,
    RelatedWord,
    SearchMode,
    TrendPoint,
    WordAnalysis,
    WordAnalysisInterface,
    WordContext,
    WordEntry,
)
from .lexicon import Lexicon
from .search_matcher import SearchMatcher
from .tokenizer import strip_markup

logger = logging.getLogger(__name__)


class AnalysisCache(WordAnalysisInterface):
    """Кэш глубоких анализов слов."""

    def __init__(self, matcher: SearchMatcher, lexicon: Optional[Lexicon] = None,
                 trend_buckets: int = 6, related_limit: int = 5,
                 related_threshold: float = 0.6, contexts_per_article: int = 3):
        """
        Инициализирует кэш.

        Args:
            matcher: Поиск по текущей карте частот
            lexicon: Справочник определений и частей речи
            trend_buckets: Число сегментов корпуса для тренда
            related_limit: Максимум родственных слов
            related_threshold: Минимальное сходство Левенштейна для родственного слова
            contexts_per_article: Максимум контекстов на документ
        """
        self.matcher = matcher
        self.lexicon = lexicon or matcher.lexicon
        self.trend_buckets = max(1, trend_buckets)
        self.related_limit = related_limit
        self.related_threshold = related_threshold
        self.contexts_per_article = contexts_per_article
        self._cache: Dict[str, WordAnalysis] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, word: str) -> bool:
        return word.lower() in self._cache

    def reset(self, matcher: SearchMatcher) -> None:
        """Переключает кэш на новую карту частот и очищает его."""
        with self._lock:
            self.matcher = matcher
            self._cache.clear()

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def get_cached(self, word: str) -> Optional[WordAnalysis]:
        return self._cache.get(word.lower())

    def analyze(self, word: str) -> WordAnalysis:
        """
        Возвращает анализ слова, при необходимости строя его.

        Args:
            word: Слово

        Returns:
            WordAnalysis

        Raises:
            ValidationError: Пустое слово
            NotFoundError: Слово не найдено в корпусе
        """
        key = (word or '').strip().lower()
        if not key:
            raise ValidationError("Слово для анализа не указано")

        cached = self._cache.get(key)
        if cached is not None:
            return cached

        analysis = self._build(key)
        with self._lock:
            # Параллельный вызов мог записать анализ раньше
            return self._cache.setdefault(key, analysis)

    def _build(self, word: str) -> WordAnalysis:
        matches = self.matcher.find_matches(word, SearchMode.INTELLIGENT)
        if not matches:
            raise NotFoundError(f"Слово '{word}' не найдено в корпусе")

        main = next((m for m in matches if m.word == word), matches[0])
        pattern = self.matcher.context_pattern(word, {main.word})

        articles: List[ArticleOccurrence] = []
        contexts: List[WordContext] = []
        for document in self._documents_of(main):
            content = strip_markup(document.content) if self.matcher.tokenizer.strip_html else document.content
            articles.append(ArticleOccurrence(
                article_id=document.id,
                title=document.title,
                count=len(pattern.findall(content)),
                category=document.category,
            ))
            for text in self.matcher.extract_contexts(document.content, pattern, self.contexts_per_article):
                contexts.append(WordContext(text=text, article_id=document.id, article_title=document.title))

        logger.debug(f"Построен анализ слова '{word}' (запись '{main.word}')")
        return WordAnalysis(
            word=main.word,
            frequency=main.frequency,
            articles=tuple(articles),
            contexts=tuple(contexts),
            definition=self.lexicon.definition(word),
            synonyms=tuple(self.lexicon.synonyms_for(word)),
            part_of_speech=self.lexicon.part_of_speech(word),
            related_words=tuple(self.related_words(main)),
            frequency_trend=tuple(self.frequency_trend(main)),
        )

    def _documents_of(self, entry: WordEntry) -> List[Document]:
        documents = self.matcher.documents
        return [documents[a] for a in entry.articles if a in documents]

    def related_words(self, entry: WordEntry) -> List[RelatedWord]:
        """
        Родственные слова: та же основа или сходство Левенштейна не ниже порога.

        Сортировка: сначала слова с той же основой, затем по убыванию
        сходства, затем по убыванию частоты.
        """
        candidates = []
        for other in self.matcher.entries:
            if other.word == entry.word:
                continue
            same_stem = other.stemmed == entry.stemmed
            similarity = Levenshtein.normalized_similarity(entry.word, other.word)
            if same_stem or similarity >= self.related_threshold:
                candidates.append((same_stem, similarity, other))

        candidates.sort(key=lambda c: (c[0], c[1], c[2].frequency), reverse=True)
        return [
            RelatedWord(word=other.word, similarity=round(similarity, 2), same_stem=same_stem)
            for same_stem, similarity, other in candidates[:self.related_limit]
        ]

    def frequency_trend(self, entry: WordEntry) -> List[TrendPoint]:
        """
        Число вхождений слова в каждом из trend_buckets последовательных
        сегментов корпуса (в порядке корпуса).

        Сумма по сегментам равна частоте слова.
        """
        documents: Sequence[Document] = list(self.matcher.documents.values())
        segments = np.array_split(np.arange(len(documents)), self.trend_buckets)
        trend = []
        for number, indices in enumerate(segments, start=1):
            count = sum(self.matcher.token_counts(documents[i])[entry.word] for i in indices)
            trend.append(TrendPoint(period=f"segment {number}", count=int(count)))
        return trend
