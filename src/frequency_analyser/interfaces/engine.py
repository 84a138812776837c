"""
Абстрактные интерфейсы и модели данных движка частотного анализа.

Определяет контракты компонентов (токенизация, стемминг, агрегация,
поиск, глубокий анализ слова, экспорт) и неизменяемые записи,
которыми они обмениваются.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union


@dataclass(frozen=True)
class Document:
    """Документ корпуса, предоставляемый внешним поставщиком."""
    id: str
    title: str
    content: str
    category: str = ""


@dataclass(frozen=True)
class WordEntry:
    """Агрегированная запись по одному уникальному слову корпуса."""
    word: str
    frequency: int
    # Идентификаторы документов без повторов, в порядке первого появления
    articles: Tuple[str, ...]
    stemmed: str


class SearchMode(str, Enum):
    """Режим поиска."""
    INTELLIGENT = "intelligent"
    EXACT = "exact"


@dataclass(frozen=True)
class SearchFilters:
    """Фильтры поиска, применяются по порядку объявления полей."""
    min_length: int = 1
    exclude_common: bool = False
    part_of_speech: Tuple[str, ...] = ()
    article_scope: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SearchQuery:
    """Поисковый запрос."""
    query: str
    mode: SearchMode = SearchMode.INTELLIGENT
    filters: SearchFilters = field(default_factory=SearchFilters)


@dataclass(frozen=True)
class ArticleMatch:
    """Совпадения термина в одном документе."""
    article_id: str
    title: str
    match_count: int
    contexts: Tuple[str, ...]


@dataclass(frozen=True)
class SearchResult:
    """Результат поиска по одному термину запроса."""
    term: str
    frequency: int
    article_matches: Tuple[ArticleMatch, ...]
    contexts: Tuple[str, ...]


@dataclass(frozen=True)
class ArticleOccurrence:
    """Число вхождений слова в исходный текст документа."""
    article_id: str
    title: str
    count: int
    category: str


@dataclass(frozen=True)
class WordContext:
    """Предложение-пример со ссылкой на документ."""
    text: str
    article_id: str
    article_title: str


@dataclass(frozen=True)
class RelatedWord:
    """Родственное слово и его сходство по Левенштейну (0..1)."""
    word: str
    similarity: float
    same_stem: bool


@dataclass(frozen=True)
class TrendPoint:
    """Число вхождений слова в одном сегменте корпуса."""
    period: str
    count: int


@dataclass(frozen=True)
class WordAnalysis:
    """Глубокий анализ слова, строится по запросу и кэшируется."""
    word: str
    frequency: int
    articles: Tuple[ArticleOccurrence, ...]
    contexts: Tuple[WordContext, ...]
    definition: Optional[str] = None
    synonyms: Tuple[str, ...] = ()
    part_of_speech: Optional[str] = None
    related_words: Tuple[RelatedWord, ...] = ()
    frequency_trend: Tuple[TrendPoint, ...] = ()


@dataclass(frozen=True)
class CorpusStatistics:
    """Сводная статистика по набору WordEntry."""
    total_words: int
    unique_words: int
    average_length: float
    articles_analyzed: int
    average_frequency: float = 0.0
    median_frequency: float = 0.0
    max_frequency: int = 0
    min_frequency: int = 0

    def to_dict(self) -> Dict[str, Union[int, float]]:
        return {
            'totalWords': self.total_words,
            'uniqueWords': self.unique_words,
            'averageLength': self.average_length,
            'articlesAnalyzed': self.articles_analyzed,
            'averageFrequency': self.average_frequency,
            'medianFrequency': self.median_frequency,
            'maxFrequency': self.max_frequency,
            'minFrequency': self.min_frequency,
        }


@dataclass(frozen=True)
class ProgressEvent:
    """Событие прогресса пакетной задачи."""
    percent: float
    processed: int
    total: int


ProgressCallback = Callable[[ProgressEvent], None]


class TokenizerInterface(ABC):
    """Интерфейс токенизации текста."""

    @abstractmethod
    def clean_text(self, text: str) -> str:
        """Очищает и нормализует текст."""
        pass

    @abstractmethod
    def extract_words(self, text: str, include_stopwords: bool = False,
                      min_length: Optional[int] = None) -> List[str]:
        """Извлекает валидные токены."""
        pass

    @abstractmethod
    def split_into_sentences(self, text: str) -> List[str]:
        """Разбивает текст на предложения."""
        pass


class StemmerInterface(ABC):
    """Интерфейс стемминга."""

    @abstractmethod
    def stem(self, word: str) -> str:
        """Возвращает основу слова."""
        pass


class FrequencyAggregatorInterface(ABC):
    """Интерфейс агрегации частот по корпусу."""

    @abstractmethod
    def analyze_all(self, corpus: Sequence[Document],
                    on_progress: Optional[ProgressCallback] = None) -> List[WordEntry]:
        """Строит отсортированный список WordEntry."""
        pass


class SearchMatcherInterface(ABC):
    """Интерфейс поиска по агрегированной карте."""

    @abstractmethod
    def search(self, query: SearchQuery) -> List[SearchResult]:
        """Выполняет поиск."""
        pass


class WordAnalysisInterface(ABC):
    """Интерфейс глубокого анализа слова."""

    @abstractmethod
    def analyze(self, word: str) -> WordAnalysis:
        """Возвращает (возможно, закэшированный) анализ слова."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Очищает кэш анализов."""
        pass


class ResultExporterInterface(ABC):
    """Интерфейс экспорта результатов."""

    @abstractmethod
    def to_csv(self, entries: Sequence[WordEntry]) -> str:
        """Сериализует записи в CSV."""
        pass

    @abstractmethod
    def to_json(self, entries: Sequence[WordEntry], statistics: CorpusStatistics) -> str:
        """Сериализует записи в JSON."""
        pass

    @abstractmethod
    def export(self, entries: Sequence[WordEntry], fmt: str,
               filepath: Optional[Union[str, Path]] = None) -> Path:
        """Записывает файл экспорта в нужном формате."""
        pass
