"""
Фасад движка частотного анализа.

WordFrequencyEngine создаётся вызывающим явно (корпус, конфигурация,
стратегия исполнения) и владеет картой частот и кэшами. Публичные
операции перехватывают внутренние сбои и поднимают одно доменное
исключение с понятным сообщением.
"""

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from .components.analysis_cache import AnalysisCache
from .components.exporter import ResultExporter
from .components.frequency_aggregator import FrequencyAggregator
from .components.jobs import CancellationToken, JobRunner, create_job_runner
from .components.lexicon import Lexicon
from .components.search_matcher import SearchMatcher, index_documents, resolve_mode
from .components.stemmer import Stemmer
from .components.tokenizer import Tokenizer
from .config import Config, config as default_config
from .errors import (
    AnalysisInProgressError,
    FrequencyAnalyserError,
    NotFoundError,
    ProcessingError,
    ValidationError,
)
from .interfaces.engine import (
    CorpusStatistics,
    Document,
    ProgressCallback,
    SearchFilters,
    SearchMode,
    SearchQuery,
    SearchResult,
    WordAnalysis,
    WordEntry,
)

logger = logging.getLogger(__name__)


class WordFrequencyEngine:
    """Движок частотного анализа корпуса документов."""

    def __init__(self, corpus: Sequence[Document], cfg: Optional[Config] = None,
                 runner: Optional[JobRunner] = None, tokenizer: Optional[Tokenizer] = None,
                 stemmer: Optional[Stemmer] = None, lexicon: Optional[Lexicon] = None,
                 exporter: Optional[ResultExporter] = None):
        """
        Инициализирует движок.

        Args:
            corpus: Документы корпуса (статичны на время сессии)
            cfg: Конфигурация (по умолчанию глобальный экземпляр)
            runner: Стратегия исполнения агрегации (по умолчанию из конфигурации)
            tokenizer: Токенизатор
            stemmer: Стеммер
            lexicon: Справочник определений и частей речи
            exporter: Экспортёр результатов

        Raises:
            ValidationError: В корпусе повторяются id документов
        """
        self.config = cfg or default_config
        self.corpus = tuple(corpus)
        self._documents = index_documents(self.corpus)
        self.tokenizer = tokenizer or Tokenizer(
            min_length=self.config.get_min_word_length(),
            include_stopwords=self.config.include_stopwords(),
            strip_html=self.config.is_html_stripping_enabled(),
        )
        self.stemmer = stemmer or Stemmer()
        self.lexicon = lexicon or Lexicon()
        self.runner = runner or create_job_runner(self.config.get_execution_mode())
        self.aggregator = FrequencyAggregator(
            tokenizer=self.tokenizer,
            stemmer=self.stemmer,
            runner=self.runner,
            batch_size=self.config.get_batch_size(),
            yield_every=self.config.get_yield_every(),
            yield_interval=self.config.get_yield_interval(),
            timeout=self.config.get_job_timeout(),
        )
        self.exporter = exporter or ResultExporter(
            output_dir=self.config.get_results_folder(),
            json_word_limit=self.config.get_json_word_limit(),
            filename_prefix=self.config.get_results_filename_prefix(),
            main_sheet_name=self.config.get_main_sheet_name(),
        )

        self._entries: Optional[List[WordEntry]] = None
        self._matcher: Optional[SearchMatcher] = None
        self._analysis_cache: Optional[AnalysisCache] = None
        self._run_lock = threading.Lock()
        self.last_refreshed: Optional[datetime] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self) -> None:
        self.runner.shutdown()

    @property
    def is_initialized(self) -> bool:
        return self._entries is not None

    # --- Агрегация ---
    def analyze_all(self, on_progress: Optional[ProgressCallback] = None,
                    cancel_token: Optional[CancellationToken] = None) -> List[WordEntry]:
        """
        Возвращает отсортированные записи WordEntry по корпусу.

        Повторный вызов без clear_cache() отдаёт закэшированный результат.

        Args:
            on_progress: Обработчик событий прогресса
            cancel_token: Токен отмены

        Returns:
            Записи по убыванию частоты

        Raises:
            AnalysisInProgressError: Агрегация уже выполняется
            AnalysisTimeoutError: Задача не уложилась в дедлайн
            AnalysisCancelledError: Задача отменена
            ProcessingError: Иной сбой агрегации
        """
        entries = self._entries
        if entries is not None:
            return list(entries)
        return self._run_aggregation(on_progress, cancel_token, force=False)

    def refresh(self, on_progress: Optional[ProgressCallback] = None,
                cancel_token: Optional[CancellationToken] = None) -> List[WordEntry]:
        """Пересчитывает карту частот; при сбое остаётся прежнее состояние."""
        return self._run_aggregation(on_progress, cancel_token, force=True)

    def _run_aggregation(self, on_progress: Optional[ProgressCallback],
                         cancel_token: Optional[CancellationToken], force: bool) -> List[WordEntry]:
        if not self._run_lock.acquire(blocking=False):
            raise AnalysisInProgressError("Анализ частотности уже выполняется")
        try:
            if not force and self._entries is not None:
                return list(self._entries)

            try:
                entries = self.aggregator.analyze_all(self.corpus, on_progress, cancel_token)
            except FrequencyAnalyserError as e:
                logger.error(f"Анализ частотности не выполнен: {e}")
                raise
            except Exception as e:
                logger.error(f"Ошибка анализа частотности: {e}")
                raise ProcessingError(f"Не удалось выполнить анализ частотности: {e}") from e

            if self.config.is_optimize_enabled():
                entries = FrequencyAggregator.optimize(entries, self.config.get_max_words())

            self._install(entries)
            return list(entries)
        finally:
            self._run_lock.release()

    def _install(self, entries: List[WordEntry]) -> None:
        matcher = SearchMatcher(
            entries,
            self.corpus,
            stemmer=self.stemmer,
            tokenizer=self.tokenizer,
            lexicon=self.lexicon,
            article_scopes=self.config.get_article_scopes(),
            max_contexts_per_article=self.config.get_max_contexts_per_article(),
            max_contexts_total=self.config.get_max_contexts_total(),
        )
        if self._analysis_cache is None:
            self._analysis_cache = AnalysisCache(
                matcher,
                lexicon=self.lexicon,
                trend_buckets=self.config.get_trend_buckets(),
                related_limit=self.config.get_related_words_limit(),
                related_threshold=self.config.get_related_similarity_threshold(),
                contexts_per_article=self.config.get_analysis_contexts_per_article(),
            )
        else:
            self._analysis_cache.reset(matcher)
        self._matcher = matcher
        self._entries = entries
        self.last_refreshed = datetime.now()

    def clear_cache(self) -> None:
        """Сбрасывает карту частот, кэш анализов и флаг инициализации."""
        self._entries = None
        self._matcher = None
        if self._analysis_cache is not None:
            self._analysis_cache.clear()
        self.last_refreshed = None
        logger.info("Кэш движка очищен")

    def _ensure_matcher(self) -> SearchMatcher:
        self.analyze_all()
        matcher = self._matcher
        if matcher is None:
            raise ProcessingError("Карта частот недоступна")
        return matcher

    # --- Поиск и анализ ---
    def search(self, query: Union[SearchQuery, str], mode: Union[SearchMode, str, None] = None,
               filters: Optional[SearchFilters] = None) -> List[SearchResult]:
        """
        Ищет слова в корпусе.

        Args:
            query: SearchQuery или строка запроса
            mode: Режим, если query передан строкой (по умолчанию интеллектуальный)
            filters: Фильтры, если query передан строкой

        Returns:
            Результаты по убыванию частоты

        Raises:
            ValidationError: Пустой запрос или неизвестный режим
            ProcessingError: Сбой поиска
        """
        if not isinstance(query, SearchQuery):
            query = SearchQuery(
                query=query,
                mode=resolve_mode(mode),
                filters=filters or SearchFilters(),
            )
        if not query.query or not query.query.strip():
            raise ValidationError("Поисковый запрос не может быть пустым")
        resolve_mode(query.mode)

        try:
            return self._ensure_matcher().search(query)
        except FrequencyAnalyserError:
            raise
        except Exception as e:
            logger.error(f"Ошибка поиска '{query.query}': {e}")
            raise ProcessingError(f"Не удалось выполнить поиск: {e}") from e

    def analyze(self, word: str) -> WordAnalysis:
        """
        Возвращает глубокий анализ слова (кэшируется по слову в нижнем регистре).

        Raises:
            ValidationError: Пустое слово
            NotFoundError: Слово не найдено в корпусе
            ProcessingError: Сбой анализа
        """
        try:
            self._ensure_matcher()
            return self._analysis_cache.analyze(word)
        except FrequencyAnalyserError:
            raise
        except Exception as e:
            logger.error(f"Ошибка анализа слова '{word}': {e}")
            raise ProcessingError(f"Не удалось проанализировать слово: {e}") from e

    def get_cached_analysis(self, word: str) -> Optional[WordAnalysis]:
        if self._analysis_cache is None:
            return None
        return self._analysis_cache.get_cached(word)

    # --- Статистика и экспорт ---
    def statistics(self) -> CorpusStatistics:
        return FrequencyAggregator.calculate_statistics(self.analyze_all(), len(self.corpus))

    def export(self, fmt: str, filepath: Optional[Union[str, Path]] = None) -> Path:
        """
        Экспортирует текущую карту частот.

        Args:
            fmt: 'csv', 'json' или 'xlsx'
            filepath: Путь к файлу (None = папка результатов)

        Returns:
            Путь к записанному файлу

        Raises:
            UnsupportedFormatError: 'pdf' или неизвестный формат
            ProcessingError: Ошибка записи
        """
        try:
            entries = self.analyze_all()
            return self.exporter.export(entries, fmt, filepath, statistics=self.statistics())
        except FrequencyAnalyserError as e:
            logger.error(f"Экспорт прерван: {e}")
            raise
        except Exception as e:
            logger.error(f"Экспорт прерван: {e}")
            raise ProcessingError(f"Не удалось экспортировать результаты: {e}") from e

    # --- Дополнительные выборки ---
    def suggestions(self, partial: str, limit: int = 5) -> List[str]:
        return self._ensure_matcher().suggestions(partial, limit)

    def similar_words(self, target: str, limit: int = 10) -> List[WordEntry]:
        return self._ensure_matcher().similar_words(target, limit)

    def words_by_pattern(self, pattern: str) -> List[WordEntry]:
        return self._ensure_matcher().words_by_pattern(pattern)

    def words_by_frequency_range(self, min_freq: int = 1, max_freq: Optional[int] = None) -> List[WordEntry]:
        return self._ensure_matcher().words_by_frequency_range(min_freq, max_freq)

    def words_by_article_count(self, min_articles: int) -> List[WordEntry]:
        return self._ensure_matcher().words_by_article_count(min_articles)

    def frequency_distribution(self) -> List[Dict]:
        return FrequencyAggregator.frequency_distribution(self.analyze_all())

    def collocations(self, word: str, window: int = 5) -> List[Dict]:
        return self.aggregator.find_collocations(self.corpus, word, window)

    def ngrams(self, n: int = 2) -> List[Dict]:
        return self.aggregator.extract_ngrams(self.corpus, n)

    def keywords(self, max_keywords: int = 20) -> List[Dict]:
        return FrequencyAggregator.extract_keywords(self.analyze_all(), max_keywords)

    def word_density(self, word: str) -> float:
        return self.aggregator.word_density(self.corpus, word)

    def complexity(self, document_id: Optional[str] = None) -> Dict:
        """
        Оценка сложности текста одного документа или всего корпуса.

        Args:
            document_id: id документа (None = весь корпус)

        Returns:
            Словарь Tokenizer.analyze_complexity

        Raises:
            NotFoundError: Документ не найден
        """
        if document_id is None:
            text = '\n'.join(d.content for d in self.corpus)
        else:
            document = self._documents.get(str(document_id))
            if document is None:
                raise NotFoundError(f"Документ '{document_id}' не найден")
            text = document.content
        return self.tokenizer.analyze_complexity(text)
