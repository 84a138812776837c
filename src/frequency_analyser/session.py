"""
Состояние поисковой сессии поверх движка.

Сессия: IDLE → SEARCHING (submit) → RESULTS | EMPTY | ERROR → IDLE (clear).
Анализ слова: NOT_REQUESTED → LOADING → CACHED | FAILED.

Неудачный поиск не роняет вызывающего: сессия переходит в ERROR с
сообщением и пустыми результатами.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Union

from .components.search_matcher import resolve_mode
from .engine import WordFrequencyEngine
from .errors import FrequencyAnalyserError, ValidationError
from .interfaces.engine import SearchFilters, SearchMode, SearchQuery, SearchResult, WordAnalysis

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    RESULTS = "results"
    EMPTY = "empty"
    ERROR = "error"


class AnalysisState(str, Enum):
    NOT_REQUESTED = "not_requested"
    LOADING = "loading"
    CACHED = "cached"
    FAILED = "failed"


@dataclass(frozen=True)
class HistoryItem:
    """Запись истории поиска."""
    query: str
    mode: SearchMode


class SearchSession:
    """Поисковая сессия: состояние, результаты, история и анализы слов."""

    def __init__(self, engine: WordFrequencyEngine, history_limit: Optional[int] = None):
        """
        Инициализирует сессию.

        Args:
            engine: Движок частотного анализа
            history_limit: Размер истории (по умолчанию из конфигурации движка)
        """
        self.engine = engine
        self.history_limit = history_limit if history_limit is not None else engine.config.get_history_limit()
        self.state = SessionState.IDLE
        self.results: List[SearchResult] = []
        self.error: Optional[str] = None
        self.current_query: Optional[SearchQuery] = None
        self.history: List[HistoryItem] = []
        self._analysis_states: Dict[str, AnalysisState] = {}
        self._analysis_errors: Dict[str, str] = {}

    def submit(self, query: Union[SearchQuery, str], mode: Union[SearchMode, str, None] = None,
               filters: Optional[SearchFilters] = None) -> SessionState:
        """
        Выполняет поиск и переводит сессию в итоговое состояние.

        Args:
            query: SearchQuery или строка запроса
            mode: Режим, если query передан строкой
            filters: Фильтры, если query передан строкой

        Returns:
            Новое состояние: RESULTS, EMPTY или ERROR
        """
        if not isinstance(query, SearchQuery):
            try:
                query = SearchQuery(
                    query=query,
                    mode=resolve_mode(mode),
                    filters=filters or SearchFilters(),
                )
            except ValidationError as e:
                return self._fail(e.message)

        self.state = SessionState.SEARCHING
        self.error = None
        try:
            results = self.engine.search(query)
        except FrequencyAnalyserError as e:
            logger.warning(f"Поиск '{query.query}' завершился ошибкой: {e}")
            return self._fail(e.message)

        self.results = results
        self.current_query = query
        self._add_to_history(query)
        self.state = SessionState.RESULTS if results else SessionState.EMPTY
        return self.state

    def _fail(self, message: str) -> SessionState:
        self.results = []
        self.error = message
        self.state = SessionState.ERROR
        return self.state

    def clear(self) -> None:
        """Сбрасывает результаты и возвращает сессию в IDLE."""
        self.results = []
        self.error = None
        self.current_query = None
        self.state = SessionState.IDLE

    def refresh(self) -> SessionState:
        """Пересчитывает корпус и повторяет текущий поиск, если он был."""
        try:
            self.engine.refresh()
        except FrequencyAnalyserError as e:
            logger.warning(f"Не удалось обновить данные: {e}")
            return self._fail(e.message)
        self._analysis_states.clear()
        self._analysis_errors.clear()
        if self.current_query is not None:
            return self.submit(self.current_query)
        return self.state

    # --- История ---
    def _add_to_history(self, query: SearchQuery) -> None:
        item = HistoryItem(query=query.query, mode=SearchMode(query.mode))
        rest = [h for h in self.history if h != item]
        self.history = [item] + rest[:max(0, self.history_limit - 1)]

    def recent_queries(self, limit: int = 10) -> List[str]:
        """Недавние запросы без повторов, новые первыми."""
        return list(dict.fromkeys(h.query for h in self.history))[:limit]

    def remove_from_history(self, index: int) -> None:
        del self.history[index]

    def clear_history(self) -> None:
        self.history = []

    def suggestions(self, partial: str, limit: int = 5) -> List[str]:
        """Подсказки по префиксу; для коротких строк недавние запросы."""
        if not partial or len(partial) < 2:
            return self.recent_queries(limit)
        try:
            return self.engine.suggestions(partial, limit)
        except FrequencyAnalyserError as e:
            logger.warning(f"Подсказки недоступны: {e}")
            return []

    # --- Анализ слов ---
    def analysis_state(self, word: str) -> AnalysisState:
        """Состояние анализа слова; CACHED только пока анализ лежит в кэше движка."""
        key = word.strip().lower()
        state = self._analysis_states.get(key, AnalysisState.NOT_REQUESTED)
        if state == AnalysisState.CACHED and self.engine.get_cached_analysis(key) is None:
            del self._analysis_states[key]
            return AnalysisState.NOT_REQUESTED
        return state

    def analysis_error(self, word: str) -> Optional[str]:
        return self._analysis_errors.get(word.strip().lower())

    def request_analysis(self, word: str) -> Optional[WordAnalysis]:
        """
        Запрашивает анализ слова.

        Args:
            word: Слово

        Returns:
            WordAnalysis или None при ошибке (состояние FAILED)
        """
        key = word.strip().lower()
        self._analysis_states[key] = AnalysisState.LOADING
        try:
            analysis = self.engine.analyze(word)
        except FrequencyAnalyserError as e:
            logger.warning(f"Анализ слова '{word}' не выполнен: {e}")
            self._analysis_states[key] = AnalysisState.FAILED
            self._analysis_errors[key] = e.message
            return None
        self._analysis_states[key] = AnalysisState.CACHED
        self._analysis_errors.pop(key, None)
        return analysis
