"""
Frequency Analyser - движок частотного анализа слов в корпусе документов

Этот модуль предоставляет инструменты для:
- Токенизации текстов и сведения слов к основе
- Пакетной агрегации частот в фоновом режиме с прогрессом и отменой
- Интеллектуального и точного поиска по карте частот
- Глубокого анализа отдельных слов с кэшированием
- Экспорта результатов в CSV, JSON и Excel
"""

__version__ = "0.1.0"
__author__ = "Sergey"

from .corpus import SAMPLE_CORPUS, load_corpus
from .engine import WordFrequencyEngine
from .errors import (
    AnalysisCancelledError,
    AnalysisInProgressError,
    AnalysisTimeoutError,
    ErrorKind,
    FrequencyAnalyserError,
    NotFoundError,
    ProcessingError,
    UnsupportedFormatError,
    ValidationError,
)
from .interfaces.engine import (
    CorpusStatistics,
    Document,
    SearchFilters,
    SearchMode,
    SearchQuery,
    SearchResult,
    WordAnalysis,
    WordEntry,
)
from .session import AnalysisState, SearchSession, SessionState

__all__ = [
    "WordFrequencyEngine",
    "SearchSession",
    "SessionState",
    "AnalysisState",
    "Document",
    "WordEntry",
    "SearchMode",
    "SearchFilters",
    "SearchQuery",
    "SearchResult",
    "WordAnalysis",
    "CorpusStatistics",
    "ErrorKind",
    "FrequencyAnalyserError",
    "ValidationError",
    "NotFoundError",
    "ProcessingError",
    "AnalysisTimeoutError",
    "UnsupportedFormatError",
    "AnalysisCancelledError",
    "AnalysisInProgressError",
    "load_corpus",
    "SAMPLE_CORPUS",
]
