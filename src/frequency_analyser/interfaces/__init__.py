"""
Интерфейсы и модели данных для компонентов частотного анализа.

Определяет абстрактные базовые классы для всех компонентов,
обеспечивая единообразный API и возможность замены реализаций.
"""

from .engine import (
    Document,
    WordEntry,
    SearchMode,
    SearchFilters,
    SearchQuery,
    ArticleMatch,
    SearchResult,
    ArticleOccurrence,
    WordContext,
    RelatedWord,
    TrendPoint,
    WordAnalysis,
    CorpusStatistics,
    ProgressEvent,
    ProgressCallback,
    TokenizerInterface,
    StemmerInterface,
    FrequencyAggregatorInterface,
    SearchMatcherInterface,
    WordAnalysisInterface,
    ResultExporterInterface,
)

__all__ = [
    'Document',
    'WordEntry',
    'SearchMode',
    'SearchFilters',
    'SearchQuery',
    'ArticleMatch',
    'SearchResult',
    'ArticleOccurrence',
    'WordContext',
    'RelatedWord',
    'TrendPoint',
    'WordAnalysis',
    'CorpusStatistics',
    'ProgressEvent',
    'ProgressCallback',
    'TokenizerInterface',
    'StemmerInterface',
    'FrequencyAggregatorInterface',
    'SearchMatcherInterface',
    'WordAnalysisInterface',
    'ResultExporterInterface',
]
