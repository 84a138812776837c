"""
Компоненты движка частотного анализа.

Каждый компонент отвечает за одну конкретную задачу:
- Tokenizer - очистка текста и извлечение слов
- Stemmer - сведение слов к основе
- Lexicon - статические определения, синонимы и части речи
- FrequencyAggregator - пакетная агрегация частот по корпусу
- JobRunner - исполнение пакетной задачи (фоновое или синхронное)
- SearchMatcher - поиск по карте частот
- AnalysisCache - глубокий анализ слова с кэшированием
- ResultExporter - экспорт результатов
"""

from .tokenizer import Tokenizer, STOP_WORDS, is_stop_word
from .stemmer import Stemmer, stem_word, enhanced_stem, IRREGULAR_VERBS
from .lexicon import Lexicon
from .jobs import (
    CancellationToken,
    JobHandle,
    JobRunner,
    InlineJobRunner,
    BackgroundJobRunner,
    create_job_runner,
)
from .frequency_aggregator import FrequencyAggregator
from .search_matcher import SearchMatcher
from .analysis_cache import AnalysisCache
from .exporter import ResultExporter

__all__ = [
    'Tokenizer',
    'STOP_WORDS',
    'is_stop_word',
    'Stemmer',
    'stem_word',
    'enhanced_stem',
    'IRREGULAR_VERBS',
    'Lexicon',
    'CancellationToken',
    'JobHandle',
    'JobRunner',
    'InlineJobRunner',
    'BackgroundJobRunner',
    'create_job_runner',
    'FrequencyAggregator',
    'SearchMatcher',
    'AnalysisCache',
    'ResultExporter',
]
