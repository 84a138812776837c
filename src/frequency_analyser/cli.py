#!/usr/bin/env python3
"""
Интерфейс командной строки для Frequency Analyser

Команды:
1. analyze - частотный анализ корпуса (топ слов и статистика)
2. search  - поиск слов (интеллектуальный или точный режим)
3. word    - глубокий анализ одного слова
4. keywords - ключевые слова, плотность и удобочитаемость
5. export  - экспорт результатов в CSV / JSON / XLSX

Корпус задаётся файлом .json / .csv / .xlsx; без --corpus используется
встроенный демонстрационный корпус.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from tqdm import tqdm

from .config import Config, config as default_config
from .corpus import SAMPLE_CORPUS, load_corpus
from .engine import WordFrequencyEngine
from .errors import FrequencyAnalyserError
from .interfaces.engine import ProgressEvent, SearchFilters, SearchMode, SearchQuery

logger = logging.getLogger(__name__)


def _build_engine(args: argparse.Namespace, cfg: Config) -> WordFrequencyEngine:
    corpus = load_corpus(args.corpus) if args.corpus else SAMPLE_CORPUS
    return WordFrequencyEngine(corpus, cfg=cfg)


def _analyze_with_progress(engine: WordFrequencyEngine) -> None:
    """Запускает агрегацию с прогресс-баром."""
    progress_bar = tqdm(
        total=100,
        desc="📊 Анализ частотности",
        unit="%",
        ncols=80,
        bar_format='{l_bar}{bar}| {n:.0f}/{total_fmt}% [{elapsed}<{remaining}] {postfix}'
    )

    def on_progress(event: ProgressEvent) -> None:
        progress_bar.n = event.percent
        progress_bar.set_postfix({"Документы": f"{event.processed}/{event.total}"})
        progress_bar.refresh()

    try:
        engine.analyze_all(on_progress=on_progress)
    finally:
        progress_bar.close()


def run_analyze(engine: WordFrequencyEngine, args: argparse.Namespace) -> int:
    """Печатает топ слов и сводную статистику."""
    _analyze_with_progress(engine)
    entries = engine.analyze_all()
    stats = engine.statistics()

    print(f"\n📊 Результаты анализа:")
    print(f"   Документов: {stats.articles_analyzed}")
    print(f"   Всего слов: {stats.total_words}")
    print(f"   Уникальных слов: {stats.unique_words}")
    print(f"   Средняя длина слова: {stats.average_length:.2f}")
    print(f"   Медианная частота: {stats.median_frequency:.1f}")

    print(f"\n🔝 Топ-{args.top} слов:")
    for i, entry in enumerate(entries[:args.top], 1):
        print(f"{i:3d}. {entry.word:<20} {entry.frequency:>5}  "
              f"(документы: {', '.join(entry.articles)}; основа: {entry.stemmed})")
    return 0


def run_search(engine: WordFrequencyEngine, args: argparse.Namespace) -> int:
    """Выполняет поиск и печатает результаты с контекстами."""
    query = SearchQuery(
        query=args.query,
        mode=SearchMode(args.mode),
        filters=SearchFilters(
            min_length=args.min_length,
            exclude_common=args.exclude_common,
            part_of_speech=tuple(args.pos or ()),
            article_scope=tuple(args.scope or ()),
        ),
    )
    _analyze_with_progress(engine)
    results = engine.search(query)
    if not results:
        print(f"🔍 По запросу '{args.query}' ничего не найдено")
        return 0

    print(f"🔍 Найдено результатов: {len(results)}")
    for result in results:
        print(f"\n• {result.term} — частота {result.frequency}")
        for match in result.article_matches:
            print(f"   [{match.article_id}] {match.title}: совпадений {match.match_count}")
        for context in result.contexts:
            print(f"     «{context}»")
    return 0


def run_word(engine: WordFrequencyEngine, args: argparse.Namespace) -> int:
    """Печатает глубокий анализ слова."""
    _analyze_with_progress(engine)
    analysis = engine.analyze(args.word)

    print(f"\n📖 {analysis.word} ({analysis.part_of_speech}) — частота {analysis.frequency}")
    print(f"   Определение: {analysis.definition}")
    if analysis.synonyms:
        print(f"   Синонимы: {', '.join(analysis.synonyms)}")
    print("   Документы:")
    for occurrence in analysis.articles:
        print(f"     [{occurrence.article_id}] {occurrence.title} ({occurrence.category}): {occurrence.count}")
    if analysis.related_words:
        related = ', '.join(f"{r.word} ({r.similarity:.2f})" for r in analysis.related_words)
        print(f"   Родственные слова: {related}")
    trend = ', '.join(f"{p.period}: {p.count}" for p in analysis.frequency_trend)
    print(f"   Распределение по корпусу: {trend}")
    for context in analysis.contexts:
        print(f"     «{context.text}» — {context.article_title}")
    return 0


def run_keywords(engine: WordFrequencyEngine, args: argparse.Namespace) -> int:
    """Печатает ключевые слова и оценку сложности корпуса."""
    _analyze_with_progress(engine)
    keywords = engine.keywords(args.top)
    complexity = engine.complexity()

    print(f"\n🔑 Ключевые слова:")
    if not keywords:
        print("   нет слов, встретившихся больше одного раза")
    for i, item in enumerate(keywords, 1):
        density = engine.word_density(item['word'])
        print(f"{i:3d}. {item['word']:<20} {item['score']:.4f}  "
              f"(частота: {item['frequency']}, плотность: {density:.2%})")

    print(f"\n📚 Удобочитаемость: {complexity['readability_score']:.1f} ({complexity['difficulty']})")
    print(f"   Предложений: {complexity['sentence_count']}, слов: {complexity['word_count']}, "
          f"сложных слов: {complexity['complex_word_count']}")
    return 0


def run_export(engine: WordFrequencyEngine, args: argparse.Namespace) -> int:
    """Экспортирует карту частот в файл."""
    _analyze_with_progress(engine)
    path = engine.export(args.format, args.output)
    print(f"✅ Результаты экспортированы в: {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="frequency-analyser",
        description="Frequency Analyser - частотный анализ слов в корпусе документов",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры использования:
  frequency-analyser analyze --corpus articles.json --top 20
  frequency-analyser search "learn*" --mode exact
  frequency-analyser search energy --scope recent --exclude-common
  frequency-analyser word communication
  frequency-analyser keywords --top 10
  frequency-analyser export csv --output results/words.csv
        """
    )
    parser.add_argument('--corpus', help='Файл корпуса (.json, .csv или .xlsx)')
    parser.add_argument('--config', help='Путь к config.yaml')

    subparsers = parser.add_subparsers(dest='command', required=True)

    analyze_parser = subparsers.add_parser('analyze', help='Частотный анализ корпуса')
    analyze_parser.add_argument('--top', type=int, default=20, help='Сколько слов показать')

    search_parser = subparsers.add_parser('search', help='Поиск слов')
    search_parser.add_argument('query', help='Запрос: слова, "фраза" или шаблон со *')
    search_parser.add_argument('--mode', choices=[m.value for m in SearchMode],
                               default=SearchMode.INTELLIGENT.value, help='Режим поиска')
    search_parser.add_argument('--min-length', type=int, default=1, help='Минимальная длина слова')
    search_parser.add_argument('--exclude-common', action='store_true', help='Исключить стоп-слова')
    search_parser.add_argument('--pos', action='append', help='Часть речи (можно повторять)')
    search_parser.add_argument('--scope', action='append', help='Область документов: recent, popular, bookmarked')

    word_parser = subparsers.add_parser('word', help='Глубокий анализ слова')
    word_parser.add_argument('word', help='Слово')

    keywords_parser = subparsers.add_parser('keywords', help='Ключевые слова и удобочитаемость')
    keywords_parser.add_argument('--top', type=int, default=10, help='Количество ключевых слов')

    export_parser = subparsers.add_parser('export', help='Экспорт результатов')
    export_parser.add_argument('format', help='Формат: csv, json, xlsx')
    export_parser.add_argument('--output', help='Путь к файлу (по умолчанию папка результатов)')

    return parser


COMMANDS = {
    'analyze': run_analyze,
    'search': run_search,
    'word': run_word,
    'keywords': run_keywords,
    'export': run_export,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Основная функция CLI"""
    args = build_parser().parse_args(argv)

    cfg = Config(args.config) if args.config else default_config

    # FREQUENCY_ANALYSER_DEBUG=1 переопределяет уровень логирования
    if os.environ.get('FREQUENCY_ANALYSER_DEBUG') == '1':
        os.environ['FREQUENCY_ANALYSER_LOGGING__LEVEL'] = 'DEBUG'
        cfg._apply_env_overrides()
    cfg._configure_logging_if_needed(force=True)

    try:
        with _build_engine(args, cfg) as engine:
            return COMMANDS[args.command](engine, args)
    except FrequencyAnalyserError as e:
        logger.debug(f"Команда {args.command} завершилась ошибкой ({e.kind.value})")
        print(f"❌ {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
