"""
Компонент для агрегации частотности слов по корпусу.

Строит по одной записи WordEntry на каждое уникальное слово: частота
вхождений, документы, в которых слово встретилось, и основа слова.
Работает как пакетная задача: документы обрабатываются пакетами,
после каждого пакета публикуется событие прогресса, а каждые
yield_every пакетов задача уступает управление.
"""

import logging
import time
from collections import Counter
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..interfaces.engine import (
    CorpusStatistics,
    Document,
    FrequencyAggregatorInterface,
    ProgressCallback,
    ProgressEvent,
    WordEntry,
)
from .jobs import CancellationToken, InlineJobRunner, Job, JobRunner
from .stemmer import Stemmer
from .tokenizer import STOP_WORDS, Tokenizer

logger = logging.getLogger(__name__)

# Границы корзин распределения частот (включительно)
FREQUENCY_RANGES = [
    (1, 1, '1'),
    (2, 5, '2-5'),
    (6, 10, '6-10'),
    (11, 20, '11-20'),
    (21, 50, '21-50'),
    (51, None, '50+'),
]


class _WordAccumulator:
    """Изменяемая запись, живущая только внутри одного прогона."""

    __slots__ = ('frequency', 'articles', 'stemmed')

    def __init__(self, stemmed: str):
        self.frequency = 0
        # dict сохраняет порядок первого появления и убирает повторы
        self.articles: Dict[str, None] = {}
        self.stemmed = stemmed


class FrequencyAggregator(FrequencyAggregatorInterface):
    """Агрегатор частотности слов корпуса."""

    def __init__(self, tokenizer: Optional[Tokenizer] = None, stemmer: Optional[Stemmer] = None,
                 runner: Optional[JobRunner] = None, batch_size: int = 10,
                 yield_every: int = 5, yield_interval: float = 0.1,
                 timeout: Optional[float] = 30.0):
        """
        Инициализирует агрегатор.

        Args:
            tokenizer: Токенизатор документов
            stemmer: Стеммер для поля stemmed
            runner: Стратегия исполнения задачи (по умолчанию синхронная)
            batch_size: Размер пакета документов
            yield_every: Уступать управление каждые N пакетов
            yield_interval: Длительность уступки в секундах
            timeout: Дедлайн ожидания результата в секундах
        """
        if batch_size < 1:
            raise ValueError("batch_size должен быть >= 1")
        self.tokenizer = tokenizer or Tokenizer()
        self.stemmer = stemmer or Stemmer()
        self.runner = runner or InlineJobRunner()
        self.batch_size = batch_size
        self.yield_every = max(1, yield_every)
        self.yield_interval = yield_interval
        self.timeout = timeout

    def analyze_all(self, corpus: Sequence[Document],
                    on_progress: Optional[ProgressCallback] = None,
                    cancel_token: Optional[CancellationToken] = None) -> List[WordEntry]:
        """
        Строит отсортированный список WordEntry для корпуса.

        Args:
            corpus: Документы в порядке корпуса
            on_progress: Обработчик событий прогресса
            cancel_token: Токен отмены

        Returns:
            Записи по убыванию частоты; равные частоты в порядке первого появления
        """
        handle = self.runner.submit(self.build_job(corpus), cancel_token)
        return handle.result(timeout=self.timeout, on_progress=on_progress)

    def build_job(self, corpus: Sequence[Document]) -> Job:
        """Возвращает функцию задачи для JobRunner."""
        documents = list(corpus)

        def job(token: CancellationToken, report: ProgressCallback) -> List[WordEntry]:
            return self.process_batches(documents, token, report)

        return job

    def process_batches(self, documents: List[Document], token: CancellationToken,
                        report: ProgressCallback) -> List[WordEntry]:
        """
        Обрабатывает документы пакетами, публикуя прогресс.

        Args:
            documents: Документы корпуса
            token: Токен отмены, проверяется перед каждым пакетом
            report: Публикация событий прогресса

        Returns:
            Отсортированный список WordEntry
        """
        total = len(documents)
        accumulator: Dict[str, _WordAccumulator] = {}

        report(ProgressEvent(percent=0.0, processed=0, total=total))
        if total == 0:
            report(ProgressEvent(percent=100.0, processed=0, total=0))
            return []

        processed = 0
        for batch_index, start in enumerate(range(0, total, self.batch_size)):
            token.raise_if_cancelled()
            batch = documents[start:start + self.batch_size]
            for document in batch:
                self._accumulate(document, accumulator)
            processed += len(batch)
            report(ProgressEvent(percent=processed / total * 100, processed=processed, total=total))

            if batch_index % self.yield_every == 0 and processed < total:
                time.sleep(self.yield_interval)

        entries = self._finalize(accumulator)
        logger.info(f"Агрегация завершена: документов {total}, уникальных слов {len(entries)}")
        return entries

    def _accumulate(self, document: Document, accumulator: Dict[str, _WordAccumulator]) -> None:
        for word in self.tokenizer.extract_words(document.content):
            record = accumulator.get(word)
            if record is None:
                record = _WordAccumulator(self.stemmer.stem(word))
                accumulator[word] = record
            record.frequency += 1
            record.articles[document.id] = None

    @staticmethod
    def _finalize(accumulator: Dict[str, _WordAccumulator]) -> List[WordEntry]:
        entries = [
            WordEntry(word=word, frequency=record.frequency,
                      articles=tuple(record.articles), stemmed=record.stemmed)
            for word, record in accumulator.items()
        ]
        # sorted устойчив: равные частоты остаются в порядке первого появления
        return sorted(entries, key=lambda e: e.frequency, reverse=True)

    @staticmethod
    def optimize(entries: Sequence[WordEntry], max_words: int = 1000) -> List[WordEntry]:
        """
        Убирает редкие слова (частота <= 1 и не более одного документа)
        и ограничивает размер списка.

        Args:
            entries: Отсортированные записи
            max_words: Максимальное число записей

        Returns:
            Сокращённый список в исходном порядке
        """
        kept = [e for e in entries if e.frequency > 1 or len(e.articles) > 1]
        return kept[:max_words]

    @staticmethod
    def calculate_statistics(entries: Sequence[WordEntry], articles_analyzed: int = 0) -> CorpusStatistics:
        """
        Считает сводную статистику по записям.

        Args:
            entries: Записи WordEntry
            articles_analyzed: Число документов корпуса

        Returns:
            CorpusStatistics
        """
        if not entries:
            return CorpusStatistics(total_words=0, unique_words=0, average_length=0.0,
                                    articles_analyzed=articles_analyzed)

        frequencies = np.array([e.frequency for e in entries], dtype=np.int64)
        lengths = np.array([len(e.word) for e in entries], dtype=np.float64)
        return CorpusStatistics(
            total_words=int(frequencies.sum()),
            unique_words=len(entries),
            average_length=float(lengths.mean()),
            articles_analyzed=articles_analyzed,
            average_frequency=float(frequencies.mean()),
            median_frequency=float(np.median(frequencies)),
            max_frequency=int(frequencies.max()),
            min_frequency=int(frequencies.min()),
        )

    @staticmethod
    def frequency_distribution(entries: Sequence[WordEntry]) -> List[Dict]:
        """Число слов в корзинах частот 1, 2-5, 6-10, 11-20, 21-50, 50+."""
        distribution = []
        for low, high, label in FREQUENCY_RANGES:
            count = sum(1 for e in entries
                        if e.frequency >= low and (high is None or e.frequency <= high))
            distribution.append({'range': label, 'count': count})
        return distribution

    @staticmethod
    def extract_keywords(entries: Sequence[WordEntry], max_keywords: int = 20) -> List[Dict]:
        """
        Ключевые слова по упрощённой схеме TF-IDF.

        score = tf * (ln(total / frequency) + 0.1 * длина слова), где
        tf = frequency / total. Слова, встретившиеся один раз, не учитываются.

        Args:
            entries: Записи карты частот
            max_keywords: Максимум результатов

        Returns:
            Список {'word', 'score', 'frequency'} по убыванию score
        """
        repeated = [e for e in entries if e.frequency > 1]
        if not repeated:
            return []

        total = sum(e.frequency for e in entries)
        frequencies = np.array([e.frequency for e in repeated], dtype=float)
        lengths = np.array([len(e.word) for e in repeated], dtype=float)
        scores = frequencies / total * (np.log(total / frequencies) + lengths * 0.1)

        order = np.argsort(-scores, kind='stable')[:max_keywords]
        return [
            {'word': repeated[i].word, 'score': float(scores[i]), 'frequency': repeated[i].frequency}
            for i in order
        ]

    def find_collocations(self, corpus: Sequence[Document], target_word: str,
                          window: int = 5, limit: int = 20) -> List[Dict]:
        """
        Находит слова, встречающиеся рядом с target_word.

        Args:
            corpus: Документы
            target_word: Целевое слово
            window: Размер окна слева и справа
            limit: Максимум результатов

        Returns:
            Список {'word', 'frequency', 'score'} по убыванию частоты
        """
        target = target_word.lower()
        collocations: Counter = Counter()
        for document in corpus:
            words = self.tokenizer.extract_words(document.content)
            for index, word in enumerate(words):
                if word != target:
                    continue
                start = max(0, index - window)
                end = min(len(words) - 1, index + window)
                for i in range(start, end + 1):
                    if i != index and words[i] != target and words[i] not in STOP_WORDS:
                        collocations[words[i]] += 1

        return [
            {'word': word, 'frequency': freq, 'score': freq}
            for word, freq in collocations.most_common(limit)
        ]

    def extract_ngrams(self, corpus: Sequence[Document], n: int = 2, limit: int = 100) -> List[Dict]:
        """
        Считает n-граммы токенов, встретившиеся больше одного раза.

        Args:
            corpus: Документы
            n: Длина n-граммы
            limit: Максимум результатов

        Returns:
            Список {'phrase', 'frequency'} по убыванию частоты
        """
        if n < 1:
            raise ValueError("n должно быть >= 1")
        ngrams: Counter = Counter()
        for document in corpus:
            words = self.tokenizer.extract_words(document.content)
            for i in range(len(words) - n + 1):
                ngrams[' '.join(words[i:i + n])] += 1

        return [
            {'phrase': phrase, 'frequency': freq}
            for phrase, freq in ngrams.most_common()
            if freq > 1
        ][:limit]

    def word_density(self, corpus: Sequence[Document], target_word: str) -> float:
        """Доля вхождений слова среди всех токенов корпуса, включая стоп-слова."""
        target = target_word.lower()
        occurrences = total = 0
        for document in corpus:
            words = self.tokenizer.extract_words(document.content, include_stopwords=True)
            total += len(words)
            occurrences += sum(1 for w in words if w == target)
        return occurrences / total if total else 0.0

    @staticmethod
    def compress(entries: Sequence[WordEntry]) -> Dict:
        """Компактное представление [слово, частота, документы] с метаданными."""
        return {
            'words': [[e.word, e.frequency, list(e.articles)] for e in entries],
            'metadata': {
                'totalWords': sum(e.frequency for e in entries),
                'uniqueWords': len(entries),
                'timestamp': int(time.time() * 1000),
            },
        }
