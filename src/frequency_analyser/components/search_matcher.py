"""
Компонент поиска по агрегированной карте частот.

Разбор запроса (по приоритету):
1. Подстроки в кавычках становятся терминами-фразами как есть
2. Запрос со звёздочкой становится одним шаблоном ('*' = любая
   последовательность символов, без учёта регистра)
3. Иначе запрос делится по пробелам; в интеллектуальном режиме к
   каждому термину добавляется его основа

Фильтры применяются по порядку: минимальная длина, стоп-слова,
часть речи, область документов.
"""

import logging
import re
from collections import Counter
from typing import Any, Callable, Dict, List, Optional, Pattern, Sequence, Union

from rapidfuzz.distance import Levenshtein

from ..errors import ValidationError
from ..interfaces.engine import (
    ArticleMatch,
    Document,
    SearchFilters,
    SearchMatcherInterface,
    SearchMode,
    SearchQuery,
    SearchResult,
    WordEntry,
)
from .lexicon import Lexicon
from .stemmer import Stemmer
from .tokenizer import SENTENCE_BOUNDARY, STOP_WORDS, Tokenizer, strip_markup

logger = logging.getLogger(__name__)

WILDCARD = '*'
_PHRASE = re.compile(r'"([^"]+)"')

DEFAULT_ARTICLE_SCOPES: Dict[str, Dict[str, Any]] = {
    'recent': {'ids': ['1', '2', '3']},
    'popular': {'min_frequency': 3},
    'bookmarked': {'ids': ['1', '4']},
}


def resolve_mode(mode: Union[SearchMode, str, None]) -> SearchMode:
    """
    Приводит режим поиска к SearchMode (None = интеллектуальный).

    Raises:
        ValidationError: Неизвестный режим
    """
    if mode is None:
        return SearchMode.INTELLIGENT
    try:
        return SearchMode(mode)
    except ValueError as e:
        raise ValidationError(f"Неизвестный режим поиска: {mode}") from e


def wildcard_to_regex(term: str) -> Pattern:
    """Шаблон со '*' → регулярное выражение поиска в любом месте слова."""
    return re.compile(re.escape(term).replace(re.escape(WILDCARD), '.*'), re.IGNORECASE)


def index_documents(corpus: Sequence[Document]) -> Dict[str, Document]:
    """
    Индексирует документы по id.

    Raises:
        ValidationError: Несколько документов с одним id
    """
    documents: Dict[str, Document] = {}
    duplicates = []
    for document in corpus:
        if document.id in documents:
            duplicates.append(document.id)
        documents[document.id] = document
    if duplicates:
        raise ValidationError(f"Повторяющиеся id документов: {', '.join(sorted(set(duplicates)))}")
    return documents


def build_scope_predicate(definition: Dict[str, Any]) -> Callable[[WordEntry], bool]:
    """
    Строит предикат области документов из описания конфигурации.

    Поддерживаемые ключи: 'ids' (слово встречается хотя бы в одном из
    документов) и 'min_frequency' (частота не ниже порога). Ключи
    объединяются по И; пустое описание пропускает всё.
    """
    ids = {str(i) for i in definition.get('ids', [])} if 'ids' in definition else None
    min_frequency = definition.get('min_frequency')

    def predicate(entry: WordEntry) -> bool:
        if ids is not None and not any(article in ids for article in entry.articles):
            return False
        if min_frequency is not None and entry.frequency < int(min_frequency):
            return False
        return True

    return predicate


class SearchMatcher(SearchMatcherInterface):
    """Поиск слов по агрегированной карте частот."""

    def __init__(self, entries: Sequence[WordEntry], corpus: Sequence[Document],
                 stemmer: Optional[Stemmer] = None, tokenizer: Optional[Tokenizer] = None,
                 lexicon: Optional[Lexicon] = None,
                 article_scopes: Optional[Dict[str, Dict[str, Any]]] = None,
                 max_contexts_per_article: int = 3, max_contexts_total: int = 10):
        """
        Инициализирует поиск.

        Args:
            entries: Отсортированные записи WordEntry
            corpus: Документы корпуса (заголовки и контексты)
            stemmer: Стеммер для интеллектуального режима
            tokenizer: Токенизатор (подсчёт совпадений по документам)
            lexicon: Справочник частей речи
            article_scopes: Именованные области документов
            max_contexts_per_article: Максимум контекстов на документ
            max_contexts_total: Максимум контекстов на результат
        """
        self.entries = list(entries)
        self.documents = index_documents(corpus)
        self.stemmer = stemmer or Stemmer()
        self.tokenizer = tokenizer or Tokenizer()
        self.lexicon = lexicon or Lexicon()
        scopes = DEFAULT_ARTICLE_SCOPES if article_scopes is None else article_scopes
        self.scope_predicates = {name: build_scope_predicate(d or {}) for name, d in scopes.items()}
        self.max_contexts_per_article = max_contexts_per_article
        self.max_contexts_total = max_contexts_total
        self._document_counts: Dict[str, Counter] = {}

    def search(self, query: SearchQuery) -> List[SearchResult]:
        """
        Выполняет поиск.

        Args:
            query: Поисковый запрос

        Returns:
            Результаты по убыванию суммарной частоты

        Raises:
            ValidationError: Пустой запрос
        """
        if not query.query or not query.query.strip():
            raise ValidationError("Поисковый запрос не может быть пустым")

        mode = resolve_mode(query.mode)
        results: List[SearchResult] = []
        for term in self.parse_query(query.query, mode):
            matches = self.apply_filters(self.find_matches(term, mode), query.filters)
            if matches:
                results.append(self.build_result(term, matches))

        logger.debug(f"Поиск '{query.query}' ({mode.value}): результатов {len(results)}")
        return sorted(results, key=lambda r: r.frequency, reverse=True)

    def parse_query(self, query: str, mode: SearchMode) -> List[str]:
        """
        Разбирает запрос на термины.

        Args:
            query: Строка запроса
            mode: Режим поиска

        Returns:
            Список терминов без повторов, в порядке появления
        """
        phrases = _PHRASE.findall(query)
        if phrases:
            return phrases

        if WILDCARD in query:
            return [query.strip()]

        terms: List[str] = []
        for term in query.split():
            terms.append(term)
            if mode == SearchMode.INTELLIGENT:
                terms.append(self.stemmer.stem(term.lower()))
        return list(dict.fromkeys(terms))

    def find_matches(self, term: str, mode: SearchMode) -> List[WordEntry]:
        """
        Находит записи, подходящие под термин.

        Шаблон со '*' проверяется в обоих режимах. Точный режим требует
        совпадения слова; интеллектуальный также принимает совпадение
        основ и вхождение термина подстрокой.
        """
        if WILDCARD in term:
            regex = wildcard_to_regex(term)
            return [e for e in self.entries if regex.search(e.word)]

        lower_term = term.lower()
        if mode == SearchMode.EXACT:
            return [e for e in self.entries if e.word == lower_term]

        stemmed_term = self.stemmer.stem(lower_term)
        return [
            e for e in self.entries
            if e.word == lower_term or e.stemmed == stemmed_term or lower_term in e.word
        ]

    def apply_filters(self, matches: List[WordEntry], filters: SearchFilters) -> List[WordEntry]:
        """
        Применяет фильтры по порядку.

        Args:
            matches: Найденные записи
            filters: Фильтры запроса

        Returns:
            Отфильтрованные записи
        """
        filtered = matches

        if filters.min_length > 1:
            filtered = [e for e in filtered if len(e.word) >= filters.min_length]

        if filters.exclude_common:
            filtered = [e for e in filtered if e.word not in STOP_WORDS]

        if filters.part_of_speech:
            filtered = [e for e in filtered
                        if self.lexicon.matches_part_of_speech(e.word, tuple(filters.part_of_speech))]

        if filters.article_scope:
            filtered = [e for e in filtered if self._in_any_scope(e, filters.article_scope)]

        return filtered

    def _in_any_scope(self, entry: WordEntry, scopes: Sequence[str]) -> bool:
        for name in scopes:
            predicate = self.scope_predicates.get(name)
            # Неизвестная область ничего не ограничивает
            if predicate is None or predicate(entry):
                return True
        return False

    def build_result(self, term: str, matches: List[WordEntry]) -> SearchResult:
        """
        Собирает результат по термину: суммарная частота, совпадения по
        документам и предложения-контексты.
        """
        total_frequency = sum(m.frequency for m in matches)
        matched_words = {m.word for m in matches}
        context_pattern = self.context_pattern(term, matched_words)

        article_ids: Dict[str, None] = {}
        for match in matches:
            for article_id in match.articles:
                article_ids[article_id] = None

        article_matches: List[ArticleMatch] = []
        for article_id in article_ids:
            document = self.documents.get(article_id)
            if document is None:
                continue
            counts = self.token_counts(document)
            article_matches.append(ArticleMatch(
                article_id=article_id,
                title=document.title,
                match_count=sum(counts[w] for w in matched_words),
                contexts=tuple(self.extract_contexts(document.content, context_pattern)),
            ))

        contexts = [c for match in article_matches for c in match.contexts]
        return SearchResult(
            term=term,
            frequency=total_frequency,
            article_matches=tuple(article_matches),
            contexts=tuple(contexts[:self.max_contexts_total]),
        )

    @staticmethod
    def context_pattern(term: str, matched_words: Optional[set] = None) -> Pattern:
        """
        Регулярное выражение для поиска контекстов по границам слов.

        Шаблон со '*' превращается в '\\w*'; найденные слова добавляются
        альтернативами, чтобы контекст находился и для совпадений по основе.
        """
        if WILDCARD in term:
            alternatives = [re.escape(term).replace(re.escape(WILDCARD), r'\w*')]
        else:
            alternatives = [re.escape(term)]
        for word in sorted(matched_words or ()):
            alternatives.append(re.escape(word))
        return re.compile(r'\b(?:' + '|'.join(alternatives) + r')\b', re.IGNORECASE)

    def extract_contexts(self, content: str, pattern: Pattern, limit: Optional[int] = None) -> List[str]:
        """
        Возвращает предложения исходного текста, где встречается шаблон.

        Args:
            content: Исходный текст документа
            pattern: Шаблон из context_pattern
            limit: Максимум предложений (None = max_contexts_per_article)

        Returns:
            Список предложений без крайних пробелов
        """
        if limit is None:
            limit = self.max_contexts_per_article
        if self.tokenizer.strip_html:
            content = strip_markup(content)
        contexts = []
        for sentence in SENTENCE_BOUNDARY.split(content):
            if pattern.search(sentence):
                contexts.append(sentence.strip())
                if len(contexts) >= limit:
                    break
        return contexts

    def token_counts(self, document: Document) -> Counter:
        counts = self._document_counts.get(document.id)
        if counts is None:
            counts = Counter(self.tokenizer.extract_words(document.content, include_stopwords=True))
            self._document_counts[document.id] = counts
        return counts

    # --- Выборки по карте частот ---
    def words_by_pattern(self, pattern: str) -> List[WordEntry]:
        """Записи, чьё слово содержит совпадение с регулярным выражением."""
        regex = re.compile(pattern, re.IGNORECASE)
        return [e for e in self.entries if regex.search(e.word)]

    def words_by_frequency_range(self, min_freq: int = 1, max_freq: Optional[int] = None) -> List[WordEntry]:
        return [e for e in self.entries
                if e.frequency >= min_freq and (max_freq is None or e.frequency <= max_freq)]

    def words_by_article_count(self, min_articles: int) -> List[WordEntry]:
        return [e for e in self.entries if len(e.articles) >= min_articles]

    def suggestions(self, partial: str, limit: int = 5) -> List[str]:
        """
        Подсказки автодополнения по префиксу.

        Args:
            partial: Введённая часть слова (не короче 2 символов)
            limit: Максимум подсказок

        Returns:
            Слова с этим префиксом по убыванию частоты
        """
        if not partial or len(partial) < 2:
            return []
        prefix = partial.lower()
        matches = [e for e in self.entries if e.word.startswith(prefix)]
        matches.sort(key=lambda e: e.frequency, reverse=True)
        return [e.word for e in matches[:limit]]

    def similar_words(self, target: str, limit: int = 10) -> List[WordEntry]:
        """
        Похожие по написанию слова.

        Кандидат отличается по длине не более чем на 2 символа и делит с
        целевым словом не менее 60% букв; ранжирование по частоте плюс
        сходство Левенштейна, умноженное на 100.

        Args:
            target: Целевое слово
            limit: Максимум результатов

        Returns:
            Список WordEntry
        """
        target = target.lower()
        candidates = []
        for entry in self.entries:
            word = entry.word
            if abs(len(word) - len(target)) > 2:
                continue
            shared = sum(1 for ch in word if ch in target)
            if shared < min(len(word), len(target)) * 0.6:
                continue
            score = entry.frequency + Levenshtein.normalized_similarity(word, target) * 100
            candidates.append((score, entry))

        candidates.sort(key=lambda item: item[0], reverse=True)
        return [entry for _, entry in candidates[:limit]]
