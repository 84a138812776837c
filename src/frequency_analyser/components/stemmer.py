"""
Компонент стемминга английских слов.

Пятишаговый алгоритм в духе Портера: каждое правило отрезает суффикс,
если "мера" (число переходов гласная→согласная) оставшейся основы
удовлетворяет условию шага. Перед алгоритмом сверяется таблица
неправильных глаголов ("went" → "go").

Стемминг детерминирован, но не идемпотентен: stem(stem(w)) может
отличаться от stem(w).
"""

import re
from typing import Dict, List, Optional, Tuple

from ..interfaces.engine import StemmerInterface

CONSONANTS = 'bcdfghjklmnpqrstvwxyz'
VOWELS = 'aeiou'

_LEADING_CONSONANTS = re.compile(rf'^[{CONSONANTS}]+')
_VC_PAIR = re.compile(rf'[{VOWELS}][{CONSONANTS}]')

# (суффикс, замена, условие); применяется первое подходящее правило
Rule = Tuple[str, str, Optional[str]]

STEP1A_RULES: List[Rule] = [
    ('sses', 'ss', None),
    ('ies', 'i', None),
    ('ss', 'ss', None),
    ('s', '', None),
]

STEP1B_RULES: List[Rule] = [
    ('eed', 'ee', 'm>0'),
    ('ed', '', 'has_vowel'),
    ('ing', '', 'has_vowel'),
]

STEP1B_POST_RULES: List[Rule] = [
    ('at', 'ate', None),
    ('bl', 'ble', None),
    ('iz', 'ize', None),
]

STEP2_RULES: List[Rule] = [
    ('ational', 'ate', None),
    ('tional', 'tion', None),
    ('enci', 'ence', None),
    ('anci', 'ance', None),
    ('izer', 'ize', None),
    ('abli', 'able', None),
    ('alli', 'al', None),
    ('entli', 'ent', None),
    ('eli', 'e', None),
    ('ousli', 'ous', None),
    ('ization', 'ize', None),
    ('ation', 'ate', None),
    ('ator', 'ate', None),
    ('alism', 'al', None),
    ('iveness', 'ive', None),
    ('fulness', 'ful', None),
    ('ousness', 'ous', None),
    ('aliti', 'al', None),
    ('iviti', 'ive', None),
    ('biliti', 'ble', None),
]

STEP3_RULES: List[Rule] = [
    ('icate', 'ic', None),
    ('ative', '', None),
    ('alize', 'al', None),
    ('iciti', 'ic', None),
    ('ical', 'ic', None),
    ('ful', '', None),
    ('ness', '', None),
]

STEP4_RULES: List[Rule] = [
    ('al', '', None),
    ('ance', '', None),
    ('ence', '', None),
    ('er', '', None),
    ('ic', '', None),
    ('able', '', None),
    ('ible', '', None),
    ('ant', '', None),
    ('ement', '', None),
    ('ment', '', None),
    ('ent', '', None),
    ('ion', '', 's_or_t'),
    ('ou', '', None),
    ('ism', '', None),
    ('ate', '', None),
    ('iti', '', None),
    ('ous', '', None),
    ('ive', '', None),
    ('ize', '', None),
]

# Формы неправильных глаголов → инфинитив
IRREGULAR_VERBS: Dict[str, str] = {
    'was': 'be', 'were': 'be', 'been': 'be', 'am': 'be', 'is': 'be', 'are': 'be',
    'had': 'have', 'has': 'have',
    'did': 'do', 'does': 'do', 'done': 'do',
    'went': 'go', 'gone': 'go',
    'came': 'come',
    'saw': 'see', 'seen': 'see',
    'took': 'take', 'taken': 'take',
    'gave': 'give', 'given': 'give',
    'got': 'get', 'gotten': 'get',
    'made': 'make',
    'said': 'say',
    'told': 'tell',
    'thought': 'think',
    'brought': 'bring',
    'bought': 'buy',
    'caught': 'catch',
    'taught': 'teach',
    'found': 'find',
    'left': 'leave',
    'felt': 'feel',
    'kept': 'keep',
    'slept': 'sleep',
    'met': 'meet',
    'sent': 'send',
    'spent': 'spend',
    'built': 'build',
    'heard': 'hear',
    'held': 'hold',
    'lost': 'lose',
    'meant': 'mean',
    'paid': 'pay',
    'put': 'put',
    'read': 'read',
    'ran': 'run',
    'sold': 'sell',
    'set': 'set',
    'shut': 'shut',
    'spoke': 'speak', 'spoken': 'speak',
    'stood': 'stand',
    'stuck': 'stick',
    'swam': 'swim', 'swum': 'swim',
    'threw': 'throw', 'thrown': 'throw',
    'understood': 'understand',
    'woke': 'wake', 'woken': 'wake',
    'wore': 'wear', 'worn': 'wear',
    'won': 'win',
    'wrote': 'write', 'written': 'write',
}

# Шаблоны словоформ для грубого определения части речи
WORD_PATTERNS: Dict[str, re.Pattern] = {
    'PLURALS': re.compile(r's$|es$'),
    'PAST_TENSE': re.compile(r'ed$'),
    'PRESENT_PARTICIPLE': re.compile(r'ing$'),
    'COMPARATIVE': re.compile(r'er$'),
    'SUPERLATIVE': re.compile(r'est$'),
    'ADVERBS': re.compile(r'ly$'),
    'NOUNS': re.compile(r'tion$|ness$|ment$'),
}

VARIATION_SUFFIXES = ['s', 'es', 'ed', 'ing', 'er', 'est', 'ly', 'tion', 'ness']


def measure(stem: str) -> int:
    """
    Мера основы: число пар "гласная, затем согласная" после
    отбрасывания начальной группы согласных.

    Args:
        stem: Основа в нижнем регистре

    Returns:
        Неотрицательное целое
    """
    trimmed = _LEADING_CONSONANTS.sub('', stem)
    return len(_VC_PAIR.findall(trimmed))


def has_vowel(stem: str) -> bool:
    return any(ch in VOWELS for ch in stem)


def ends_with_double_consonant(word: str) -> bool:
    if len(word) < 2:
        return False
    return word[-1] == word[-2] and word[-1] in CONSONANTS


def is_cvc(word: str) -> bool:
    """Окончание согласная-гласная-согласная, последняя не w/x/y."""
    if len(word) < 3:
        return False
    third, middle, last = word[-3], word[-2], word[-1]
    return (third in CONSONANTS and middle in VOWELS
            and last in CONSONANTS and last not in 'wxy')


def _condition_holds(condition: Optional[str], stem: str) -> bool:
    if condition is None:
        return True
    if condition == 'm>0':
        return measure(stem) > 0
    if condition == 'm>1':
        return measure(stem) > 1
    if condition == 'has_vowel':
        return has_vowel(stem)
    if condition == 's_or_t':
        return measure(stem) > 1 and stem.endswith(('s', 't'))
    raise ValueError(f"Неизвестное условие правила: {condition}")


def apply_rules(word: str, rules: List[Rule]) -> str:
    """
    Применяет первое правило, чей суффикс совпал и условие выполнено.

    Условие проверяется на основе, оставшейся после отрезания суффикса.
    Правило с совпавшим суффиксом, но невыполненным условием, не
    останавливает перебор.
    """
    for suffix, replacement, condition in rules:
        if not word.endswith(suffix):
            continue
        stem = word[:-len(suffix)]
        if _condition_holds(condition, stem):
            return stem + replacement
    return word


def stem_word(word: str) -> str:
    """
    Возвращает основу слова по пятишаговому алгоритму.

    Args:
        word: Исходное слово

    Returns:
        Основа в нижнем регистре; слова из 1-2 символов возвращаются как есть
    """
    if len(word) <= 2:
        return word

    stemmed = word.lower()

    # Шаг 1a: множественное число
    stemmed = apply_rules(stemmed, STEP1A_RULES)

    # Шаг 1b: прошедшее время и причастия
    before_step1b = stemmed
    stemmed = apply_rules(stemmed, STEP1B_RULES)

    if stemmed != before_step1b and len(stemmed) > 1:
        if stemmed.endswith(('at', 'bl', 'iz')):
            stemmed = apply_rules(stemmed, STEP1B_POST_RULES)
        elif ends_with_double_consonant(stemmed) and stemmed[-1] not in 'lsz':
            stemmed = stemmed[:-1]
        elif measure(stemmed) == 1 and is_cvc(stemmed):
            stemmed += 'e'

    # Шаги 2-3: словообразовательные суффиксы
    if measure(stemmed) > 0:
        stemmed = apply_rules(stemmed, STEP2_RULES)
    if measure(stemmed) > 0:
        stemmed = apply_rules(stemmed, STEP3_RULES)

    # Шаг 4
    if measure(stemmed) > 1:
        stemmed = apply_rules(stemmed, STEP4_RULES)

    # Шаг 5: конечная e и двойная l
    m = measure(stemmed)
    if m > 1:
        if stemmed.endswith('e'):
            stemmed = stemmed[:-1]
    elif m == 1 and not is_cvc(stemmed) and stemmed.endswith('e'):
        stemmed = stemmed[:-1]

    if measure(stemmed) > 1 and ends_with_double_consonant(stemmed) and stemmed.endswith('l'):
        stemmed = stemmed[:-1]

    return stemmed


def enhanced_stem(word: str) -> str:
    """Основа слова с приоритетом таблицы неправильных глаголов."""
    lower_word = word.lower()
    if lower_word in IRREGULAR_VERBS:
        return IRREGULAR_VERBS[lower_word]
    return stem_word(word)


def stem_words(words: List[str]) -> List[str]:
    return [stem_word(w) for w in words]


def have_same_stem(word1: str, word2: str) -> bool:
    return stem_word(word1) == stem_word(word2)


def group_by_stem(words: List[str]) -> Dict[str, List[str]]:
    """
    Группирует слова по основе.

    Args:
        words: Список слов

    Returns:
        Словарь {основа: [слова в порядке появления]}
    """
    groups: Dict[str, List[str]] = {}
    for word in words:
        groups.setdefault(stem_word(word), []).append(word)
    return groups


def get_word_variations(word: str) -> List[str]:
    """
    Порождает типичные словоформы от основы слова.

    Args:
        word: Исходное слово

    Returns:
        Список уникальных форм, исходное слово и основа первыми
    """
    stem = stem_word(word)
    variations: Dict[str, None] = {word.lower(): None, stem: None}
    for suffix in VARIATION_SUFFIXES:
        variations[stem + suffix] = None
        if suffix == 'ed' and stem.endswith('e'):
            variations[stem + 'd'] = None
        if suffix == 'ing' and stem.endswith('e'):
            variations[stem[:-1] + 'ing'] = None
    return list(variations)


class Stemmer(StemmerInterface):
    """Стеммер с необязательным кэшем результатов."""

    def __init__(self, use_cache: bool = True, enhanced: bool = False):
        """
        Инициализирует стеммер.

        Args:
            use_cache: Использовать ли кэш для основ
            enhanced: Сверяться ли с таблицей неправильных глаголов
        """
        self.use_cache = use_cache
        self.enhanced = enhanced
        self._cache: Dict[str, str] = {}

    def stem(self, word: str) -> str:
        """
        Возвращает основу слова.

        Args:
            word: Исходное слово

        Returns:
            Основа слова
        """
        if not word:
            return ""

        if self.use_cache and word in self._cache:
            return self._cache[word]

        stemmed = enhanced_stem(word) if self.enhanced else stem_word(word)

        if self.use_cache:
            self._cache[word] = stemmed
        return stemmed

    def stem_batch(self, words: List[str]) -> List[str]:
        if not words:
            return []
        return [self.stem(word) for word in words]

    def clear_cache(self) -> None:
        self._cache.clear()

    def get_cache_size(self) -> int:
        return len(self._cache)
