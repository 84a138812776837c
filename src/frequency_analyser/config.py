"""
Модуль для работы с конфигурацией проекта

Функции:
- Загрузка config.yaml (+ профили: config.prod.yaml, config.test.yaml)
- ENV-переопределения (префикс FREQUENCY_ANALYSER_, вложенность через __)
- Валидация значений
- Настройка логирования
"""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dotenv import load_dotenv
import logging
from datetime import datetime

logger = logging.getLogger(__name__)

ENV_PREFIX = 'FREQUENCY_ANALYSER_'


class Config:
    """Класс для работы с конфигурацией проекта"""

    def __init__(self, config_path: Optional[str] = None, configure_logging: bool = True):
        """
        Инициализация конфигурации

        Args:
            config_path: Путь к файлу конфигурации
            configure_logging: Настраивать ли корневой логгер по конфигу
        """
        if config_path:
            self.config_path = Path(config_path)
        else:
            # Ищем config.yaml в текущей директории и выше
            current_dir = Path.cwd()
            config_path = current_dir / "config.yaml"

            while not config_path.exists() and current_dir.parent != current_dir:
                current_dir = current_dir.parent
                config_path = current_dir / "config.yaml"

            self.config_path = config_path

        self.config_data: Dict[str, Any] = {}
        self.env_data: Dict[str, Any] = {}

        self._load_config()
        self._load_env()
        try:
            self._apply_env_overrides()
            self._validate_and_prepare()
        except Exception as e:
            logger.warning(f"Проблема при применении ENV/валидации: {e}")
        if configure_logging:
            self._configure_logging_if_needed()

    # --- Профили/ENV overrides/валидация/логирование ---
    def _resolve_config_path(self) -> Path:
        env = os.getenv(f'{ENV_PREFIX}ENV', '').lower().strip()
        root = self.config_path.parent if self.config_path else Path.cwd()
        if env == 'production':
            candidate = root / 'config.prod.yaml'
        elif env == 'testing':
            candidate = root / 'config.test.yaml'
        else:
            return self.config_path
        if candidate.exists():
            return candidate
        return self.config_path

    def _load_config(self) -> None:
        """Загружает конфигурацию из YAML файла поверх значений по умолчанию"""
        self.config_data = self._get_default_config()
        try:
            self.config_path = self._resolve_config_path()
            if self.config_path.exists():
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    loaded = yaml.safe_load(f) or {}
                self._merge(self.config_data, loaded)
                logger.info(f"Конфигурация загружена: {self.config_path}")
            else:
                logger.debug(f"Файл конфигурации {self.config_path} не найден, используются значения по умолчанию")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Ошибка загрузки конфигурации: {e}")
            self.config_data = self._get_default_config()

    def _merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        """Рекурсивно накладывает override на base."""
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                self._merge(base[key], value)
            else:
                base[key] = value

    def _load_env(self) -> None:
        """Загружает переменные окружения из .env файла"""
        load_dotenv()
        self.env_data = {
            f'{ENV_PREFIX}ENV': os.getenv(f'{ENV_PREFIX}ENV'),
            f'{ENV_PREFIX}DEBUG': os.getenv(f'{ENV_PREFIX}DEBUG'),
        }

    def _set_nested(self, data: Dict[str, Any], dotted: str, value: Any) -> None:
        cur = data
        keys = dotted.split('.')
        for k in keys[:-1]:
            if k not in cur or not isinstance(cur[k], dict):
                cur[k] = {}
            cur = cur[k]
        cur[keys[-1]] = value

    def _apply_env_overrides(self) -> None:
        """Переопределяет конфиг значениями из ENV (FREQUENCY_ANALYSER_*)."""
        for key, val in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue
            if key in (f'{ENV_PREFIX}ENV', f'{ENV_PREFIX}DEBUG'):
                continue
            tail = key[len(ENV_PREFIX):]
            # Вложенность разделяется двойным подчёркиванием
            dotted = tail.replace('__', '.').lower()
            parsed: Any = val
            if val.lower() in ('true', 'false'):
                parsed = (val.lower() == 'true')
            else:
                try:
                    if '.' in val:
                        parsed = float(val)
                    else:
                        parsed = int(val)
                except ValueError:
                    parsed = val
            self._set_nested(self.config_data, dotted, parsed)
        if os.getenv(f'{ENV_PREFIX}ENV'):
            logger.info(f"Активирован профиль: {os.getenv(f'{ENV_PREFIX}ENV')}")

    def _clamp_int(self, key: str, default: int, minimum: int = 1) -> None:
        """Приводит целочисленный параметр к допустимому диапазону."""
        try:
            value = int(self.get(key, default))
        except (TypeError, ValueError):
            logger.warning(f"{key}: некорректное значение, используется {default}")
            self._set_nested(self.config_data, key, default)
            return
        if value < minimum:
            logger.warning(f"{key} < {minimum}, установлено в {minimum}")
            self._set_nested(self.config_data, key, minimum)

    def _validate_and_prepare(self) -> None:
        """Проверяет диапазоны числовых параметров и режим исполнения."""
        self._clamp_int('text_analysis.min_word_length', 2)
        self._clamp_int('aggregation.batch_size', 10)
        self._clamp_int('search.history_limit', 20)

        mode = str(self.get('aggregation.execution', 'background')).lower()
        if mode not in ('background', 'inline'):
            logger.warning(f"Неизвестный режим исполнения '{mode}', используется background")
            self._set_nested(self.config_data, 'aggregation.execution', 'background')

    def _logging_signature(self) -> tuple:
        """Текущие параметры логирования для сравнения с уже применёнными."""
        log_file = self.get_logging_file() if self.is_logging_to_file_enabled() else None
        return (
            str(self.get_console_logging_level()).upper(),
            str(self.get_file_logging_level()).upper(),
            self.get_logging_format(),
            log_file,
        )

    def _configure_logging_if_needed(self, force: bool = False) -> None:
        """
        Настраивает корневой логгер: консоль и, по желанию, файл сессии.

        Ничего не делает, если те же параметры уже применены, кроме
        случая force=True (например после смены уровня из CLI).
        """
        root = logging.getLogger()
        console_name, file_name, fmt, log_file = self._logging_signature()
        applied = getattr(root, "_frequency_analyser_signature", None)
        if getattr(root, "_frequency_analyser_configured", False) and not force:
            # Имя файла содержит метку времени, поэтому сравниваем без него
            if applied and applied[:3] == (console_name, file_name, fmt) and bool(applied[3]) == bool(log_file):
                return

        formatter = logging.Formatter(fmt)
        console_level = getattr(logging, console_name, logging.INFO)
        file_level = getattr(logging, file_name, logging.DEBUG)

        stream = logging.StreamHandler()
        stream.setLevel(console_level)
        stream.setFormatter(formatter)
        handlers: List[logging.Handler] = [stream]

        if log_file:
            self.cleanup_old_log_files()
            try:
                Path(log_file).parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(log_file, encoding='utf-8')
            except OSError as e:
                logger.debug(f"Файл лога {log_file} недоступен: {e}")
            else:
                file_handler.setLevel(file_level)
                file_handler.setFormatter(formatter)
                handlers.append(file_handler)

        level = min(console_level, file_level) if len(handlers) > 1 else console_level
        logging.basicConfig(level=level, handlers=handlers, format=fmt, force=True)
        root._frequency_analyser_configured = True
        root._frequency_analyser_signature = (console_name, file_name, fmt, log_file)

    def _get_default_config(self) -> Dict[str, Any]:
        """Возвращает конфигурацию по умолчанию"""
        return copy.deepcopy({
            'text_analysis': {
                'min_word_length': 2,
                'include_stopwords': False,
                # Снимать HTML-разметку с содержимого документов перед токенизацией
                'strip_html': True,
            },
            'aggregation': {
                'batch_size': 10,
                # Уступать управление каждые N пакетов на yield_interval секунд
                'yield_every': 5,
                'yield_interval': 0.1,
                'timeout_seconds': 30,
                # background: отдельный рабочий поток с очередью сообщений; inline: в текущем потоке
                'execution': 'background',
                'optimize': False,
                'max_words': 1000,
            },
            'search': {
                'max_contexts_per_article': 3,
                'max_contexts_total': 10,
                'article_scopes': {
                    'recent': {'ids': ['1', '2', '3']},
                    'popular': {'min_frequency': 3},
                    'bookmarked': {'ids': ['1', '4']},
                },
                'history_limit': 20,
            },
            'analysis': {
                'trend_buckets': 6,
                'related_words_limit': 5,
                'related_similarity_threshold': 0.6,
                'contexts_per_article': 3,
            },
            'export': {
                'json_word_limit': 100,
                'results_folder': "data/results",
                'filename_prefix': "word-frequency-analysis",
                'main_sheet_name': "Word Frequency",
            },
            'logging': {
                'level': "INFO",
                'format': "%(asctime)s - %(levelname)s - %(message)s",
                'log_to_file': False,
                'log_file': "logs/frequency_analyser.log",
                'max_log_files': 10,
            },
        })

    def get(self, key: str, default: Any = None) -> Any:
        """
        Получает значение конфигурации по ключу

        Args:
            key: Ключ в формате 'section.subsection.parameter'
            default: Значение по умолчанию

        Returns:
            Значение параметра или default
        """
        try:
            value = self.config_data
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def get_env(self, key: str, default: Any = None) -> Any:
        """Получает значение переменной окружения, прочитанной при загрузке"""
        value = self.env_data.get(key)
        return default if value is None else value

    # --- Анализ текста ---
    def get_min_word_length(self) -> int:
        """Получает минимальную длину слова"""
        return int(self.get('text_analysis.min_word_length', 2))

    def include_stopwords(self) -> bool:
        return bool(self.get('text_analysis.include_stopwords', False))

    def is_html_stripping_enabled(self) -> bool:
        return bool(self.get('text_analysis.strip_html', True))

    # --- Агрегация ---
    def get_batch_size(self) -> int:
        """Размер пакета документов в задаче агрегации"""
        return int(self.get('aggregation.batch_size', 10))

    def get_yield_every(self) -> int:
        return max(1, int(self.get('aggregation.yield_every', 5)))

    def get_yield_interval(self) -> float:
        return float(self.get('aggregation.yield_interval', 0.1))

    def get_job_timeout(self) -> float:
        """Таймаут фоновой задачи агрегации (секунды)"""
        return float(self.get('aggregation.timeout_seconds', 30))

    def get_execution_mode(self) -> str:
        return str(self.get('aggregation.execution', 'background')).lower()

    def is_optimize_enabled(self) -> bool:
        return bool(self.get('aggregation.optimize', False))

    def get_max_words(self) -> int:
        return int(self.get('aggregation.max_words', 1000))

    # --- Поиск ---
    def get_max_contexts_per_article(self) -> int:
        return int(self.get('search.max_contexts_per_article', 3))

    def get_max_contexts_total(self) -> int:
        return int(self.get('search.max_contexts_total', 10))

    def get_article_scopes(self) -> Dict[str, Dict[str, Any]]:
        """Именованные области поиска: {'recent': {'ids': [...]}, 'popular': {'min_frequency': 3}}"""
        return self.get('search.article_scopes', {}) or {}

    def get_history_limit(self) -> int:
        return int(self.get('search.history_limit', 20))

    # --- Глубокий анализ ---
    def get_trend_buckets(self) -> int:
        return max(1, int(self.get('analysis.trend_buckets', 6)))

    def get_related_words_limit(self) -> int:
        return int(self.get('analysis.related_words_limit', 5))

    def get_related_similarity_threshold(self) -> float:
        return float(self.get('analysis.related_similarity_threshold', 0.6))

    def get_analysis_contexts_per_article(self) -> int:
        return int(self.get('analysis.contexts_per_article', 3))

    # --- Экспорт ---
    def get_json_word_limit(self) -> int:
        return int(self.get('export.json_word_limit', 100))

    def get_results_folder(self) -> str:
        """Получает папку для результатов"""
        return self.get('export.results_folder', "data/results")

    def get_results_filename_prefix(self) -> str:
        return self.get('export.filename_prefix', "word-frequency-analysis")

    def get_main_sheet_name(self) -> str:
        """Получает название основного листа Excel"""
        return self.get('export.main_sheet_name', "Word Frequency")

    # --- Логирование ---
    def get_console_logging_level(self) -> str:
        """Получает уровень логирования для консоли"""
        return self.get('logging.console_level', self.get('logging.level', "INFO"))

    def get_file_logging_level(self) -> str:
        """Получает уровень логирования для файла"""
        return self.get('logging.file_level', "DEBUG")

    def get_logging_level(self) -> str:
        return self.get_console_logging_level()

    def get_logging_format(self) -> str:
        """Получает формат логов"""
        return self.get('logging.format', "%(asctime)s - %(levelname)s - %(message)s")

    def is_logging_to_file_enabled(self) -> bool:
        """Проверяет, включено ли логирование в файл"""
        return bool(self.get('logging.log_to_file', False))

    def get_logging_file(self) -> str:
        """Получает путь к файлу логов с временной меткой текущей сессии"""
        template = self.get('logging.log_file', "logs/frequency_analyser.log")
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        if "{timestamp}" in template:
            return template.replace("{timestamp}", timestamp)
        path = Path(template)
        return str(path.with_name(f"{path.stem}_{timestamp}{path.suffix}"))

    def get_max_log_files(self) -> int:
        """Получает максимальное количество файлов логов для хранения"""
        return int(self.get('logging.max_log_files', 10))

    def cleanup_old_log_files(self) -> None:
        """Удаляет старые файлы логов сессий, оставляя max_log_files последних"""
        template = Path(self.get('logging.log_file', "logs/frequency_analyser.log"))
        if not template.parent.exists():
            return

        stem = template.stem.replace("{timestamp}", "").rstrip("_")
        keep = self.get_max_log_files()
        session_logs = sorted(template.parent.glob(f"{stem}_*{template.suffix}"),
                              key=lambda f: f.stat().st_mtime, reverse=True)
        for stale in session_logs[keep:]:
            try:
                stale.unlink()
                logger.debug(f"Удалён старый лог: {stale}")
            except OSError as e:
                logger.debug(f"Не удалось удалить {stale}: {e}")


# Глобальный экземпляр конфигурации
config = Config()
