"""
Исполнение пакетных задач агрегации.

Задача — функция job(token, report), где report(ProgressEvent) публикует
прогресс. Раннер оборачивает её в обмен сообщениями через queue.Queue:

    progress → complete | error

Вызывающий получает JobHandle и ждёт результат с дедлайном. Стратегия
выбирается при создании: BackgroundJobRunner (отдельный рабочий поток,
ThreadPoolExecutor с одним воркером) или InlineJobRunner (та же задача
синхронно в текущем потоке, те же сообщения).
"""

import logging
import queue
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..errors import AnalysisCancelledError, AnalysisTimeoutError
from ..interfaces.engine import ProgressCallback, ProgressEvent

logger = logging.getLogger(__name__)

MESSAGE_PROGRESS = 'progress'
MESSAGE_COMPLETE = 'complete'
MESSAGE_ERROR = 'error'


class CancellationToken:
    """Флаг отмены, проверяемый задачей на границах пакетов."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AnalysisCancelledError("Анализ частотности отменён")


Job = Callable[[CancellationToken, ProgressCallback], Any]


@dataclass(frozen=True)
class JobMessage:
    """Сообщение от задачи вызывающему."""
    kind: str
    payload: Any = None


def run_job(job: Job, messages: "queue.Queue[JobMessage]", token: CancellationToken) -> None:
    """Выполняет задачу и публикует её события в очередь сообщений."""
    def report(event: ProgressEvent) -> None:
        messages.put(JobMessage(MESSAGE_PROGRESS, event))

    try:
        result = job(token, report)
    except Exception as e:
        logger.debug(f"Задача завершилась ошибкой: {e}")
        messages.put(JobMessage(MESSAGE_ERROR, e))
    else:
        messages.put(JobMessage(MESSAGE_COMPLETE, result))


class JobHandle:
    """Дескриптор отправленной задачи: события прогресса и итог."""

    def __init__(self, messages: "queue.Queue[JobMessage]", token: CancellationToken,
                 future: Optional[Future] = None):
        self._messages = messages
        self._future = future
        self.token = token

    def cancel(self) -> None:
        """Просит задачу остановиться на ближайшей границе пакета."""
        self.token.cancel()

    def result(self, timeout: Optional[float] = None,
               on_progress: Optional[ProgressCallback] = None) -> Any:
        """
        Ждёт завершения задачи, передавая события прогресса в on_progress.

        Args:
            timeout: Дедлайн в секундах (None = без ограничения)
            on_progress: Обработчик событий прогресса

        Returns:
            Результат задачи

        Raises:
            AnalysisTimeoutError: Задача не завершилась до дедлайна
            Exception: Исключение, с которым завершилась задача
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            remaining = None if deadline is None else deadline - time.monotonic()
            if remaining is not None and remaining <= 0:
                self._expire(timeout)
            try:
                message = self._messages.get(timeout=remaining)
            except queue.Empty:
                self._expire(timeout)

            if message.kind == MESSAGE_PROGRESS:
                if on_progress is not None:
                    on_progress(message.payload)
            elif message.kind == MESSAGE_COMPLETE:
                return message.payload
            elif message.kind == MESSAGE_ERROR:
                raise message.payload
            else:
                raise RuntimeError(f"Неизвестный тип сообщения задачи: {message.kind}")

    def _expire(self, timeout: Optional[float]) -> None:
        # Задача в потоке не прерывается принудительно: просим её остановиться
        self.token.cancel()
        raise AnalysisTimeoutError(f"Анализ частотности не завершился за {timeout} с")


class JobRunner(ABC):
    """Стратегия исполнения пакетных задач."""

    @abstractmethod
    def submit(self, job: Job, token: Optional[CancellationToken] = None) -> JobHandle:
        """Отправляет задачу на исполнение."""
        pass

    def shutdown(self) -> None:
        """Освобождает ресурсы раннера."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
        return False


class InlineJobRunner(JobRunner):
    """Исполняет задачу синхронно в потоке вызывающего."""

    def submit(self, job: Job, token: Optional[CancellationToken] = None) -> JobHandle:
        token = token or CancellationToken()
        messages: "queue.Queue[JobMessage]" = queue.Queue()
        run_job(job, messages, token)
        return JobHandle(messages, token)


class BackgroundJobRunner(JobRunner):
    """Исполняет задачи на выделенном рабочем потоке."""

    def __init__(self, thread_name_prefix: str = 'frequency-analyser'):
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=thread_name_prefix)
        self._fallback = InlineJobRunner()

    def submit(self, job: Job, token: Optional[CancellationToken] = None) -> JobHandle:
        token = token or CancellationToken()
        messages: "queue.Queue[JobMessage]" = queue.Queue()
        try:
            future = self._executor.submit(run_job, job, messages, token)
        except RuntimeError as e:
            # Пул закрыт или поток не удалось запустить
            logger.warning(f"Фоновое исполнение недоступно ({e}), задача выполняется синхронно")
            return self._fallback.submit(job, token)
        return JobHandle(messages, token, future)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)


def create_job_runner(mode: str = 'background') -> JobRunner:
    """
    Создаёт раннер по названию режима.

    Args:
        mode: 'background' или 'inline'

    Returns:
        Экземпляр JobRunner; при невозможности создать фоновый — InlineJobRunner
    """
    if mode == 'inline':
        return InlineJobRunner()
    try:
        return BackgroundJobRunner()
    except (RuntimeError, OSError) as e:
        logger.warning(f"Не удалось создать фоновый раннер ({e}), используется синхронный режим")
        return InlineJobRunner()
