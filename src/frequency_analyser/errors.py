"""
Иерархия ошибок анализатора частотности.

Каждая публичная операция движка перехватывает внутренние сбои и поднимает
одно доменное исключение с понятным сообщением и видом ошибки (ErrorKind).
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Вид доменной ошибки."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PROCESSING = "processing"
    TIMEOUT = "timeout"
    UNSUPPORTED_FORMAT = "unsupported_format"
    CANCELLED = "cancelled"
    BUSY = "busy"


class FrequencyAnalyserError(Exception):
    """Базовая ошибка анализатора."""

    kind: ErrorKind = ErrorKind.PROCESSING

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    def __str__(self) -> str:
        return self.message


class ValidationError(FrequencyAnalyserError):
    """Пустой или некорректный поисковый запрос."""
    kind = ErrorKind.VALIDATION


class NotFoundError(FrequencyAnalyserError):
    """Слово отсутствует в корпусе."""
    kind = ErrorKind.NOT_FOUND


class ProcessingError(FrequencyAnalyserError):
    """Сбой конвейера агрегации или другой внутренней обработки."""
    kind = ErrorKind.PROCESSING


class AnalysisTimeoutError(FrequencyAnalyserError, TimeoutError):
    """Фоновая задача не уложилась в отведённое время."""
    kind = ErrorKind.TIMEOUT


class UnsupportedFormatError(FrequencyAnalyserError):
    """Неизвестный или нереализованный формат экспорта."""
    kind = ErrorKind.UNSUPPORTED_FORMAT


class AnalysisCancelledError(FrequencyAnalyserError):
    """Задача агрегации отменена через CancellationToken."""
    kind = ErrorKind.CANCELLED


class AnalysisInProgressError(FrequencyAnalyserError):
    """Агрегация уже выполняется на этом экземпляре движка."""
    kind = ErrorKind.BUSY
