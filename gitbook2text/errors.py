"""gitbook2text.errors: иерархия исключений краулера и конвейера конвертации."""

from __future__ import annotations

from enum import Enum
from typing import Optional

__all__ = [
    "Gitbook2TextError",
    "FetchErrorKind",
    "FetchError",
    "VerificationError",
    "CrawlError",
    "ConversionError",
]


class Gitbook2TextError(Exception):
    """Базовое исключение проекта."""


class FetchErrorKind(str, Enum):
    TIMEOUT = "timeout"
    CONNECT_FAILED = "connect_failed"
    HTTP_STATUS = "http_status"
    DECODE_ERROR = "decode_error"


class FetchError(Gitbook2TextError):
    """Сетевая ошибка, ошибка статуса или декодирования для одного URL."""

    def __init__(
        self,
        kind: FetchErrorKind,
        url: str,
        status: Optional[int] = None,
        detail: str = "",
    ) -> None:
        self.kind = kind
        self.url = url
        self.status = status
        self.detail = detail
        super().__init__(self.reason)

    @property
    def reason(self) -> str:
        """Человекочитаемая причина для итоговой сводки."""
        if self.kind is FetchErrorKind.HTTP_STATUS:
            text = f"HTTP {self.status}"
        else:
            text = self.kind.value.replace("_", " ")
        return f"{text}: {self.detail}" if self.detail else text


class VerificationError(Gitbook2TextError):
    """Сайт не похож на GitBook: ни одна сигнатура не совпала."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"{url} does not look like a GitBook site")


class CrawlError(Gitbook2TextError):
    """Фатальная ошибка обхода: базовый URL недоступен."""

    def __init__(self, url: str, cause: FetchError) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"cannot fetch base URL {url}: {cause.reason}")


class ConversionError(Gitbook2TextError):
    """Содержимое страницы нельзя превратить в текст (например, бинарные данные)."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"{url}: {reason}")
