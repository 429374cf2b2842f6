"""gitbook2text.logger: единый логгер проекта.

Все модули пишут в один именованный логгер::

    from gitbook2text.logger import logger
    logger.info("Crawl started: %s", url)

CLI перенастраивает его через :func:`init_logging` (уровень, формат, файл).
Файловый вывод идёт через :class:`RotatingFileHandler` (5 MB, 3 архива).
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Optional, TextIO, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "gitbook2text"

LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3

_Level = Union[int, str]


def _build_handlers(log_format: str, log_file: Union[str, Path, None], stream: Optional[TextIO]) -> List[logging.Handler]:
    formatter = logging.Formatter(log_format)
    handlers: List[logging.Handler] = [logging.StreamHandler(stream if stream is not None else sys.stdout)]
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                filename=str(path),
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: _Level = "INFO",
    log_file: Union[str, Path, None] = None,
    log_format: str = DEFAULT_FORMAT,
    stream: Optional[TextIO] = None,
    replace_handlers: bool = True,
) -> logging.Logger:
    """
    Настраивает логгер ``gitbook2text``.

    :param level: уровень (``"DEBUG"``, ``logging.INFO``, ...)
    :param log_file: путь к файлу лога; каталоги создаются; None — только консоль
    :param log_format: строка формата для :class:`logging.Formatter`
    :param stream: поток консольного вывода (по умолчанию текущий ``sys.stdout``)
    :param replace_handlers: закрыть и убрать прежние обработчики
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    if replace_handlers:
        for old in list(lg.handlers):
            lg.removeHandler(old)
            old.close()
    for handler in _build_handlers(log_format, log_file, stream):
        lg.addHandler(handler)
    lg.propagate = False
    return lg


def init_logging(
    level: _Level = "INFO",
    log_file: Union[str, Path, None] = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Вызов из CLI: заменить обработчики и вернуть логгер."""
    return configure(level=level, log_file=log_file, log_format=log_format)


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "DEFAULT_FORMAT", "LOGGER_NAME"]
