# File: gitbook2text/utils.py
"""gitbook2text.utils: чтение и запись списков URL, удаление дубликатов."""

from __future__ import annotations

from pathlib import Path
from typing import Collection, Iterable, List, Sequence, Union

from gitbook2text.logger import logger

__all__: Sequence[str] = (
    "read_url_list",
    "write_url_list",
    "remove_duplicates",
)


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique


def read_url_list(path: Union[str, Path]) -> List[str]:
    """Читает файл со ссылками: непустые строки без пробелов, без комментариев `#`, без дублей."""
    p = Path(path)
    if not p.is_file():
        logger.error("URL list not found: %s", p)
        raise FileNotFoundError(f"URL list file not found: {p}")
    urls = [
        line.strip()
        for line in p.read_text(encoding="utf-8").splitlines()
        if line.strip() and not line.lstrip().startswith("#")
    ]
    urls = remove_duplicates(urls)
    logger.debug("Loaded %d URL(s) from %s", len(urls), p)
    return urls


def write_url_list(path: Union[str, Path], urls: Iterable[str]) -> Path:
    """Записывает URL по одному в строке (UTF-8, без служебных данных)."""
    p = Path(path)
    if p.parent != Path("."):
        p.parent.mkdir(parents=True, exist_ok=True)
    items = list(urls)
    p.write_text("".join(f"{u}\n" for u in items), encoding="utf-8")
    logger.debug("Wrote %d URL(s) to %s", len(items), p)
    return p
