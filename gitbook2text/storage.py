"""gitbook2text.storage: сохранение результатов конвертации на диск.

Для каждой успешной страницы пишутся два файла с одинаковым именем:
``<output_dir>/md/<slug>.md`` (исходный Markdown) и
``<output_dir>/txt/<slug>.txt`` (очищенный текст).
"""

from __future__ import annotations

import hashlib
import os
import re
import tempfile
from pathlib import Path
from typing import Tuple, Union
from urllib.parse import urlparse

from gitbook2text.crawler.models import ConversionResult

__all__ = ["url_to_filename", "PageWriter"]

_SLUG_MAX = 120
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def url_to_filename(url: str) -> str:
    """
    Детерминированное имя файла для URL (без расширения).

    Читаемая часть — хост и путь, остальные символы заменены на ``_``;
    суффикс из SHA-1 полного URL исключает коллизии после усечения.
    """
    parsed = urlparse(url)
    readable = _NON_ALNUM_RE.sub("_", f"{parsed.netloc}{parsed.path}".lower()).strip("_")
    readable = readable[:_SLUG_MAX].rstrip("_") or "page"
    digest = hashlib.sha1(url.encode("utf-8")).hexdigest()[:10]
    return f"{readable}-{digest}"


def _atomic_write(path: Path, content: str) -> None:
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


class PageWriter:
    """Пишет Markdown и текст каждой страницы в md/ и txt/ внутри output_dir."""

    def __init__(self, output_dir: Union[str, Path]) -> None:
        self.output_dir = Path(output_dir)
        self.md_dir = self.output_dir / "md"
        self.txt_dir = self.output_dir / "txt"

    def prepare(self) -> None:
        self.md_dir.mkdir(parents=True, exist_ok=True)
        self.txt_dir.mkdir(parents=True, exist_ok=True)

    def paths_for(self, url: str) -> Tuple[Path, Path]:
        name = url_to_filename(url)
        return self.md_dir / f"{name}.md", self.txt_dir / f"{name}.txt"

    def write(self, result: ConversionResult) -> Tuple[Path, Path]:
        md_path, txt_path = self.paths_for(result.url)
        self.prepare()
        _atomic_write(md_path, result.markdown)
        _atomic_write(txt_path, result.text)
        return md_path, txt_path

    __call__ = write
