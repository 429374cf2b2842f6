"""gitbook2text.sanitizer: финальная нормализация текста после конвертации.

Вне блоков кода удаляются управляющие символы и символы нулевой ширины,
остатки директив GitBook ``{% ... %}``, схлопываются пробелы и пустые строки.
Содержимое fenced-блоков (вместе с ограничителями) проходит без изменений.
Функция идемпотентна: ``sanitize(sanitize(x)) == sanitize(x)``.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

__all__ = ["sanitize", "MAX_BLANK_LINES"]

MAX_BLANK_LINES = 2

_INVISIBLE_RE = re.compile("[\x00-\x08\x0b-\x1f\x7f-\x9f\u200b-\u200f\u2028-\u202e\u2060-\u2064\ufeff]")
_MARKER_RE = re.compile(r"\{%-?\s*(?P<body>.*?)\s*-?%\}")
_TITLE_RE = re.compile(r"""title\s*=\s*(?:"([^"]*)"|'([^']*)')""")
_HSPACE_RE = re.compile(r"[^\S\n]+")
_FENCE_RE = re.compile(r"^(`{3,}|~{3,})")


def _marker_title(match: re.Match) -> str:
    m = _TITLE_RE.search(match.group("body"))
    if not m:
        return ""
    return m.group(1) if m.group(1) is not None else m.group(2)


def _strip_markers(line: str) -> str:
    # removing one marker can expose another, e.g. "{{% a %}% b %}"
    previous = None
    while previous != line:
        previous = line
        line = _MARKER_RE.sub(_marker_title, line)
    return line


def _clean_line(line: str) -> str:
    line = _INVISIBLE_RE.sub("", line)
    line = _strip_markers(line)
    line = _HSPACE_RE.sub(" ", line)
    return line.strip()


def _fence_opener(line: str) -> Optional[Tuple[str, int]]:
    m = _FENCE_RE.match(line)
    if not m:
        return None
    fence = m.group(1)
    if fence[0] == "`" and "`" in line[len(fence):]:
        return None
    return fence[0], len(fence)


def _is_fence_closer(line: str, char: str, length: int) -> bool:
    stripped = line.strip()
    return len(stripped) >= length and set(stripped) == {char}


def sanitize(text: str) -> str:
    """Нормализует текст, не изменяя полезную нагрузку блоков кода."""
    out: List[str] = []
    # indexes into *out* of lines that belong to code blocks
    code_lines: set[int] = set()
    fence: Optional[Tuple[str, int]] = None
    blank_run = 0

    for raw in text.split("\n"):
        if fence is not None:
            code_lines.add(len(out))
            out.append(raw)
            if _is_fence_closer(raw, *fence):
                fence = None
            blank_run = 0
            continue

        line = _clean_line(raw)
        opener = _fence_opener(line)
        if opener is not None:
            fence = opener
            code_lines.add(len(out))
            out.append(line)
            blank_run = 0
            continue

        if not line:
            blank_run += 1
            if blank_run > MAX_BLANK_LINES:
                continue
        else:
            blank_run = 0
        out.append(line)

    start = 0
    while start < len(out) and start not in code_lines and not out[start]:
        start += 1
    end = len(out)
    while end > start and (end - 1) not in code_lines and not out[end - 1]:
        end -= 1
    return "\n".join(out[start:end])
