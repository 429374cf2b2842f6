"""gitbook2text.converter: Markdown-исходник страницы GitBook → промежуточный текст.

Документ разбирается CommonMark-парсером ``markdown-it-py`` (плюс таблицы и
зачёркивание), затем поток токенов сворачивается в текст:

* заголовки, выделение, ссылки и изображения теряют разметку, остаётся
  видимый текст (подпись ссылки, alt изображения);
* цитаты, callout-блоки, списки, таблицы и HTML-блоки разворачиваются в
  обычные строки;
* директивы GitBook ``{% ... %}`` снимаются, имя тега в вывод не попадает;
* блоки кода переносятся дословно между собственными ```-ограничителями,
  над блоком ставится строка-заголовок (``title="..."`` или ``{% code title %}``).

Блоки разделяются пустой строкой, пункты «плотного» списка идут подряд.
Окончательную нормализацию пробелов делает :func:`gitbook2text.sanitizer.sanitize`,
который не трогает содержимое блоков кода.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

import yaml
from bs4 import BeautifulSoup, Comment
from markdown_it import MarkdownIt
from markdown_it.token import Token

from gitbook2text.errors import ConversionError

__all__ = ["convert_to_text"]

_TITLE_ATTR_RE = re.compile(r"""title\s*=\s*(?:"([^"]*)"|'([^']*)')""")
_DIRECTIVE_RE = re.compile(r"\{%-?\s*(?P<body>.*?)\s*-?%\}")
_CALLOUT_RE = re.compile(r"^[ \t]*\[![A-Za-z]+\][ \t]*$")
_TASK_BOX_RE = re.compile(r"^\[[ xX]\][ \t]+")
_TAG_NAME_RE = re.compile(r"^</?([A-Za-z][A-Za-z0-9-]*)")

# tags that break the flow of text when they show up inline
_BREAKING_TAGS = frozenset(
    {
        "address", "article", "aside", "blockquote", "dd", "details", "div", "dl",
        "dt", "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6",
        "header", "hr", "li", "ol", "p", "pre", "section", "summary", "table",
        "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
    }
)

_UNCHANGED = object()

_md = MarkdownIt("commonmark").enable(["table", "strikethrough"])


def _attr_title(text: str) -> Optional[str]:
    m = _TITLE_ATTR_RE.search(text)
    if not m:
        return None
    return m.group(1) if m.group(1) is not None else m.group(2)


def _parse_fence_info(info: str) -> Tuple[str, Optional[str]]:
    """``python title="a.py"`` → (``python``, ``a.py``)."""
    info = info.strip()
    title = _attr_title(info)
    lang = ""
    if info and not info.startswith(("title", "{")):
        lang = re.split(r"[\s{]", info, maxsplit=1)[0]
    lang = lang.replace("`", "")
    return lang, title


def _strip_front_matter(text: str) -> Tuple[Optional[str], str]:
    """Отрезает YAML front matter; возвращает (описание, остальной документ)."""
    lines = text.split("\n")
    if not lines or lines[0].strip() != "---":
        return None, text
    for i in range(1, len(lines)):
        if lines[i].strip() in ("---", "..."):
            break
    else:
        return None, text
    try:
        meta = yaml.safe_load("\n".join(lines[1:i]))
    except yaml.YAMLError:
        return None, text
    if meta is not None and not isinstance(meta, dict):
        return None, text
    description = (meta or {}).get("description")
    if not isinstance(description, str) or not description.strip():
        description = None
    else:
        description = description.strip()
    return description, "\n".join(lines[i + 1:])


def _replace_directive(match: re.Match) -> str:
    body = match.group("body")
    name = body.split(None, 1)[0].lower() if body.strip() else ""
    if name in ("code", "endcode"):
        return ""
    return _attr_title(body) or ""


def _html_text(markup: str) -> List[str]:
    """Видимый текст HTML-блока: alt изображений, без комментариев, построчно."""
    soup = BeautifulSoup(markup, "html.parser")
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    for img in soup.find_all("img"):
        img.replace_with(img.get("alt") or "")
    for tag in soup.find_all(True):
        if tag.name == "br":
            tag.replace_with("\n")
        elif tag.name in _BREAKING_TAGS:
            tag.insert_before("\n")
            tag.append("\n")
    return [line.strip() for line in soup.get_text().split("\n") if line.strip()]


def _inline_html(markup: str) -> str:
    m = _TAG_NAME_RE.match(markup)
    if m is None:
        # comments, processing instructions, CDATA
        return ""
    name = m.group(1).lower()
    if name == "img":
        img = BeautifulSoup(markup, "html.parser").find("img")
        return (img.get("alt") or "") if img is not None else ""
    if name == "br":
        return "\n"
    return " " if name in _BREAKING_TAGS else ""


def _render_inline(tokens: Optional[Sequence[Token]]) -> str:
    parts: List[str] = []
    for tok in tokens or ():
        if tok.type in ("text", "text_special", "code_inline"):
            parts.append(tok.content)
        elif tok.type in ("softbreak", "hardbreak"):
            parts.append("\n")
        elif tok.type == "image":
            parts.append(_render_inline(tok.children) if tok.children else tok.content)
        elif tok.type == "html_inline":
            parts.append(_inline_html(tok.content))
    return "".join(parts)


class _TextWriter:
    """Собирает строки вывода по мере обхода токенов."""

    def __init__(self) -> None:
        self.lines: List[str] = []
        self.pending_title: Optional[str] = None
        self._prev_tight = False

    def block(self, lines: List[str], *, tight: bool = False) -> None:
        if not lines:
            return
        if self.lines and not (tight and self._prev_tight):
            self.lines.append("")
        self.lines.extend(lines)
        self._prev_tight = tight
        self.pending_title = None

    def prose(self, text: str, *, tight: bool = False, in_list: bool = False) -> None:
        """Абзац или заголовок: директивы, callout-маркеры, флажки задач."""
        kept: List[str] = []
        title_update: object = _UNCHANGED
        for number, line in enumerate(text.split("\n")):
            if in_list and number == 0:
                line = _TASK_BOX_RE.sub("", line)
            if _CALLOUT_RE.match(line):
                continue
            found = False
            for directive in _DIRECTIVE_RE.finditer(line):
                found = True
                words = directive.group("body").split(None, 1)
                name = words[0].lower() if words else ""
                if name == "code":
                    title_update = _attr_title(directive.group("body"))
                elif name == "endcode":
                    title_update = None
            if found:
                line = _DIRECTIVE_RE.sub(_replace_directive, line)
                if not line.strip():
                    continue
            kept.append(line)
        self.block(kept, tight=tight)
        if title_update is not _UNCHANGED:
            self.pending_title = title_update

    def code(self, content: str, info: str = "") -> None:
        lang, title = _parse_fence_info(info)
        title = title or self.pending_title
        payload = content[:-1] if content.endswith("\n") else content
        lines = payload.split("\n") if payload else []
        longest = 0
        for line in lines:
            stripped = line.lstrip()
            longest = max(longest, len(stripped) - len(stripped.lstrip("`")))
        marker = "`" * max(3, longest + 1)
        self.block(([title] if title else []) + [marker + lang] + lines + [marker])


def _walk(tokens: Sequence[Token], writer: _TextWriter) -> None:
    list_depth = 0
    rows: List[str] = []
    cells: List[str] = []
    for i, tok in enumerate(tokens):
        kind = tok.type
        if kind in ("bullet_list_open", "ordered_list_open"):
            list_depth += 1
        elif kind in ("bullet_list_close", "ordered_list_close"):
            list_depth -= 1
        elif kind == "table_open":
            rows = []
        elif kind == "tr_open":
            cells = []
        elif kind == "tr_close":
            rows.append(" ".join(c for c in cells if c))
        elif kind == "table_close":
            writer.block([row for row in rows if row])
        elif kind == "inline":
            text = _render_inline(tok.children)
            parent = tokens[i - 1].type if i else ""
            if parent in ("th_open", "td_open"):
                cells.append(_DIRECTIVE_RE.sub(_replace_directive, text).replace("\n", " ").strip())
            elif parent == "heading_open":
                writer.prose(text.replace("\n", " ").strip())
            else:
                writer.prose(text, tight=tokens[i - 1].hidden, in_list=list_depth > 0)
        elif kind in ("fence", "code_block"):
            writer.code(tok.content, tok.info)
        elif kind == "html_block":
            writer.block(_html_text(tok.content))


def convert_to_text(markup: str, url: str = "") -> str:
    """
    Превращает Markdown страницы GitBook в промежуточный текст.

    Незакрытый блок кода продолжается до конца своего контейнера (цитаты,
    пункта списка или документа). Бинарный ввод (NUL-символы) приводит к
    ConversionError.
    """
    if "\x00" in markup:
        raise ConversionError(url or "<input>", "binary content cannot be converted to text")

    description, body = _strip_front_matter(markup.replace("\r\n", "\n").replace("\r", "\n"))
    writer = _TextWriter()
    if description:
        writer.block([description])
    _walk(_md.parse(body), writer)
    return "\n".join(writer.lines)
