# gitbook2text/crawler/link_extractor.py
"""
Link extraction and URL normalization utilities for gitbook2text.
"""
from __future__ import annotations

import posixpath
from typing import List, Optional
from urllib.parse import urldefrag, urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup
from bs4.element import Tag

# Non-content targets: images, archives, binaries, fonts, media, assets.
NON_CONTENT_EXTENSIONS = (
    ".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".ico", ".bmp", ".avif",
    ".pdf", ".zip", ".rar", ".7z", ".gz", ".tgz", ".tar", ".bz2", ".xz",
    ".exe", ".dmg", ".msi", ".deb", ".rpm", ".apk", ".bin", ".iso", ".whl",
    ".woff", ".woff2", ".ttf", ".eot", ".otf",
    ".mp3", ".mp4", ".wav", ".webm", ".avi", ".mov", ".ogg",
    ".css", ".js", ".json", ".xml", ".rss",
)

_SKIPPED_SCHEMES = ("mailto:", "javascript:", "tel:", "data:")


def normalize_url(url: str) -> str:
    """
    Normalize URL: lowercase scheme and netloc, drop query and fragment,
    strip trailing slash in path, collapse to root URL.
    """
    parsed = urlparse(url.strip())
    scheme = parsed.scheme.lower()
    netloc = parsed.netloc.lower()
    path = parsed.path
    if path:
        norm = posixpath.normpath(path)
        path = "" if norm in (".", "/", "//") else norm
    path = path.rstrip("/")
    if not path:
        return f"{scheme}://{netloc}"
    return urlunparse((scheme, netloc, path, "", "", ""))


def is_http_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def has_non_content_extension(url: str) -> bool:
    path = urlparse(url).path.lower()
    return path.endswith(NON_CONTENT_EXTENSIONS)


def is_under_prefix(url: str, prefix: str) -> bool:
    """True if normalized *url* equals *prefix* or lies below it in the path tree."""
    return url == prefix or url.startswith(prefix.rstrip("/") + "/")


def extract_links(markup: str, base_url: str, allowed_prefix: Optional[str] = None) -> List[str]:
    """
    Extract same-site content links from a page.

    Relative targets are resolved against *base_url*. Skips mailto:/javascript:
    and similar schemes, fragment-only anchors, other hosts, non-content file
    extensions and the page itself. When *allowed_prefix* is given only links
    at or below it are kept. Order is the first occurrence in the markup.
    """
    soup = BeautifulSoup(markup, "html.parser")
    base_netloc = urlparse(base_url).netloc.lower()
    self_url = normalize_url(base_url)
    prefix = normalize_url(allowed_prefix) if allowed_prefix else None

    seen: set[str] = set()
    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw or raw.startswith("#") or raw.lower().startswith(_SKIPPED_SCHEMES):
            continue
        absolute, _fragment = urldefrag(urljoin(base_url, raw))
        if not is_http_url(absolute) or urlparse(absolute).netloc.lower() != base_netloc:
            continue
        if has_non_content_extension(absolute):
            continue
        normalized = normalize_url(absolute)
        if normalized == self_url or normalized in seen:
            continue
        if prefix is not None and not is_under_prefix(normalized, prefix):
            continue
        seen.add(normalized)
        links.append(normalized)
    return links
