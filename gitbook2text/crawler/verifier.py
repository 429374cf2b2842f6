# gitbook2text/crawler/verifier.py
"""
GitBook site detection.

A site is recognised by an ordered list of independent signatures, each a
predicate over the landing page markup. Verification stops at the first one
that matches, so new signatures can be appended to :data:`SIGNATURES`
without touching the call sites.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from gitbook2text.crawler.fetcher import Fetcher
from gitbook2text.errors import VerificationError
from gitbook2text.logger import logger

__all__ = ("Signature", "SIGNATURES", "match_signature", "verify", "ensure_gitbook")

_GITBOOK_HOSTS = ("gitbook.com", "gitbook.io")
_GITBOOK_WORD_RE = re.compile(r"gitbook", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class Signature:
    name: str
    check: Callable[[BeautifulSoup, str], bool]


def _generator_meta(soup: BeautifulSoup, _markup: str) -> bool:
    for meta in soup.find_all("meta"):
        name = str(meta.get("name") or meta.get("property") or "").lower()
        if name == "generator" and "gitbook" in str(meta.get("content", "")).lower():
            return True
    return False


def _data_gitbook_attribute(soup: BeautifulSoup, _markup: str) -> bool:
    return soup.find(lambda tag: any(attr.lower().startswith("data-gitbook") for attr in tag.attrs)) is not None


def _runtime_global(_soup: BeautifulSoup, markup: str) -> bool:
    return "__GITBOOK__" in markup


def _gitbook_assets(soup: BeautifulSoup, _markup: str) -> bool:
    for tag in soup.find_all(["script", "link", "img", "a"]):
        ref = tag.get("src") or tag.get("href")
        if not isinstance(ref, str):
            continue
        host = urlparse(ref).netloc.lower()
        if any(host == h or host.endswith("." + h) for h in _GITBOOK_HOSTS):
            return True
    return False


def _gitbook_mention(_soup: BeautifulSoup, markup: str) -> bool:
    return _GITBOOK_WORD_RE.search(markup) is not None


SIGNATURES: List[Signature] = [
    Signature("generator-meta", _generator_meta),
    Signature("data-gitbook-attribute", _data_gitbook_attribute),
    Signature("runtime-global", _runtime_global),
    Signature("gitbook-assets", _gitbook_assets),
    Signature("gitbook-mention", _gitbook_mention),
]


def match_signature(markup: str, signatures: Optional[List[Signature]] = None) -> Optional[str]:
    """Return the name of the first matching signature, or None."""
    soup = BeautifulSoup(markup, "html.parser")
    for signature in signatures if signatures is not None else SIGNATURES:
        if signature.check(soup, markup):
            return signature.name
    return None


async def verify(fetcher: Fetcher, base_url: str) -> bool:
    """
    Fetch *base_url* once, without retries, and test it against the GitBook
    signatures.

    FetchError from the initial request propagates to the caller.
    """
    page = await fetcher.fetch(base_url, retries=0)
    matched = match_signature(page.content)
    if matched is None:
        logger.info("No GitBook signature found on %s", base_url)
        return False
    logger.info("GitBook detected on %s (signature: %s)", base_url, matched)
    return True


async def ensure_gitbook(fetcher: Fetcher, base_url: str) -> None:
    """Raise VerificationError unless *base_url* looks like a GitBook site."""
    if not await verify(fetcher, base_url):
        raise VerificationError(base_url)
