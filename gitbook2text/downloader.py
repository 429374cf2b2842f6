# gitbook2text/downloader.py
"""
Download orchestrator: runs fetch → convert → sanitize for many pages at once.

Concurrency is bounded by an :class:`asyncio.Semaphore`; every page yields
exactly one :class:`ConversionResult`, and a failing page never cancels the
others.
"""
from __future__ import annotations

import asyncio
from typing import Callable, List, Optional, Sequence
from urllib.parse import urlparse, urlunparse

from gitbook2text.converter import convert_to_text
from gitbook2text.crawler.fetcher import Fetcher
from gitbook2text.crawler.models import ConversionResult, ConversionStatus, PageData
from gitbook2text.errors import ConversionError, FetchError
from gitbook2text.logger import logger
from gitbook2text.sanitizer import sanitize

__all__ = ("DownloadOrchestrator", "source_url", "process_markdown")

ResultCallback = Callable[[ConversionResult], None]

# source path of a site's landing page, which has no path of its own
ROOT_PAGE = "/README"

_BINARY_TYPE_PREFIXES = ("image/", "audio/", "video/", "font/")
_BINARY_TYPES = (
    "application/octet-stream",
    "application/pdf",
    "application/zip",
    "application/gzip",
    "application/x-tar",
)


def source_url(page_url: str, raw_suffix: str = ".md") -> str:
    """URL of the page's raw Markdown source (GitBook serves it at ``<page>.md``)."""
    if not raw_suffix or page_url.endswith(raw_suffix):
        return page_url
    parsed = urlparse(page_url)
    path = parsed.path.rstrip("/") or ROOT_PAGE
    return urlunparse(parsed._replace(path=path + raw_suffix, fragment=""))


def _is_binary(page: PageData) -> bool:
    ctype = page.content_type
    if ctype.startswith(_BINARY_TYPE_PREFIXES) or ctype in _BINARY_TYPES:
        return True
    return "\x00" in page.content


def process_markdown(url: str, markdown: str) -> str:
    """Strictly staged conversion: convert first, then sanitize."""
    return sanitize(convert_to_text(markdown, url))


class DownloadOrchestrator:
    """Downloads and converts pages with at most ``concurrency`` pipelines in flight."""

    def __init__(
        self,
        fetcher: Fetcher,
        concurrency: int = 8,
        raw_suffix: str = ".md",
        on_result: Optional[ResultCallback] = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.fetcher = fetcher
        self.concurrency = concurrency
        self.raw_suffix = raw_suffix
        self.on_result = on_result
        self._stop = asyncio.Event()

    def cancel(self) -> None:
        """Stop launching new pipelines; those already running finish normally."""
        self._stop.set()

    @property
    def cancelled(self) -> bool:
        return self._stop.is_set()

    async def download_all(
        self, urls: Sequence[str], *, preserve_order: bool = False
    ) -> List[ConversionResult]:
        """
        Process every URL and return one result per input.

        Results come in completion order unless *preserve_order* is set, in
        which case they are sorted by input position.
        """
        semaphore = asyncio.Semaphore(self.concurrency)
        logger.info("Downloading %d page(s), concurrency %d", len(urls), self.concurrency)

        tasks = [
            asyncio.create_task(self._run_one(semaphore, index, url))
            for index, url in enumerate(urls)
        ]
        results: List[ConversionResult] = []
        try:
            for next_done in asyncio.as_completed(tasks):
                result = self._deliver(await next_done)
                results.append(result)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.warning("Download interrupted after %d/%d page(s)", len(results), len(urls))
            raise

        if preserve_order:
            results.sort(key=lambda r: r.index)
        return results

    async def _run_one(self, semaphore: asyncio.Semaphore, index: int, url: str) -> ConversionResult:
        async with semaphore:
            if self._stop.is_set():
                return ConversionResult(url, index, ConversionStatus.SKIPPED, error="cancelled before start")
            return await self._pipeline(index, url)

    async def _pipeline(self, index: int, url: str) -> ConversionResult:
        try:
            page = await self.fetcher.fetch(source_url(url, self.raw_suffix))
        except FetchError as exc:
            logger.warning("Failed %s: %s", url, exc.reason)
            return ConversionResult(url, index, ConversionStatus.FAILED, error=exc.reason)

        try:
            if _is_binary(page):
                raise ConversionError(url, f"binary content ({page.content_type or 'unknown type'})")
            text = process_markdown(url, page.content)
        except ConversionError as exc:
            logger.warning("Cannot convert %s: %s", url, exc.reason)
            return ConversionResult(url, index, ConversionStatus.FAILED, error=exc.reason)
        except Exception as exc:
            logger.exception("Unexpected conversion error for %s", url)
            return ConversionResult(url, index, ConversionStatus.FAILED, error=f"conversion error: {exc}")

        return ConversionResult(url, index, ConversionStatus.SUCCESS, markdown=page.content, text=text)

    def _deliver(self, result: ConversionResult) -> ConversionResult:
        if not result.ok or self.on_result is None:
            return result
        try:
            self.on_result(result)
        except OSError as exc:
            logger.error("Cannot save %s: %s", result.url, exc)
            return result.as_failed(f"write error: {exc}")
        logger.info("Saved page: %s", result.url)
        return result
