# === FILE: gitbook2text/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import time
from typing import List, Optional, Tuple

from gitbook2text.crawler.fetcher import Fetcher
from gitbook2text.crawler.frontier import CrawlFrontier
from gitbook2text.crawler.link_extractor import extract_links, normalize_url
from gitbook2text.crawler.models import CrawlResult, PageData, PageFailure
from gitbook2text.errors import CrawlError, FetchError
from gitbook2text.logger import logger

__all__ = ("GitBookCrawler",)

_FetchOutcome = Tuple[Optional[PageData], Optional[FetchError]]


class GitBookCrawler:
    """Breadth-first crawler collecting every same-site page of a GitBook.

    Up to ``prefetch`` frontier entries are fetched concurrently, but their
    results are processed in dequeue order, so the discovered sequence is the
    same as a strictly sequential BFS.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        base_url: str,
        *,
        max_pages: Optional[int] = None,
        max_depth: Optional[int] = None,
        prefetch: int = 4,
        stay_under_base_path: bool = False,
    ) -> None:
        if prefetch < 1:
            raise ValueError("prefetch must be >= 1")
        self.fetcher = fetcher
        self.base_url = normalize_url(base_url)
        self.max_pages = max_pages
        self.max_depth = max_depth
        self.prefetch = prefetch
        self.allowed_prefix = self.base_url if stay_under_base_path else None

    async def crawl(self) -> CrawlResult:
        logger.info("Crawl started: %s", self.base_url)
        start = time.monotonic()
        frontier = CrawlFrontier(max_pages=self.max_pages, max_depth=self.max_depth)
        frontier.offer(self.base_url, 0)
        result = CrawlResult(base_url=self.base_url)

        while frontier:
            batch = frontier.take(self.prefetch)
            outcomes: List[_FetchOutcome] = await asyncio.gather(
                *(self._fetch(url) for url, _ in batch)
            )
            for (url, depth), (page, error) in zip(batch, outcomes):
                if error is not None:
                    if url == self.base_url:
                        raise CrawlError(url, error)
                    logger.warning("Failed %s: %s", url, error.reason)
                    result.failures.append(PageFailure(url, error.reason))
                    continue
                assert page is not None
                result.pages.append(url)
                logger.info("Explored [%d]: %s", len(result.pages), url)
                added = 0
                for link in extract_links(page.content, page.final_url, self.allowed_prefix):
                    if frontier.offer(link, depth + 1):
                        added += 1
                logger.debug("%s: %d new link(s), %d queued", url, added, len(frontier))

        duration = time.monotonic() - start
        logger.info(
            "Crawl finished: %d page(s), %d failure(s) in %.2f s",
            len(result.pages), len(result.failures), duration,
        )
        if frontier.dropped:
            logger.info("Links dropped by depth/page limits: %d", frontier.dropped)
        return result

    async def _fetch(self, url: str) -> _FetchOutcome:
        try:
            return await self.fetcher.fetch(url), None
        except FetchError as exc:
            return None, exc
