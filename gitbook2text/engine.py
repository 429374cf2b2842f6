# File: gitbook2text/engine.py
"""gitbook2text.engine: фасад для CLI и тестов — проверка сайта, обход и загрузка страниц."""

from __future__ import annotations

from typing import Optional, Sequence

from gitbook2text.aggregator import DownloadSummary, aggregate_results
from gitbook2text.config import AppConfig
from gitbook2text.crawler.crawler import GitBookCrawler
from gitbook2text.crawler.fetcher import Fetcher
from gitbook2text.crawler.models import CrawlResult
from gitbook2text.crawler.verifier import ensure_gitbook
from gitbook2text.downloader import DownloadOrchestrator
from gitbook2text.errors import CrawlError, FetchError
from gitbook2text.logger import logger
from gitbook2text.storage import PageWriter
from gitbook2text.utils import remove_duplicates, write_url_list

__all__ = ["Engine"]


class Engine:
    """Связывает Fetcher, краулер, оркестратор загрузки и запись файлов по конфигурации."""

    def __init__(self, config: AppConfig, writer: Optional[PageWriter] = None) -> None:
        self.config = config
        self.writer = writer if writer is not None else PageWriter(config.output_dir)
        self.orchestrator: Optional[DownloadOrchestrator] = None

    async def crawl(self, base_url: str, *, verify: Optional[bool] = None) -> CrawlResult:
        """Проверяет сайт (если включено) и возвращает найденные страницы в порядке BFS."""
        verify = self.config.verify_site if verify is None else verify
        async with Fetcher(self.config) as fetcher:
            if verify:
                logger.info("Checking that %s is a GitBook…", base_url)
                try:
                    await ensure_gitbook(fetcher, base_url)
                except FetchError as exc:
                    raise CrawlError(base_url, exc) from exc
            crawler = GitBookCrawler(
                fetcher,
                base_url,
                max_pages=self.config.max_pages,
                max_depth=self.config.max_depth,
                prefetch=self.config.prefetch,
                stay_under_base_path=self.config.stay_under_base_path,
            )
            return await crawler.crawl()

    async def crawl_to_file(self, base_url: str, output=None, *, verify: Optional[bool] = None) -> CrawlResult:
        """Обход и запись списка ссылок (по одному URL в строке)."""
        result = await self.crawl(base_url, verify=verify)
        path = write_url_list(output or self.config.links_file, result.pages)
        logger.info("%d link(s) saved to %s", len(result.pages), path)
        return result

    async def download(self, urls: Sequence[str], crawl: Optional[CrawlResult] = None) -> DownloadSummary:
        """Загружает, конвертирует и сохраняет страницы; ошибки отдельных страниц не фатальны."""
        urls = remove_duplicates(urls)
        self.writer.prepare()
        async with Fetcher(self.config) as fetcher:
            self.orchestrator = DownloadOrchestrator(
                fetcher,
                concurrency=self.config.concurrency,
                raw_suffix=self.config.raw_suffix,
                on_result=self.writer.write,
            )
            results = await self.orchestrator.download_all(
                urls, preserve_order=self.config.preserve_order
            )
        summary = aggregate_results(results, crawl=crawl)
        logger.info(
            "Download finished: %d succeeded, %d failed, %d skipped",
            summary.succeeded, summary.failed, summary.skipped,
        )
        return summary

    async def run_all(self, base_url: str, *, verify: Optional[bool] = None) -> DownloadSummary:
        """Полный цикл: проверка, обход, список ссылок, загрузка."""
        crawl = await self.crawl_to_file(base_url, verify=verify)
        return await self.download(crawl.pages, crawl=crawl)

    def cancel(self) -> None:
        """Прекращает запуск новых загрузок (уже идущие завершатся)."""
        if self.orchestrator is not None:
            self.orchestrator.cancel()
