# File: gitbook2text/aggregator.py
"""gitbook2text.aggregator: сводка по пакету загрузок (успехи, ошибки, пропуски)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, TypedDict

from gitbook2text.crawler.models import ConversionResult, ConversionStatus, CrawlResult


class FailureInfo(TypedDict):
    """Неудачная страница и причина."""

    url: str
    reason: str


@dataclass(slots=True)
class DownloadSummary:
    """Итог загрузки: все результаты и счётчики по статусам."""

    results: List[ConversionResult] = field(default_factory=list)
    crawl: CrawlResult | None = None

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.status is ConversionStatus.SUCCESS)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status is ConversionStatus.FAILED)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.status is ConversionStatus.SKIPPED)

    @property
    def failures(self) -> List[FailureInfo]:
        return [
            {"url": r.url, "reason": r.error or "unknown error"}
            for r in self.results
            if r.status is ConversionStatus.FAILED
        ]

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "total": len(self.results),
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "failures": self.failures,
            "pages": [{"url": r.url, "status": r.status.value} for r in self.results],
        }
        if self.crawl is not None:
            data["crawl"] = {
                "base_url": self.crawl.base_url,
                "discovered": len(self.crawl.pages),
                "failures": [{"url": f.url, "reason": f.reason} for f in self.crawl.failures],
            }
        return data

    def json(self, *, pretty: bool = False) -> str:
        """JSON-представление сводки без текста страниц."""
        return json.dumps(self.as_dict(), ensure_ascii=False, indent=2 if pretty else None)


def aggregate_results(
    results: Iterable[ConversionResult], crawl: CrawlResult | None = None
) -> DownloadSummary:
    """Собирает результаты загрузки (и, если есть, обхода) в DownloadSummary."""
    return DownloadSummary(results=list(results), crawl=crawl)
