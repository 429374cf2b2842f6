# gitbook2text/crawler/models.py
"""
Data models for the gitbook2text crawler and download pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional


@dataclass(slots=True)
class PageData:
    """Holds the requested URL, decoded body and response metadata of a fetched page."""

    url: str
    content: str
    content_type: str = ""
    final_url: str = ""

    def __post_init__(self) -> None:
        if not self.final_url:
            self.final_url = self.url


@dataclass(slots=True)
class PageFailure:
    """A page that could not be processed, with a human-readable reason."""

    url: str
    reason: str


@dataclass(slots=True)
class CrawlResult:
    """Outcome of one crawl: pages in breadth-first discovery order plus per-page failures."""

    base_url: str
    pages: List[str] = field(default_factory=list)
    failures: List[PageFailure] = field(default_factory=list)


class ConversionStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(slots=True)
class ConversionResult:
    """Result of the fetch → convert → sanitize pipeline for one page."""

    url: str
    index: int
    status: ConversionStatus
    markdown: str = ""
    text: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ConversionStatus.SUCCESS

    def as_failed(self, reason: str) -> ConversionResult:
        return replace(self, status=ConversionStatus.FAILED, error=reason)
