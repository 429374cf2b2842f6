"""gitbook2text.crawler: загрузка страниц, проверка GitBook-сигнатур и обход ссылок."""

from .crawler import GitBookCrawler
from .fetcher import Fetcher
from .link_extractor import extract_links, normalize_url
from .models import ConversionResult, ConversionStatus, CrawlResult, PageData, PageFailure
from .verifier import ensure_gitbook, verify

__all__ = [
    "ConversionResult",
    "ConversionStatus",
    "CrawlResult",
    "Fetcher",
    "GitBookCrawler",
    "PageData",
    "PageFailure",
    "ensure_gitbook",
    "extract_links",
    "normalize_url",
    "verify",
]
