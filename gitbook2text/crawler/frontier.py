# gitbook2text/crawler/frontier.py
"""
Breadth-first crawl frontier.

The pending queue and the set of seen URLs live together here and change
only through :meth:`CrawlFrontier.offer` and :meth:`CrawlFrontier.take`.
A URL is marked seen when it is enqueued, so it can never be queued twice
even while several frontier entries are being fetched at once.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, List, Optional, Set, Tuple

__all__ = ("CrawlFrontier",)


class CrawlFrontier:
    """FIFO queue of ``(url, depth)`` plus the visited set of one crawl session."""

    def __init__(self, max_pages: Optional[int] = None, max_depth: Optional[int] = None) -> None:
        self.max_pages = max_pages
        self.max_depth = max_depth
        self._queue: Deque[Tuple[str, int]] = deque()
        self._seen: Set[str] = set()
        self.dropped = 0

    def offer(self, url: str, depth: int) -> bool:
        """Mark *url* seen and enqueue it if it is new and within limits."""
        if url in self._seen:
            return False
        if self.max_depth is not None and depth > self.max_depth:
            self.dropped += 1
            return False
        if self.max_pages is not None and len(self._seen) >= self.max_pages:
            self.dropped += 1
            return False
        self._seen.add(url)
        self._queue.append((url, depth))
        return True

    def take(self, count: int = 1) -> List[Tuple[str, int]]:
        """Dequeue up to *count* entries in FIFO order."""
        batch: List[Tuple[str, int]] = []
        while self._queue and len(batch) < count:
            batch.append(self._queue.popleft())
        return batch

    def seen(self, url: str) -> bool:
        return url in self._seen

    @property
    def seen_count(self) -> int:
        return len(self._seen)

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)
