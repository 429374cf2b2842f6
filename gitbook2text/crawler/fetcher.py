# gitbook2text/crawler/fetcher.py
"""
Fetcher module: handles HTTP requests with rate limiting, retry/backoff, and timeout.

Every failure surfaces as :class:`~gitbook2text.errors.FetchError`, so callers
decide per URL whether it is fatal.
"""
from __future__ import annotations

import asyncio
import time
from typing import Optional, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from gitbook2text.config import AppConfig
from gitbook2text.crawler.models import PageData
from gitbook2text.errors import FetchError, FetchErrorKind
from gitbook2text.logger import logger

RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)


class Fetcher:
    """Handles HTTP fetching with rate limit, retries/backoff, and timeout.

    Use as an async context manager; it owns the :class:`ClientSession`
    unless one is passed in.
    """

    def __init__(
        self,
        config: AppConfig,
        session: Optional[ClientSession] = None,
        retry_status: Sequence[int] = RETRY_STATUS,
    ) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None
        self._retry_status = retry_status
        self._rate_lock = asyncio.Lock()
        self._last_request_ts = 0.0

    async def __aenter__(self) -> Fetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session is not None and not self.session.closed:
            await self.session.close()
        if self._owns_session:
            self.session = None

    async def fetch(self, url: str, *, retries: Optional[int] = None) -> PageData:
        """
        Fetch *url* and return its decoded body.

        *retries* overrides ``config.retry_times`` for this call; 0 means one
        attempt only.

        Raises FetchError on timeout, connection failure, non-2xx status
        (after retries) or undecodable body.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized")

        retry_limit = self.config.retry_times if retries is None else retries
        attempts = 0
        while True:
            await self._wait_for_rate_limit()
            try:
                async with self.session.get(url, allow_redirects=True) as resp:
                    status = resp.status
                    if status in self._retry_status and attempts < retry_limit:
                        raise ClientError(f"retryable status {status}")
                    if not 200 <= status < 300:
                        raise FetchError(FetchErrorKind.HTTP_STATUS, url, status=status)
                    try:
                        text = await resp.text()
                    except (UnicodeDecodeError, LookupError) as exc:
                        raise FetchError(FetchErrorKind.DECODE_ERROR, url, detail=str(exc)) from exc
                    ctype = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                    return PageData(url, text, content_type=ctype, final_url=str(resp.url))
            except asyncio.TimeoutError as exc:
                # no retry on timeout
                raise FetchError(
                    FetchErrorKind.TIMEOUT, url, detail=f"no response within {self.config.timeout}s"
                ) from exc
            except ClientError as exc:
                attempts += 1
                if attempts > retry_limit:
                    raise FetchError(FetchErrorKind.CONNECT_FAILED, url, detail=str(exc)) from exc
                backoff = min(60.0, self.config.retry_backoff * 2 ** (attempts - 1))
                logger.debug(
                    "Retry %d/%d for %s after %.2f s (%s)",
                    attempts, retry_limit, url, backoff, exc,
                )
                await asyncio.sleep(backoff)

    async def _wait_for_rate_limit(self) -> None:
        if not self.config.rate_limit:
            return
        interval = 1 / self.config.rate_limit
        async with self._rate_lock:
            now = time.monotonic()
            wait = interval - (now - self._last_request_ts)
            if wait > 0:
                await asyncio.sleep(wait)
            self._last_request_ts = time.monotonic()
