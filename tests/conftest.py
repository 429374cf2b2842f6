# File: tests/conftest.py
import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, Tuple, Union

import pytest
from aiohttp import web

from gitbook2text.config import AppConfig
from gitbook2text.crawler.models import PageData

#: path -> HTML body | HTTP status | (status, body, content_type)
PageResponse = Union[str, int, Tuple[int, str, str]]


def _make_handler(response: PageResponse, hits: Dict[str, int], path: str):
    async def handler(_request: web.Request) -> web.Response:
        hits[path] = hits.get(path, 0) + 1
        if isinstance(response, int):
            return web.Response(status=response, text="error")
        if isinstance(response, tuple):
            status, body, ctype = response
            return web.Response(status=status, text=body, content_type=ctype)
        ctype = "text/markdown" if path.endswith(".md") else "text/html"
        return web.Response(text=response, content_type=ctype)

    return handler


@pytest.fixture()
def serve_site(unused_tcp_port_factory) -> Callable[..., Any]:
    """
    Return an async context manager that serves a fake site on localhost.

    Usage::

        async with serve_site({"/": "<a href='/a'>A</a>"}) as (base, hits):
            ...
    """

    @asynccontextmanager
    async def _serve(pages: Dict[str, PageResponse], *, delay: Dict[str, float] | None = None) -> AsyncIterator[Tuple[str, Dict[str, int]]]:
        app = web.Application()
        hits: Dict[str, int] = {}
        for path, response in pages.items():
            handler = _make_handler(response, hits, path)
            if delay and path in delay:
                handler = _delayed(handler, delay[path])
            app.router.add_get(path, handler)
        runner = web.AppRunner(app)
        await runner.setup()
        port = unused_tcp_port_factory()
        site = web.TCPSite(runner, "localhost", port)
        await site.start()
        try:
            yield f"http://localhost:{port}", hits
        finally:
            await runner.cleanup()

    return _serve


def _delayed(handler, seconds: float):
    async def wrapper(request: web.Request) -> web.Response:
        await asyncio.sleep(seconds)
        return await handler(request)

    return wrapper


@pytest.fixture()
def app_config(tmp_path) -> AppConfig:
    """
    Return a fast AppConfig for network tests: no retries, short timeout.
    """
    return AppConfig(
        timeout=2.0,
        user_agent="TestAgent/1.0",
        retry_times=0,
        retry_backoff=0.0,
        concurrency=4,
        prefetch=2,
        links_file=tmp_path / "links.txt",
        output_dir=tmp_path / "data",
    )


@pytest.fixture()
def gitbook_landing() -> str:
    """
    Landing page markup carrying a GitBook generator signature.
    """
    return (
        '<html><head><meta name="generator" content="GitBook (3.2)"></head>'
        '<body><nav><a href="/intro">Intro</a><a href="/guide/">Guide</a></nav></body></html>'
    )


@pytest.fixture()
def mock_page_data() -> PageData:
    """
    Provide a simple PageData instance with HTML content.
    """
    html = '<html><body><a href="/link1">L1</a><a href="http://external.com">X</a></body></html>'
    return PageData(url="http://example.com/", content=html, content_type="text/html")
