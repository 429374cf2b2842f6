# File: tests/test_engine.py
import pytest

from gitbook2text.engine import Engine
from gitbook2text.errors import CrawlError, FetchErrorKind, VerificationError
from gitbook2text.storage import url_to_filename
from gitbook2text.utils import read_url_list


@pytest.fixture()
def gitbook_site(gitbook_landing):
    return {
        "/": gitbook_landing,
        "/intro": "<p>Intro</p>",
        "/guide": '<a href="/guide/setup">Setup</a><a href="/logo.png">logo</a>',
        "/guide/setup": "<p>Setup</p>",
        "/README.md": "# Welcome\n\n{% hint style=\"info\" %}\nRead on.\n{% endhint %}",
        "/intro.md": "# Intro\n\nHello **world**.",
        "/guide.md": "# Guide\n\n| a | b |\n|---|---|\n| 1 | 2 |",
    }


@pytest.mark.asyncio()
async def test_run_all_end_to_end(serve_site, app_config, gitbook_site):
    async with serve_site(gitbook_site) as (base, hits):
        summary = await Engine(app_config).run_all(base)

    expected_pages = [base, f"{base}/intro", f"{base}/guide", f"{base}/guide/setup"]
    assert summary.crawl is not None
    assert summary.crawl.pages == expected_pages
    assert read_url_list(app_config.links_file) == expected_pages

    assert [r.url for r in summary.results] == expected_pages
    assert (summary.succeeded, summary.failed, summary.skipped) == (3, 1, 0)
    assert summary.failures == [{"url": f"{base}/guide/setup", "reason": "HTTP 404"}]
    assert hits["/"] == 2

    txt_dir = app_config.output_dir / "txt"
    md_dir = app_config.output_dir / "md"
    intro = url_to_filename(f"{base}/intro")
    assert (txt_dir / f"{intro}.txt").read_text(encoding="utf-8") == "Intro\n\nHello world."
    assert (md_dir / f"{intro}.md").read_text(encoding="utf-8") == "# Intro\n\nHello **world**."
    readme = (txt_dir / f"{url_to_filename(base)}.txt").read_text(encoding="utf-8")
    assert readme == "Welcome\n\nRead on."
    guide = (txt_dir / f"{url_to_filename(f'{base}/guide')}.txt").read_text(encoding="utf-8")
    assert guide == "Guide\n\na b\n1 2"
    assert len(list(txt_dir.iterdir())) == 3


@pytest.mark.asyncio()
async def test_crawl_to_custom_file(serve_site, app_config, gitbook_site, tmp_path):
    target = tmp_path / "lists" / "pages.txt"
    async with serve_site(gitbook_site) as (base, _hits):
        result = await Engine(app_config).crawl_to_file(base, target, verify=False)

    assert target.read_text(encoding="utf-8").splitlines() == result.pages
    assert not app_config.links_file.exists()


@pytest.mark.asyncio()
async def test_non_gitbook_site_rejected(serve_site, app_config):
    async with serve_site({"/": "<h1>Hugo site</h1>"}) as (base, hits):
        with pytest.raises(VerificationError):
            await Engine(app_config).crawl(base)
        result = await Engine(app_config).crawl(base, verify=False)

    assert result.pages == [base]
    assert hits["/"] == 2


@pytest.mark.asyncio()
async def test_unreachable_base_during_verification(app_config, unused_tcp_port):
    with pytest.raises(CrawlError) as info:
        await Engine(app_config).crawl(f"http://localhost:{unused_tcp_port}")
    assert info.value.cause.kind is FetchErrorKind.CONNECT_FAILED


@pytest.mark.asyncio()
async def test_download_deduplicates(serve_site, app_config):
    async with serve_site({"/a.md": "A"}) as (base, hits):
        summary = await Engine(app_config).download([f"{base}/a", f"{base}/a"])

    assert summary.succeeded == 1
    assert hits["/a.md"] == 1
    assert summary.crawl is None


@pytest.mark.asyncio()
async def test_cancel_reaches_orchestrator(serve_site, app_config):
    engine = Engine(app_config)
    engine.cancel()
    async with serve_site({"/a.md": "A"}) as (base, _hits):
        await engine.download([f"{base}/a"])
    engine.cancel()
    assert engine.orchestrator is not None and engine.orchestrator.cancelled
