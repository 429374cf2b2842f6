# File: tests/test_cli.py
"""Тесты для CLI (`gitbook2text.cli`) с использованием click.testing.CliRunner.
Проверяют команды `crawl`, `download`, `all`, `config`, `--version`,
режим без подкоманды и коды выхода при ошибках.
"""
import json

import pytest
from click.testing import CliRunner

import gitbook2text.cli as cli_module
from gitbook2text import __version__
from gitbook2text.aggregator import DownloadSummary
from gitbook2text.cli import cli
from gitbook2text.crawler.models import ConversionResult, ConversionStatus, CrawlResult, PageFailure
from gitbook2text.errors import CrawlError, FetchError, FetchErrorKind, VerificationError
from gitbook2text.logger import init_logging

URL = "https://docs.example.com"


class FakeEngine:
    """Engine без сети: запоминает вызовы и возвращает заготовленные результаты."""

    instances = []
    error = None

    def __init__(self, config, writer=None):
        self.config = config
        self.calls = []
        FakeEngine.instances.append(self)

    def _crawl_result(self, url):
        return CrawlResult(base_url=url, pages=[url, f"{url}/a"], failures=[PageFailure(f"{url}/b", "HTTP 500")])

    async def crawl_to_file(self, url, output=None, *, verify=None):
        self.calls.append(("crawl", url, output, verify))
        if FakeEngine.error is not None:
            raise FakeEngine.error
        return self._crawl_result(url)

    async def download(self, urls, crawl=None):
        self.calls.append(("download", list(urls)))
        results = [
            ConversionResult(url, i, ConversionStatus.SUCCESS if i == 0 else ConversionStatus.FAILED,
                             error=None if i == 0 else "HTTP 404")
            for i, url in enumerate(urls)
        ]
        return DownloadSummary(results=results, crawl=crawl)

    async def run_all(self, url, *, verify=None):
        crawl = await self.crawl_to_file(url, verify=verify)
        return await self.download(crawl.pages, crawl=crawl)


@pytest.fixture(autouse=True)
def fake_engine(monkeypatch):
    FakeEngine.instances = []
    FakeEngine.error = None
    monkeypatch.setattr(cli_module, "Engine", FakeEngine)
    yield FakeEngine
    # CliRunner closes its captured stdout; point the logger back at the real one
    init_logging()


@pytest.fixture()
def config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "concurrency": 3,
                "links_file": str(tmp_path / "links.txt"),
                "output_dir": str(tmp_path / "data"),
            }
        ),
        encoding="utf-8",
    )
    return path


def invoke(*args):
    return CliRunner().invoke(cli, list(args))


def test_version_option():
    result = invoke("--version")
    assert result.exit_code == 0
    assert f"gitbook2text, version {__version__}" in result.output


def test_show_config(config_file):
    result = invoke("--config", str(config_file), "--concurrency", "5", "config")
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["concurrency"] == 5
    assert data["raw_suffix"] == ".md"


def test_bad_config_exits_with_error(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("concurrency: 0\n", encoding="utf-8")
    result = invoke("--config", str(bad), "config")
    assert result.exit_code == 1
    assert "Ошибка загрузки конфигурации" in result.output


def test_crawl(config_file, tmp_path):
    out = tmp_path / "pages.txt"
    result = invoke("--config", str(config_file), "crawl", URL, "-o", str(out), "--no-verify", "--max-pages", "9")
    assert result.exit_code == 0, result.output
    assert "2 page(s) found" in result.output
    assert f"{URL}/b: HTTP 500" in result.output
    engine = FakeEngine.instances[0]
    assert engine.calls == [("crawl", URL, out, False)]
    assert engine.config.max_pages == 9


def test_crawl_rejects_relative_url(config_file):
    result = invoke("--config", str(config_file), "crawl", "docs.example.com")
    assert result.exit_code == 2
    assert not FakeEngine.instances


@pytest.mark.parametrize(
    "error",
    [
        CrawlError(URL, FetchError(FetchErrorKind.CONNECT_FAILED, URL, detail="refused")),
        VerificationError(URL),
    ],
)
def test_crawl_fatal_errors(config_file, error):
    FakeEngine.error = error
    result = invoke("--config", str(config_file), "crawl", URL)
    assert result.exit_code == 1
    assert "Ошибка" in result.output


def test_download_missing_input(config_file):
    result = invoke("--config", str(config_file), "download")
    assert result.exit_code == 1
    assert "gitbook2text crawl" in result.output
    assert not FakeEngine.instances


def test_download_empty_input(config_file, tmp_path):
    (tmp_path / "links.txt").write_text("# nothing yet\n\n", encoding="utf-8")
    result = invoke("--config", str(config_file), "download")
    assert result.exit_code == 1


def test_download_page_failures_are_not_fatal(config_file, tmp_path):
    links = tmp_path / "mine.txt"
    links.write_text(f"{URL}\n{URL}/a\n", encoding="utf-8")
    report = tmp_path / "reports" / "download.json"
    result = invoke("--config", str(config_file), "download", "-i", str(links), "--report", str(report))

    assert result.exit_code == 0, result.output
    assert "Succeeded: 1" in result.output
    assert "Failed: 1" in result.output
    assert FakeEngine.instances[0].calls == [("download", [URL, f"{URL}/a"])]
    data = json.loads(report.read_text(encoding="utf-8"))
    assert data["failures"] == [{"url": f"{URL}/a", "reason": "HTTP 404"}]


def test_no_subcommand_runs_download(config_file, tmp_path):
    (tmp_path / "links.txt").write_text(f"{URL}\n", encoding="utf-8")
    result = invoke("--config", str(config_file))
    assert result.exit_code == 0, result.output
    assert FakeEngine.instances[0].calls == [("download", [URL])]
    assert "Succeeded: 1" in result.output


def test_all(config_file, tmp_path):
    result = invoke("--config", str(config_file), "all", URL, "--output-dir", str(tmp_path / "out"))
    assert result.exit_code == 0, result.output
    engine = FakeEngine.instances[0]
    assert engine.config.output_dir == tmp_path / "out"
    assert engine.calls == [("crawl", URL, None, None), ("download", [URL, f"{URL}/a"])]
    assert "2 page(s) found" in result.output
    assert "Failed: 1" in result.output
