# === FILE: gitbook2text/cli.py ===
#!/usr/bin/env python3
"""
Точка входа gitbook2text для командной строки.

Команды:
  crawl URL     Проверить, что сайт — GitBook, и сохранить список страниц
  download      Скачать страницы из списка и сконвертировать их в текст
  all URL       crawl + download за один запуск
  config        Показать текущую конфигурацию
  (без команды) То же, что download с файлом ссылок по умолчанию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --concurrency INT   Макс. число одновременных загрузок
  --timeout SEC       Таймаут на один запрос
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Код выхода 1 — фатальная ошибка (базовый URL недоступен, сайт не GitBook,
нет файла ссылок), 130 — прерывание; ошибки отдельных страниц не фатальны.

Пример:
  gitbook2text all https://docs.example.com --report reports/download.json
"""
import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
from pydantic import ValidationError

from gitbook2text import __version__
from gitbook2text.aggregator import DownloadSummary
from gitbook2text.config import load_config
from gitbook2text.crawler.link_extractor import is_http_url
from gitbook2text.crawler.models import CrawlResult
from gitbook2text.engine import Engine
from gitbook2text.errors import CrawlError, VerificationError
from gitbook2text.logger import DEFAULT_FORMAT, init_logging
from gitbook2text.report.json_report import render_json
from gitbook2text.utils import read_url_list

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str, code: int = 1):
    click.secho(message, fg='red', err=True)
    sys.exit(code)


def _validate_url(ctx, param, value: Optional[str]) -> Optional[str]:
    if value is not None and not is_http_url(value):
        raise click.BadParameter(f'ожидается абсолютный http(s) URL, получено {value!r}')
    return value


def _apply_overrides(ctx: click.Context, **overrides: Any) -> None:
    updates: Dict[str, Any] = {k: v for k, v in overrides.items() if v is not None}
    if updates:
        ctx.obj['config'] = ctx.obj['config'].model_copy(update=updates)


def _run(coro):
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        print_error('Прервано пользователем; уже сохранённые страницы сохранены.', code=130)
    except (CrawlError, VerificationError) as e:
        print_error(f'Ошибка: {e}')


def _echo_crawl(result: CrawlResult) -> None:
    click.echo(f'✅ {len(result.pages)} page(s) found')
    if result.failures:
        click.echo(f'⚠️  {len(result.failures)} page(s) could not be explored:')
        for failure in result.failures:
            click.echo(f'  - {failure.url}: {failure.reason}')


def _echo_summary(summary: DownloadSummary) -> None:
    click.echo('\n📊 Summary:')
    click.echo(f'  ✅ Succeeded: {summary.succeeded}')
    click.echo(f'  ❌ Failed: {summary.failed}')
    if summary.skipped:
        click.echo(f'  ⏭  Skipped: {summary.skipped}')
    for failure in summary.failures:
        click.echo(f'  - {failure["url"]}: {failure["reason"]}')


def _save_report(summary: DownloadSummary, report: Optional[Path]) -> None:
    if report is None:
        return
    try:
        saved = render_json(summary, report)
        click.echo(f'JSON report: {saved}')
    except OSError as e:
        print_error(f'Ошибка при сохранении JSON: {e}')


@click.group(context_settings=CONTEXT_SETTINGS, invoke_without_command=True)
@click.version_option(__version__, '--version', '-v', message='gitbook2text, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option('--concurrency', type=click.IntRange(min=1), default=None, help='Макс. число одновременных загрузок')
@click.option('--timeout', type=click.FloatRange(min=0, min_open=True), default=None, help='Таймаут запроса (секунд)')
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, concurrency, timeout, log_level, log_file, log_format):
    """Скачивает страницы GitBook и превращает их в чистый текст."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError, ValidationError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg
    _apply_overrides(ctx, concurrency=concurrency, timeout=timeout)

    if ctx.invoked_subcommand is None:
        ctx.invoke(download)


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url', callback=_validate_url)
@click.option('--output', '-o', default=None, type=click.Path(dir_okay=False, path_type=Path),
              help='Файл для списка ссылок (default: links_file из конфига)')
@click.option('--verify/--no-verify', default=None, help='Проверять GitBook-сигнатуры перед обходом')
@click.option('--max-pages', type=click.IntRange(min=1), default=None, help='Макс. число страниц')
@click.option('--max-depth', type=click.IntRange(min=0), default=None, help='Макс. глубина ссылок')
@click.pass_context
def crawl(ctx, url, output, verify, max_pages, max_depth):
    """Найти все страницы GitBook и сохранить их URL."""
    _apply_overrides(ctx, max_pages=max_pages, max_depth=max_depth)
    cfg = ctx.obj['config']
    click.echo(f'🕷️  Crawling {url}')
    engine = Engine(cfg)
    result = _run(engine.crawl_to_file(url, output, verify=verify))
    _echo_crawl(result)
    click.echo(f'💾 Links saved to {output or cfg.links_file}')


@cli.command('download', context_settings=CONTEXT_SETTINGS)
@click.option('--input', '-i', 'input_path', default=None, type=click.Path(dir_okay=False, path_type=Path),
              help='Файл со списком ссылок (default: links_file из конфига)')
@click.option('--output-dir', default=None, type=click.Path(file_okay=False, path_type=Path),
              help='Каталог для md/ и txt/')
@click.option('--report', default=None, type=click.Path(dir_okay=False, path_type=Path),
              help='Сохранить JSON-сводку в файл')
@click.pass_context
def download(ctx, input_path=None, output_dir=None, report=None):
    """Скачать страницы из списка и сохранить Markdown и текст."""
    _apply_overrides(ctx, output_dir=output_dir)
    cfg = ctx.obj['config']
    source = input_path or cfg.links_file
    try:
        urls = read_url_list(source)
    except OSError as e:
        print_error(f'Не удалось прочитать {source}: {e}. '
                    f"Используйте 'gitbook2text crawl <URL>' чтобы создать файл.")
    if not urls:
        print_error(f'В {source} нет ни одного URL')
    click.echo(f'📥 Downloading {len(urls)} page(s)…')
    summary = _run(Engine(cfg).download(urls))
    _echo_summary(summary)
    _save_report(summary, report)


@cli.command('all', context_settings=CONTEXT_SETTINGS)
@click.argument('url', callback=_validate_url)
@click.option('--verify/--no-verify', default=None, help='Проверять GitBook-сигнатуры перед обходом')
@click.option('--max-pages', type=click.IntRange(min=1), default=None, help='Макс. число страниц')
@click.option('--max-depth', type=click.IntRange(min=0), default=None, help='Макс. глубина ссылок')
@click.option('--output-dir', default=None, type=click.Path(file_okay=False, path_type=Path),
              help='Каталог для md/ и txt/')
@click.option('--report', default=None, type=click.Path(dir_okay=False, path_type=Path),
              help='Сохранить JSON-сводку в файл')
@click.pass_context
def run_all(ctx, url, verify, max_pages, max_depth, output_dir, report):
    """Обход сайта и загрузка всех найденных страниц."""
    _apply_overrides(ctx, max_pages=max_pages, max_depth=max_depth, output_dir=output_dir)
    cfg = ctx.obj['config']
    click.echo(f'🚀 Crawl + download: {url}')
    summary = _run(Engine(cfg).run_all(url, verify=verify))
    if summary.crawl is not None:
        _echo_crawl(summary.crawl)
    _echo_summary(summary)
    _save_report(summary, report)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
