# gitbook2text/report/json_report.py
"""
JSON-сводка загрузки: счётчики, неудачные страницы с причинами,
статус каждой страницы и, после ``all``, итоги обхода.
Текст страниц в отчёт не попадает.
"""
from pathlib import Path

from gitbook2text.aggregator import DownloadSummary
from gitbook2text.logger import logger


def render_json(summary: DownloadSummary, output_path: Path | str) -> Path:
    """
    Записывает ``summary.json(pretty=True)`` в *output_path*, создавая каталоги.

    >>> render_json(summary, "reports/download.json")  # doctest: +SKIP
    PosixPath('reports/download.json')
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(summary.json(pretty=True) + "\n", encoding="utf-8")
    logger.info("Report saved: %s (%d page(s))", output, len(summary.results))
    return output
