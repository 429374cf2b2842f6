"""gitbook2text.report: сохранение итоговой сводки загрузки в файл."""

from __future__ import annotations

from .json_report import render_json

__all__ = ["render_json"]
