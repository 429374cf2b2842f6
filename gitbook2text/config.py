# === FILE: gitbook2text/config.py ===
"""
Модуль для загрузки и валидации конфигурации gitbook2text.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

_DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; gitbook2text/0.1)"


class AppConfig(BaseModel):
    """Конфигурация одного запуска: обход, загрузка и сохранение страниц."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field(_DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    retry_times: int = Field(2, ge=0, description="Число повторных попыток при 5xx/429 и обрыве соединения.")
    retry_backoff: float = Field(1.0, ge=0, description="Базовая задержка экспоненциального backoff (секунд).")
    rate_limit: Optional[float] = Field(None, gt=0, description="Лимит запросов в секунду (None — без лимита).")

    concurrency: int = Field(8, ge=1, description="Макс. число одновременных загрузок страниц.")
    prefetch: int = Field(4, ge=1, description="Сколько страниц фронтира краулер загружает параллельно.")
    max_pages: Optional[int] = Field(None, ge=1, description="Жесткий лимит по числу страниц обхода.")
    max_depth: Optional[int] = Field(None, ge=0, description="Максимальная глубина обхода ссылок.")
    stay_under_base_path: bool = Field(False, description="Обходить только страницы под путём базового URL.")
    verify_site: bool = Field(True, description="Проверять, что сайт построен на GitBook.")

    raw_suffix: str = Field(".md", description="Суффикс URL с исходным Markdown страницы.")
    links_file: Path = Field(Path("links.txt"), description="Файл со списком URL (по одному в строке).")
    output_dir: Path = Field(Path("data"), description="Каталог для md/ и txt/.")
    preserve_order: bool = Field(True, description="Сортировать результаты по порядку входных URL.")

    @field_validator("user_agent", mode="before")
    def _strip_user_agent(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None] = None) -> AppConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект AppConfig.

    Без явного пути используется configs/default.yaml, а если его нет —
    встроенные значения по умолчанию. Явно указанный, но отсутствующий файл
    приводит к FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return AppConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return AppConfig(**data)
