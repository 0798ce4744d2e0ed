# File: fetch_window/utils.py
"""fetch_window.utils: Утилитарные функции для работы со списками ресурсов и путями."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Sequence, Union
from urllib.parse import urlparse

from fetch_window.logger import logger

__all__: Sequence[str] = (
    "SUPPORTED_SCHEMES",
    "locator_scheme",
    "is_supported_locator",
    "read_locators",
    "merge_locators",
)

SUPPORTED_SCHEMES = ("http", "https", "file")


def locator_scheme(locator: str) -> str:
    """Схема ресурса; для локальных путей (в т.ч. ``C:\\...``) возвращает ``file``."""
    scheme = urlparse(locator).scheme.lower()
    return "file" if len(scheme) <= 1 else scheme


def is_supported_locator(locator: str) -> bool:
    """Проверяет, что ресурс можно загрузить встроенным Fetcher."""
    supported = bool(locator.strip()) and locator_scheme(locator) in SUPPORTED_SCHEMES
    logger.debug("Locator supported: %s -> %s", locator, supported)
    return supported


def read_locators(path: Union[str, Path]) -> List[str]:
    """Читает файл ресурсов: непустые строки без пробелов, строки с ``#`` пропускаются."""
    p = Path(path)
    if not p.exists():
        logger.error("Locators file not found: %s", p)
        raise FileNotFoundError(f"Locators file not found: {p}")
    items = []
    for line in p.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            items.append(line)
    logger.debug("Loaded %d locators from %s", len(items), p)
    return items


def merge_locators(*sources: Iterable[str]) -> List[str]:
    """Склеивает несколько источников в один список, сохраняя порядок и повторы."""
    merged: List[str] = []
    for source in sources:
        merged.extend(item for item in source if item)
    return merged
