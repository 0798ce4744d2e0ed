# === FILE: fetch_window/config.py ===
"""
Модуль для загрузки и валидации конфигурации FetchWindow.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from fetch_window.hashing import check_algorithm
from fetch_window.utils import read_locators


class FetcherConfig(BaseModel):
    """Конфигурация одного запуска загрузки."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_concurrency: int = Field(4, ge=1, description="Максимум одновременных запросов (K).")
    timeout: Optional[float] = Field(None, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field("FetchWindow/0.1", min_length=1, description="Заголовок User-Agent.")
    hash_algorithm: str = Field("md5", description="Алгоритм хеширования для fetch_and_hash.")
    raise_on_failure: bool = Field(False, description="Считать запуск неудачным при любой ошибке.")
    ordered: bool = Field(False, description="Возвращать результаты в порядке входа.")
    locators: List[str] = Field(default_factory=list, description="Список ресурсов для загрузки.")
    locators_file: Optional[Path] = Field(None, description="Файл со списком ресурсов, по одному в строке.")

    @field_validator("hash_algorithm")
    def _check_algorithm(cls, v: str) -> str:
        return check_algorithm(v)

    @field_validator("locators")
    def _strip_locators(cls, v: List[str]) -> List[str]:
        return [item.strip() for item in v if item.strip()]

    @model_validator(mode="after")
    def _check_locators_file_exists(self) -> FetcherConfig:
        if self.locators_file is not None and not Path(self.locators_file).is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(self.locators_file))
        return self

    def all_locators(self) -> List[str]:
        """Locators from the config followed by those listed in ``locators_file``."""
        items = list(self.locators)
        if self.locators_file is not None:
            items.extend(read_locators(self.locators_file))
        return items


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


def load_config(path: Union[str, Path, None]) -> FetcherConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект FetcherConfig.
    При отсутствии файла конфига или файла со списком ресурсов бросает FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
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

    # relative locators_file is resolved against the config file location
    locators_file = data.get("locators_file")
    if isinstance(locators_file, str) and not Path(locators_file).expanduser().is_absolute():
        data["locators_file"] = str(path_obj.parent / locators_file)

    return FetcherConfig(**data)


__all__ = ["FetcherConfig", "load_config"]
