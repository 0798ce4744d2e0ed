# fetch_window/hashing.py
"""Digest helpers applied to already downloaded content."""
from __future__ import annotations

import hashlib
from typing import Union

from fetch_window.errors import ConfigurationError

DEFAULT_ALGORITHM = "md5"


def check_algorithm(algorithm: str) -> str:
    """Normalize *algorithm* and make sure hashlib provides it."""
    name = algorithm.lower()
    if name not in hashlib.algorithms_available:
        raise ConfigurationError(f"unknown hash algorithm: {algorithm}")
    return name


def digest(data: Union[bytes, str], algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Return the lowercase hex digest of *data* (text is hashed as UTF-8)."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    h = hashlib.new(check_algorithm(algorithm))
    h.update(data)
    # shake_* digests need an explicit length
    if h.digest_size == 0:
        return h.hexdigest(32)  # type: ignore[call-arg]
    return h.hexdigest()


__all__ = ["DEFAULT_ALGORITHM", "check_algorithm", "digest"]
