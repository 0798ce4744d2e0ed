# File: fetch_window/errors.py
"""fetch_window.errors: иерархия исключений FetchWindow."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from fetch_window.fetcher.models import Failure, Outcome

__all__ = (
    "FetchWindowError",
    "ConfigurationError",
    "FetchError",
    "AggregateFailure",
)


class FetchWindowError(Exception):
    """Base class for every error raised by the package."""


class ConfigurationError(FetchWindowError, ValueError):
    """Invalid settings detected before any fetch was issued (e.g. limit < 1)."""


class FetchError(FetchWindowError):
    """A single locator could not be fetched."""

    def __init__(self, locator: str, reason: str, *, status: Optional[int] = None) -> None:
        self.locator = locator
        self.reason = reason
        self.status = status
        super().__init__(f"{locator}: {reason}")


class AggregateFailure(FetchWindowError):
    """
    All-or-nothing result of a run: at least one fetch failed.

    Raised only after every fetch settled, so ``outcomes`` is a complete
    accounting of the run and ``first`` is the earliest failure observed.
    """

    def __init__(self, first: Failure, outcomes: Sequence[Outcome]) -> None:
        self.first = first
        self.outcomes: List[Outcome] = list(outcomes)
        failed = sum(1 for o in self.outcomes if not o.ok)
        super().__init__(
            f"{failed} of {len(self.outcomes)} fetches failed; first: {first.error}"
        )
