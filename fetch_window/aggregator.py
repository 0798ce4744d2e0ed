# File: fetch_window/aggregator.py
"""fetch_window.aggregator: сводный отчёт по результатам загрузки."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import List, Sequence, TypedDict, Union

from fetch_window.fetcher.models import Outcome


class OutcomeInfo(TypedDict, total=False):
    """Информация о результате загрузки одного ресурса."""

    index: int
    locator: str
    ok: bool
    size: int
    error: Union[str, None]
    status: Union[int, None]
    content: Union[str, None]


@dataclass(slots=True)
class FetchReport:
    """Результаты запуска: строки по каждому ресурсу и итоговые счётчики."""

    outcomes: List[OutcomeInfo] = field(default_factory=list)
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    limit: Union[int, None] = None
    elapsed: float = 0.0

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление FetchReport."""
        return json.dumps(asdict(self), ensure_ascii=False, indent=2 if pretty else None)

    def failures(self) -> List[OutcomeInfo]:
        return [row for row in self.outcomes if not row.get("ok")]


def _size(content: Union[str, bytes]) -> int:
    return len(content.encode("utf-8")) if isinstance(content, str) else len(content)


def _outcome_row(outcome: Outcome, include_content: bool) -> OutcomeInfo:
    """Преобразует Content/Failure в строку отчёта."""
    row: OutcomeInfo = {"index": outcome.index, "locator": outcome.locator, "ok": outcome.ok}
    if outcome.ok:
        row.update(size=_size(outcome.content), error=None, status=None)
        if include_content:
            content = outcome.content
            row["content"] = content if isinstance(content, str) else content.decode("utf-8", "replace")
    else:
        row.update(size=0, error=outcome.error.reason, status=outcome.error.status)
    return row


def aggregate_outcomes(
    outcomes: Sequence[Outcome],
    *,
    limit: Union[int, None] = None,
    elapsed: float = 0.0,
    ordered: bool = False,
    include_content: bool = False,
) -> FetchReport:
    """Собирает все части отчёта в FetchReport.

    Строки идут в порядке завершения загрузок, если не задан ``ordered``.
    """
    items = sorted(outcomes, key=lambda o: o.index) if ordered else list(outcomes)
    report = FetchReport(limit=limit, elapsed=round(elapsed, 3))
    report.outcomes = [_outcome_row(o, include_content) for o in items]
    report.total = len(items)
    report.succeeded = sum(1 for o in items if o.ok)
    report.failed = report.total - report.succeeded
    return report


__all__ = ["OutcomeInfo", "FetchReport", "aggregate_outcomes"]
