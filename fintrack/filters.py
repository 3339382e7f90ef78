"""Date-range filtering and ordering of expense records.

Range boundaries are calendar dates taken from an injectable clock so the
filters stay deterministic under test.  Production code passes nothing and
gets :class:`SystemClock`; tests pass a :class:`FixedClock`.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .models import as_records, to_frame

Clock = Callable[[], date]

RANGE_KINDS = ('all', 'today', 'thisMonth', 'lastMonth', 'thisYear', 'lastYear', 'custom')
RANGE_LABELS = {
    'all': 'All Time',
    'today': 'Today',
    'thisMonth': 'This Month',
    'lastMonth': 'Last Month',
    'thisYear': 'This Year',
    'lastYear': 'Last Year',
}
SORT_KEYS = ('date', 'amount', 'category', 'title')


class SystemClock:
    """Reads the local calendar date."""

    def __call__(self) -> date:
        return date.today()


class FixedClock:
    """Always returns the same date."""

    def __init__(self, today: Union[date, datetime, str]):
        if isinstance(today, datetime):
            today = today.date()
        elif isinstance(today, str):
            today = date.fromisoformat(today)
        self.today = today

    def __call__(self) -> date:
        return self.today


def _to_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class RangeSpec:
    """A named calendar window, or a custom inclusive date range."""
    kind: str = 'all'
    start_date: Optional[Union[str, date]] = None
    end_date: Optional[Union[str, date]] = None

    def __post_init__(self) -> None:
        if self.kind not in RANGE_KINDS:
            raise ValueError(
                f"Unknown date range '{self.kind}'. Expected one of: {', '.join(RANGE_KINDS)}"
            )

    @classmethod
    def custom(cls, start_date: Union[str, date], end_date: Union[str, date]) -> 'RangeSpec':
        return cls('custom', start_date, end_date)


def coerce_range(range_spec: Any) -> RangeSpec:
    """Accept a :class:`RangeSpec`, a kind name, or a mapping."""
    if range_spec is None:
        return RangeSpec()
    if isinstance(range_spec, RangeSpec):
        return range_spec
    if isinstance(range_spec, str):
        return RangeSpec(range_spec)
    if isinstance(range_spec, Mapping):
        return RangeSpec(
            range_spec.get('kind') or range_spec.get('type') or 'custom',
            range_spec.get('start_date', range_spec.get('startDate')),
            range_spec.get('end_date', range_spec.get('endDate')),
        )
    raise ValueError(f"Unsupported date range specification: {range_spec!r}")


def _month_bounds(year: int, month: int) -> Tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def range_bounds(range_spec: Any, today: date) -> Optional[Tuple[Optional[date], Optional[date]]]:
    """Return the inclusive ``(start, end)`` dates for a range, ``None`` for all time.

    Custom bounds that cannot be parsed come back as ``None`` entries.
    """
    spec = coerce_range(range_spec)
    if spec.kind == 'all':
        return None
    if spec.kind == 'today':
        return today, today
    if spec.kind == 'thisMonth':
        return _month_bounds(today.year, today.month)
    if spec.kind == 'lastMonth':
        previous = today.replace(day=1) - timedelta(days=1)
        return _month_bounds(previous.year, previous.month)
    if spec.kind == 'thisYear':
        return date(today.year, 1, 1), date(today.year, 12, 31)
    if spec.kind == 'lastYear':
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)
    return _to_date(spec.start_date), _to_date(spec.end_date)


def range_label(range_spec: Any) -> str:
    """Human-readable label for a range, e.g. ``Custom Range (Jan 01, 2024 - Jan 31, 2024)``."""
    spec = coerce_range(range_spec)
    if spec.kind != 'custom':
        return RANGE_LABELS[spec.kind]
    start, end = _to_date(spec.start_date), _to_date(spec.end_date)
    if start is None or end is None:
        return 'Custom Range'
    return f"Custom Range ({start.strftime('%b %d, %Y')} - {end.strftime('%b %d, %Y')})"


def _select(rows: List[Any], mask: pd.Series) -> List[Any]:
    positions = np.flatnonzero(mask.to_numpy(dtype=bool))
    return [rows[i] for i in positions]


def filter_by_range(records: Any, range_spec: Any = 'all', clock: Optional[Clock] = None) -> List[Any]:
    """Narrow ``records`` to the requested calendar window.

    Records with a missing or unparsable date only survive the ``all`` range.
    Output order follows input order; callers sort separately.
    """
    rows = as_records(records)
    spec = coerce_range(range_spec)
    if spec.kind == 'all' or not rows:
        return rows

    frame = to_frame(rows)
    today = (clock or SystemClock())()

    if spec.kind == 'today':
        return _select(rows, frame['date'] == today.isoformat())

    start, end = range_bounds(spec, today)
    if start is None or end is None:
        return []
    dates = frame['parsed_date']
    mask = dates.notna() & (dates >= pd.Timestamp(start)) & (dates <= pd.Timestamp(end))
    return _select(rows, mask)


def expenses_for_last_days(records: Any, days: int, clock: Optional[Clock] = None) -> List[Any]:
    """Records dated on or after ``today - days``."""
    rows = as_records(records)
    if not rows:
        return []
    cutoff = (clock or SystemClock())() - timedelta(days=days)
    dates = to_frame(rows)['parsed_date']
    return _select(rows, dates.notna() & (dates >= pd.Timestamp(cutoff)))


def filter_by_category(records: Any, category: Optional[str]) -> List[Any]:
    rows = as_records(records)
    if category in (None, '', 'All'):
        return rows
    return _select(rows, to_frame(rows)['category'] == category)


def _sort_key(series: pd.Series) -> pd.Series:
    if series.dtype == object:
        return series.map(lambda value: value.lower() if isinstance(value, str) else value)
    return series


def sort_expenses(records: Any, by: str = 'date', descending: bool = True) -> List[Any]:
    """Return a new list ordered by ``by``; ``created_at`` breaks ties.

    Records missing the sort key are placed last.  The input is not mutated.
    """
    if by not in SORT_KEYS:
        raise ValueError(f"Cannot sort expenses by '{by}'. Expected one of: {', '.join(SORT_KEYS)}")
    rows = as_records(records)
    if len(rows) < 2:
        return list(rows)

    frame = to_frame(rows)
    primary = 'parsed_date' if by == 'date' else by
    ordered = frame.sort_values(
        [primary, 'created_at'],
        ascending=not descending,
        kind='mergesort',
        na_position='last',
        key=_sort_key,
    )
    return [rows[i] for i in ordered.index]
