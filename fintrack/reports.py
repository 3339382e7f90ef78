"""Report formatting: chart series, export rows and the combined report.

This module turns aggregation output into the two shapes consumers need:
chart series (``{'labels': [...], 'datasets': [{'data': [...], ...}]}``)
and flat export rows.  :func:`build_report` runs the whole
filter → aggregate → format pipeline for one snapshot.  Nothing here
touches the network or the file system; writing files is the job of
:mod:`fintrack.export`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from .aggregation import (
    CategoryShare,
    ExpenseAnalytics,
    InsightThresholds,
    MonthlyTotal,
    TopCategory,
)
from .filters import Clock, SystemClock, coerce_range, filter_by_range, range_label, sort_expenses
from .formatting import format_amount, format_display_date
from .models import as_records, get_field
from .settings import get_config_value

EXPORT_HEADERS = ['Date', 'Category', 'Title', 'Amount']

_DEFAULT_PALETTE = ['#4fd1c5', '#f687b3', '#f6ad55', '#68d391', '#63b3ed', '#b794f4']


def chart_palette() -> List[str]:
    return list(get_config_value('reports', 'charts', 'palette', default=_DEFAULT_PALETTE))


def _line_style() -> Dict[str, Any]:
    return dict(get_config_value('reports', 'charts', 'line', default={'label': 'Monthly Spending'}))


# ---------------------------------------------------------------------------
# Chart series
# ---------------------------------------------------------------------------


def category_chart_data(breakdown: Sequence[CategoryShare]) -> Dict[str, Any]:
    """Pie/bar series with one label per category, index-aligned with the values."""
    return {
        'labels': [share.category for share in breakdown],
        'datasets': [{
            'data': [share.amount for share in breakdown],
            'backgroundColor': chart_palette(),
        }],
    }


def month_label(month: str) -> str:
    """``'2024-01'`` → ``'Jan 2024'``."""
    try:
        return pd.Period(month, freq='M').strftime('%b %Y')
    except ValueError:
        return month


def monthly_chart_data(trend: Sequence[MonthlyTotal]) -> Dict[str, Any]:
    """Line series in chronological order, labelled ``MMM yyyy``."""
    dataset = _line_style()
    dataset['data'] = [point.amount for point in trend]
    return {
        'labels': [month_label(point.month) for point in trend],
        'datasets': [dataset],
    }


# ---------------------------------------------------------------------------
# Export rows
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExportRow:
    date: str
    category: str
    title: str
    amount: str

    def as_list(self) -> List[str]:
        return [self.date, self.category, self.title, self.amount]


def export_rows(records: Any) -> List[ExportRow]:
    """One row per record: display date, category, title, two-decimal amount."""
    rows: List[ExportRow] = []
    for record in as_records(records):
        rows.append(ExportRow(
            date=format_display_date(get_field(record, 'date')),
            category=str(get_field(record, 'category') or ''),
            title=str(get_field(record, 'title') or ''),
            amount=format_amount(get_field(record, 'amount')),
        ))
    return rows


def rows_frame(rows: Sequence[ExportRow]) -> pd.DataFrame:
    return pd.DataFrame([row.as_list() for row in rows], columns=EXPORT_HEADERS)


# ---------------------------------------------------------------------------
# Combined report
# ---------------------------------------------------------------------------


@dataclass
class Report:
    """Everything the reports page and the export sinks need for one snapshot."""
    range_label: str
    generated_on: date
    records: List[Any]
    count: int
    total: float
    average: float
    top_category: Optional[TopCategory]
    breakdown: List[CategoryShare]
    monthly_trend: List[MonthlyTotal]
    insights: List[str]
    category_chart: Dict[str, Any] = field(default_factory=dict)
    monthly_chart: Dict[str, Any] = field(default_factory=dict)
    rows: List[ExportRow] = field(default_factory=list)


def build_report(
    records: Any,
    range_spec: Any = 'all',
    categories: Optional[Sequence[Any]] = None,
    clock: Optional[Clock] = None,
    thresholds: Optional[InsightThresholds] = None,
) -> Report:
    """Filter, aggregate and format one snapshot of records.

    Filtered records are ordered newest first, which is also the order of
    the export rows.
    """
    clock = clock or SystemClock()
    spec = coerce_range(range_spec)
    filtered = sort_expenses(filter_by_range(records, spec, clock=clock), by='date', descending=True)
    analytics = ExpenseAnalytics(filtered)
    breakdown = analytics.category_breakdown(categories)
    trend = analytics.monthly_trend()
    return Report(
        range_label=range_label(spec),
        generated_on=clock(),
        records=filtered,
        count=analytics.count,
        total=analytics.total(),
        average=analytics.average(),
        top_category=analytics.top_category(),
        breakdown=breakdown,
        monthly_trend=trend,
        insights=analytics.generate_insights(thresholds),
        category_chart=category_chart_data(breakdown),
        monthly_chart=monthly_chart_data(trend),
        rows=export_rows(filtered),
    )
