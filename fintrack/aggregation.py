"""Expense aggregation: totals, breakdowns, trends and spending insights.

Every calculation degrades to a neutral value (``0``, ``None`` or an empty
list) for empty input, missing amounts or unparsable dates rather than
raising.  :class:`ExpenseAnalytics` prepares one snapshot once and answers
repeated questions about it; the module-level functions are one-shot
shortcuts over the same class.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from .formatting import format_currency
from .models import Category, to_frame
from .settings import get_config_value

UNCATEGORIZED = 'Uncategorized'


@dataclass(frozen=True)
class CategoryShare:
    category: str
    amount: float
    percentage: float


@dataclass(frozen=True)
class TopCategory:
    name: str
    amount: float


@dataclass(frozen=True)
class MonthlyTotal:
    month: str  # YYYY-MM
    amount: float


@dataclass(frozen=True)
class InsightThresholds:
    """Advisory limits for :meth:`ExpenseAnalytics.generate_insights`."""
    category_share_percent: float = 50.0
    average_transaction: float = 100.0
    transaction_count: int = 50

    @classmethod
    def from_config(cls) -> 'InsightThresholds':
        defaults = cls()
        return cls(
            category_share_percent=float(get_config_value(
                'reports', 'insights', 'category_share_percent', default=defaults.category_share_percent)),
            average_transaction=float(get_config_value(
                'reports', 'insights', 'average_transaction', default=defaults.average_transaction)),
            transaction_count=int(get_config_value(
                'reports', 'insights', 'transaction_count', default=defaults.transaction_count)),
        )


def _category_names(categories: Iterable[Any]) -> List[str]:
    names: List[str] = []
    for item in categories:
        name = item.name if isinstance(item, Category) else str(item)
        if name not in names:
            names.append(name)
    return names


class ExpenseAnalytics:
    """Aggregations over a single snapshot of expense records."""

    def __init__(self, records: Any):
        """Initialize with records, a DataFrame, or ``None``."""
        self.data = to_frame(records)
        self._prepare_data()

    def _prepare_data(self) -> None:
        self.data['category'] = self.data['category'].map(
            lambda value: value if isinstance(value, str) and value else UNCATEGORIZED
        )

    @property
    def count(self) -> int:
        return len(self.data)

    def total(self) -> float:
        if self.data.empty:
            return 0.0
        return float(self.data['amount'].sum())

    def total_by_category(self, category: str) -> float:
        mask = self.data['category'] == category
        return float(self.data.loc[mask, 'amount'].sum())

    def total_by_month(self, month: str) -> float:
        """Sum of records whose date string starts with ``month`` (``YYYY-MM``)."""
        mask = self.data['date'].map(lambda value: isinstance(value, str) and value.startswith(month))
        return float(self.data.loc[mask.astype(bool), 'amount'].sum())

    def average(self) -> float:
        return self.total() / self.count if self.count else 0.0

    def _category_sums(self) -> pd.Series:
        # sort=False keeps categories in first-encountered order
        return self.data.groupby('category', sort=False)['amount'].sum()

    def category_breakdown(self, categories: Optional[Iterable[Any]] = None) -> List[CategoryShare]:
        """Per-category totals with their share of the overall total.

        When ``categories`` is given (names, :class:`Category` objects or a
        :class:`CategorySet`) each of them is listed even with zero activity,
        in the given order; categories only present in the records follow.
        """
        totals: Dict[str, float] = dict.fromkeys(_category_names(categories or ()), 0.0)
        for name, amount in self._category_sums().items():
            totals[name] = totals.get(name, 0.0) + float(amount)
        if not totals:
            return []

        amounts = np.fromiter(totals.values(), dtype=float, count=len(totals))
        total = self.total()
        percentages = amounts / total * 100 if total > 0 else np.zeros(len(amounts))
        return [
            CategoryShare(category=name, amount=float(amount), percentage=float(pct))
            for name, amount, pct in zip(totals.keys(), amounts, percentages)
        ]

    def top_category(self) -> Optional[TopCategory]:
        """Category with the strictly largest positive sum; first one wins ties."""
        sums = self._category_sums()
        sums = sums[sums > 0]
        if sums.empty:
            return None
        name = sums.idxmax()
        return TopCategory(name=name, amount=float(sums[name]))

    def monthly_trend(self) -> List[MonthlyTotal]:
        """Per-month totals in calendar order; undated records are skipped."""
        dated = self.data[self.data['parsed_date'].notna()]
        if dated.empty:
            return []
        months = dated['parsed_date'].dt.to_period('M')
        sums = dated.groupby(months)['amount'].sum().sort_index()
        return [MonthlyTotal(month=str(period), amount=float(amount)) for period, amount in sums.items()]

    def generate_insights(self, thresholds: Optional[InsightThresholds] = None) -> List[str]:
        """Advisory spending messages; empty for an empty snapshot."""
        if not self.count:
            return []
        limits = thresholds or InsightThresholds.from_config()
        insights: List[str] = []

        total = self.total()
        top = self.top_category()
        share = (top.amount / total * 100) if top and total > 0 else 0.0
        if top and share > limits.category_share_percent:
            insights.append(f"You spend {share:.1f}% of your money on {top.name}")

        average = self.average()
        if average > limits.average_transaction:
            insights.append(
                f"Your average transaction is {format_currency(average)}, consider reviewing larger expenses"
            )

        if self.count > limits.transaction_count:
            insights.append(f"You have {self.count} transactions in this period")
        return insights


def total(records: Any) -> float:
    return ExpenseAnalytics(records).total()


def total_by_category(records: Any, category: str) -> float:
    return ExpenseAnalytics(records).total_by_category(category)


def total_by_month(records: Any, month: str) -> float:
    return ExpenseAnalytics(records).total_by_month(month)


def average(records: Any) -> float:
    return ExpenseAnalytics(records).average()


def category_breakdown(records: Any, categories: Optional[Iterable[Any]] = None) -> List[CategoryShare]:
    return ExpenseAnalytics(records).category_breakdown(categories)


def top_category(records: Any) -> Optional[TopCategory]:
    return ExpenseAnalytics(records).top_category()


def monthly_trend(records: Any) -> List[MonthlyTotal]:
    return ExpenseAnalytics(records).monthly_trend()


def generate_insights(records: Any, thresholds: Optional[InsightThresholds] = None) -> List[str]:
    return ExpenseAnalytics(records).generate_insights(thresholds)
