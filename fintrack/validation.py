"""Expense validation.

``validate_expense`` is the pure record check run before anything is
persisted.  ``validate_expense_form`` is the stricter variant used by the
entry form, which also parses raw text input and rejects future dates.
Neither raises for bad input; both return a :class:`ValidationResult`.
"""

from __future__ import annotations

import math
import numbers
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Optional

from .models import get_field

Clock = Callable[[], date]


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.is_valid


VALID = ValidationResult(True)


def _is_positive_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    number = float(value)
    return math.isfinite(number) and number > 0


def validate_expense(candidate: Any) -> ValidationResult:
    """Check title and amount of an expense-like object or mapping.

    Example:
        >>> validate_expense({'title': 'Coffee', 'amount': 5}).is_valid
        True
        >>> validate_expense({'title': '', 'amount': 10}).error
        'Title is required'
    """
    title = get_field(candidate, 'title')
    if not isinstance(title, str) or not title.strip():
        return ValidationResult(False, 'Title is required')
    if not _is_positive_number(get_field(candidate, 'amount')):
        return ValidationResult(False, 'Amount must be positive')
    return VALID


_AMOUNT_INPUT = re.compile(r'^\d*(\.\d{0,2})?$')


def clean_amount_input(text: Any) -> Optional[str]:
    """Sanitize typed amount text the way the entry form does.

    Non-numeric characters are dropped.  Input with more than one decimal
    point or more than two decimal places is refused (``None``).

    Example:
        >>> clean_amount_input('$1,234.5')
        '1234.5'
        >>> clean_amount_input('1.234') is None
        True
    """
    if text is None:
        return ''
    cleaned = re.sub(r'[^0-9.]', '', str(text))
    if not _AMOUNT_INPUT.match(cleaned):
        return None
    return cleaned


def _parse_form_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.strptime(value.strip(), '%Y-%m-%d').date()
        except ValueError:
            return None
    return None


def validate_expense_form(
    amount: Any,
    title: Any,
    expense_date: Any,
    clock: Optional[Clock] = None,
) -> ValidationResult:
    """Validate raw entry-form input before submission.

    Checks run in form order: amount, title, date present, date not after
    the end of the current day.
    """
    try:
        amount_value = float(amount) if not isinstance(amount, bool) else math.nan
    except (TypeError, ValueError):
        amount_value = math.nan
    if not math.isfinite(amount_value) or amount_value <= 0:
        return ValidationResult(False, 'Please enter a valid amount')

    if not isinstance(title, str) or not title.strip():
        return ValidationResult(False, 'Please enter a title')

    if expense_date is None or (isinstance(expense_date, str) and not expense_date.strip()):
        return ValidationResult(False, 'Please select a date')
    parsed = _parse_form_date(expense_date)
    if parsed is None:
        return ValidationResult(False, 'Please select a date')

    today = (clock or date.today)()
    if parsed > today:
        return ValidationResult(False, 'Date cannot be in the future')
    return VALID
