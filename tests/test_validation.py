import math
from datetime import date

import pytest

from fintrack.filters import FixedClock
from fintrack.models import Expense
from fintrack.validation import clean_amount_input, validate_expense, validate_expense_form


def test_well_formed_expense_is_valid():
    result = validate_expense({'title': 'Coffee', 'amount': 5})
    assert result.is_valid
    assert result.error is None
    assert bool(result)


@pytest.mark.parametrize("title", ['', '   ', None, 42])
def test_blank_or_missing_title_is_rejected(title):
    result = validate_expense({'title': title, 'amount': 10})
    assert not result.is_valid
    assert 'title' in result.error.lower()


@pytest.mark.parametrize("amount", [0, -5, None, '10', True, math.nan, math.inf])
def test_non_positive_or_non_numeric_amount_is_rejected(amount):
    result = validate_expense({'title': 'Lunch', 'amount': amount})
    assert not result.is_valid
    assert 'amount' in result.error.lower()


def test_title_is_checked_before_amount():
    assert validate_expense({'title': '', 'amount': -1}).error == 'Title is required'


def test_expense_objects_are_accepted():
    expense = Expense(title='Taxi', amount=12.5, category='Transport', date='2024-01-01')
    assert validate_expense(expense).is_valid


def test_clean_amount_input_strips_symbols():
    assert clean_amount_input('$1,234.5') == '1234.5'
    assert clean_amount_input('12.34') == '12.34'
    assert clean_amount_input(None) == ''


@pytest.mark.parametrize("text", ['1.234', '1.2.3'])
def test_clean_amount_input_refuses_malformed_decimals(text):
    assert clean_amount_input(text) is None


def test_form_validation_messages_follow_field_order():
    clock = FixedClock(date(2024, 3, 15))
    assert validate_expense_form('', 'Lunch', date(2024, 3, 1), clock).error == 'Please enter a valid amount'
    assert validate_expense_form('0', 'Lunch', date(2024, 3, 1), clock).error == 'Please enter a valid amount'
    assert validate_expense_form('12', ' ', date(2024, 3, 1), clock).error == 'Please enter a title'
    assert validate_expense_form('12', 'Lunch', None, clock).error == 'Please select a date'
    assert validate_expense_form('12', 'Lunch', '', clock).error == 'Please select a date'


def test_form_rejects_future_dates():
    clock = FixedClock(date(2024, 3, 15))
    result = validate_expense_form('12', 'Lunch', '2024-03-16', clock)
    assert result.error == 'Date cannot be in the future'
    assert validate_expense_form('12', 'Lunch', date(2024, 3, 15), clock).is_valid
