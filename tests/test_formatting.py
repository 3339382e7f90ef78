import math
from datetime import date

from fintrack.formatting import (
    escape_dollar_for_markdown,
    format_amount,
    format_currency,
    format_display_date,
)


def test_format_currency():
    assert format_currency(1234.56, symbol='$') == '$1,234.56'
    assert format_currency(-123.45, symbol='$') == '-$123.45'
    assert format_currency(None, symbol='$') == '$0.00'
    assert format_currency(math.nan, symbol='$') == '$0.00'
    assert format_currency(1234.56, include_sign=False) == '1,234.56'


def test_format_amount():
    assert format_amount(12.5) == '12.50'
    assert format_amount(None) == '0.00'


def test_escape_dollar_for_markdown():
    assert escape_dollar_for_markdown(5).endswith('5.00')
    assert '$' not in escape_dollar_for_markdown(5).replace('\\$', '')


def test_format_display_date():
    assert format_display_date('2024-01-15') == 'Jan 15, 2024'
    assert format_display_date(date(2024, 2, 29)) == 'Feb 29, 2024'
    assert format_display_date('someday') == 'someday'
    assert format_display_date(None) == ''
