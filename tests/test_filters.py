from datetime import date

import pandas as pd
import pytest

from fintrack.filters import (
    FixedClock,
    RangeSpec,
    expenses_for_last_days,
    filter_by_category,
    filter_by_range,
    range_bounds,
    range_label,
    sort_expenses,
)


def _build_records():
    return [
        {'id': 'a', 'title': 'Coffee', 'amount': 4, 'category': 'Food', 'date': '2024-03-15'},
        {'id': 'b', 'title': 'Rent', 'amount': 900, 'category': 'Rent', 'date': '2024-03-01'},
        {'id': 'c', 'title': 'Cinema', 'amount': 15, 'category': 'Entertainment', 'date': '2024-02-29'},
        {'id': 'd', 'title': 'Power', 'amount': 60, 'category': 'Utilities', 'date': '2024-02-01'},
        {'id': 'e', 'title': 'Party', 'amount': 80, 'category': 'Entertainment', 'date': '2023-12-31'},
        {'id': 'f', 'title': 'Train', 'amount': 30, 'category': 'Transport', 'date': '2023-06-10'},
        {'id': 'g', 'title': 'Undated', 'amount': 5, 'category': 'Other', 'date': None},
        {'id': 'h', 'title': 'Broken', 'amount': 5, 'category': 'Other', 'date': 'not-a-date'},
    ]


def _ids(records):
    return [record['id'] for record in records]


@pytest.mark.parametrize("kind, expected", [
    ('today', ['a']),
    ('thisMonth', ['a', 'b']),
    ('lastMonth', ['c', 'd']),
    ('thisYear', ['a', 'b', 'c', 'd']),
    ('lastYear', ['e', 'f']),
])
def test_named_ranges(kind, expected, clock):
    assert _ids(filter_by_range(_build_records(), kind, clock=clock)) == expected


def test_all_range_is_identity(clock):
    records = _build_records()
    assert filter_by_range(records, 'all', clock=clock) == records


def test_custom_range_is_inclusive(clock):
    spec = RangeSpec.custom('2024-02-01', '2024-02-29')
    assert _ids(filter_by_range(_build_records(), spec, clock=clock)) == ['c', 'd']


def test_custom_range_accepts_mapping(clock):
    spec = {'kind': 'custom', 'startDate': '2023-12-31', 'endDate': '2023-12-31'}
    assert _ids(filter_by_range(_build_records(), spec, clock=clock)) == ['e']


def test_custom_range_with_unparsable_bounds_is_empty(clock):
    spec = RangeSpec.custom('yesterday', '2024-02-29')
    assert filter_by_range(_build_records(), spec, clock=clock) == []


def test_filtering_is_idempotent(clock):
    records = _build_records()
    for kind in ('today', 'thisMonth', 'lastMonth', 'thisYear', 'lastYear'):
        once = filter_by_range(records, kind, clock=clock)
        assert filter_by_range(once, kind, clock=clock) == once


def test_last_month_in_january_wraps_to_december():
    january = FixedClock('2024-01-10')
    assert _ids(filter_by_range(_build_records(), 'lastMonth', clock=january)) == ['e']


def test_unknown_range_raises():
    with pytest.raises(ValueError):
        filter_by_range(_build_records(), 'nextWeek')


def test_empty_and_none_inputs(clock):
    assert filter_by_range([], 'thisMonth', clock=clock) == []
    assert filter_by_range(None, 'thisMonth', clock=clock) == []


def test_dataframe_input_returns_row_dicts(clock):
    df = pd.DataFrame(_build_records())
    result = filter_by_range(df, 'thisMonth', clock=clock)
    assert _ids(result) == ['a', 'b']


def test_range_bounds_and_labels():
    today = date(2024, 3, 15)
    assert range_bounds('all', today) is None
    assert range_bounds('lastMonth', today) == (date(2024, 2, 1), date(2024, 2, 29))
    assert range_label('thisYear') == 'This Year'
    assert range_label(RangeSpec.custom('2024-02-01', '2024-02-29')) == 'Custom Range (Feb 01, 2024 - Feb 29, 2024)'


def test_sort_by_date_descending():
    records = [{'date': '2024-01-15'}, {'date': '2024-02-10'}, {'date': '2024-01-20'}]
    result = sort_expenses(records, by='date', descending=True)
    assert [r['date'] for r in result] == ['2024-02-10', '2024-01-20', '2024-01-15']
    assert [r['date'] for r in records] == ['2024-01-15', '2024-02-10', '2024-01-20']


def test_sort_ties_break_on_created_at():
    records = [
        {'id': 'x', 'amount': 10, 'date': '2024-01-01', 'created_at': '2024-01-01T09:00:00'},
        {'id': 'y', 'amount': 10, 'date': '2024-01-01', 'created_at': '2024-01-01T10:00:00'},
        {'id': 'z', 'amount': 5, 'date': '2024-01-02', 'created_at': '2024-01-02T08:00:00'},
    ]
    assert _ids(sort_expenses(records, by='amount', descending=False)) == ['z', 'x', 'y']
    assert _ids(sort_expenses(records, by='date', descending=True)) == ['z', 'y', 'x']


def test_sort_by_title_ignores_case():
    records = [{'id': '1', 'title': 'banana'}, {'id': '2', 'title': 'Apple'}, {'id': '3', 'title': 'cherry'}]
    assert _ids(sort_expenses(records, by='title', descending=False)) == ['2', '1', '3']


def test_sort_places_undated_records_last():
    records = _build_records()
    result = sort_expenses(records, by='date', descending=True)
    assert _ids(result)[:2] == ['a', 'b']
    assert set(_ids(result)[-2:]) == {'g', 'h'}


def test_sort_rejects_unknown_key():
    with pytest.raises(ValueError):
        sort_expenses(_build_records(), by='colour')


def test_expenses_for_last_days(clock):
    assert _ids(expenses_for_last_days(_build_records(), 14, clock=clock)) == ['a', 'b']
    assert _ids(expenses_for_last_days(_build_records(), 7, clock=clock)) == ['a']


def test_filter_by_category():
    records = _build_records()
    assert filter_by_category(records, 'All') == records
    assert _ids(filter_by_category(records, 'Entertainment')) == ['c', 'e']
