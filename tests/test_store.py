import re

import pytest

from fintrack import store
from fintrack.errors import StoreError
from fintrack.live import Snapshot, Subscription
from fintrack.models import CUSTOM_CATEGORY_ICON, DEFAULT_CATEGORY_NAMES, CategorySet


def _expense(**overrides):
    record = {'title': 'Groceries', 'amount': 42.5, 'category': 'Food', 'date': '2024-01-15'}
    record.update(overrides)
    return record


def test_add_and_list(db_path):
    expenses = store.ExpenseStore('user-1')
    expense_id = expenses.add(_expense(title='  Groceries  '))
    assert re.fullmatch(r'[0-9a-f]{32}', expense_id)

    rows = expenses.list()
    assert len(rows) == 1
    row = rows[0]
    assert row['id'] == expense_id
    assert row['title'] == 'Groceries'
    assert row['amount'] == 42.5
    assert row['created_at'] == row['updated_at']


def test_list_is_newest_first(db_path, monkeypatch):
    stamps = iter(['2024-01-01T08:00:00.000000+00:00', '2024-01-01T09:00:00.000000+00:00'])
    monkeypatch.setattr(store, 'utc_timestamp', lambda: next(stamps))
    expenses = store.ExpenseStore('user-1')
    first = expenses.add(_expense(title='First'))
    second = expenses.add(_expense(title='Second'))
    assert [row['id'] for row in expenses.list()] == [second, first]


def test_add_rejects_invalid_expenses(db_path):
    expenses = store.ExpenseStore('user-1')
    with pytest.raises(StoreError, match='Failed to add expense: Title is required'):
        expenses.add(_expense(title=' '))
    with pytest.raises(StoreError, match='Failed to add expense: Amount must be positive'):
        expenses.add(_expense(amount=0))
    with pytest.raises(StoreError, match='Missing required expense data'):
        expenses.add(_expense(category=''))
    assert expenses.list() == []


def test_missing_user_or_id_is_rejected(db_path):
    with pytest.raises(StoreError, match='Missing required parameters'):
        store.ExpenseStore(None).add(_expense())
    with pytest.raises(StoreError, match='Missing required parameters'):
        store.ExpenseStore('user-1').delete('')


def test_users_only_see_their_own_rows(db_path):
    alice = store.ExpenseStore('alice')
    bob = store.ExpenseStore('bob')
    alice_id = alice.add(_expense())
    bob.add(_expense(title='Bus', category='Transport'))

    assert [row['title'] for row in bob.list()] == ['Bus']
    bob.delete(alice_id)
    assert [row['id'] for row in alice.list()] == [alice_id]


def test_update_changes_fields_and_timestamp(db_path):
    expenses = store.ExpenseStore('user-1')
    expense_id = expenses.add(_expense())
    before = expenses.get(expense_id)

    expenses.update(expense_id, {'amount': 10, 'category': 'Other', 'id': 'ignored'})
    after = expenses.get(expense_id)
    assert after['id'] == expense_id
    assert after['amount'] == 10
    assert after['category'] == 'Other'
    assert after['title'] == before['title']
    assert after['created_at'] == before['created_at']
    assert after['updated_at'] >= before['updated_at']


def test_update_rejects_bad_values_and_unknown_ids(db_path):
    expenses = store.ExpenseStore('user-1')
    expense_id = expenses.add(_expense())
    with pytest.raises(StoreError, match='Failed to update expense: Amount must be positive'):
        expenses.update(expense_id, {'amount': -1})
    with pytest.raises(StoreError, match='Failed to update expense'):
        expenses.update('does-not-exist', {'amount': 5})


def test_delete_scenario_removes_id_from_snapshots(db_path):
    expenses = store.ExpenseStore('user-1')
    keep = expenses.add(_expense(title='Keep'))
    remove = expenses.add(_expense(title='Remove'))

    received = []
    subscription = expenses.subscribe(received.append)
    assert {row['id'] for row in received[-1].records} == {keep, remove}

    expenses.delete(remove)
    assert [row['id'] for row in received[-1].records] == [keep]

    later = []
    store.ExpenseStore('user-1').subscribe(later.append)
    assert remove not in [row['id'] for row in later[0].records]
    subscription.unsubscribe()


def test_subscription_receives_every_write(db_path):
    expenses = store.ExpenseStore('user-1')
    received = []
    expenses.subscribe(received.append)
    expense_id = expenses.add(_expense())
    expenses.update(expense_id, {'title': 'Market'})
    expenses.delete(expense_id)

    assert [len(snapshot.records) for snapshot in received] == [0, 1, 1, 0]
    assert received[2].records[0]['title'] == 'Market'
    assert all(snapshot.ok for snapshot in received)


def test_writes_reach_subscribers_of_other_handles(db_path):
    received = []
    store.ExpenseStore('user-1').subscribe(received.append)
    store.ExpenseStore('user-1').add(_expense())
    assert len(received[-1].records) == 1


def test_unsubscribe_is_idempotent(db_path):
    expenses = store.ExpenseStore('user-1')
    received = []
    subscription = expenses.subscribe(received.append)
    subscription.unsubscribe()
    subscription.unsubscribe()
    expenses.add(_expense())
    assert len(received) == 1
    assert not subscription.active


def test_unsubscribe_on_inactive_subscription_is_safe():
    Subscription().unsubscribe()


def test_subscribe_requires_a_callable(db_path):
    with pytest.raises(StoreError):
        store.ExpenseStore('user-1').subscribe(None)


def test_read_failure_pushes_empty_snapshot_with_error(db_path, monkeypatch):
    expenses = store.ExpenseStore('user-1')
    expenses.add(_expense())

    def broken_list(self):
        raise StoreError('Failed to load expenses: disk I/O error')

    monkeypatch.setattr(store.ExpenseStore, 'list', broken_list)
    received = []
    expenses.subscribe(received.append)
    snapshot = received[0]
    assert isinstance(snapshot, Snapshot)
    assert snapshot.records == []
    assert isinstance(snapshot.error, StoreError)


def test_categories_store(db_path):
    categories = store.CategoryStore('user-1')
    category_id = categories.add({'name': ' Pets '})
    rows = categories.list()
    assert rows[0]['id'] == category_id
    assert rows[0]['name'] == 'Pets'
    assert rows[0]['icon'] == CUSTOM_CATEGORY_ICON

    with pytest.raises(StoreError, match="already exists"):
        categories.add({'name': 'Food'})
    with pytest.raises(StoreError, match="already exists"):
        categories.add({'name': 'Pets'})
    with pytest.raises(StoreError, match='Missing required category data'):
        categories.add({'name': ''})

    merged = CategorySet.merge(categories.list())
    assert merged.names() == list(DEFAULT_CATEGORY_NAMES) + ['Pets']

    categories.delete(category_id)
    assert categories.list() == []


def test_add_rejects_unparsable_and_future_dates(db_path, clock):
    expenses = store.ExpenseStore('user-1', clock=clock)
    with pytest.raises(StoreError, match="Failed to add expense: Invalid date 'not-a-date'"):
        expenses.add(_expense(date='not-a-date'))
    with pytest.raises(StoreError, match='Failed to add expense: Date cannot be in the future'):
        expenses.add(_expense(date='2024-03-16'))
    with pytest.raises(StoreError, match='Date cannot be in the future'):
        store.ExpenseStore('user-1').add(_expense(date='2999-01-01'))
    assert expenses.list() == []

    expense_id = expenses.add(_expense(date='2024-03-15'))
    assert expenses.get(expense_id)['date'] == '2024-03-15'


def test_update_rejects_unparsable_dates(db_path, clock):
    expenses = store.ExpenseStore('user-1', clock=clock)
    expense_id = expenses.add(_expense())
    with pytest.raises(StoreError, match='Failed to update expense: Invalid date'):
        expenses.update(expense_id, {'date': '15/01/2024'})
    assert expenses.get(expense_id)['date'] == '2024-01-15'
