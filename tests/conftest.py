from datetime import date

import pytest

from fintrack import store
from fintrack.filters import FixedClock


@pytest.fixture
def db_path(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """Point the store at a fresh temporary database."""
    path = tmp_path / "fintrack.db"
    monkeypatch.setattr(store, "DB_PATH", path)
    store.init_db()
    return path


@pytest.fixture
def clock():
    return FixedClock(date(2024, 3, 15))


@pytest.fixture
def scenario_records():
    return [
        {'title': 'Groceries', 'amount': 100, 'category': 'Food', 'date': '2024-01-15'},
        {'title': 'Bus pass', 'amount': 50, 'category': 'Transport', 'date': '2024-01-20'},
        {'title': 'Dinner out', 'amount': 200, 'category': 'Food', 'date': '2024-02-01'},
    ]
