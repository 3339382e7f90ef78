"""Domain records for FinTrack: expenses, categories and the merged category set.

Core functions accept records in several shapes (``Expense`` objects, plain
mappings straight from the store, or a pandas DataFrame).  The helpers at the
bottom of this module normalize any of those into one DataFrame layout so the
filter and aggregation code only has to deal with a single shape.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

CUSTOM_CATEGORY_ICON = '📊'

FRAME_COLUMNS = ['id', 'title', 'amount', 'category', 'date', 'created_at', 'updated_at']

# Store snapshots use snake_case; records exported by older clients use camelCase.
_FIELD_ALIASES = {
    'created_at': ('created_at', 'createdAt'),
    'updated_at': ('updated_at', 'updatedAt'),
}


@dataclass
class Expense:
    """A single user-entered transaction."""
    title: str
    amount: float
    category: str
    date: str  # YYYY-MM-DD
    id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'Expense':
        return cls(
            title=get_field(data, 'title', ''),
            amount=get_field(data, 'amount', 0.0),
            category=get_field(data, 'category', ''),
            date=get_field(data, 'date', ''),
            id=get_field(data, 'id'),
            created_at=get_field(data, 'created_at'),
            updated_at=get_field(data, 'updated_at'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Category:
    """A label used to group expenses, either built in or user-defined."""
    name: str
    icon: str = CUSTOM_CATEGORY_ICON
    id: Optional[str] = None
    created_at: Optional[str] = None
    is_default: bool = False


DEFAULT_CATEGORIES: Tuple[Category, ...] = (
    Category(name='Food', icon='🍕', id='food', is_default=True),
    Category(name='Transport', icon='🚗', id='transport', is_default=True),
    Category(name='Entertainment', icon='🎬', id='entertainment', is_default=True),
    Category(name='Utilities', icon='⚡', id='utilities', is_default=True),
    Category(name='Rent', icon='🏠', id='rent', is_default=True),
    Category(name='Other', icon='📦', id='other', is_default=True),
)
DEFAULT_CATEGORY_NAMES = tuple(cat.name for cat in DEFAULT_CATEGORIES)


@dataclass(frozen=True)
class CategorySet:
    """Defaults followed by the user's custom categories, unique by exact name.

    Defaults always come first in their fixed order.  A custom category whose
    name collides with a default, or with an earlier custom category, is
    suppressed rather than shadowing it.
    """
    categories: Tuple[Category, ...] = field(default=DEFAULT_CATEGORIES)

    @classmethod
    def merge(
        cls,
        custom: Iterable[Any] = (),
        defaults: Sequence[Category] = DEFAULT_CATEGORIES,
    ) -> 'CategorySet':
        merged: List[Category] = list(defaults)
        seen = {cat.name for cat in merged}
        for item in custom or ():
            category = _as_category(item)
            if category is None or category.name in seen:
                continue
            seen.add(category.name)
            merged.append(category)
        return cls(tuple(merged))

    def names(self) -> List[str]:
        return [cat.name for cat in self.categories]

    def options_for(self, current: Optional[str] = None) -> List[str]:
        """Selectable names for editing a record filed under ``current``.

        A category that has since been deleted stays selectable at the end so
        saving the record does not move it.
        """
        names = self.names()
        if current and current not in names:
            names.append(current)
        return names

    def label(self, name: str) -> str:
        category = self.get(name)
        return f"{category.icon} {name}" if category else f"{CUSTOM_CATEGORY_ICON} {name}"

    def custom(self) -> List[Category]:
        return [cat for cat in self.categories if not cat.is_default]

    def get(self, name: str) -> Optional[Category]:
        for cat in self.categories:
            if cat.name == name:
                return cat
        return None

    def __contains__(self, name: object) -> bool:
        return any(cat.name == name for cat in self.categories)

    def __iter__(self) -> Iterator[Category]:
        return iter(self.categories)

    def __len__(self) -> int:
        return len(self.categories)


def _as_category(item: Any) -> Optional[Category]:
    if isinstance(item, Category):
        return item
    if isinstance(item, str):
        name = item.strip()
        return Category(name=name) if name else None
    if isinstance(item, Mapping):
        name = str(item.get('name') or '').strip()
        if not name:
            return None
        return Category(
            name=name,
            icon=CUSTOM_CATEGORY_ICON,
            id=item.get('id'),
            created_at=get_field(item, 'created_at'),
        )
    return None


# ---------------------------------------------------------------------------
# Record normalization
# ---------------------------------------------------------------------------


def get_field(record: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a mapping or an object, honouring camelCase aliases."""
    for key in _FIELD_ALIASES.get(name, (name,)):
        if isinstance(record, Mapping):
            if key in record:
                return record[key]
        elif hasattr(record, key):
            return getattr(record, key)
    return default


def as_records(records: Any) -> List[Any]:
    """Return ``records`` as a list; ``None`` becomes an empty list."""
    if records is None:
        return []
    if isinstance(records, pd.DataFrame):
        return records.to_dict('records')
    if isinstance(records, (str, bytes, Mapping)):
        return []
    try:
        return list(records)
    except TypeError:
        return []


def iso_date_string(value: Any) -> Optional[str]:
    """Coerce a record's date value to its ``YYYY-MM-DD`` string form."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def to_frame(records: Any) -> pd.DataFrame:
    """Build the normalized DataFrame used by filters and aggregations.

    Row positions match the positions in ``as_records(records)`` so callers
    can map a boolean mask back onto the original record objects.
    """
    rows = as_records(records)
    data = {column: [get_field(row, column) for row in rows] for column in FRAME_COLUMNS}
    frame = pd.DataFrame(data, columns=FRAME_COLUMNS, index=pd.RangeIndex(len(rows)))

    frame['amount'] = pd.to_numeric(frame['amount'], errors='coerce').fillna(0.0).astype(float)
    frame['date'] = frame['date'].map(iso_date_string)
    frame['parsed_date'] = pd.to_datetime(frame['date'], format='%Y-%m-%d', errors='coerce')
    return frame
