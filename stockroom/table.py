"""
In-memory table transforms: search, sort and pagination over list-of-dict rows.

Everything here is a pure function of (columns, rows, search term, sort state,
page). The Streamlit rendering lives in ``stockroom.table_view``.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from datetime import datetime
from functools import cmp_to_key
from typing import Any, Mapping, Optional, Sequence, Union

ASC = "asc"
DESC = "desc"

DEFAULT_PAGE_SIZE = 10
PAGE_WINDOW = 5

# Labels of the row-action column; its cells are buttons, never searched
ACTION_LABELS = {"aksi", "action", "actions"}

# Keys tried, in order, when a cell holds a nested record (e.g. row["good"])
NESTED_KEYS = ("name", "descriptionname", "locationname", "categoryname", "code", "label")

DATE_KEYS = ("created_at", "updated_at", "date")


@dataclass(frozen=True)
class Column:
    key: str
    label: str
    sortable: bool = True
    width: Optional[str] = None

    @property
    def is_action(self) -> bool:
        return self.label.strip().lower() in ACTION_LABELS


@dataclass(frozen=True)
class SortState:
    column: Optional[str] = None
    direction: Optional[str] = None

    @property
    def active(self) -> bool:
        return bool(self.column) and self.direction in (ASC, DESC)


@dataclass
class Page:
    rows: list[dict]
    page: int
    per_page: int
    total_rows: int
    total_pages: int

    @property
    def start(self) -> int:
        """1-based index of the first row on this page (0 when empty)."""
        if not self.total_rows:
            return 0
        return (self.page - 1) * self.per_page + 1

    @property
    def end(self) -> int:
        return min(self.page * self.per_page, self.total_rows)

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_number(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def nested_display_value(value: Mapping) -> Any:
    for k in NESTED_KEYS:
        if value.get(k) is not None:
            return value[k]
    return None


def comparable_value(value: Any) -> Union[str, int, float]:
    """
    Reduce a cell value to something orderable.

    None becomes "" (sorted last), numbers stay numbers, strings are lowercased
    and nested records are represented by their most name-like field.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return 1 if value else 0
    if _is_number(value):
        return value
    if isinstance(value, str):
        return value.lower()
    if isinstance(value, Mapping):
        v = nested_display_value(value)
        if v is not None:
            return v if _is_number(v) else str(v).lower()
    if isinstance(value, (Mapping, list, tuple)):
        try:
            return _to_json(value).lower()
        except (TypeError, ValueError):
            return str(value).lower()
    return str(value).lower()


def _stringify(value: Any) -> str:
    if isinstance(value, (Mapping, list, tuple)):
        try:
            return _to_json(value)
        except (TypeError, ValueError):
            return str(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def cell_value(row: Mapping, column: Column) -> Any:
    if column.key not in row and column.key == "total":
        return _to_number(row.get("stock")) * _to_number(row.get("price"))
    return row.get(column.key)


def row_haystack(row: Mapping, columns: Sequence[Column], index: int) -> str:
    # The visible row number is searchable too.
    values = [str(index + 1)]
    for col in columns:
        if col.is_action:
            continue
        v = cell_value(row, col)
        if v is None:
            continue
        values.append(_stringify(v))
    return " | ".join(values).lower()


def filter_rows(rows: Sequence[dict], columns: Sequence[Column], term: Optional[str]) -> list[dict]:
    term = (term or "").strip().lower()
    if not term:
        return list(rows)
    return [row for idx, row in enumerate(rows) if term in row_haystack(row, columns, idx)]


def _compare(a: Any, b: Any) -> int:
    if _is_number(a) and _is_number(b):
        return (a > b) - (a < b)
    sa, sb = str(a).casefold(), str(b).casefold()
    return (sa > sb) - (sa < sb)


def sort_rows(rows: Sequence[dict], state: SortState) -> list[dict]:
    if not state.active:
        return list(rows)

    sign = 1 if state.direction == ASC else -1
    key = state.column

    def cmp(r1: dict, r2: dict) -> int:
        a = comparable_value(r1.get(key))
        b = comparable_value(r2.get(key))
        # Empty values go last whatever the direction.
        if a == "" and b != "":
            return 1
        if b == "" and a != "":
            return -1
        return sign * _compare(a, b)

    return sorted(rows, key=cmp_to_key(cmp))


def next_sort(state: SortState, column: Union[Column, str]) -> SortState:
    """Header click: asc -> desc -> unsorted; a different column starts at asc."""
    if isinstance(column, Column):
        if not column.sortable:
            return state
        key = column.key
    else:
        key = column

    if state.column == key:
        if state.direction == ASC:
            return SortState(key, DESC)
        if state.direction == DESC:
            return SortState()
    return SortState(key, ASC)


def paginate(rows: Sequence[dict], page: int = 1, per_page: int = DEFAULT_PAGE_SIZE) -> Page:
    if per_page < 1:
        raise ValueError("per_page must be >= 1.")
    total = len(rows)
    total_pages = math.ceil(total / per_page)
    page = min(max(1, int(page)), max(total_pages, 1))
    start = (page - 1) * per_page
    return Page(
        rows=list(rows[start:start + per_page]),
        page=page,
        per_page=per_page,
        total_rows=total,
        total_pages=total_pages,
    )


def page_window(current: int, total_pages: int, size: int = PAGE_WINDOW) -> list[int]:
    """Page numbers shown in the pager, centred on the current page where possible."""
    if total_pages <= 0:
        return []
    first = max(1, min(total_pages - size + 1, current - size // 2))
    return list(range(first, first + min(size, total_pages)))


def row_number(page: int, per_page: int, index: int) -> int:
    return (page - 1) * per_page + index + 1


def is_date_key(key: str) -> bool:
    k = (key or "").lower()
    return any(d in k for d in DATE_KEYS)


def format_date(value: str) -> str:
    try:
        d = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    # Stored timestamps are UTC; show them in local time. Naive values stay as they are.
    if d.tzinfo is not None:
        d = d.astimezone()
    return f"{d.day} {d.strftime('%B %Y %H:%M')}"


def format_cell(key: str, value: Any) -> Any:
    if isinstance(value, str) and is_date_key(key):
        return format_date(value)
    return value


def build_view(
    columns: Sequence[Column],
    rows: Sequence[dict],
    term: Optional[str] = "",
    state: Optional[SortState] = None,
    page: int = 1,
    per_page: int = DEFAULT_PAGE_SIZE,
) -> Page:
    filtered = filter_rows(rows, columns, term)
    ordered = sort_rows(filtered, state or SortState())
    return paginate(ordered, page, per_page)
