from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, Sequence

import pandas as pd
import streamlit as st

from stockroom.table import (
    ASC,
    DEFAULT_PAGE_SIZE,
    Column,
    Page,
    SortState,
    build_view,
    cell_value,
    format_cell,
    nested_display_value,
    next_sort,
    page_window,
    row_number,
)


def _display(key: str, value: Any) -> Any:
    if isinstance(value, Mapping):
        value = nested_display_value(value)
    return format_cell(key, value)


def to_frame(columns: Sequence[Column], page: Page, *, show_numbering: bool = True) -> pd.DataFrame:
    labels = (["No."] if show_numbering else []) + [c.label for c in columns if not c.is_action]
    records = []
    for i, row in enumerate(page.rows):
        rec = {"No.": row_number(page.page, page.per_page, i)} if show_numbering else {}
        for c in columns:
            if c.is_action:
                continue
            rec[c.label] = _display(c.key, cell_value(row, c))
        records.append(rec)
    return pd.DataFrame(records, columns=labels)


def _sort_header(key: str, columns: Sequence[Column], state: SortState) -> None:
    sortable = [c for c in columns if c.sortable and not c.is_action]
    if not sortable:
        return
    cells = st.columns(len(sortable))
    for cell, col in zip(cells, sortable):
        arrow = ""
        if state.column == col.key:
            arrow = " ▲" if state.direction == ASC else " ▼"
        if cell.button(f"{col.label}{arrow}", key=f"{key}__sort__{col.key}", use_container_width=True):
            st.session_state[f"{key}__sort"] = next_sort(state, col)
            st.session_state[f"{key}__page"] = 1
            st.rerun()


def _pager(key: str, page: Page) -> None:
    st.caption(f"Showing {page.start} to {page.end} of {page.total_rows} results")
    if page.total_pages <= 1:
        return

    window = page_window(page.page, page.total_pages)
    cells = st.columns(len(window) + 2)
    target = None
    if cells[0].button("‹", key=f"{key}__prev", disabled=not page.has_prev):
        target = page.page - 1
    for cell, n in zip(cells[1:-1], window):
        if cell.button(str(n), key=f"{key}__p{n}", type="primary" if n == page.page else "secondary"):
            target = n
    if cells[-1].button("›", key=f"{key}__next", disabled=not page.has_next):
        target = page.page + 1

    if target is not None:
        st.session_state[f"{key}__page"] = target
        st.rerun()


def render_data_table(
    key: str,
    columns: Sequence[Column],
    rows: Sequence[dict],
    *,
    search_term: str = "",
    per_page: int = DEFAULT_PAGE_SIZE,
    empty_message: str = "No data",
    show_numbering: bool = True,
) -> Optional[Page]:
    """Searchable, sortable, paginated table. Sort and page live in session state under ``key``."""
    if not rows:
        st.info(empty_message)
        return None

    state = st.session_state.get(f"{key}__sort", SortState())
    current = st.session_state.get(f"{key}__page", 1)

    _sort_header(key, columns, state)
    page = build_view(columns, rows, search_term, state, current, per_page)
    st.dataframe(to_frame(columns, page, show_numbering=show_numbering), use_container_width=True, hide_index=True)
    _pager(key, page)
    return page
