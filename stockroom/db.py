from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any, Iterable, Optional, Union

import streamlit as st

from stockroom.schema import SCHEMA_SQL, TABLES

logger = logging.getLogger(__name__)


def _connect(db_path: Union[Path, str]) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


@st.cache_resource
def get_conn(db_path: Path) -> sqlite3.Connection:
    logger.info("Opening database %s", db_path)
    return _connect(db_path)


def _column_exists(conn: sqlite3.Connection, table: str, column: str) -> bool:
    rows = conn.execute(f"PRAGMA table_info({table});").fetchall()
    cols = [r["name"] for r in rows]
    return column in cols


def ensure_schema(conn: sqlite3.Connection) -> None:
    # Create base schema (for new installs)
    conn.executescript(SCHEMA_SQL)

    # ---- migrations for existing installs ----
    # Stock movements are linked to the money transaction they produced
    if not _column_exists(conn, "goods_history", "transaction_id"):
        conn.execute("ALTER TABLE goods_history ADD COLUMN transaction_id INTEGER;")

    if not _column_exists(conn, "damaged_goods", "reported_by"):
        conn.execute("ALTER TABLE damaged_goods ADD COLUMN reported_by TEXT;")

    conn.commit()


def q(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
    cur = conn.execute(sql, tuple(params))
    rows = cur.fetchall()
    cur.close()
    return rows


def q1(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> Optional[dict]:
    rows = q(conn, sql, params)
    return dict(rows[0]) if rows else None


def x(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> int:
    cur = conn.execute(sql, tuple(params))
    conn.commit()
    last = cur.lastrowid
    cur.close()
    return int(last) if last is not None else 0


def u(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> int:
    """Run an UPDATE/DELETE and return the number of affected rows."""
    cur = conn.execute(sql, tuple(params))
    conn.commit()
    n = cur.rowcount
    cur.close()
    return int(n)


def check_connection(conn: sqlite3.Connection) -> bool:
    try:
        q(conn, "SELECT 1")
    except sqlite3.Error:
        logger.exception("Database connection check failed")
        return False
    logger.info("Database connection successful")
    return True


def check_tables(conn: sqlite3.Connection, tables: Optional[list[str]] = None) -> dict[str, dict]:
    """
    Probe each table with a COUNT query.

    Returns {table: {"success": bool, "error": str | None, "count": int | None}}.
    """
    results: dict[str, dict] = {}
    for table in tables or TABLES:
        try:
            n = q(conn, f"SELECT COUNT(*) AS n FROM {table}")[0]["n"]
        except sqlite3.Error as e:
            logger.error("Error testing table %s: %s", table, e)
            results[table] = {"success": False, "error": str(e), "count": None}
        else:
            logger.debug("Table %s: OK - Count: %s", table, n)
            results[table] = {"success": True, "error": None, "count": int(n)}
    return results
