from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Optional

from stockroom.db import q, q1, u, x

logger = logging.getLogger(__name__)


@dataclass
class DamagedGoodsSummary:
    total_damaged_items: int = 0
    total_damaged_stock: int = 0
    total_value: float = 0.0


_DAMAGED_SQL = """
    SELECT d.*, g.name AS good_name, g.code AS good_code, g.price AS good_price
    FROM damaged_goods d
    JOIN goods g ON g.id = d.idgood
"""


def _with_good(rows) -> list[dict]:
    out = []
    for r in rows:
        d = dict(r)
        d["good"] = {
            "id": d["idgood"],
            "name": d.pop("good_name"),
            "code": d.pop("good_code"),
            "price": d.pop("good_price"),
        }
        out.append(d)
    return out


def _end_of_day(value: str) -> str:
    # A bare date as the upper bound means "through the end of that day".
    return f"{value}T23:59:59.999999" if len(value) == 10 else value


def get_damaged_good(conn, damaged_id: int) -> Optional[dict]:
    return q1(conn, "SELECT * FROM damaged_goods WHERE id=?", (damaged_id,))


def get_all_damaged_goods(conn) -> list[dict]:
    try:
        rows = q(conn, _DAMAGED_SQL + " ORDER BY d.created_at DESC, d.id DESC")
    except sqlite3.Error:
        logger.exception("Get all damaged goods error")
        return []
    return _with_good(rows)


def get_damaged_goods_by_good(conn, good_id: int) -> list[dict]:
    try:
        rows = q(conn, _DAMAGED_SQL + " WHERE d.idgood=? ORDER BY d.created_at DESC, d.id DESC", (good_id,))
    except sqlite3.Error:
        logger.exception("Get damaged goods by good error")
        return []
    return _with_good(rows)


def get_damaged_goods_by_date_range(conn, start_date: str, end_date: str) -> list[dict]:
    try:
        rows = q(
            conn,
            _DAMAGED_SQL + " WHERE d.created_at >= ? AND d.created_at <= ? ORDER BY d.created_at DESC, d.id DESC",
            (start_date, _end_of_day(end_date)),
        )
    except sqlite3.Error:
        logger.exception("Get damaged goods by date range error")
        return []
    return _with_good(rows)


def create_damaged_good(
    conn,
    *,
    idgood: int,
    stock: int,
    reason: str,
    reported_by: Optional[str] = None,
) -> Optional[dict]:
    """
    Record damaged units of a good and raise the good's damaged_stock.

    The quantity may not exceed the good's available stock (stock minus
    damaged_stock). The record insert and the damaged_stock write are two
    separate calls.
    """
    if not idgood or not str(reason or "").strip() or int(stock or 0) <= 0:
        logger.error("Missing required fields for creating damaged good")
        return None

    try:
        good = q1(conn, "SELECT stock, damaged_stock FROM goods WHERE id=?", (idgood,))
        if not good:
            logger.error("Good not found: %s", idgood)
            return None

        available = int(good["stock"] or 0) - int(good["damaged_stock"] or 0)
        if int(stock) > available:
            logger.error("Not enough available stock: requested %s, available %s", stock, available)
            return None

        damaged_id = x(
            conn,
            "INSERT INTO damaged_goods (idgood, stock, reason, reported_by) VALUES (?, ?, ?, ?)",
            (idgood, int(stock), str(reason).strip(), reported_by or None),
        )

        new_damaged = int(good["damaged_stock"] or 0) + int(stock)
        u(conn, "UPDATE goods SET damaged_stock=? WHERE id=?", (new_damaged, idgood))
        row = get_damaged_good(conn, damaged_id)
    except sqlite3.Error:
        logger.exception("Create damaged good error")
        return None

    logger.info("Damaged good created successfully: %s", damaged_id)
    return row


def update_damaged_good(
    conn,
    damaged_id: int,
    *,
    stock: Optional[int] = None,
    reason: Optional[str] = None,
) -> Optional[dict]:
    try:
        current = get_damaged_good(conn, damaged_id)
        if not current:
            logger.error("Damaged good record not found: %s", damaged_id)
            return None

        if stock is not None and int(stock) != int(current["stock"]):
            difference = int(stock) - int(current["stock"])
            good = q1(conn, "SELECT damaged_stock FROM goods WHERE id=?", (current["idgood"],))
            if good:
                new_damaged = int(good["damaged_stock"] or 0) + difference
                u(
                    conn,
                    "UPDATE goods SET damaged_stock=? WHERE id=?",
                    (max(0, new_damaged), current["idgood"]),
                )

        data = {}
        if stock is not None:
            data["stock"] = int(stock)
        if reason is not None:
            data["reason"] = reason
        if data:
            assignments = ", ".join(f"{k}=?" for k in data)
            u(conn, f"UPDATE damaged_goods SET {assignments} WHERE id=?", (*data.values(), damaged_id))
        return get_damaged_good(conn, damaged_id)
    except sqlite3.Error:
        logger.exception("Update damaged good error")
        return None


def delete_damaged_good(conn, damaged_id: int) -> bool:
    try:
        current = get_damaged_good(conn, damaged_id)
        if not current:
            logger.error("Damaged good record not found: %s", damaged_id)
            return False

        good = q1(conn, "SELECT damaged_stock FROM goods WHERE id=?", (current["idgood"],))
        if good:
            new_damaged = max(0, int(good["damaged_stock"] or 0) - int(current["stock"]))
            u(conn, "UPDATE goods SET damaged_stock=? WHERE id=?", (new_damaged, current["idgood"]))

        u(conn, "DELETE FROM damaged_goods WHERE id=?", (damaged_id,))
    except sqlite3.Error:
        logger.exception("Delete damaged good error")
        return False
    return True


def get_damaged_goods_summary(conn) -> DamagedGoodsSummary:
    try:
        rows = q(
            conn,
            """
            SELECT d.stock, g.price
            FROM damaged_goods d
            JOIN goods g ON g.id = d.idgood
            """,
        )
    except sqlite3.Error:
        logger.exception("Get damaged goods summary error")
        return DamagedGoodsSummary()

    return DamagedGoodsSummary(
        total_damaged_items=len(rows),
        total_damaged_stock=sum(int(r["stock"] or 0) for r in rows),
        total_value=sum(float(r["price"] or 0) * int(r["stock"] or 0) for r in rows),
    )
