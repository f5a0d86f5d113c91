from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Any, Optional

from stockroom.db import q, q1, u, x
from stockroom.errors import ForeignKeyConstraintError
from stockroom.services import financial
from stockroom.utils import iso_now

logger = logging.getLogger(__name__)

STOCK_IN = "in"
STOCK_OUT = "out"

HISTORY_DESCRIPTIONS = {STOCK_IN: "Goods In", STOCK_OUT: "Goods Out"}

# Transaction descriptions the money side books stock movements under
SALES_DESCRIPTION = "Sales"
PURCHASE_DESCRIPTION = "Purchase"

GOOD_UPDATABLE_FIELDS = ("idcategory", "code", "name", "price", "damaged_stock")


@dataclass
class StockTransactionInput:
    idgood: int
    idlocation: int
    stock: int
    type: str
    payment_type: Optional[int] = None
    price: float = 0.0
    note: Optional[str] = None


# ---------------------------------------------------------------------------
# Goods
# ---------------------------------------------------------------------------


def _by_name(rows: list[dict], key: str = "name") -> list[dict]:
    return sorted(rows, key=lambda r: str(r.get(key) or "").casefold())


def get_good(conn, good_id: int) -> Optional[dict]:
    return q1(conn, "SELECT * FROM goods WHERE id=?", (good_id,))


def create_good_with_initial_stock(
    conn,
    *,
    idcategory: int,
    code: str,
    name: str,
    price: float = 0.0,
    stock: int = 0,
    location_id: int,
) -> dict:
    """
    Insert a good and its first location stock row. The initial quantity is
    also the good's overall stock.

    Unlike the other create calls this one raises: ValueError for bad input or
    an unknown location, sqlite3.Error for database failures. If the location
    stock insert fails, the freshly created good is deleted again.
    """
    if not idcategory or not location_id or not code or not name:
        logger.error("Missing required fields for creating good with initial stock")
        raise ValueError("Missing required fields for creating good with initial stock.")

    try:
        price = float(price or 0)
        stock = int(stock or 0)
    except (TypeError, ValueError):
        raise ValueError("Price and stock must be numbers.")

    if not q1(conn, "SELECT id FROM locations WHERE id=?", (location_id,)):
        logger.error("Location not found for creating good: %s", location_id)
        raise ValueError("Location not found.")

    good_id = x(
        conn,
        """
        INSERT INTO goods (idcategory, code, name, price, stock, damaged_stock)
        VALUES (?, ?, ?, ?, ?, 0)
        """,
        (idcategory, str(code).strip(), str(name).strip(), price, stock),
    )

    try:
        x(
            conn,
            "INSERT INTO location_stocks (idgood, idlocation, stock) VALUES (?, ?, ?)",
            (good_id, location_id, stock),
        )
    except sqlite3.Error:
        logger.exception("Create location stock error, removing good %s", good_id)
        u(conn, "DELETE FROM goods WHERE id=?", (good_id,))
        raise

    logger.info("Good %s created at location %s with stock %s", good_id, location_id, stock)
    return get_good(conn, good_id)


def create_good(
    conn,
    *,
    idcategory: int,
    idlocation: int,
    code: str,
    name: str,
    price: float = 0.0,
    stock: int = 0,
) -> Optional[dict]:
    if not idcategory or not idlocation or not code or not name:
        logger.error("Missing required fields for creating good")
        return None

    try:
        good_id = x(
            conn,
            """
            INSERT INTO goods (idcategory, code, name, price, stock, damaged_stock)
            VALUES (?, ?, ?, ?, ?, 0)
            """,
            (idcategory, str(code).strip(), str(name).strip(), float(price or 0), int(stock or 0)),
        )
        x(
            conn,
            "INSERT INTO location_stocks (idgood, idlocation, stock) VALUES (?, ?, ?)",
            (good_id, idlocation, int(stock or 0)),
        )
    except sqlite3.Error:
        logger.exception("Create good error")
        return None

    logger.info("Good created successfully: %s", good_id)
    return get_good(conn, good_id)


def get_all_goods(conn) -> list[dict]:
    try:
        rows = q(conn, "SELECT * FROM goods ORDER BY name ASC")
    except sqlite3.Error:
        logger.exception("Get all goods error")
        return []
    return [dict(r) for r in rows]


def get_all_goods_with_details(conn, location_id: Optional[int] = None) -> list[dict]:
    """One row per good per location (``id`` is the location stock id, ``goods_id`` the good)."""
    try:
        if location_id:
            rows = q(conn, "SELECT * FROM goods_with_details WHERE idlocation=? ORDER BY id", (location_id,))
        else:
            rows = q(conn, "SELECT * FROM goods_with_details ORDER BY id")
    except sqlite3.Error:
        logger.exception("Get all goods with details error")
        return []
    return _by_name([dict(r) for r in rows])


def get_goods_by_location(conn, location_id: int) -> list[dict]:
    return get_all_goods_with_details(conn, location_id)


def update_good(conn, good_id: int, **fields: Any) -> Optional[dict]:
    """
    Update a good's own columns.

    ``idlocation`` and ``stock`` are accepted but ignored: per-location
    quantities live in location_stocks.
    """
    try:
        if not get_good(conn, good_id):
            logger.error("Good not found for update: %s", good_id)
            return None

        data = {k: v for k, v in fields.items() if k in GOOD_UPDATABLE_FIELDS and v is not None}
        if data:
            assignments = ", ".join(f"{k}=?" for k in data)
            u(
                conn,
                f"UPDATE goods SET {assignments}, updated_at=? WHERE id=?",
                (*data.values(), iso_now(), good_id),
            )
        row = get_good(conn, good_id)
    except sqlite3.Error:
        logger.exception("Update good error")
        return None

    logger.info("Good %s updated: %s", good_id, sorted(data))
    return row


def delete_good(conn, good_id: int) -> bool:
    """
    Delete a good that no stock movement or damaged record refers to.

    Raises ForeignKeyConstraintError when it is still referenced.
    """
    history = q(conn, "SELECT COUNT(*) AS n FROM goods_history WHERE idgood=?", (good_id,))[0]["n"]
    damaged = q(conn, "SELECT COUNT(*) AS n FROM damaged_goods WHERE idgood=?", (good_id,))[0]["n"]
    if history or damaged:
        logger.error("Delete good %s blocked: %s history, %s damaged records", good_id, history, damaged)
        raise ForeignKeyConstraintError()

    try:
        u(conn, "DELETE FROM goods WHERE id=?", (good_id,))
    except sqlite3.IntegrityError as e:
        logger.error("Delete good error: %s", e)
        if "FOREIGN KEY" in str(e).upper():
            raise ForeignKeyConstraintError() from e
        raise

    logger.info("Good deleted successfully: %s", good_id)
    return True


def search_goods(conn, term: str) -> list[dict]:
    like = f"%{(term or '').strip()}%"
    try:
        rows = q(
            conn,
            """
            SELECT * FROM goods_with_details
            WHERE name LIKE ? OR code LIKE ? OR categoryname LIKE ?
            ORDER BY name ASC
            """,
            (like, like, like),
        )
    except sqlite3.Error:
        logger.exception("Search goods error")
        return []
    return [dict(r) for r in rows]


def get_low_stock_goods(conn, threshold: int = 10) -> list[dict]:
    try:
        rows = q(
            conn,
            "SELECT * FROM goods_with_details WHERE available_stock < ? ORDER BY available_stock ASC",
            (int(threshold),),
        )
    except sqlite3.Error:
        logger.exception("Get low stock goods error")
        return []
    return [dict(r) for r in rows]


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------


def get_all_stocks(conn) -> list[dict]:
    try:
        rows = q(
            conn,
            """
            SELECT
              ls.id, ls.idgood, ls.idlocation, ls.stock, ls.created_at, ls.updated_at,
              g.idcategory, g.code, g.name, g.price, g.stock AS good_stock, g.damaged_stock,
              l.locationname, l.address, l.is_active
            FROM location_stocks ls
            LEFT JOIN goods g ON g.id = ls.idgood
            LEFT JOIN locations l ON l.id = ls.idlocation
            ORDER BY ls.id ASC
            """,
        )
    except sqlite3.Error:
        logger.exception("Get all stocks error")
        return []

    stocks = []
    for r in rows:
        stocks.append(
            {
                "id": r["id"],
                "idgood": r["idgood"],
                "idlocation": r["idlocation"],
                "stock": r["stock"] or 0,
                "type": STOCK_IN,
                "payment_type": None,
                "price": r["price"] or 0,
                "created_at": r["created_at"] or iso_now(),
                "good": {
                    "id": r["idgood"],
                    "idcategory": r["idcategory"],
                    "idlocation": r["idlocation"],
                    "code": r["code"] or "",
                    "name": r["name"] or "",
                    "price": r["price"] or 0,
                    "stock": r["good_stock"] or 0,
                    "damaged_stock": r["damaged_stock"] or 0,
                },
                "location": {
                    "id": r["idlocation"],
                    "locationname": r["locationname"] or "",
                    "address": r["address"] or "",
                    "is_active": bool(r["is_active"]) if r["is_active"] is not None else True,
                },
            }
        )
    return sorted(stocks, key=lambda s: s["good"]["name"].casefold())


def create_stock(
    conn,
    *,
    idgood: int,
    idlocation: int,
    stock: int,
    type: str,
    payment_type: Optional[int] = None,
    price: float = 0.0,
) -> bool:
    """Record a movement and apply it to the good's overall stock."""
    if type not in (STOCK_IN, STOCK_OUT):
        logger.error("Invalid stock movement type: %s", type)
        return False

    try:
        x(
            conn,
            """
            INSERT INTO goods_history (idgood, idlocation, stock, type, payment_type, price, description, note)
            VALUES (?, ?, ?, ?, ?, ?, ?, NULL)
            """,
            (idgood, idlocation, int(stock), type, payment_type or None, float(price or 0), HISTORY_DESCRIPTIONS[type]),
        )

        good = q1(conn, "SELECT stock FROM goods WHERE id=?", (idgood,))
        current = int((good or {}).get("stock") or 0)
        new_stock = current + int(stock) if type == STOCK_IN else current - int(stock)

        u(conn, "UPDATE goods SET stock=?, updated_at=? WHERE id=?", (new_stock, iso_now(), idgood))
    except sqlite3.Error:
        logger.exception("Create stock error")
        return False
    return True


def update_stock(
    conn,
    stock_id: int,
    *,
    idgood: int,
    stock: int,
    price: float,
    idlocation: Optional[int] = None,
    type: Optional[str] = None,
    payment_type: Optional[int] = None,
) -> bool:
    # Overwrites the good's totals directly; stock_id is the row the edit came from.
    try:
        u(
            conn,
            "UPDATE goods SET stock=?, price=?, updated_at=? WHERE id=?",
            (int(stock), float(price or 0), iso_now(), idgood),
        )
    except sqlite3.Error:
        logger.exception("Update stock error (row %s)", stock_id)
        return False
    return True


def delete_stock(conn, history_id: int) -> bool:
    try:
        u(conn, "DELETE FROM goods_history WHERE id=?", (history_id,))
    except sqlite3.Error:
        logger.exception("Delete stock history error")
        return False
    return True


def update_location_stock(conn, location_stock_id: int, *, stock: Optional[int] = None) -> bool:
    logger.info("Updating location stock %s: stock=%s", location_stock_id, stock)
    if stock is None:
        return True
    try:
        u(
            conn,
            "UPDATE location_stocks SET stock=?, updated_at=? WHERE id=?",
            (int(stock), iso_now(), location_stock_id),
        )
    except sqlite3.Error:
        logger.exception("Update location stock error")
        return False
    return True


def delete_location_stock(conn, location_stock_id: int) -> bool:
    try:
        u(conn, "DELETE FROM location_stocks WHERE id=?", (location_stock_id,))
    except sqlite3.Error:
        logger.exception("Delete location stock error")
        return False
    logger.info("Location stock deleted successfully: %s", location_stock_id)
    return True


def _location_stock(conn, idgood: int, idlocation: int) -> Optional[dict]:
    return q1(
        conn,
        "SELECT id, stock FROM location_stocks WHERE idgood=? AND idlocation=?",
        (idgood, idlocation),
    )


def _record_payment(conn, data: StockTransactionInput, history_id: int, good_name: str) -> None:
    """
    Book the money side of a priced movement.

    Selling goods (stock out) brings money in; buying them (stock in) pays
    money out. Skipped silently when no wallet can be resolved.
    """
    payment_type = data.payment_type or financial.get_primary_wallet_id(conn)
    if not payment_type:
        logger.warning("No wallet for stock movement %s; money side skipped", history_id)
        return

    if data.type == STOCK_OUT:
        tx_type, description, label = "in", SALES_DESCRIPTION, "Goods Out"
    else:
        tx_type, description, label = "out", PURCHASE_DESCRIPTION, "Goods In"

    transaction = financial.create_transaction(
        conn,
        type=tx_type,
        total=int(data.stock) * float(data.price),
        payment_type=payment_type,
        note=f"{label}: {int(data.stock)} x {good_name or 'Item'}",
        id_description=financial.get_transaction_description_id(conn, description, tx_type),
        id_goods_history=history_id,
    )
    if transaction:
        u(conn, "UPDATE goods_history SET transaction_id=? WHERE id=?", (transaction["id"], history_id))


def create_stock_transaction(conn, data: StockTransactionInput) -> bool:
    """
    Move stock in or out of a location.

    Steps run one after the other with no transaction around them: history
    insert, location stock read-modify-write, the same for the good's overall
    stock, then the money transaction.
    """
    if data.type not in (STOCK_IN, STOCK_OUT) or not data.idgood or not data.idlocation:
        logger.error("Invalid stock transaction: %s", data)
        return False
    if int(data.stock) <= 0:
        logger.error("Stock transaction quantity must be > 0: %s", data.stock)
        return False

    try:
        good = q1(conn, "SELECT id, name FROM goods WHERE id=?", (data.idgood,))
        if not good:
            logger.error("Good not found for stock transaction: %s", data.idgood)
            return False

        if not q1(conn, "SELECT id FROM locations WHERE id=?", (data.idlocation,)):
            logger.error("Location not found for stock transaction: %s", data.idlocation)
            return False

        if data.type == STOCK_OUT:
            current = int((_location_stock(conn, data.idgood, data.idlocation) or {}).get("stock") or 0)
            if int(data.stock) > current:
                logger.error(
                    "Insufficient stock for stock out: good=%s location=%s requested=%s available=%s",
                    data.idgood,
                    data.idlocation,
                    data.stock,
                    current,
                )
                return False

        history_id = x(
            conn,
            """
            INSERT INTO goods_history (idgood, idlocation, stock, type, payment_type, price, description, note)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                data.idgood,
                data.idlocation,
                int(data.stock),
                data.type,
                data.payment_type or None,
                float(data.price or 0),
                HISTORY_DESCRIPTIONS[data.type],
                data.note or None,
            ),
        )

        location_stock = _location_stock(conn, data.idgood, data.idlocation)
        if location_stock:
            current = int(location_stock["stock"] or 0)
            new_stock = current + int(data.stock) if data.type == STOCK_IN else current - int(data.stock)
            u(
                conn,
                "UPDATE location_stocks SET stock=?, updated_at=? WHERE idgood=? AND idlocation=?",
                (max(0, new_stock), iso_now(), data.idgood, data.idlocation),
            )
        else:
            x(
                conn,
                "INSERT INTO location_stocks (idgood, idlocation, stock) VALUES (?, ?, ?)",
                (data.idgood, data.idlocation, int(data.stock) if data.type == STOCK_IN else 0),
            )

        # goods.stock is the overall quantity damaged-goods reports check against
        overall = q1(conn, "SELECT stock FROM goods WHERE id=?", (data.idgood,))
        current = int((overall or {}).get("stock") or 0)
        new_overall = current + int(data.stock) if data.type == STOCK_IN else current - int(data.stock)
        u(
            conn,
            "UPDATE goods SET stock=?, updated_at=? WHERE id=?",
            (max(0, new_overall), iso_now(), data.idgood),
        )

        if float(data.price or 0) > 0:
            _record_payment(conn, data, history_id, good["name"])
    except sqlite3.Error:
        logger.exception("Create stock transaction error")
        return False

    logger.info("Stock %s of %s x good %s at location %s", data.type, data.stock, data.idgood, data.idlocation)
    return True


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


def _history_rows(rows) -> list[dict]:
    out = []
    for r in rows:
        d = dict(r)
        good_name = d.pop("good_name", None)
        good_code = d.pop("good_code", None)
        location_name = d.pop("location_name", None)
        d["good"] = {"name": good_name, "code": good_code}
        d["location"] = {"locationname": location_name}
        out.append(d)
    return out


_HISTORY_SQL = """
    SELECT h.*, g.name AS good_name, g.code AS good_code, l.locationname AS location_name
    FROM goods_history h
    LEFT JOIN goods g ON g.id = h.idgood
    LEFT JOIN locations l ON l.id = h.idlocation
"""


def get_all_goods_history(conn, location_id: Optional[int] = None) -> list[dict]:
    try:
        if location_id:
            rows = q(
                conn,
                _HISTORY_SQL + " WHERE h.idlocation=? ORDER BY h.created_at DESC, h.id DESC",
                (location_id,),
            )
        else:
            rows = q(conn, _HISTORY_SQL + " ORDER BY h.created_at DESC, h.id DESC")
    except sqlite3.Error:
        logger.exception("Get all goods history error")
        return []
    return _history_rows(rows)


def get_goods_history_by_location(conn, location_id: int) -> list[dict]:
    return get_all_goods_history(conn, location_id)


def get_goods_history_by_good(conn, good_id: int) -> list[dict]:
    try:
        rows = q(conn, _HISTORY_SQL + " WHERE h.idgood=? ORDER BY h.created_at DESC, h.id DESC", (good_id,))
    except sqlite3.Error:
        logger.exception("Get goods history by good error")
        return []
    return _history_rows(rows)
