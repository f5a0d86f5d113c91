from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from stockroom.db import q1, x

logger = logging.getLogger(__name__)

TRANSACTION_TYPES = {"in", "out"}


def get_primary_wallet_id(conn) -> Optional[int]:
    try:
        row = q1(conn, "SELECT id FROM financial_categories WHERE is_primary=1 ORDER BY id LIMIT 1")
    except sqlite3.Error:
        logger.exception("Get primary wallet error")
        return None
    return int(row["id"]) if row else None


def get_transaction_description_id(conn, name: str, type_: str) -> Optional[int]:
    try:
        row = q1(
            conn,
            """
            SELECT id FROM transaction_descriptions
            WHERE descriptionname=? AND type=? AND is_active=1
            ORDER BY id LIMIT 1
            """,
            (name, type_),
        )
    except sqlite3.Error:
        logger.exception("Get transaction description error")
        return None
    return int(row["id"]) if row else None


def create_transaction(
    conn,
    *,
    type: str,
    total: float,
    payment_type: Optional[int],
    id_description: Optional[int] = None,
    id_goods_history: Optional[int] = None,
    note: Optional[str] = None,
) -> Optional[dict]:
    if type not in TRANSACTION_TYPES or not total:
        logger.error("Missing required fields for creating transaction")
        return None

    try:
        tx_id = x(
            conn,
            """
            INSERT INTO transactions (type, total, id_description, id_goods_history, note, payment_type)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (type, float(total), id_description, id_goods_history, note or None, payment_type),
        )
        row = q1(conn, "SELECT * FROM transactions WHERE id=?", (tx_id,))
    except sqlite3.Error:
        logger.exception("Create transaction error")
        return None

    logger.info("Transaction %s created: %s %.2f", tx_id, type, float(total))
    return row
