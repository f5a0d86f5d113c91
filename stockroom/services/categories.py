from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from stockroom.db import q, q1, u, x
from stockroom.utils import iso_now

logger = logging.getLogger(__name__)


def get_all_categories(conn) -> list[dict]:
    try:
        rows = q(conn, "SELECT * FROM categories ORDER BY categoryname ASC")
    except sqlite3.Error:
        logger.exception("Get all categories error")
        return []
    return [dict(r) for r in rows]


def create_category(conn, *, categoryname: str) -> Optional[dict]:
    name = str(categoryname or "").strip()
    if not name:
        logger.error("Category name is required")
        return None
    try:
        cat_id = x(conn, "INSERT INTO categories (categoryname) VALUES (?)", (name,))
        return q1(conn, "SELECT * FROM categories WHERE id=?", (cat_id,))
    except sqlite3.Error:
        logger.exception("Create category error")
        return None


def update_category(conn, category_id: int, *, categoryname: str) -> Optional[dict]:
    name = str(categoryname or "").strip()
    if not name:
        logger.error("Category name is required")
        return None
    try:
        n = u(
            conn,
            "UPDATE categories SET categoryname=?, updated_at=? WHERE id=?",
            (name, iso_now(), category_id),
        )
        if not n:
            logger.error("Category not found for update: %s", category_id)
            return None
        return q1(conn, "SELECT * FROM categories WHERE id=?", (category_id,))
    except sqlite3.Error:
        logger.exception("Update category error")
        return None


def delete_category(conn, category_id: int) -> bool:
    try:
        n = q(conn, "SELECT COUNT(*) AS n FROM goods WHERE idcategory=?", (category_id,))[0]["n"]
        if n:
            logger.error("Delete category blocked: referenced by %s goods", n)
            return False
        u(conn, "DELETE FROM categories WHERE id=?", (category_id,))
    except sqlite3.Error:
        logger.exception("Delete category error")
        return False
    return True
