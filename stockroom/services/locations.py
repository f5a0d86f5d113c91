from __future__ import annotations

import logging
import sqlite3
from typing import Any, Optional

from stockroom.db import q, q1, u, x
from stockroom.utils import iso_now

logger = logging.getLogger(__name__)

LOCATION_UPDATABLE_FIELDS = ("locationname", "address", "is_active")


def get_all_locations(conn) -> list[dict]:
    try:
        rows = q(conn, "SELECT * FROM locations ORDER BY created_at DESC, id DESC")
    except sqlite3.Error:
        logger.exception("Get locations error")
        return []
    return [dict(r) for r in rows]


def get_active_locations(conn) -> list[dict]:
    try:
        rows = q(conn, "SELECT * FROM locations WHERE is_active=1 ORDER BY locationname ASC")
    except sqlite3.Error:
        logger.exception("Get active locations error")
        return []
    return [dict(r) for r in rows]


def get_location_by_id(conn, location_id: int) -> Optional[dict]:
    try:
        row = q1(conn, "SELECT * FROM locations WHERE id=?", (location_id,))
    except sqlite3.Error:
        logger.exception("Get location by id error")
        return None
    if row is None:
        logger.error("Location not found: %s", location_id)
    return row


def get_goods_at_location(conn, location_id: int) -> list[dict]:
    try:
        rows = q(
            conn,
            """
            SELECT ls.idgood, ls.stock, g.code, g.name, c.categoryname
            FROM location_stocks ls
            JOIN goods g ON g.id = ls.idgood
            JOIN categories c ON c.id = g.idcategory
            WHERE ls.idlocation=?
            """,
            (location_id,),
        )
    except sqlite3.Error:
        logger.exception("Get goods at location error")
        return []

    mapped = [
        {
            "idgood": r["idgood"],
            "good_code": r["code"] or "",
            "good_name": r["name"] or "",
            "categoryname": r["categoryname"] or "",
            "total_stock": r["stock"] or 0,
        }
        for r in rows
    ]
    return sorted(mapped, key=lambda m: m["good_name"].casefold())


def create_location(conn, *, locationname: str, locationaddress: Optional[str] = None) -> Optional[dict]:
    name = str(locationname or "").strip()
    if not name:
        logger.error("Location name is required")
        return None
    try:
        loc_id = x(
            conn,
            "INSERT INTO locations (locationname, address) VALUES (?, ?)",
            (name, (locationaddress or "").strip() or None),
        )
        return q1(conn, "SELECT * FROM locations WHERE id=?", (loc_id,))
    except sqlite3.Error:
        logger.exception("Create location error")
        return None


def update_location(conn, location_id: int, **fields: Any) -> Optional[dict]:
    # The edit form calls the address "locationaddress"; the column is "address".
    if "locationaddress" in fields:
        fields["address"] = fields.pop("locationaddress")
    data = {k: v for k, v in fields.items() if k in LOCATION_UPDATABLE_FIELDS}
    if "is_active" in data:
        data["is_active"] = 1 if data["is_active"] else 0

    try:
        if data:
            assignments = ", ".join(f"{k}=?" for k in data)
            n = u(
                conn,
                f"UPDATE locations SET {assignments}, updated_at=? WHERE id=?",
                (*data.values(), iso_now(), location_id),
            )
            if not n:
                logger.error("Location not found for update: %s", location_id)
                return None
        return q1(conn, "SELECT * FROM locations WHERE id=?", (location_id,))
    except sqlite3.Error:
        logger.exception("Update location error")
        return None


def delete_location(conn, location_id: int) -> bool:
    try:
        n = q(conn, "SELECT COUNT(*) AS n FROM location_stocks WHERE idlocation=?", (location_id,))[0]["n"]
        if n:
            logger.error("Delete location blocked: referenced by %s location stocks", n)
            return False
        u(conn, "DELETE FROM locations WHERE id=?", (location_id,))
    except sqlite3.Error:
        logger.exception("Delete location error")
        return False
    return True
