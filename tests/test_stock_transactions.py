"""
Tests for stock-in / stock-out movements and the money transactions they book.
"""

import pytest

from stockroom.db import q, q1
from stockroom.services.financial import (
    create_transaction,
    get_primary_wallet_id,
    get_transaction_description_id,
)
from stockroom.services.inventory import StockTransactionInput, create_stock_transaction, update_stock


def movement(good, location, **kwargs):
    data = dict(idgood=good["id"], idlocation=location["id"], stock=5, type="in", price=0.0)
    data.update(kwargs)
    return StockTransactionInput(**data)


def transactions(conn):
    return [dict(r) for r in q(conn, "SELECT * FROM transactions ORDER BY id")]


def history(conn):
    return [dict(r) for r in q(conn, "SELECT * FROM goods_history ORDER BY id")]


def overall_stock(conn, good):
    return q1(conn, "SELECT stock FROM goods WHERE id=?", (good["id"],))["stock"]


class TestStockIn:
    def test_adds_to_location_stock(self, conn, good, location, stock_at):
        assert create_stock_transaction(conn, movement(good, location, stock=5)) is True
        assert stock_at(good["id"], location["id"]) == 55

        rows = history(conn)
        assert len(rows) == 1
        assert rows[0]["type"] == "in"
        assert rows[0]["description"] == "Goods In"
        assert rows[0]["stock"] == 5

    def test_creates_location_row_when_missing(self, conn, good, other_location, stock_at):
        assert stock_at(good["id"], other_location["id"]) is None
        assert create_stock_transaction(conn, movement(good, other_location, stock=8))
        assert stock_at(good["id"], other_location["id"]) == 8

    def test_priced_stock_in_books_a_purchase(self, conn, good, location):
        assert create_stock_transaction(conn, movement(good, location, stock=4, price=2500.0, note="restock"))

        [tx] = transactions(conn)
        assert tx["type"] == "out"
        assert tx["total"] == 10000.0
        assert tx["payment_type"] == get_primary_wallet_id(conn)
        assert tx["id_description"] == get_transaction_description_id(conn, "Purchase", "out")
        assert tx["note"] == "Goods In: 4 x Mineral Water"

        [h] = history(conn)
        assert h["transaction_id"] == tx["id"]
        assert tx["id_goods_history"] == h["id"]
        assert h["note"] == "restock"

    def test_explicit_wallet_is_used(self, conn, good, location):
        bank = q1(conn, "SELECT id FROM financial_categories WHERE name='Bank Transfer'")["id"]
        assert create_stock_transaction(conn, movement(good, location, price=1000.0, payment_type=bank))
        [tx] = transactions(conn)
        assert tx["payment_type"] == bank
        assert history(conn)[0]["payment_type"] == bank

    def test_unpriced_movement_books_nothing(self, conn, good, location):
        assert create_stock_transaction(conn, movement(good, location, price=0.0))
        assert transactions(conn) == []

    def test_no_wallet_still_moves_stock(self, conn, good, location, stock_at):
        conn.execute("DELETE FROM financial_categories")
        conn.commit()
        assert create_stock_transaction(conn, movement(good, location, stock=1, price=500.0))
        assert transactions(conn) == []
        assert stock_at(good["id"], location["id"]) == 51


class TestStockOut:
    def test_removes_from_location_stock_and_books_a_sale(self, conn, good, location, stock_at):
        assert create_stock_transaction(conn, movement(good, location, type="out", stock=20, price=4000.0))
        assert stock_at(good["id"], location["id"]) == 30

        [tx] = transactions(conn)
        assert tx["type"] == "in"
        assert tx["total"] == 80000.0
        assert tx["id_description"] == get_transaction_description_id(conn, "Sales", "in")
        assert tx["note"] == "Goods Out: 20 x Mineral Water"
        assert history(conn)[0]["description"] == "Goods Out"

    def test_whole_stock_can_leave(self, conn, good, location, stock_at):
        assert create_stock_transaction(conn, movement(good, location, type="out", stock=50))
        assert stock_at(good["id"], location["id"]) == 0

    def test_insufficient_stock_is_rejected(self, conn, good, location, stock_at):
        assert create_stock_transaction(conn, movement(good, location, type="out", stock=51)) is False
        assert stock_at(good["id"], location["id"]) == 50
        assert history(conn) == []

    def test_no_stock_row_means_nothing_to_take(self, conn, good, other_location):
        assert create_stock_transaction(conn, movement(good, other_location, type="out", stock=1)) is False


class TestValidation:
    def test_unknown_good(self, conn, location):
        assert create_stock_transaction(conn, movement({"id": 999}, location)) is False
        assert history(conn) == []

    def test_unknown_location(self, conn, good):
        assert create_stock_transaction(conn, movement(good, {"id": 999})) is False
        assert history(conn) == []

    @pytest.mark.parametrize("qty", [0, -3])
    def test_quantity_must_be_positive(self, conn, good, location, qty):
        assert create_stock_transaction(conn, movement(good, location, stock=qty)) is False

    def test_unknown_type(self, conn, good, location):
        assert create_stock_transaction(conn, movement(good, location, type="adjustment")) is False

    def test_unknown_wallet_fails_before_stock_moves(self, conn, good, location, stock_at):
        assert create_stock_transaction(conn, movement(good, location, payment_type=999, price=10.0)) is False
        assert stock_at(good["id"], location["id"]) == 50


class TestSequentialMovements:
    def test_in_then_out_then_in(self, conn, good, location, stock_at):
        assert create_stock_transaction(conn, movement(good, location, stock=10))
        assert create_stock_transaction(conn, movement(good, location, type="out", stock=55))
        assert create_stock_transaction(conn, movement(good, location, stock=2))
        assert stock_at(good["id"], location["id"]) == 7
        assert [h["type"] for h in history(conn)] == ["in", "out", "in"]

    def test_overall_stock_follows_movements(self, conn, good, location, other_location):
        assert create_stock_transaction(conn, movement(good, location, stock=10))
        assert overall_stock(conn, good) == 60
        assert create_stock_transaction(conn, movement(good, other_location, stock=5))
        assert overall_stock(conn, good) == 65
        assert create_stock_transaction(conn, movement(good, location, type="out", stock=25))
        assert overall_stock(conn, good) == 40

    def test_overall_stock_clamped_at_zero(self, conn, good, location):
        update_stock(conn, 0, idgood=good["id"], stock=3, price=good["price"])
        assert create_stock_transaction(conn, movement(good, location, type="out", stock=10))
        assert overall_stock(conn, good) == 0

    def test_rejected_movement_leaves_overall_stock(self, conn, good, location):
        assert create_stock_transaction(conn, movement(good, location, type="out", stock=51)) is False
        assert overall_stock(conn, good) == 50


class TestFinancialCollaborator:
    def test_create_transaction_requires_type_and_total(self, conn):
        assert create_transaction(conn, type="sideways", total=10, payment_type=None) is None
        assert create_transaction(conn, type="in", total=0, payment_type=None) is None

    def test_create_transaction(self, conn):
        wallet = get_primary_wallet_id(conn)
        tx = create_transaction(conn, type="in", total=1500, payment_type=wallet, note="")
        assert tx["total"] == 1500.0
        assert tx["note"] is None

    def test_unknown_description(self, conn):
        assert get_transaction_description_id(conn, "Refund", "in") is None
