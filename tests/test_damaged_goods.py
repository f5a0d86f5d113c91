"""
Tests for damaged-goods records and their effect on goods.damaged_stock.
"""

from stockroom.db import q1, u
from stockroom.services.damaged_goods import (
    DamagedGoodsSummary,
    create_damaged_good,
    delete_damaged_good,
    get_all_damaged_goods,
    get_damaged_good,
    get_damaged_goods_by_date_range,
    get_damaged_goods_by_good,
    get_damaged_goods_summary,
    update_damaged_good,
)
from stockroom.services.inventory import (
    StockTransactionInput,
    create_good_with_initial_stock,
    create_stock_transaction,
)


def damaged_stock(conn, good_id):
    return q1(conn, "SELECT damaged_stock FROM goods WHERE id=?", (good_id,))["damaged_stock"]


# =============================================================================
# Create
# =============================================================================


class TestCreateDamagedGood:
    def test_records_and_raises_damaged_stock(self, conn, good):
        record = create_damaged_good(conn, idgood=good["id"], stock=3, reason="  Dented can ", reported_by="ana")
        assert record["stock"] == 3
        assert record["reason"] == "Dented can"
        assert record["reported_by"] == "ana"
        assert damaged_stock(conn, good["id"]) == 3

    def test_accumulates(self, conn, good):
        create_damaged_good(conn, idgood=good["id"], stock=3, reason="Dented")
        create_damaged_good(conn, idgood=good["id"], stock=4, reason="Leaking")
        assert damaged_stock(conn, good["id"]) == 7

    def test_cannot_exceed_available_stock(self, conn, make_good):
        good = make_good(stock=5)
        assert create_damaged_good(conn, idgood=good["id"], stock=4, reason="Dented")
        # Only one undamaged unit is left
        assert create_damaged_good(conn, idgood=good["id"], stock=2, reason="Dented") is None
        assert damaged_stock(conn, good["id"]) == 4

    def test_whole_available_stock_can_be_damaged(self, conn, make_good):
        good = make_good(stock=5)
        assert create_damaged_good(conn, idgood=good["id"], stock=5, reason="Flood")
        assert damaged_stock(conn, good["id"]) == 5

    def test_unknown_good(self, conn):
        assert create_damaged_good(conn, idgood=999, stock=1, reason="Dented") is None

    def test_required_fields(self, conn, good):
        assert create_damaged_good(conn, idgood=good["id"], stock=1, reason="   ") is None
        assert create_damaged_good(conn, idgood=good["id"], stock=0, reason="Dented") is None
        assert create_damaged_good(conn, idgood=None, stock=1, reason="Dented") is None
        assert get_all_damaged_goods(conn) == []


# =============================================================================
# Update / delete
# =============================================================================


class TestUpdateDamagedGood:
    def test_quantity_change_adjusts_by_difference(self, conn, good):
        record = create_damaged_good(conn, idgood=good["id"], stock=3, reason="Dented")
        create_damaged_good(conn, idgood=good["id"], stock=2, reason="Torn")

        updated = update_damaged_good(conn, record["id"], stock=5)
        assert updated["stock"] == 5
        assert damaged_stock(conn, good["id"]) == 7

        update_damaged_good(conn, record["id"], stock=1)
        assert damaged_stock(conn, good["id"]) == 3

    def test_reason_only(self, conn, good):
        record = create_damaged_good(conn, idgood=good["id"], stock=3, reason="Dented")
        updated = update_damaged_good(conn, record["id"], reason="Crushed")
        assert updated["reason"] == "Crushed"
        assert updated["stock"] == 3
        assert damaged_stock(conn, good["id"]) == 3

    def test_damaged_stock_never_goes_negative(self, conn, good):
        record = create_damaged_good(conn, idgood=good["id"], stock=3, reason="Dented")
        u(conn, "UPDATE goods SET damaged_stock=1 WHERE id=?", (good["id"],))
        update_damaged_good(conn, record["id"], stock=0)
        assert damaged_stock(conn, good["id"]) == 0

    def test_unknown_record(self, conn):
        assert update_damaged_good(conn, 999, stock=1) is None


class TestDeleteDamagedGood:
    def test_delete_gives_quantity_back(self, conn, good):
        first = create_damaged_good(conn, idgood=good["id"], stock=3, reason="Dented")
        create_damaged_good(conn, idgood=good["id"], stock=2, reason="Torn")
        assert delete_damaged_good(conn, first["id"]) is True
        assert get_damaged_good(conn, first["id"]) is None
        assert damaged_stock(conn, good["id"]) == 2

    def test_clamped_at_zero(self, conn, good):
        record = create_damaged_good(conn, idgood=good["id"], stock=3, reason="Dented")
        u(conn, "UPDATE goods SET damaged_stock=1 WHERE id=?", (good["id"],))
        assert delete_damaged_good(conn, record["id"])
        assert damaged_stock(conn, good["id"]) == 0

    def test_unknown_record(self, conn):
        assert delete_damaged_good(conn, 999) is False


# =============================================================================
# Listings / summary
# =============================================================================


class TestListings:
    def test_newest_first_with_nested_good(self, conn, good):
        create_damaged_good(conn, idgood=good["id"], stock=1, reason="First")
        create_damaged_good(conn, idgood=good["id"], stock=2, reason="Second")

        rows = get_all_damaged_goods(conn)
        assert [r["reason"] for r in rows] == ["Second", "First"]
        assert rows[0]["good"] == {"id": good["id"], "name": "Mineral Water", "code": "BEV-001", "price": 3500.0}

    def test_by_good(self, conn, make_good):
        water = make_good()
        tea = make_good(code="BEV-002", name="Tea")
        create_damaged_good(conn, idgood=water["id"], stock=1, reason="Dented")
        create_damaged_good(conn, idgood=tea["id"], stock=1, reason="Torn")
        assert [r["reason"] for r in get_damaged_goods_by_good(conn, tea["id"])] == ["Torn"]

    def test_date_range_includes_whole_end_day(self, conn, good):
        for day in ("2026-10-01", "2026-10-15", "2026-10-20"):
            record = create_damaged_good(conn, idgood=good["id"], stock=1, reason=day)
            u(conn, "UPDATE damaged_goods SET created_at=? WHERE id=?", (f"{day}T18:30:00+00:00", record["id"]))

        rows = get_damaged_goods_by_date_range(conn, "2026-10-01", "2026-10-15")
        assert [r["reason"] for r in rows] == ["2026-10-15", "2026-10-01"]

        rows = get_damaged_goods_by_date_range(conn, "2026-10-02", "2026-10-31")
        assert [r["reason"] for r in rows] == ["2026-10-20", "2026-10-15"]


class TestSummary:
    def test_empty(self, conn):
        assert get_damaged_goods_summary(conn) == DamagedGoodsSummary(0, 0, 0.0)

    def test_totals(self, conn, make_good):
        water = make_good(price=3500.0)
        soap = make_good(code="HSE-001", name="Dish Soap", price=18000.0)
        create_damaged_good(conn, idgood=water["id"], stock=2, reason="Dented")
        create_damaged_good(conn, idgood=soap["id"], stock=1, reason="Leaking")

        summary = get_damaged_goods_summary(conn)
        assert summary.total_damaged_items == 2
        assert summary.total_damaged_stock == 3
        assert summary.total_value == 25000.0


# =============================================================================
# End to end through the services
# =============================================================================


class TestReportingDamageOnNewGoods:
    def test_new_good_then_stock_in_then_damage(self, conn, category, location):
        good = create_good_with_initial_stock(
            conn,
            idcategory=category["id"],
            code="SNK-009",
            name="Rice Crackers",
            price=9000,
            stock=50,
            location_id=location["id"],
        )
        assert create_stock_transaction(
            conn, StockTransactionInput(idgood=good["id"], idlocation=location["id"], stock=20, type="in")
        )

        record = create_damaged_good(conn, idgood=good["id"], stock=1, reason="Torn bag")
        assert record is not None
        assert damaged_stock(conn, good["id"]) == 1

        # 70 on hand, 1 already damaged
        assert create_damaged_good(conn, idgood=good["id"], stock=69, reason="Flood")
        assert create_damaged_good(conn, idgood=good["id"], stock=1, reason="Flood") is None

    def test_stock_out_shrinks_what_can_be_damaged(self, conn, make_good, location):
        good = make_good(stock=10)
        assert create_stock_transaction(
            conn, StockTransactionInput(idgood=good["id"], idlocation=location["id"], stock=8, type="out")
        )
        assert create_damaged_good(conn, idgood=good["id"], stock=3, reason="Dented") is None
        assert create_damaged_good(conn, idgood=good["id"], stock=2, reason="Dented")
