"""
Pytest fixtures for the stockroom test suite.

Every test gets a fresh in-memory sqlite database with the schema and the
reference data (primary wallet, Sales/Purchase descriptions) applied.
"""

import pytest

from stockroom.db import _connect, ensure_schema, q1
from stockroom.services.categories import create_category
from stockroom.services.demo_data import upsert_reference_data
from stockroom.services.inventory import create_good_with_initial_stock
from stockroom.services.locations import create_location


@pytest.fixture
def conn():
    c = _connect(":memory:")
    ensure_schema(c)
    upsert_reference_data(c)
    yield c
    c.close()


@pytest.fixture
def category(conn):
    return create_category(conn, categoryname="Beverages")


@pytest.fixture
def location(conn):
    return create_location(conn, locationname="Main Warehouse", locationaddress="Jl. Merdeka 1")


@pytest.fixture
def other_location(conn):
    return create_location(conn, locationname="Downtown Shop")


@pytest.fixture
def make_good(conn, category, location):
    """Create a good stocked at ``location`` through the service call."""

    def _make(code="BEV-001", name="Mineral Water", price=3500.0, stock=50, location_id=None):
        return create_good_with_initial_stock(
            conn,
            idcategory=category["id"],
            code=code,
            name=name,
            price=price,
            stock=stock,
            location_id=location_id or location["id"],
        )

    return _make


@pytest.fixture
def good(make_good):
    return make_good()


@pytest.fixture
def stock_at(conn):
    """Current location_stocks quantity, or None when there is no row."""

    def _stock_at(good_id, location_id):
        row = q1(conn, "SELECT stock FROM location_stocks WHERE idgood=? AND idlocation=?", (good_id, location_id))
        return None if row is None else row["stock"]

    return _stock_at
