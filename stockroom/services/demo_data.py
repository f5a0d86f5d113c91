from __future__ import annotations

import random

from stockroom.db import q, x, ensure_schema
from stockroom.services.categories import create_category
from stockroom.services.damaged_goods import create_damaged_good
from stockroom.services.inventory import (
    PURCHASE_DESCRIPTION,
    SALES_DESCRIPTION,
    StockTransactionInput,
    create_good_with_initial_stock,
    create_stock_transaction,
)
from stockroom.services.locations import create_location


PRIMARY_WALLET = "Cash"
DEFAULT_WALLETS = [PRIMARY_WALLET, "Bank Transfer"]
DEFAULT_DESCRIPTIONS = [
    (SALES_DESCRIPTION, "in"),
    (PURCHASE_DESCRIPTION, "out"),
]

DEMO_CATEGORIES = ["Beverages", "Snacks", "Household"]
DEMO_LOCATIONS = [("Main Warehouse", "Jl. Merdeka 1"), ("Downtown Shop", "Jl. Sudirman 22")]
DEMO_GOODS = [
    ("BEV-001", "Mineral Water 600ml", "Beverages", 3500),
    ("BEV-002", "Iced Tea 350ml", "Beverages", 5000),
    ("SNK-001", "Potato Chips", "Snacks", 12000),
    ("SNK-002", "Peanut Crackers", "Snacks", 8500),
    ("HSE-001", "Dish Soap 800ml", "Household", 18000),
]


def upsert_reference_data(conn) -> None:
    ensure_schema(conn)

    for name in DEFAULT_WALLETS:
        x(
            conn,
            "INSERT OR IGNORE INTO financial_categories(name, is_primary) VALUES (?, ?)",
            (name, 1 if name == PRIMARY_WALLET else 0),
        )

    for name, type_ in DEFAULT_DESCRIPTIONS:
        x(
            conn,
            "INSERT OR IGNORE INTO transaction_descriptions(descriptionname, type) VALUES (?, ?)",
            (name, type_),
        )


def wipe_all(conn) -> None:
    # Keep schema, delete data (order matters for FKs).
    for t in [
        "transactions",
        "damaged_goods",
        "goods_history",
        "location_stocks",
        "goods",
        "categories",
        "locations",
        "transaction_descriptions",
        "financial_categories",
    ]:
        conn.execute(f"DELETE FROM {t};")
    conn.commit()


def load_demo_data(conn, *, seed: int = 7) -> None:
    """Seed categories, locations, goods and a few movements. Refuses to run twice."""
    upsert_reference_data(conn)
    if q(conn, "SELECT id FROM goods LIMIT 1"):
        raise ValueError("Database already has goods; wipe it before loading demo data.")

    random.seed(seed)

    categories = {name: create_category(conn, categoryname=name)["id"] for name in DEMO_CATEGORIES}
    locations = [
        create_location(conn, locationname=name, locationaddress=address)["id"] for name, address in DEMO_LOCATIONS
    ]

    for code, name, category, price in DEMO_GOODS:
        for loc_id in locations:
            existing = q(conn, "SELECT id FROM goods WHERE code=?", (code,))
            if existing:
                good_id = int(existing[0]["id"])
                create_stock_transaction(
                    conn,
                    StockTransactionInput(
                        idgood=good_id,
                        idlocation=loc_id,
                        stock=random.randint(20, 60),
                        type="in",
                        price=float(price) * 0.8,
                    ),
                )
                continue
            create_good_with_initial_stock(
                conn,
                idcategory=categories[category],
                code=code,
                name=name,
                price=float(price),
                stock=random.randint(20, 60),
                location_id=loc_id,
            )

    # A few sales and damage reports
    goods = q(conn, "SELECT id FROM goods ORDER BY id")
    for g in goods[:3]:
        create_stock_transaction(
            conn,
            StockTransactionInput(
                idgood=int(g["id"]),
                idlocation=locations[0],
                stock=random.randint(1, 5),
                type="out",
                price=10000.0,
            ),
        )

    create_damaged_good(conn, idgood=int(goods[0]["id"]), stock=2, reason="Broken seal", reported_by="demo")
    create_damaged_good(conn, idgood=int(goods[-1]["id"]), stock=1, reason="Leaking bottle", reported_by="demo")
