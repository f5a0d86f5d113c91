from __future__ import annotations

import streamlit as st

from stockroom.config import get_settings
from stockroom.db import get_conn, ensure_schema
from stockroom.services.damaged_goods import get_damaged_goods_summary
from stockroom.services.demo_data import upsert_reference_data
from stockroom.services.inventory import get_all_goods, get_low_stock_goods
from stockroom.utils import format_currency

st.title("📦 Stockroom Admin")
st.caption("Goods, per-location stock, stock movements and damaged-goods tracking.")

settings = get_settings()
conn = get_conn(settings.db_path)
ensure_schema(conn)
upsert_reference_data(conn)

with st.sidebar:
    st.subheader("Environment")
    st.write(f"**Data directory:** `{settings.data_dir}`")
    st.write(f"**Database:** `{settings.db_path.name}`")

damaged = get_damaged_goods_summary(conn)
low = get_low_stock_goods(conn, settings.low_stock_threshold)

c1, c2, c3, c4 = st.columns(4)
c1.metric("Goods", len(get_all_goods(conn)))
c2.metric(f"Low stock (< {settings.low_stock_threshold})", len(low))
c3.metric("Damaged units", damaged.total_damaged_stock)
c4.metric(f"Damaged value ({settings.currency})", format_currency(damaged.total_value))

st.info(
    "Use the left sidebar navigation. Start with **🧪 Data Management** to load demo data, then try **Goods**, **Stock In / Out** and **Damaged Goods**.",
    icon="ℹ️",
)
