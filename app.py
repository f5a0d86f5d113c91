from __future__ import annotations

import streamlit as st

from stockroom.config import get_settings
from stockroom.logging_config import configure_logging

st.set_page_config(page_title="Stockroom Admin", page_icon="📦", layout="wide")

configure_logging(get_settings().log_level)

pages = [
    st.Page("home.py", title="Home", icon="🏠"),
    st.Page("pages/1_📦_Goods.py", title="Goods", icon="📦"),
    st.Page("pages/2_🔁_Stock.py", title="Stock In / Out", icon="🔁"),
    st.Page("pages/3_🩹_Damaged_Goods.py", title="Damaged Goods", icon="🩹"),
    st.Page("pages/4_📁_Categories.py", title="Categories", icon="📁"),
    st.Page("pages/5_📍_Locations.py", title="Locations", icon="📍"),
    st.Page("pages/6_📜_History.py", title="Stock History", icon="📜"),
    st.Page("pages/7_🧪_Data_Management.py", title="Data Management", icon="🧪"),
]

st.navigation(pages).run()
