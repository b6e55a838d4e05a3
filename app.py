"""Tiered Distribution Planner — Streamlit entry point."""

import streamlit as st
import sys
import os

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from components.sidebar import render_sidebar
from config.logging_setup import configure_logging
from data.session_store import initialize_session_state
from tabs import (
    tab_plan,
    tab_batch,
    tab_codec,
    tab_catalog,
)


def main():
    st.set_page_config(
        page_title="Tiered Distribution Planner",
        page_icon="📦",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    configure_logging()
    initialize_session_state()
    sidebar_state = render_sidebar()

    tab1, tab2, tab3, tab4 = st.tabs([
        "📐 Plan",
        "🗂️ Batch",
        "🔤 Codec",
        "📚 Catalog",
    ])

    with tab1:
        tab_plan.render(sidebar_state)
    with tab2:
        tab_batch.render(sidebar_state)
    with tab3:
        tab_codec.render(sidebar_state)
    with tab4:
        tab_catalog.render(sidebar_state)


if __name__ == "__main__":
    main()
