"""Global sidebar controls for category, catalog variant and logging."""

import logging

import streamlit as st
from dataclasses import dataclass
from config.logging_setup import configure_logging
from data.session_store import get_sidebar_state, get_snapshot, is_data_loaded, set_sidebar_state
from models.category import Category

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@dataclass
class SidebarState:
    category: Category
    bi_weekly_float: bool
    log_level: str


def render_sidebar() -> SidebarState:
    """Render the global sidebar controls and return current state."""
    current = get_sidebar_state()
    with st.sidebar:
        st.title("Tiered Distribution Planner")
        st.divider()

        categories = list(Category)
        category = st.selectbox(
            "Category",
            options=categories,
            format_func=lambda c: c.label,
            index=categories.index(current.get("category", Category.COUNTY)),
            key="sidebar_category",
        )

        bi_weekly = st.toggle(
            "Bi-weekly float catalog",
            value=current.get("bi_weekly_float", False),
            key="sidebar_bi_weekly",
        )

        level = st.selectbox(
            "Log level",
            options=LOG_LEVELS,
            index=LOG_LEVELS.index(current.get("log_level", "INFO")),
            key="sidebar_log_level",
        )
        if logging.getLevelName(logging.getLogger().level) != level:
            configure_logging(level)

        st.divider()

        # Data status indicator
        if is_data_loaded():
            snapshot = get_snapshot()
            st.success(f"Snapshot loaded ({len(snapshot.entries)} catalogs)")
            st.caption(f"Built at {snapshot.built_at:%Y-%m-%d %H:%M:%S}")
            if not snapshot.has(category, bi_weekly):
                st.warning("No catalog for this category/variant")
        else:
            st.warning("No snapshot loaded — go to Catalog tab")

    state = SidebarState(category=category, bi_weekly_float=bi_weekly, log_level=level)
    set_sidebar_state({
        "category": state.category,
        "bi_weekly_float": state.bi_weekly_float,
        "log_level": state.log_level,
    })
    return state
