"""Styled dataframe display helpers."""

import streamlit as st
import pandas as pd
from typing import Optional


def render_styled_table(
    df: pd.DataFrame,
    title: Optional[str] = None,
    height: Optional[int] = None,
    use_container_width: bool = True,
):
    """Render a styled, non-editable dataframe."""
    if title:
        st.subheader(title)
    st.dataframe(df, height=height, use_container_width=use_container_width)


def render_status_table(df: pd.DataFrame, status_column: str = "Status"):
    """Render a table with color-coded outcome statuses."""
    def color_status(val):
        if val == "ok":
            return "background-color: #d4edda; color: #155724; font-weight: bold"
        elif val in ("skipped", "cancelled"):
            return "background-color: #fff3cd; color: #856404; font-weight: bold"
        elif val in ("invalid", "failed"):
            return "background-color: #ffcccc; color: #cc0000; font-weight: bold"
        return ""

    if status_column in df.columns:
        styled = df.style.map(color_status, subset=[status_column])
        st.dataframe(styled, use_container_width=True)
    else:
        st.dataframe(df, use_container_width=True)


def render_error_table(df: pd.DataFrame, error_column: str = "Error %", threshold: float = 5.0):
    """Render a table highlighting error percentages above threshold."""
    def color_error(val):
        try:
            v = float(val)
            if v > threshold:
                return "color: #cc0000; font-weight: bold"
            elif v == 0:
                return "color: #155724; font-weight: bold"
        except (ValueError, TypeError):
            pass
        return ""

    if error_column in df.columns:
        styled = df.style.map(color_error, subset=[error_column])
        st.dataframe(styled, use_container_width=True)
    else:
        st.dataframe(df, use_container_width=True)
