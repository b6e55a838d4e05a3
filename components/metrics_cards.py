"""Reusable KPI metric card widgets."""

import streamlit as st

from models.allocation import AllocationPlan


def render_metric_row(metrics: list[dict]):
    """Render a row of metric cards.

    Each metric dict should have: label, value, and optionally delta, delta_color.
    """
    cols = st.columns(len(metrics))
    for col, m in zip(cols, metrics):
        with col:
            delta = m.get("delta")
            delta_color = m.get("delta_color", "normal")
            st.metric(
                label=m["label"],
                value=m["value"],
                delta=delta,
                delta_color=delta_color,
            )


def render_plan_metrics(plan: AllocationPlan):
    render_metric_row([
        {"label": "Requested", "value": f"{plan.request.total:,}"},
        {
            "label": "Actual Amount",
            "value": f"{plan.actual_amount:,}",
            "delta": f"{plan.actual_amount - plan.request.total:+,}",
            "delta_color": "off",
        },
        {"label": "Error", "value": f"{plan.error:,}"},
        {"label": "Error %", "value": f"{plan.error_pct}%"},
        {"label": "Targets", "value": len(plan.targets)},
    ])


def render_alert_card(message: str, level: str = "warning"):
    """Render an alert card with appropriate styling."""
    if level == "error":
        st.error(message, icon="🔴")
    elif level == "warning":
        st.warning(message, icon="🟡")
    else:
        st.info(message, icon="🔵")
