"""Plotly chart builders for the Tiered Distribution Planner."""

import plotly.express as px
import plotly.graph_objects as go
import pandas as pd
from typing import Dict, List, Sequence

from config.defaults import TIER_LABELS


def tier_profile_line(
    targets: Sequence[str],
    matrix: Sequence[Sequence],
    title: str = "Allocation by Tier",
) -> go.Figure:
    """One line per target showing its allocation from D30 down to D1."""
    fig = go.Figure()
    for target, row in zip(targets, matrix):
        fig.add_trace(go.Scatter(
            name=target,
            x=TIER_LABELS,
            y=[float(v) for v in row],
            mode="lines+markers",
            line_shape="hv",
        ))
    fig.update_layout(
        title=title,
        xaxis_title="Tier",
        yaxis_title="Allocation per customer",
        height=400,
        legend_title_text="",
    )
    return fig


def allocation_heatmap(
    targets: Sequence[str],
    matrix: Sequence[Sequence],
) -> go.Figure:
    """Heatmap of allocation values per target per tier."""
    z = [[float(v) for v in row] for row in matrix]
    fig = go.Figure(data=go.Heatmap(
        z=z,
        x=TIER_LABELS,
        y=list(targets),
        colorscale="YlOrRd",
        text=z,
        texttemplate="%{text}",
        hovertemplate="Target: %{y}<br>Tier: %{x}<br>Allocation: %{z}<extra></extra>",
    ))
    fig.update_layout(
        title="Allocation Matrix",
        xaxis_title="Tier",
        yaxis_title="Target",
        height=max(300, len(z) * 40),
    )
    return fig


def per_target_bar(per_target: Dict[str, object], title: str = "Actual Amount by Target") -> go.Figure:
    df = pd.DataFrame({
        "Target": list(per_target.keys()),
        "Amount": [float(v) for v in per_target.values()],
    })
    fig = px.bar(
        df, x="Target", y="Amount",
        title=title,
        color_discrete_sequence=["#4A90D9"],
    )
    fig.update_layout(height=350)
    return fig


def heuristic_vs_optimal_bar(comparison: List[dict]) -> go.Figure:
    """Bar chart comparing requested, heuristic and optimal amounts."""
    df = pd.DataFrame(comparison)
    fig = px.bar(
        df, x="Method", y="Amount",
        color="Method",
        title="Heuristic vs Optimal",
        color_discrete_sequence=["#999999", "#4A90D9", "#E8734A"],
    )
    fig.update_layout(height=350, showlegend=False)
    return fig


def batch_status_donut(status_counts: Dict[str, int], title: str = "Batch Outcomes") -> go.Figure:
    fig = go.Figure(data=[go.Pie(
        labels=list(status_counts.keys()),
        values=list(status_counts.values()),
        hole=0.6,
        textinfo="value+label",
    )])
    fig.update_layout(
        title=title,
        height=350,
        showlegend=True,
        annotations=[dict(text=str(sum(status_counts.values())), x=0.5, y=0.5, font_size=16, showarrow=False)],
    )
    return fig
