"""Tab 2: Batch — run many product requests against the loaded snapshot."""

import threading

import pandas as pd
import streamlit as st

from components.charts import batch_status_donut
from components.tables import render_error_table, render_status_table
from data.frames import plans_summary_frame
from data.sample_data import generate_sample_requests
from data.session_store import get_batch_outcomes, get_rule_config, get_snapshot, is_data_loaded, set_batch_outcomes
from engine.batch import run_batch
from engine.errors import InvariantViolation


def render(sidebar_state):
    """Render the Batch tab."""
    st.header("Batch Distribution")

    if not is_data_loaded():
        st.info("No snapshot loaded. Load sample catalogs in the Catalog tab.")
        return

    requests = generate_sample_requests()
    st.caption(f"{len(requests)} sample requests across all categories.")
    st.dataframe(pd.DataFrame([{
        "Product Code": r.product_code,
        "Product Name": r.product_name,
        "Category": r.category.label,
        "Bi-weekly": r.bi_weekly_float,
        "Total": float(r.total),
        "Delivery Area": r.descriptor,
    } for r in requests]), use_container_width=True)

    col1, col2 = st.columns(2)
    with col1:
        workers = st.slider("Workers (1 = sequential)", min_value=1, max_value=8, value=1, key="batch_workers")
    with col2:
        use_processes = st.checkbox("Use process pool", value=False, key="batch_processes")

    if st.button("Run Batch", type="primary"):
        progress = st.progress(0.0, text="Starting...")

        def on_progress(done, total):
            progress.progress(done / total, text=f"{done}/{total} requests")

        try:
            outcomes = run_batch(
                requests,
                get_snapshot(),
                rule_config=get_rule_config(),
                max_workers=workers,
                use_process_pool=use_processes,
                cancel_event=threading.Event(),
                progress_callback=on_progress,
            )
        except InvariantViolation as exc:
            st.error(f"Batch aborted, allocation invariant broken: {exc}")
            return
        set_batch_outcomes(outcomes)

    outcomes = get_batch_outcomes()
    if not outcomes:
        return

    st.divider()
    counts = {}
    for o in outcomes:
        counts[o.status.value] = counts.get(o.status.value, 0) + 1

    col1, col2 = st.columns([1, 2])
    with col1:
        st.plotly_chart(batch_status_donut(counts), use_container_width=True)
    with col2:
        render_status_table(pd.DataFrame([{
            "Product Code": o.product_code,
            "Status": o.status.value,
            "Message": o.message,
            "Expressions": "; ".join(o.plan.expressions) if o.plan else "",
        } for o in outcomes]))

    plans = [o.plan for o in outcomes if o.plan is not None]
    if plans:
        st.subheader("Allocated Products")
        render_error_table(plans_summary_frame(plans))
