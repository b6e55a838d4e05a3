"""Tab 1: Plan — allocate one product request and inspect the result."""

from decimal import Decimal, InvalidOperation

import streamlit as st

from data.frames import matrix_to_frame, plan_to_frame
from data.session_store import add_plan, get_plan, get_rule_config, get_snapshot, is_data_loaded
from engine.errors import DistributionError, NoMatchError
from engine.strategies import optimize_plan, plan_distribution
from components.charts import allocation_heatmap, heuristic_vs_optimal_bar, per_target_bar, tier_profile_line
from components.metrics_cards import render_alert_card, render_plan_metrics
from components.tables import render_styled_table
from config.defaults import ERROR_WARN_THRESHOLD
from models.category import Category
from models.request import DistributionRequest


def _parse_decimal(text: str, label: str):
    if not text.strip():
        return None
    try:
        return Decimal(text.strip())
    except InvalidOperation:
        st.error(f"{label} must be a number.")
        st.stop()


def render(sidebar_state):
    """Render the Plan tab."""
    st.header("Plan a Distribution")

    with st.expander("How does the allocation work?", expanded=False):
        st.markdown("""
1. **Resolve** — catalog targets named in the delivery area text are picked in catalog order.
2. **Coarse fill** — whole tiers from D30 down are set to 1 while the total allows.
3. **Refine** — *plateau* categories pick the best of three candidates;
   the *market* category runs a leveled smooth fill and a short hill climb.
4. **Enforce** — every row is made non-increasing (and, for smooth, drops of at most 1).
5. **Encode** — targets sharing a row are grouped into compact expressions.
        """)

    if not is_data_loaded():
        st.info("No snapshot loaded. Load sample catalogs in the Catalog tab.")
        return

    snapshot = get_snapshot()
    category = sidebar_state.category
    bi_weekly = sidebar_state.bi_weekly_float
    if not snapshot.has(category, bi_weekly):
        st.warning(f"No catalog loaded for {category.label} (bi-weekly={bi_weekly}).")
        return

    catalog = snapshot.catalog(category, bi_weekly)
    st.caption(f"Catalog targets: {', '.join(catalog.targets)}")

    with st.form("plan_form"):
        col1, col2 = st.columns(2)
        with col1:
            product_code = st.text_input("Product code", value="P0001")
            product_name = st.text_input("Product name", value="")
            total_text = st.text_input("Total to distribute", value="1000")
        with col2:
            descriptor = st.text_area("Delivery area", value=", ".join(catalog.targets[:2]))
            urban_text = rural_text = ""
            if category is Category.MARKET:
                urban_text = st.text_input("Urban ratio (城网)", value="", placeholder="0.4")
                rural_text = st.text_input("Rural ratio (农网)", value="", placeholder="0.6")
        compare = st.checkbox("Compare against exact optimizer (slower)", value=False)
        submitted = st.form_submit_button("Allocate", type="primary")

    if submitted:
        total = _parse_decimal(total_text, "Total")
        if total is None:
            st.error("Total is required.")
            return
        request = DistributionRequest(
            product_code=product_code.strip(),
            product_name=product_name.strip(),
            total=total,
            descriptor=descriptor,
            category=category,
            bi_weekly_float=bi_weekly,
            urban_ratio=_parse_decimal(urban_text, "Urban ratio"),
            rural_ratio=_parse_decimal(rural_text, "Rural ratio"),
        )
        try:
            with st.spinner("Allocating..."):
                plan = plan_distribution(request, snapshot, get_rule_config())
        except NoMatchError as exc:
            render_alert_card(f"Skipped: {exc}", level="info")
            return
        except DistributionError as exc:
            render_alert_card(str(exc), level="error")
            return
        add_plan(plan)
        st.session_state["plan_compare"] = compare
        st.session_state["plan_last_code"] = plan.product_code

    plan = get_plan(st.session_state.get("plan_last_code", ""))
    if plan is None:
        return

    st.divider()
    st.subheader(f"{plan.request.product_code} {plan.request.product_name}")
    render_plan_metrics(plan)
    if plan.error > ERROR_WARN_THRESHOLD:
        render_alert_card(f"Large allocation error: {plan.error}", level="warning")

    render_styled_table(matrix_to_frame(plan.targets, plan.matrix), title="Allocation Matrix")

    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(tier_profile_line(plan.targets, plan.matrix), use_container_width=True)
    with col2:
        st.plotly_chart(per_target_bar(plan.per_target_amounts), use_container_width=True)
    st.plotly_chart(allocation_heatmap(plan.targets, plan.matrix), use_container_width=True)

    st.subheader("Encoded Expressions")
    st.code("\n".join(plan.expressions), language=None)

    with st.expander("Explanation", expanded=True):
        for step in plan.explanation_steps:
            st.markdown(f"- {step}")

    st.download_button(
        "Download plan (CSV)",
        data=plan_to_frame(plan).to_csv(index=False).encode("utf-8-sig"),
        file_name=f"plan_{plan.product_code}.csv",
        mime="text/csv",
    )

    if st.session_state.get("plan_compare"):
        st.subheader("Heuristic vs Exact Optimum")
        with st.spinner("Solving integer program..."):
            result = optimize_plan(plan, snapshot)
        if result.status != "Optimal":
            render_alert_card(result.message, level="warning")
            return
        st.success(result.message)
        st.plotly_chart(heuristic_vs_optimal_bar([
            {"Method": "Requested", "Amount": float(plan.request.total)},
            {"Method": "Heuristic", "Amount": float(plan.actual_amount)},
            {"Method": "Optimal", "Amount": float(result.actual_amount)},
        ]), use_container_width=True)
        render_styled_table(matrix_to_frame(plan.targets, result.matrix), title="Optimal Matrix")
