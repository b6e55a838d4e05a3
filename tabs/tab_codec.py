"""Tab 3: Codec — encode a plan or decode stored expressions."""

import streamlit as st

from components.metrics_cards import render_alert_card
from components.tables import render_styled_table
from config.code_tables import DELIVERY_TYPE_CODES, METHOD_CODES, TARGET_CODE_TABLES
from data.frames import matrix_to_frame
from data.session_store import get_plans
from engine.codec import decode_many, encode, expand
from engine.errors import CodecError


def _render_code_tables():
    with st.expander("Code tables", expanded=False):
        st.markdown("**Methods**: " + ", ".join(f"{name} → `{code}`" for name, code in METHOD_CODES.items()))
        st.markdown("**Delivery types**: " + ", ".join(
            f"{name} → `{code}`" for name, code in DELIVERY_TYPE_CODES.items()
        ))
        for delivery_type, table in TARGET_CODE_TABLES.items():
            st.markdown(f"**{delivery_type}**: " + ", ".join(f"{n} → `{c}`" for n, c in table.items()))


def render(sidebar_state):
    """Render the Codec tab."""
    st.header("Expression Codec")
    _render_code_tables()

    st.subheader("Decode")
    text = st.text_area(
        "Expressions (separate with ;)",
        value="A(2×1+28×0)",
        key="codec_decode_input",
    )
    if st.button("Decode", type="primary"):
        try:
            decoded = decode_many(text)
        except CodecError as exc:
            render_alert_card(str(exc), level="error")
        else:
            for item in decoded:
                st.markdown(
                    f"- **{item.method}**"
                    + (f" / {item.delivery_type}" if item.delivery_type else "")
                    + f": {', '.join(item.targets)}"
                )
            targets, matrix = expand(decoded)
            render_styled_table(matrix_to_frame(targets, matrix), title="Decoded Tiers")

    st.divider()
    st.subheader("Encode a Plan")
    plans = get_plans()
    if not plans:
        st.info("No plans yet. Allocate a product in the Plan or Batch tab.")
        return

    code = st.selectbox("Plan", options=list(plans.keys()), key="codec_plan")
    plan = plans[code]
    methods = list(METHOD_CODES)
    method = st.selectbox("Delivery method", options=methods, index=1 if len(plan.targets) > 1 else 0)
    types = [None] + list(DELIVERY_TYPE_CODES)
    delivery_type = st.selectbox(
        "Delivery type", options=types, format_func=lambda t: t or "(none)", key="codec_type",
    )
    try:
        expressions = encode(method, delivery_type, plan.targets, plan.matrix)
    except CodecError as exc:
        render_alert_card(str(exc), level="error")
        return
    st.code("; ".join(expressions), language=None)
