"""Tab 4: Catalog — load catalogs, inspect the snapshot and edit rule configuration."""

from decimal import Decimal

import streamlit as st

from config.defaults import (
    ERROR_WARN_THRESHOLD, MAX_REFINEMENT_ITERATIONS, MAX_SMOOTH_LEVEL, MODE_PLATEAU, MODE_SMOOTH,
    NEARBY_TIER_RADIUS, TIER_COUNT,
)
from components.metrics_cards import render_alert_card, render_metric_row
from components.tables import render_styled_table
from data.frames import catalog_from_frame, counts_to_frame, load_counts_file
from data.sample_data import build_sample_snapshot
from data.session_store import get_rule_config, get_snapshot, is_data_loaded, set_rule_config, set_snapshot
from data.validator import validate_catalog_coverage, validate_customer_counts
from engine.errors import DistributionError
from models.catalog import CatalogSnapshot


def _replace_entry(snapshot: CatalogSnapshot, new_entry) -> CatalogSnapshot:
    entries = [e for e in snapshot.entries if e.key != new_entry.key] + [new_entry]
    return CatalogSnapshot.build(entries)


def _render_rule_config():
    config = get_rule_config()

    with st.expander("Rule Configuration", expanded=False):
        mode_options = ["Category default", MODE_PLATEAU, MODE_SMOOTH]
        mode = st.radio(
            "Allocation mode",
            mode_options,
            index=mode_options.index(config.get("mode", "Category default")),
            horizontal=True,
            key="cfg_mode",
            help="Override the category's ordering mode for every plan.",
        )

        col1, col2 = st.columns(2)
        with col1:
            radius = st.number_input(
                "Nearby tier radius", min_value=0, max_value=TIER_COUNT - 1,
                value=int(config.get("nearby_tier_radius", NEARBY_TIER_RADIUS)),
                key="cfg_radius",
            )
            iterations = st.number_input(
                "Max hill-climb moves", min_value=0, max_value=10_000,
                value=int(config.get("max_refinement_iterations", MAX_REFINEMENT_ITERATIONS)),
                key="cfg_iterations",
            )
        with col2:
            max_level = st.number_input(
                "Max smooth level", min_value=1, max_value=MAX_SMOOTH_LEVEL,
                value=int(config.get("max_smooth_level", MAX_SMOOTH_LEVEL)),
                key="cfg_max_level",
            )
            warn_threshold = st.number_input(
                "Error warning threshold", min_value=0,
                value=int(config.get("error_warn_threshold", ERROR_WARN_THRESHOLD)),
                key="cfg_warn_threshold",
            )

        if st.button("Save Rule Configuration"):
            new_config = {
                "nearby_tier_radius": int(radius),
                "max_refinement_iterations": int(iterations),
                "max_smooth_level": int(max_level),
                "error_warn_threshold": Decimal(int(warn_threshold)),
            }
            if mode != "Category default":
                new_config["mode"] = mode
            set_rule_config(new_config)
            st.success("Rule configuration saved.")


def render(sidebar_state):
    """Render the Catalog tab."""
    st.header("Catalogs & Customer Counts")
    _render_rule_config()

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Load Sample Catalogs", type="primary"):
            set_snapshot(build_sample_snapshot())
            st.success("Sample snapshot built.")
            st.rerun()

    if not is_data_loaded():
        st.info("No snapshot loaded yet.")
        return

    snapshot = get_snapshot()
    category = sidebar_state.category
    bi_weekly = sidebar_state.bi_weekly_float

    render_metric_row([
        {"label": "Catalogs", "value": len(snapshot.entries)},
        {"label": "Built", "value": f"{snapshot.built_at:%H:%M:%S}"},
    ])

    with col2:
        uploaded = st.file_uploader(
            f"Replace customer counts for {category.label} (CSV or XLSX with Target, D30..D1)",
            type=["csv", "xlsx"],
        )
        if uploaded is not None:
            try:
                df = load_counts_file(uploaded)
            except DistributionError as exc:
                render_alert_card(str(exc), level="error")
                return
            result = validate_customer_counts(df)
            for err in result.errors:
                render_alert_card(err, level="error")
            for warn in result.warnings:
                render_alert_card(warn, level="warning")
            if result.is_valid and st.button("Apply upload"):
                try:
                    entry = catalog_from_frame(df, category, bi_weekly)
                except DistributionError as exc:
                    render_alert_card(str(exc), level="error")
                else:
                    set_snapshot(_replace_entry(snapshot, entry))
                    st.rerun()

    if not snapshot.has(category, bi_weekly):
        st.warning(f"No catalog for {category.label} (bi-weekly={bi_weekly}).")
        return

    entry = snapshot.entry(category, bi_weekly)
    counts_df = counts_to_frame(entry.customer_counts)
    coverage = validate_catalog_coverage(entry.catalog, counts_df)
    for warn in coverage.warnings:
        render_alert_card(warn, level="warning")

    st.markdown(f"**Targets ({len(entry.catalog)})**: {', '.join(entry.catalog.targets)}")
    render_styled_table(counts_df, title="Customer Counts")
