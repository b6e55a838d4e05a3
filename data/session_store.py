"""Typed wrapper around st.session_state for application data."""

import streamlit as st
from typing import Dict, List, Optional
from config.defaults import DEFAULT_LOG_LEVEL, MAX_REFINEMENT_ITERATIONS, MAX_SMOOTH_LEVEL, NEARBY_TIER_RADIUS
from models.allocation import AllocationPlan
from models.catalog import CatalogSnapshot
from models.category import Category
from models.outcome import DistributionOutcome


def initialize_session_state():
    """Initialize all session state keys with defaults."""
    defaults = {
        "snapshot": None,
        "plans": {},
        "batch_outcomes": [],
        "rule_config": {
            "max_refinement_iterations": MAX_REFINEMENT_ITERATIONS,
            "max_smooth_level": MAX_SMOOTH_LEVEL,
            "nearby_tier_radius": NEARBY_TIER_RADIUS,
        },
        "sidebar_state": {
            "category": Category.COUNTY,
            "bi_weekly_float": False,
            "log_level": DEFAULT_LOG_LEVEL,
        },
    }
    for key, default in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = default


# --- Getters ---

def get_snapshot() -> Optional[CatalogSnapshot]:
    return st.session_state.get("snapshot")


def get_plans() -> Dict[str, AllocationPlan]:
    return st.session_state.get("plans", {})


def get_plan(product_code: str) -> Optional[AllocationPlan]:
    return get_plans().get(product_code)


def get_batch_outcomes() -> List[DistributionOutcome]:
    return st.session_state.get("batch_outcomes", [])


def get_rule_config() -> dict:
    return st.session_state.get("rule_config", {})


def get_sidebar_state() -> dict:
    return st.session_state.get("sidebar_state", {})


def is_data_loaded() -> bool:
    return get_snapshot() is not None


# --- Setters ---

def set_snapshot(snapshot: CatalogSnapshot):
    """Swap in a new snapshot; plans built on the old one are dropped."""
    st.session_state["snapshot"] = snapshot
    st.session_state["plans"] = {}
    st.session_state["batch_outcomes"] = []


def add_plan(plan: AllocationPlan):
    st.session_state["plans"][plan.product_code] = plan


def set_batch_outcomes(outcomes: List[DistributionOutcome]):
    st.session_state["batch_outcomes"] = outcomes
    for outcome in outcomes:
        if outcome.plan is not None:
            add_plan(outcome.plan)


def set_rule_config(config: dict):
    st.session_state["rule_config"] = config


def set_sidebar_state(state: dict):
    st.session_state["sidebar_state"] = state
