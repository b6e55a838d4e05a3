"""Logging configuration for the planner app."""

import logging

from config.defaults import DEFAULT_LOG_LEVEL, LOG_FORMAT

_HANDLER_NAME = "distribution-planner"


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Install one stream handler on the root logger and set its level.

    Safe to call on every Streamlit rerun: the handler is added once and only
    the level is updated afterwards.
    """
    root = logging.getLogger()
    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level.upper())
    return root
