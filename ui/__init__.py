from .runtime import app_config, get_auth, report_error, require_tracker, run, run_mutation
from .theme import (
    COMPETITION_PAGE,
    HOME_PAGE,
    TRAINING_PAGE,
    configure_page,
    render_page_header,
    render_top_nav,
)

__all__ = [
    "COMPETITION_PAGE",
    "HOME_PAGE",
    "TRAINING_PAGE",
    "app_config",
    "configure_page",
    "get_auth",
    "render_page_header",
    "render_top_nav",
    "report_error",
    "require_tracker",
    "run",
    "run_mutation",
]
