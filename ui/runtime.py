from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

import streamlit as st

from services import (
    AppConfig,
    AuthService,
    AuthUser,
    SupabaseStore,
    Tracker,
    TrackerError,
    build_tracker,
    configure_logging,
    create_supabase_client,
    get_app_config,
    get_authenticated_user,
    sign_out_user,
    supabase_configured,
)

from .theme import HOME_PAGE, render_top_nav


CLIENT_KEY = "supabase_client"
TRACKER_KEY = "tracker"
OWNER_KEY = "owner_id"


def run(work: Awaitable[Any]) -> Any:
    return asyncio.run(work)


def run_mutation(start: Callable[[], "asyncio.Task | None"]) -> Any:
    """Apply an optimistic mutation and wait for its reconciliation within one script run."""

    async def _main() -> Any:
        task = start()
        if task is None:
            return None
        return await task

    return asyncio.run(_main())


def report_error(exc: Exception) -> None:
    if isinstance(exc, TrackerError):
        st.error(str(exc))
    else:
        st.exception(exc)


def app_config() -> AppConfig:
    cfg = get_app_config()
    configure_logging(cfg.log_level)
    return cfg


def get_client(cfg: AppConfig) -> Any:
    # one client per browser session: it carries that user's auth tokens
    if CLIENT_KEY not in st.session_state:
        st.session_state[CLIENT_KEY] = create_supabase_client(cfg)
    return st.session_state[CLIENT_KEY]


def get_auth(cfg: AppConfig) -> AuthService:
    return AuthService(get_client(cfg), app_base_url=cfg.app_base_url)


def current_owner() -> str | None:
    return st.session_state.get(OWNER_KEY)


def get_tracker(cfg: AppConfig, user: AuthUser) -> Tracker:
    tracker = st.session_state.get(TRACKER_KEY)
    if tracker is not None and st.session_state.get(OWNER_KEY) == user.id:
        return tracker

    st.session_state[OWNER_KEY] = user.id
    tracker = build_tracker(cfg, SupabaseStore(get_client(cfg)), owner_provider=current_owner)
    try:
        run(tracker.load_all())
    except TrackerError as exc:
        st.error(f"Error loading data: {exc}")
    st.session_state[TRACKER_KEY] = tracker
    return tracker


def sign_out(cfg: AppConfig) -> None:
    tracker = st.session_state.pop(TRACKER_KEY, None)
    if tracker is not None:
        tracker.clear()
    st.session_state.pop(OWNER_KEY, None)
    sign_out_user(get_auth(cfg))
    try:
        st.switch_page(HOME_PAGE)
    except Exception:
        st.rerun()


def require_tracker(active_page: str) -> tuple[AppConfig, Tracker]:
    cfg = app_config()
    if not supabase_configured(cfg):
        st.error("Supabase is not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY.")
        st.stop()

    user = get_authenticated_user(get_auth(cfg))
    if user is None:
        st.warning("Please sign in from the home page first.")
        st.stop()

    render_top_nav(active_page, user_label=user.email or user.id, on_signout=lambda: sign_out(cfg))
    return cfg, get_tracker(cfg, user)
