from __future__ import annotations

from typing import Callable

import streamlit as st


HOME_PAGE = "app.py"
TRAINING_PAGE = "pages/1_Training_Log.py"
COMPETITION_PAGE = "pages/2_Competitions.py"


def _go(page: str) -> None:
    try:
        st.switch_page(page)
    except Exception:
        st.info("Page navigation is temporarily unavailable. Use the top navigation buttons.")


def configure_page(page_title: str, page_icon: str = "🏊") -> None:
    st.set_page_config(
        page_title=page_title,
        page_icon=page_icon,
        layout="wide",
        initial_sidebar_state="collapsed",
    )
    apply_global_theme()


def apply_global_theme() -> None:
    st.markdown(
        """
<style>
:root {
  --pool: #0b3954;
  --lane: #e0f2f1;
  --accent: #087e8b;
  --muted: #5c6b73;
}

[data-testid="stSidebarNav"], [data-testid="stSidebar"], [data-testid="collapsedControl"] {
  display: none !important;
}

.main .block-container {
  max-width: 1100px;
  padding-top: 1rem;
}

div[data-testid="metric-container"] {
  background: var(--lane);
  border-radius: 14px;
  padding: 0.8rem 0.9rem;
}

.app-topbar {
  display: flex;
  align-items: center;
  justify-content: space-between;
  border-bottom: 3px solid var(--accent);
  padding: 0.4rem 0 0.6rem 0;
  margin-bottom: 0.6rem;
}

.brand-title {
  margin: 0;
  font-size: 1.5rem;
  font-weight: 700;
  color: var(--pool);
}

.brand-sub, .page-copy {
  color: var(--muted);
}

.user-chip {
  border: 1px solid var(--accent);
  border-radius: 999px;
  padding: 0.2rem 0.7rem;
  font-size: 0.85rem;
}
</style>
""",
        unsafe_allow_html=True,
    )


def render_top_nav(
    active_page: str,
    *,
    user_label: str | None = None,
    on_signout: Callable[[], None] | None = None,
) -> None:
    user_html = f'<div class="user-chip">{user_label}</div>' if user_label else ""
    st.markdown(
        f"""
<div class="app-topbar">
  <div>
    <p class="brand-title">Swimmer Tracker</p>
    <div class="brand-sub">Training log, race results and personal bests</div>
  </div>
  {user_html}
</div>
""",
        unsafe_allow_html=True,
    )

    nav_cols = st.columns([1, 1, 1, 0.8], gap="small")
    pages = [("home", "Home", HOME_PAGE), ("training", "Training", TRAINING_PAGE), ("competitions", "Competitions", COMPETITION_PAGE)]
    for col, (name, label, page) in zip(nav_cols, pages):
        with col:
            if st.button(label, key=f"nav.{active_page}.{name}", use_container_width=True, type="primary" if active_page == name else "secondary"):
                _go(page)
    with nav_cols[3]:
        if on_signout is not None and st.button("Sign out", key=f"nav.{active_page}.signout", use_container_width=True):
            on_signout()


def render_page_header(title: str, subtitle: str) -> None:
    st.subheader(title)
    st.markdown(f'<p class="page-copy">{subtitle}</p>', unsafe_allow_html=True)
