from __future__ import annotations

import streamlit as st

from services import (
    TrackerError,
    bootstrap_auth_session_from_query,
    build_training_summary,
    format_number,
    get_authenticated_user,
    minutes_to_mmss,
    sec_to_time,
    supabase_configured,
)
from ui import TRAINING_PAGE, app_config, configure_page, get_auth, render_top_nav
from ui.runtime import get_tracker, sign_out


configure_page("Swimmer Tracker")

cfg = app_config()
if not supabase_configured(cfg):
    st.error("Supabase is not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY.")
    st.stop()

auth = get_auth(cfg)
flash = bootstrap_auth_session_from_query(auth)
if flash:
    st.info(flash)

user = get_authenticated_user(auth)

if user is None:
    render_top_nav("home")
    st.markdown("Sign in to keep your data synced and private.")

    with st.form("signin.email"):
        email = st.text_input("Email", placeholder="you@example.com")
        send = st.form_submit_button("Send magic link", type="primary")
    if send:
        try:
            auth.send_magic_link(email)
            st.success("Check your email for a login link.")
        except TrackerError as exc:
            st.error(str(exc))
        except Exception as exc:
            st.error(f"Could not send the login link: {exc}")

    google_col, apple_col = st.columns(2)
    for col, provider, label in ((google_col, "google", "Continue with Google"), (apple_col, "apple", "Continue with Apple")):
        with col:
            try:
                st.link_button(label, auth.get_oauth_url(provider), use_container_width=True)
            except Exception as exc:
                st.caption(f"{label} unavailable: {exc}")
    st.stop()


render_top_nav("home", user_label=user.email or user.id, on_signout=lambda: sign_out(cfg))
tracker = get_tracker(cfg, user)

summary = build_training_summary(tracker.sessions.list())
k1, k2, k3 = st.columns(3)
k1.metric("Total Distance", f"{format_number(summary.total_distance_m)} m")
k2.metric("Sessions", format_number(summary.total_sessions))
k3.metric("Avg Pace /100m", minutes_to_mmss(summary.avg_pace_min_per_100m))

bests = tracker.personal_bests.bests
st.subheader("Personal Bests")
if not bests:
    st.info("Add competition results to see PBs.")
else:
    st.dataframe(
        [
            {"Stroke": b.stroke, "Distance": f"{b.distance_m} m", "Best Time": sec_to_time(b.time_sec), "Meet": b.meet, "Date": b.date.isoformat()}
            for b in bests
        ],
        hide_index=True,
        use_container_width=True,
    )

if st.button("Open training log", type="primary"):
    st.switch_page(TRAINING_PAGE)
