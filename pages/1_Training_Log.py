from __future__ import annotations

import time
from datetime import date

import plotly.express as px
import streamlit as st

from services import (
    SESSION_STROKES,
    QueryDebouncer,
    TrackerError,
    build_training_summary,
    export_filename,
    export_sessions_csv,
    format_decimal,
    format_number,
    minutes_to_mmss,
    page_count,
    view,
)
from services.search import filter_records
from ui import configure_page, render_page_header, report_error, require_tracker, run, run_mutation


EDIT_KEY = "training.editing_id"
DELETE_KEY = "training.delete_confirm_id"
FLASH_KEY = "training.flash"
PAGE_KEY = "training.page"
DEBOUNCE_KEY = "training.debouncer"


def _flash(kind: str, message: str) -> None:
    st.session_state[FLASH_KEY] = (kind, message)


def _show_flash() -> None:
    flash = st.session_state.pop(FLASH_KEY, None)
    if flash:
        kind, message = flash
        getattr(st, kind)(message)


def _mutate(start, success: str) -> None:
    try:
        run_mutation(start)
        _flash("success", success)
    except TrackerError as exc:
        _flash("error", str(exc))
    st.rerun()


configure_page("Training Log")
cfg, tracker = require_tracker("training")
repo = tracker.sessions

render_page_header("Training Log", "Log sessions, search your history and move data in and out as CSV.")
_show_flash()

sessions = repo.list()
summary = build_training_summary(sessions)
k1, k2, k3 = st.columns(3)
k1.metric("Total Distance", f"{format_number(summary.total_distance_m)} m")
k2.metric("Sessions", format_number(summary.total_sessions))
k3.metric("Avg Pace /100m", minutes_to_mmss(summary.avg_pace_min_per_100m))

if not summary.weekly.empty:
    fig = px.line(summary.weekly, x="week_start", y="distance_m", labels={"week_start": "Week", "distance_m": "Distance (m)"})
    fig.update_layout(height=260, margin=dict(l=0, r=0, t=10, b=0))
    st.plotly_chart(fig, use_container_width=True)

editing_id = st.session_state.get(EDIT_KEY)
editing = repo.get(editing_id) if editing_id else None

st.markdown("#### " + ("Edit session" if editing else "Add session"))
with st.form("training.form", clear_on_submit=editing is None):
    c1, c2, c3 = st.columns(3)
    s_date = c1.date_input("Date", value=editing.date if editing else date.today())
    s_distance = c2.number_input("Distance (m)", min_value=0, step=50, value=editing.distance_m if editing else 0)
    s_duration = c3.number_input("Duration (min)", min_value=0.0, step=1.0, value=float(editing.duration_min) if editing else 0.0)
    c4, c5 = st.columns(2)
    strokes = list(SESSION_STROKES)
    s_stroke = c4.selectbox("Stroke", strokes, index=strokes.index(editing.stroke) if editing else 0)
    s_rpe_given = c5.checkbox("Record RPE", value=editing.rpe is not None if editing else False)
    s_rpe = c5.slider("RPE", min_value=1, max_value=10, value=(editing.rpe or 5) if editing else 5)
    s_notes = st.text_input("Notes", value=(editing.notes or "") if editing else "")
    save_col, cancel_col = st.columns(2)
    saved = save_col.form_submit_button("Update" if editing else "Save", type="primary")
    cancelled = cancel_col.form_submit_button("Cancel") if editing else False

if saved:
    draft = {"date": s_date, "distance_m": s_distance, "duration_min": s_duration, "stroke": s_stroke, "rpe": s_rpe if s_rpe_given else None, "notes": s_notes}
    st.session_state.pop(EDIT_KEY, None)
    if editing:
        _mutate(lambda: repo.update(editing.id, draft), "Session updated.")
    else:
        _mutate(lambda: repo.create(draft), "Session saved.")
if cancelled:
    st.session_state.pop(EDIT_KEY, None)
    st.rerun()

st.markdown("#### History")
debouncer = st.session_state.setdefault(DEBOUNCE_KEY, QueryDebouncer(delay=cfg.search_debounce_ms / 1000))
search = st.text_input("Search", placeholder="date, stroke, notes…", key="training.search")
debouncer.submit(search)
if not debouncer.settled:
    time.sleep(debouncer.delay)
query = debouncer.committed()
if st.session_state.get("training.last_query") != query:
    st.session_state["training.last_query"] = query
    st.session_state[PAGE_KEY] = 0

page = st.session_state.get(PAGE_KEY, 0)
visible = view(sessions, query, page, cfg.page_size)
matching = len(filter_records(sessions, query))
pages = page_count(matching, cfg.page_size)

if not visible:
    st.info("No sessions yet." if not query else "No sessions match your search.")

for s in visible:
    c0, c1, c2, c3, c4, c5, c6 = st.columns([2, 2, 2, 2, 4, 1, 1], vertical_alignment="center")
    c0.write(s.date.isoformat())
    c1.write(f"{s.distance_m} m")
    c2.write(f"{format_decimal(s.duration_min)} min")
    c3.write(s.stroke + (f" · RPE {s.rpe}" if s.rpe else ""))
    c4.write(s.notes or "")
    busy = s.is_pending or repo.is_busy(s.id)
    if c5.button("", key=f"training.edit.{s.id}", icon=":material/edit:", disabled=busy):
        st.session_state[EDIT_KEY] = s.id
        st.rerun()
    if c6.button("", key=f"training.delete.{s.id}", icon=":material/delete:", disabled=busy):
        st.session_state[DELETE_KEY] = s.id
        st.rerun()

    if st.session_state.get(DELETE_KEY) == s.id:
        st.warning("Delete this session?")
        confirm_col, cancel_col = st.columns(2)
        if confirm_col.button("Confirm delete", key=f"training.delete.confirm.{s.id}", type="primary"):
            st.session_state.pop(DELETE_KEY, None)
            _mutate(lambda: repo.delete(s.id, confirmed=True), "Session deleted.")
        if cancel_col.button("Cancel", key=f"training.delete.cancel.{s.id}"):
            st.session_state.pop(DELETE_KEY, None)
            st.rerun()

if pages > 1:
    prev_col, label_col, next_col = st.columns([1, 2, 1])
    if prev_col.button("Prev", disabled=page <= 0):
        st.session_state[PAGE_KEY] = page - 1
        st.rerun()
    label_col.caption(f"Page {page + 1} of {pages}")
    if next_col.button("Next", disabled=page + 1 >= pages):
        st.session_state[PAGE_KEY] = page + 1
        st.rerun()

st.markdown("#### Import / export")
upload = st.file_uploader("Import CSV", type=["csv"], key="training.import")
if upload is not None and st.button("Import rows", type="primary"):
    try:
        report = run(tracker.import_sessions(upload.getvalue().decode("utf-8", errors="replace")))
    except TrackerError as exc:
        report_error(exc)
    else:
        (st.success if report.ok else st.warning)(report.summary())

st.download_button(
    "Export CSV",
    data=export_sessions_csv(sessions),
    file_name=export_filename(),
    mime="text/csv",
)
