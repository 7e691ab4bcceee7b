from __future__ import annotations

from datetime import date

import streamlit as st

from services import RESULT_STROKES, TrackerError, personal_bests_frame, sec_to_time
from ui import configure_page, render_page_header, require_tracker, run, run_mutation


EDIT_KEY = "results.editing_id"
DELETE_KEY = "results.delete_confirm_id"
FLASH_KEY = "results.flash"


def _mutate(start, success: str) -> None:
    try:
        run_mutation(start)
        st.session_state[FLASH_KEY] = ("success", success)
    except TrackerError as exc:
        st.session_state[FLASH_KEY] = ("error", str(exc))
    st.rerun()


configure_page("Competitions")
cfg, tracker = require_tracker("competitions")
repo = tracker.results

render_page_header("Competitions", "Race results and the personal bests derived from them.")
flash = st.session_state.pop(FLASH_KEY, None)
if flash:
    getattr(st, flash[0])(flash[1])

st.markdown("#### Personal Bests")
bests = personal_bests_frame(tracker.personal_bests.bests)
if bests.empty:
    st.info("Add competition results to see PBs.")
else:
    bests["time_sec"] = bests["time_sec"].map(sec_to_time)
    st.dataframe(
        bests.rename(columns={"stroke": "Stroke", "distance_m": "Distance (m)", "time_sec": "Best Time", "meet": "Meet", "date": "Date"}),
        hide_index=True,
        use_container_width=True,
    )
if st.button("Re-check with server", key="results.reconcile"):
    try:
        run(tracker.personal_bests.reconcile())
    except TrackerError as exc:
        st.session_state[FLASH_KEY] = ("error", str(exc))
    st.rerun()

editing_id = st.session_state.get(EDIT_KEY)
editing = repo.get(editing_id) if editing_id else None

st.markdown("#### " + ("Edit result" if editing else "Add result"))
with st.form("results.form", clear_on_submit=editing is None):
    c1, c2 = st.columns(2)
    r_date = c1.date_input("Date", value=editing.date if editing else date.today())
    r_meet = c2.text_input("Meet", value=editing.meet if editing else "")
    c3, c4, c5 = st.columns(3)
    strokes = list(RESULT_STROKES)
    r_stroke = c3.selectbox("Stroke", strokes, index=strokes.index(editing.stroke) if editing else 0)
    r_distance = c4.number_input("Distance (m)", min_value=25, step=25, value=editing.distance_m if editing else 50)
    r_time = c5.text_input("Time (M:SS.xx)", value=sec_to_time(editing.time_sec) if editing else "0:40.00")
    c6, c7 = st.columns(2)
    r_location = c6.text_input("Location", value=(editing.location or "") if editing else "")
    r_notes = c7.text_input("Notes", value=(editing.notes or "") if editing else "")
    save_col, cancel_col = st.columns(2)
    saved = save_col.form_submit_button("Update" if editing else "Save", type="primary")
    cancelled = cancel_col.form_submit_button("Cancel") if editing else False

if saved:
    draft = {
        "date": r_date,
        "meet": r_meet,
        "stroke": r_stroke,
        "distance_m": r_distance,
        "time_sec": r_time,
        "location": r_location,
        "notes": r_notes,
    }
    st.session_state.pop(EDIT_KEY, None)
    if editing:
        _mutate(lambda: repo.update(editing.id, draft), "Result updated.")
    else:
        _mutate(lambda: repo.create(draft), "Result saved.")
if cancelled:
    st.session_state.pop(EDIT_KEY, None)
    st.rerun()

st.markdown("#### Results")
results = repo.list()
if not results:
    st.info("No results yet.")

for r in results:
    c0, c1, c2, c3, c4, c5, c6 = st.columns([2, 3, 2, 2, 3, 1, 1], vertical_alignment="center")
    c0.write(r.date.isoformat())
    c1.write(r.meet)
    c2.write(f"{r.distance_m} m {r.stroke}")
    c3.write(sec_to_time(r.time_sec))
    c4.write(" · ".join(x for x in (r.location, r.notes) if x))
    busy = r.is_pending or repo.is_busy(r.id)
    if c5.button("", key=f"results.edit.{r.id}", icon=":material/edit:", disabled=busy):
        st.session_state[EDIT_KEY] = r.id
        st.rerun()
    if c6.button("", key=f"results.delete.{r.id}", icon=":material/delete:", disabled=busy):
        st.session_state[DELETE_KEY] = r.id
        st.rerun()

    if st.session_state.get(DELETE_KEY) == r.id:
        st.warning("Delete this result?")
        confirm_col, cancel_col = st.columns(2)
        if confirm_col.button("Confirm delete", key=f"results.delete.confirm.{r.id}", type="primary"):
            st.session_state.pop(DELETE_KEY, None)
            _mutate(lambda: repo.delete(r.id, confirmed=True), "Result deleted.")
        if cancel_col.button("Cancel", key=f"results.delete.cancel.{r.id}"):
            st.session_state.pop(DELETE_KEY, None)
            st.rerun()
