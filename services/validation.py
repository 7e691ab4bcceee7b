from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any

import numpy as np

from .errors import ValidationError
from .formatting import parse_race_time
from .models import RESULT_STROKES, SESSION_STROKES


DEFAULT_RESULT_DISTANCE_M = 50
MIN_RESULT_DISTANCE_M = 25
DEFAULT_RESULT_TIME_SEC = 40.0
MIN_RESULT_TIME_SEC = 1.0
RPE_MIN = 1
RPE_MAX = 10


def _to_float(v: Any) -> float | None:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, str):
        v = v.strip()
        if not v:
            return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if np.isfinite(f) else None


def clean_text(value: Any) -> str | None:
    return (str(value) if value is not None else "").strip() or None


def parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    text = (str(value) if value is not None else "").strip()
    if not text:
        raise ValidationError("Date is required.")
    try:
        return date.fromisoformat(text[:10])
    except ValueError as exc:
        raise ValidationError(f"Invalid date: {text!r}. Use YYYY-MM-DD.") from exc


def canonical_stroke(value: Any, allowed: tuple[str, ...]) -> str | None:
    text = (str(value) if value is not None else "").strip().lower()
    for stroke in allowed:
        if stroke.lower() == text:
            return stroke
    return None


def normalize_stroke(value: Any, allowed: tuple[str, ...]) -> str:
    stroke = canonical_stroke(value, allowed)
    if stroke is None:
        raise ValidationError(f"Invalid stroke: {value!r}. Choose one of {', '.join(allowed)}.")
    return stroke


def clamp_distance(value: Any) -> int:
    return int(round(max(0.0, _to_float(value) or 0.0)))


def clamp_duration(value: Any) -> float:
    return max(0.0, _to_float(value) or 0.0)


def clamp_rpe(value: Any) -> int | None:
    # zero counts as "not given", like an untouched form field
    f = _to_float(value)
    if not f:
        return None
    return int(round(min(RPE_MAX, max(RPE_MIN, f))))


def normalize_session_draft(draft: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "date": parse_date(draft.get("date")),
        "distance_m": clamp_distance(draft.get("distance_m")),
        "duration_min": clamp_duration(draft.get("duration_min")),
        "stroke": normalize_stroke(draft.get("stroke"), SESSION_STROKES),
        "rpe": clamp_rpe(draft.get("rpe")),
        "notes": clean_text(draft.get("notes")),
    }


def normalize_result_draft(draft: Mapping[str, Any]) -> dict[str, Any]:
    meet = clean_text(draft.get("meet"))
    if meet is None:
        raise ValidationError("Meet is required.")

    distance = _to_float(draft.get("distance_m")) or DEFAULT_RESULT_DISTANCE_M
    time_sec = parse_race_time(draft.get("time_sec")) or DEFAULT_RESULT_TIME_SEC

    return {
        "date": parse_date(draft.get("date")),
        "meet": meet,
        "distance_m": int(round(max(MIN_RESULT_DISTANCE_M, distance))),
        "stroke": normalize_stroke(draft.get("stroke"), RESULT_STROKES),
        "time_sec": max(MIN_RESULT_TIME_SEC, float(time_sec)),
        "location": clean_text(draft.get("location")),
        "notes": clean_text(draft.get("notes")),
    }
