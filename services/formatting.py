from __future__ import annotations

from typing import Any

import numpy as np


def format_number(value: float) -> str:
    if value is None or not np.isfinite(value):
        return "-"
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.1f}"


def format_decimal(value: float) -> str:
    """Render 25.0 as "25" and 25.5 as "25.5", keeping every digit, the way records are searched and exported."""
    v = float(value)
    return str(int(v)) if v.is_integer() else repr(v)


def minutes_to_mmss(minutes: float) -> str:
    if minutes is None or not np.isfinite(minutes) or minutes <= 0:
        return "-"
    total = int(round(minutes * 60))
    return f"{total // 60}:{total % 60:02d}"


def sec_to_time(seconds: float) -> str:
    if seconds is None or not np.isfinite(seconds) or seconds <= 0:
        return "-"
    hundredths = int(round(seconds * 100))
    m, rem = divmod(hundredths, 6000)
    s, hs = divmod(rem, 100)
    return f"{m}:{s:02d}.{hs:02d}"


def parse_race_time(value: Any) -> float | None:
    """Parse ``M:SS.xx``, ``SS.xx`` or a plain number into seconds.

    Returns ``None`` for anything that is not a finite time.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        f = float(value)
        return f if np.isfinite(f) else None

    text = str(value).strip()
    if not text:
        return None
    parts = text.split(":")
    if len(parts) > 2:
        return None
    try:
        if len(parts) == 1:
            total = float(parts[0])
        else:
            total = int(parts[0]) * 60 + float(parts[1])
    except ValueError:
        return None
    return total if np.isfinite(total) else None
