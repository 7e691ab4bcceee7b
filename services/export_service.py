from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from .formatting import format_decimal
from .models import Session


EXPORT_COLUMNS = ("date", "distance_m", "duration_min", "stroke", "rpe", "notes")


def _session_line(s: Session) -> str:
    notes = (s.notes or "").replace(",", " ").replace("\n", " ")
    return ",".join(
        [
            s.date.isoformat(),
            str(s.distance_m),
            format_decimal(s.duration_min),
            s.stroke,
            "" if s.rpe is None else str(s.rpe),
            notes,
        ]
    )


def export_sessions_csv(sessions: Iterable[Session]) -> str:
    lines = [",".join(EXPORT_COLUMNS)]
    lines.extend(_session_line(s) for s in sessions)
    return "\n".join(lines)


def export_filename(now: datetime | None = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y-%m-%dT%H-%M-%S")
    return f"swims_{stamp}.csv"
