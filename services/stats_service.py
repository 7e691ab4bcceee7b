from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
import pandas as pd

from .models import Session


@dataclass
class TrainingSummary:
    total_distance_m: int
    total_sessions: int
    avg_pace_min_per_100m: float
    weekly: pd.DataFrame


def sessions_frame(sessions: Iterable[Session]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "id": s.id,
                "date": pd.Timestamp(s.date),
                "distance_m": s.distance_m,
                "duration_min": s.duration_min,
                "stroke": s.stroke,
                "rpe": s.rpe,
                "notes": s.notes,
            }
            for s in sessions
        ],
        columns=["id", "date", "distance_m", "duration_min", "stroke", "rpe", "notes"],
    )


def weekly_distance(frame: pd.DataFrame) -> pd.DataFrame:
    """Distance per week, weeks starting on Monday, oldest first."""
    if frame.empty:
        return pd.DataFrame(columns=["week_start", "distance_m"])
    dates = pd.to_datetime(frame["date"])
    week_start = (dates - pd.to_timedelta(dates.dt.weekday, unit="D")).dt.normalize()
    return (
        frame.assign(week_start=week_start)
        .groupby("week_start", as_index=False)["distance_m"]
        .sum()
        .sort_values("week_start")
        .reset_index(drop=True)
    )


def build_training_summary(sessions: Iterable[Session]) -> TrainingSummary:
    frame = sessions_frame(sessions)
    if frame.empty:
        return TrainingSummary(0, 0, float("nan"), weekly_distance(frame))

    distance = frame["distance_m"].to_numpy(dtype=float)
    duration = frame["duration_min"].to_numpy(dtype=float)
    timed = (distance > 0) & (duration > 0)
    paces = duration[timed] / (distance[timed] / 100.0)

    return TrainingSummary(
        total_distance_m=int(np.nansum(distance)),
        total_sessions=int(len(frame)),
        avg_pace_min_per_100m=float(np.mean(paces)) if paces.size else float("nan"),
        weekly=weekly_distance(frame),
    )
