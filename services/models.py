from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Union


SESSION_STROKES = ("Free", "Back", "Breast", "Fly", "IM", "Drill")
RESULT_STROKES = ("Free", "Back", "Breast", "Fly", "IM")

SESSIONS_TABLE = "workouts"
RESULTS_TABLE = "competitions"
PERSONAL_BESTS_VIEW = "personal_bests"


@dataclass(frozen=True)
class Pending:
    """Local placeholder key for a record the store has not confirmed yet."""

    temp_id: str

    @property
    def value(self) -> str:
        return self.temp_id


@dataclass(frozen=True)
class Confirmed:
    server_id: str

    @property
    def value(self) -> str:
        return self.server_id


RecordKey = Union[Pending, Confirmed]


@dataclass(frozen=True)
class Session:
    key: RecordKey
    owner: str
    date: date
    distance_m: int
    duration_min: float
    stroke: str
    rpe: int | None = None
    notes: str | None = None

    @property
    def id(self) -> str:
        return self.key.value

    @property
    def is_pending(self) -> bool:
        return isinstance(self.key, Pending)


@dataclass(frozen=True)
class Result:
    key: RecordKey
    owner: str
    date: date
    meet: str
    distance_m: int
    stroke: str
    time_sec: float
    location: str | None = None
    notes: str | None = None

    @property
    def id(self) -> str:
        return self.key.value

    @property
    def is_pending(self) -> bool:
        return isinstance(self.key, Pending)


@dataclass(frozen=True)
class PersonalBest:
    owner: str
    stroke: str
    distance_m: int
    time_sec: float
    date: date
    meet: str


def _row_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _opt_int(value: Any) -> int | None:
    return None if value is None or value == "" else int(value)


def session_from_row(row: dict[str, Any]) -> Session:
    return Session(
        key=Confirmed(str(row["id"])),
        owner=str(row.get("user_id") or ""),
        date=_row_date(row["date"]),
        distance_m=int(row.get("distance_m") or 0),
        duration_min=float(row.get("duration_min") or 0),
        stroke=str(row.get("stroke") or "Free"),
        rpe=_opt_int(row.get("rpe")),
        notes=row.get("notes"),
    )


def session_to_row(session: Session) -> dict[str, Any]:
    return {
        "user_id": session.owner,
        "date": session.date.isoformat(),
        "distance_m": session.distance_m,
        "duration_min": session.duration_min,
        "stroke": session.stroke,
        "rpe": session.rpe,
        "notes": session.notes,
    }


def result_from_row(row: dict[str, Any]) -> Result:
    return Result(
        key=Confirmed(str(row["id"])),
        owner=str(row.get("user_id") or ""),
        date=_row_date(row["date"]),
        meet=str(row.get("meet") or ""),
        distance_m=int(row["distance_m"]),
        stroke=str(row["stroke"]),
        time_sec=float(row["time_sec"]),
        location=row.get("location"),
        notes=row.get("notes"),
    )


def result_to_row(result: Result) -> dict[str, Any]:
    return {
        "user_id": result.owner,
        "date": result.date.isoformat(),
        "meet": result.meet,
        "distance_m": result.distance_m,
        "stroke": result.stroke,
        "time_sec": result.time_sec,
        "location": result.location,
        "notes": result.notes,
    }


def personal_best_from_row(row: dict[str, Any]) -> PersonalBest:
    # postgres numeric columns can come back as strings
    return PersonalBest(
        owner=str(row.get("user_id") or ""),
        stroke=str(row["stroke"]),
        distance_m=int(row["distance_m"]),
        time_sec=float(row["time_sec"]),
        date=_row_date(row["date"]),
        meet=str(row.get("meet") or ""),
    )
