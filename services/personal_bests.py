from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

import pandas as pd

from .models import PersonalBest, Result, personal_best_from_row
from .repositories import ResultRepository
from .store import RemoteStore


logger = logging.getLogger(__name__)

KEY_COLUMNS = ["owner", "stroke", "distance_m"]


def derive_personal_bests(results: Iterable[Result]) -> list[PersonalBest]:
    """One row per (owner, stroke, distance): the fastest time, earliest date on a tie.

    Ordered by stroke then distance, like the ``personal_bests`` view.
    """
    frame = pd.DataFrame(
        [
            {
                "owner": r.owner,
                "stroke": r.stroke,
                "distance_m": int(r.distance_m),
                "time_sec": float(r.time_sec),
                "date": r.date,
                "meet": r.meet,
            }
            for r in results
        ]
    )
    if frame.empty:
        return []

    best = (
        frame.sort_values(KEY_COLUMNS + ["time_sec", "date"], kind="mergesort")
        .drop_duplicates(subset=KEY_COLUMNS, keep="first")
        .sort_values(["stroke", "distance_m", "owner"], kind="mergesort")
    )
    return [
        PersonalBest(
            owner=str(row.owner),
            stroke=str(row.stroke),
            distance_m=int(row.distance_m),
            time_sec=float(row.time_sec),
            date=row.date,
            meet=str(row.meet),
        )
        for row in best.itertuples(index=False)
    ]


def personal_bests_frame(bests: Iterable[PersonalBest]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"stroke": b.stroke, "distance_m": b.distance_m, "time_sec": b.time_sec, "meet": b.meet, "date": b.date}
            for b in bests
        ],
        columns=["stroke", "distance_m", "time_sec", "meet", "date"],
    )


class PersonalBestAggregator:
    """Keeps personal bests in step with a ResultRepository.

    ``refresh`` derives them from the in-memory results and runs after every
    successful result mutation. ``reconcile`` re-reads the store's view after
    the settle interval and is meant to be called occasionally, e.g. on page
    load.
    """

    def __init__(self, results: ResultRepository, store: RemoteStore, settle_seconds: float = 0.25) -> None:
        self.results = results
        self.store = store
        self.settle_seconds = settle_seconds
        self._bests: list[PersonalBest] = []
        results.subscribe(self._on_results_changed)

    @property
    def bests(self) -> list[PersonalBest]:
        return list(self._bests)

    def refresh(self) -> list[PersonalBest]:
        # pending results are excluded until the store confirms them
        confirmed = [r for r in self.results.list() if not r.is_pending]
        self._bests = derive_personal_bests(confirmed)
        return self.bests

    async def reconcile(self, settle: bool = True) -> list[PersonalBest]:
        owner = self.results.require_owner()
        if settle and self.settle_seconds > 0:
            await asyncio.sleep(self.settle_seconds)
        rows = await self.store.list_personal_bests(owner)
        remote = sorted(
            (personal_best_from_row(row) for row in rows),
            key=lambda b: (b.stroke, b.distance_m, b.owner),
        )
        local = self.refresh()
        if _summary(remote) != _summary(local):
            logger.warning(
                "Personal bests from the store differ from local results (%d remote, %d local rows)",
                len(remote),
                len(local),
            )
        self._bests = remote
        return self.bests

    def _on_results_changed(self, _repo: Any) -> None:
        self.refresh()


def _summary(bests: list[PersonalBest]) -> list[tuple[str, int, float]]:
    return [(b.stroke, b.distance_m, round(b.time_sec, 3)) for b in bests]
