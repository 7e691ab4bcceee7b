from __future__ import annotations

import asyncio
from dataclasses import dataclass

from .config import AppConfig
from .import_service import ImportReport, import_sessions_csv
from .personal_bests import PersonalBestAggregator
from .repositories import OwnerProvider, ResultRepository, SessionRepository
from .store import RemoteStore


@dataclass
class Tracker:
    """Everything one signed-in user works with, wired to a single store."""

    config: AppConfig
    store: RemoteStore
    sessions: SessionRepository
    results: ResultRepository
    personal_bests: PersonalBestAggregator

    async def load_all(self) -> None:
        await asyncio.gather(self.sessions.load(), self.results.load())
        await self.personal_bests.reconcile(settle=False)

    async def import_sessions(self, text: str) -> ImportReport:
        return await import_sessions_csv(self.sessions, text, batch_size=self.config.import_batch_size)

    async def wait_idle(self) -> None:
        await asyncio.gather(self.sessions.wait_idle(), self.results.wait_idle())

    def clear(self) -> None:
        self.sessions.clear()
        self.results.clear()



def build_tracker(cfg: AppConfig, store: RemoteStore, owner_provider: OwnerProvider) -> Tracker:
    sessions = SessionRepository(store, owner_provider, list_limit=cfg.list_limit)
    results = ResultRepository(store, owner_provider, list_limit=cfg.list_limit)
    return Tracker(
        config=cfg,
        store=store,
        sessions=sessions,
        results=results,
        personal_bests=PersonalBestAggregator(results, store, settle_seconds=cfg.pb_settle_seconds),
    )
