from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from .errors import SIGN_IN_REQUIRED, MutationInProgressError, PreconditionError, RemoteOperationError
from .models import (
    RESULTS_TABLE,
    SESSIONS_TABLE,
    Pending,
    RecordKey,
    Result,
    Session,
    result_from_row,
    result_to_row,
    session_from_row,
    session_to_row,
)
from .store import RemoteStore
from .validation import normalize_result_draft, normalize_session_draft


logger = logging.getLogger(__name__)

R = TypeVar("R", Session, Result)

OwnerProvider = Callable[[], Optional[str]]


@dataclass(frozen=True)
class EntityKind(Generic[R]):
    name: str
    table: str
    record_type: type
    normalize: Callable[[Mapping[str, Any]], dict[str, Any]]
    from_row: Callable[[dict[str, Any]], R]
    to_row: Callable[[R], dict[str, Any]]


SESSION_KIND: EntityKind[Session] = EntityKind(
    name="session",
    table=SESSIONS_TABLE,
    record_type=Session,
    normalize=normalize_session_draft,
    from_row=session_from_row,
    to_row=session_to_row,
)

RESULT_KIND: EntityKind[Result] = EntityKind(
    name="result",
    table=RESULTS_TABLE,
    record_type=Result,
    normalize=normalize_result_draft,
    from_row=result_from_row,
    to_row=result_to_row,
)


class RecordRepository(Generic[R]):
    """In-memory copy of one user's records with optimistic writes.

    Mutations apply locally first and return an ``asyncio.Task`` for the
    remote round-trip. The task resolves with the confirmed record, or rolls
    the local change back and raises ``RemoteOperationError``. Call the
    mutating methods from inside a running event loop.

    Only one mutation per record may be in flight; a second one is rejected
    with ``MutationInProgressError`` until the first has been reconciled.
    """

    def __init__(
        self,
        store: RemoteStore,
        kind: EntityKind[R],
        owner_provider: OwnerProvider,
        list_limit: int = 500,
    ) -> None:
        self.store = store
        self.kind = kind
        self.list_limit = list_limit
        self._owner_provider = owner_provider
        self._records: list[R] = []
        self._busy: set[str] = set()
        self._tasks: set[asyncio.Task] = set()
        self._listeners: list[Callable[[RecordRepository[R]], None]] = []

    # reads

    def list(self) -> list[R]:
        return sorted(self._records, key=lambda r: r.date, reverse=True)

    def get(self, record_id: str) -> R | None:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def is_busy(self, record_id: str) -> bool:
        return record_id in self._busy

    def subscribe(self, listener: Callable[[RecordRepository[R]], None]) -> None:
        self._listeners.append(listener)

    async def load(self) -> list[R]:
        owner = self.require_owner()
        rows = await self.store.list_by_owner(self.kind.table, owner, order_by="date", limit=self.list_limit)
        self._records = [self._decode(row) for row in rows]
        logger.debug("Loaded %d %s records", len(self._records), self.kind.name)
        self._notify()
        return self.list()

    def clear(self) -> None:
        self._records = []
        self._notify()

    async def wait_idle(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # optimistic mutations

    def create(self, draft: Mapping[str, Any]) -> asyncio.Task:
        owner = self.require_owner()
        fields = self.kind.normalize(draft)
        loop = asyncio.get_running_loop()

        pending = self.kind.record_type(key=Pending(uuid.uuid4().hex), owner=owner, **fields)
        self._records.insert(0, pending)
        return self._track(loop, pending.id, self._finish_create(pending))

    def update(self, record_id: str, draft: Mapping[str, Any]) -> asyncio.Task:
        self.require_owner()
        index = self._index_of(record_id)
        self._ensure_idle(record_id)
        fields = self.kind.normalize(draft)
        loop = asyncio.get_running_loop()

        previous = self._records[index]
        updated = self.kind.record_type(key=previous.key, owner=previous.owner, **fields)
        self._records[index] = updated
        return self._track(loop, record_id, self._finish_update(previous, updated))

    def delete(self, record_id: str, *, confirmed: bool = False) -> asyncio.Task | None:
        """Remove a record. Without ``confirmed=True`` nothing is touched and ``None`` is returned."""
        if not confirmed:
            logger.debug("Delete of %s %s not confirmed; ignoring", self.kind.name, record_id)
            return None
        self.require_owner()
        index = self._index_of(record_id)
        self._ensure_idle(record_id)
        loop = asyncio.get_running_loop()

        removed = self._records.pop(index)
        successor = self._records[index].key if index < len(self._records) else None
        return self._track(loop, record_id, self._finish_delete(removed, index, successor))

    async def bulk_insert(self, normalized: Sequence[dict[str, Any]]) -> int:
        """Insert already-normalized drafts in one store call, without optimistic state."""
        owner = self.require_owner()
        rows = [
            self.kind.to_row(self.kind.record_type(key=Pending(""), owner=owner, **fields))
            for fields in normalized
        ]
        await self.store.insert_many(self.kind.table, rows)
        return len(rows)

    # reconciliation

    async def _finish_create(self, pending: R) -> R:
        try:
            row = await self.store.insert(self.kind.table, self.kind.to_row(pending))
            confirmed = self._decode(row)
        except RemoteOperationError as exc:
            self._remove(pending.key)
            self._notify()
            logger.warning("Rolled back new %s: %s", self.kind.name, exc.message)
            raise
        self._replace(pending.key, confirmed)
        self._notify()
        return confirmed

    async def _finish_update(self, previous: R, updated: R) -> R:
        patch = self.kind.to_row(updated)
        patch.pop("user_id", None)
        try:
            await self.store.update(self.kind.table, updated.id, patch)
        except RemoteOperationError as exc:
            self._replace(updated.key, previous)
            self._notify()
            logger.warning("Rolled back update of %s %s: %s", self.kind.name, updated.id, exc.message)
            raise
        self._notify()
        return updated

    async def _finish_delete(self, removed: R, index: int, successor: RecordKey | None) -> R:
        try:
            await self.store.delete(self.kind.table, removed.id)
        except RemoteOperationError as exc:
            self._restore(removed, index, successor)
            self._notify()
            logger.warning("Rolled back delete of %s %s: %s", self.kind.name, removed.id, exc.message)
            raise
        self._notify()
        return removed

    # helpers

    def require_owner(self) -> str:
        owner = self._owner_provider()
        if not owner:
            raise PreconditionError(SIGN_IN_REQUIRED)
        return owner

    def _index_of(self, record_id: str) -> int:
        for i, record in enumerate(self._records):
            if record.id == record_id:
                return i
        raise PreconditionError(f"Unknown {self.kind.name}: {record_id}")

    def _ensure_idle(self, record_id: str) -> None:
        if record_id in self._busy:
            raise MutationInProgressError(record_id)

    def _decode(self, row: dict[str, Any]) -> R:
        try:
            return self.kind.from_row(row)
        except (KeyError, TypeError, ValueError) as exc:
            raise RemoteOperationError(f"Unexpected {self.kind.name} row from store: {exc}") from exc

    def _track(self, loop: asyncio.AbstractEventLoop, record_id: str, work: Awaitable[R]) -> asyncio.Task:
        self._busy.add(record_id)
        task = loop.create_task(self._guarded(record_id, work))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _guarded(self, record_id: str, work: Awaitable[R]) -> R:
        try:
            return await work
        finally:
            self._busy.discard(record_id)

    def _replace(self, key: RecordKey, record: R) -> None:
        for i, current in enumerate(self._records):
            if current.key == key:
                self._records[i] = record
                return

    def _remove(self, key: RecordKey) -> None:
        self._records = [r for r in self._records if r.key != key]

    def _restore(self, record: R, index: int, successor: RecordKey | None) -> None:
        if any(current.key == record.key for current in self._records):
            # a reload while the delete was in flight already brought it back
            return
        if successor is not None:
            for i, current in enumerate(self._records):
                if current.key == successor:
                    self._records.insert(i, record)
                    return
        self._records.insert(min(index, len(self._records)), record)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self)


class SessionRepository(RecordRepository[Session]):
    def __init__(self, store: RemoteStore, owner_provider: OwnerProvider, list_limit: int = 500) -> None:
        super().__init__(store, SESSION_KIND, owner_provider, list_limit=list_limit)


class ResultRepository(RecordRepository[Result]):
    def __init__(self, store: RemoteStore, owner_provider: OwnerProvider, list_limit: int = 500) -> None:
        super().__init__(store, RESULT_KIND, owner_provider, list_limit=list_limit)
