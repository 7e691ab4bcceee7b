from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Protocol

from .errors import RemoteOperationError
from .models import PERSONAL_BESTS_VIEW


logger = logging.getLogger(__name__)


class RemoteStore(Protocol):
    """Async contract the repositories consume.

    Every method raises ``RemoteOperationError`` when the store refuses the
    request or cannot be reached.
    """

    async def list_by_owner(
        self, table: str, owner_id: str, order_by: str = "date", limit: int = 500
    ) -> list[dict[str, Any]]: ...

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]: ...

    async def insert_many(self, table: str, rows: list[dict[str, Any]]) -> list[dict[str, Any]]: ...

    async def update(self, table: str, record_id: str, patch: dict[str, Any]) -> None: ...

    async def delete(self, table: str, record_id: str) -> None: ...

    async def list_personal_bests(self, owner_id: str) -> list[dict[str, Any]]: ...


def error_message(exc: BaseException) -> str:
    # postgrest.APIError carries the server text in .message
    message = getattr(exc, "message", None)
    if message:
        return str(message)
    return str(exc) or exc.__class__.__name__


class SupabaseStore:
    """RemoteStore over a supabase-py client.

    The client is synchronous; each request runs in a worker thread so the
    event loop only suspends at the network boundary.
    """

    def __init__(self, client: Any) -> None:
        self.client = client

    async def _run(self, operation: str, call: Callable[[], Any]) -> list[dict[str, Any]]:
        try:
            resp = await asyncio.to_thread(call)
        except Exception as exc:
            logger.debug("%s failed: %s", operation, exc)
            raise RemoteOperationError(error_message(exc), operation=operation) from exc
        return list(getattr(resp, "data", []) or [])

    async def list_by_owner(
        self, table: str, owner_id: str, order_by: str = "date", limit: int = 500
    ) -> list[dict[str, Any]]:
        return await self._run(
            f"list {table}",
            lambda: (
                self.client.table(table)
                .select("*")
                .eq("user_id", owner_id)
                .order(order_by, desc=True)
                .limit(limit)
                .execute()
            ),
        )

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        data = await self._run(f"insert {table}", lambda: self.client.table(table).insert(row).execute())
        if not data:
            raise RemoteOperationError(f"Saving to {table} returned no row.", operation=f"insert {table}")
        return data[0]

    async def insert_many(self, table: str, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not rows:
            return []
        return await self._run(f"insert {table}", lambda: self.client.table(table).insert(rows).execute())

    async def update(self, table: str, record_id: str, patch: dict[str, Any]) -> None:
        data = await self._run(
            f"update {table}",
            lambda: self.client.table(table).update(patch).eq("id", record_id).execute(),
        )
        if not data:
            raise RemoteOperationError("Record not found or not yours to change.", operation=f"update {table}")

    async def delete(self, table: str, record_id: str) -> None:
        # an already-missing row is the state the caller asked for
        await self._run(f"delete {table}", lambda: self.client.table(table).delete().eq("id", record_id).execute())

    async def list_personal_bests(self, owner_id: str) -> list[dict[str, Any]]:
        return await self._run(
            "list personal bests",
            lambda: self.client.table(PERSONAL_BESTS_VIEW).select("*").eq("user_id", owner_id).execute(),
        )
