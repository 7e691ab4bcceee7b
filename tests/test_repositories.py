from __future__ import annotations

import asyncio
import unittest
from dataclasses import asdict
from datetime import date

from fakes import FakeStore, result_row, session_row

from services.errors import MutationInProgressError, PreconditionError, RemoteOperationError, ValidationError
from services.models import Confirmed, Pending
from services.repositories import ResultRepository, SessionRepository
from services.validation import normalize_session_draft


DRAFT = {
    "date": "2024-06-02",
    "distance_m": "2000",
    "duration_min": 40,
    "stroke": "back",
    "rpe": 12,
    "notes": "  pull buoy  ",
}


def _fields(record) -> dict:
    data = asdict(record)
    data.pop("key")
    return data


class SessionRepositoryTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.store = FakeStore()
        self.owner = "u1"
        self.repo = SessionRepository(self.store, lambda: self.owner)

    async def _seed(self, *rows: dict) -> None:
        for row in rows:
            self.store.seed("workouts", row)
        await self.repo.load()
        self.store.calls.clear()

    async def test_create_is_visible_before_confirmation(self) -> None:
        self.store.gate = asyncio.Event()
        task = self.repo.create(DRAFT)

        pending = self.repo.list()[0]
        self.assertIsInstance(pending.key, Pending)
        self.assertTrue(self.repo.is_busy(pending.id))

        self.store.gate.set()
        confirmed = await task
        self.assertIsInstance(confirmed.key, Confirmed)
        self.assertEqual([r.key for r in self.repo.list()], [confirmed.key])
        self.assertFalse(self.repo.is_busy(pending.id))

    async def test_create_then_list_matches_normalized_draft(self) -> None:
        confirmed = await self.repo.create(DRAFT)

        expected = dict(normalize_session_draft(DRAFT), owner="u1")
        self.assertEqual(_fields(self.repo.list()[0]), expected)
        self.assertEqual(_fields(confirmed), expected)
        self.assertEqual(expected["stroke"], "Back")
        self.assertEqual(expected["rpe"], 10)
        self.assertEqual(expected["notes"], "pull buoy")

        stored = self.store.tables["workouts"][0]
        self.assertEqual(stored["user_id"], "u1")
        self.assertEqual(stored["date"], "2024-06-02")
        self.assertEqual(stored["id"], confirmed.id)

    async def test_failed_create_restores_previous_list(self) -> None:
        await self._seed(session_row(date="2024-05-01"))
        before = self.repo.list()
        self.store.fail["insert"] = "duplicate key"

        task = self.repo.create(DRAFT)
        self.assertEqual(len(self.repo.list()), 2)

        with self.assertRaises(RemoteOperationError) as ctx:
            await task
        self.assertEqual(str(ctx.exception), "duplicate key")
        self.assertEqual(self.repo.list(), before)

    async def test_update_applies_immediately_and_persists(self) -> None:
        await self._seed(session_row(notes="old"))
        record = self.repo.list()[0]

        task = self.repo.update(record.id, dict(DRAFT, notes="new"))
        self.assertEqual(self.repo.get(record.id).notes, "new")
        await task

        self.assertEqual(self.store.tables["workouts"][0]["notes"], "new")
        self.assertEqual(self.store.tables["workouts"][0]["distance_m"], 2000)
        self.assertEqual(self.repo.get(record.id).key, record.key)

    async def test_effort_can_be_left_out_and_cleared(self) -> None:
        created = await self.repo.create(dict(DRAFT, rpe=None))
        self.assertIsNone(created.rpe)
        self.assertIsNone(self.store.tables["workouts"][0]["rpe"])

        await self.repo.update(created.id, dict(DRAFT, rpe=7))
        self.assertEqual(self.repo.get(created.id).rpe, 7)
        await self.repo.update(created.id, dict(DRAFT, rpe=None))
        self.assertIsNone(self.repo.get(created.id).rpe)
        self.assertIsNone(self.store.tables["workouts"][0]["rpe"])

    async def test_failed_update_restores_exact_previous_list(self) -> None:
        await self._seed(
            session_row(date="2024-05-03", notes="a"),
            session_row(date="2024-05-02", notes="b"),
            session_row(date="2024-05-01", notes="c"),
        )
        before = self.repo.list()
        target = before[1]
        self.store.fail["update"] = "permission denied"

        task = self.repo.update(target.id, dict(DRAFT, date="2024-05-02"))
        self.assertNotEqual(self.repo.list(), before)

        with self.assertRaises(RemoteOperationError):
            await task
        self.assertEqual(self.repo.list(), before)

    async def test_delete_without_confirmation_does_nothing(self) -> None:
        await self._seed(session_row())
        before = self.repo.list()

        result = self.repo.delete(before[0].id)

        self.assertIsNone(result)
        self.assertEqual(self.repo.list(), before)
        self.assertEqual(self.store.calls, [])

    async def test_delete_removes_locally_and_remotely(self) -> None:
        await self._seed(session_row())
        record = self.repo.list()[0]

        task = self.repo.delete(record.id, confirmed=True)
        self.assertEqual(self.repo.list(), [])
        await task
        self.assertEqual(self.store.tables["workouts"], [])

    async def test_failed_delete_restores_record_in_place(self) -> None:
        await self._seed(
            session_row(date="2024-05-01", notes="a"),
            session_row(date="2024-05-01", notes="b"),
            session_row(date="2024-05-01", notes="c"),
        )
        before = self.repo.list()
        self.store.fail["delete"] = "network down"

        task = self.repo.delete(before[1].id, confirmed=True)
        self.assertEqual(len(self.repo.list()), 2)
        with self.assertRaises(RemoteOperationError):
            await task
        self.assertEqual(self.repo.list(), before)

    async def test_failed_delete_after_reload_keeps_one_copy(self) -> None:
        await self._seed(session_row())
        record = self.repo.list()[0]
        self.store.gates["delete"] = asyncio.Event()
        self.store.fail["delete"] = "network down"

        task = self.repo.delete(record.id, confirmed=True)
        self.assertEqual(self.repo.list(), [])
        await self.repo.load()
        self.assertEqual([r.id for r in self.repo.list()], [record.id])

        self.store.gates["delete"].set()
        with self.assertRaises(RemoteOperationError):
            await task
        self.assertEqual([r.id for r in self.repo.list()], [record.id])

    async def test_signed_out_mutations_are_rejected_before_any_call(self) -> None:
        await self._seed(session_row())
        before = self.repo.list()
        self.owner = None

        with self.assertRaises(PreconditionError):
            self.repo.create(DRAFT)
        with self.assertRaises(PreconditionError):
            self.repo.update(before[0].id, DRAFT)
        with self.assertRaises(PreconditionError):
            self.repo.delete(before[0].id, confirmed=True)

        self.assertEqual(self.repo.list(), before)
        self.assertEqual(self.store.calls, [])

    async def test_invalid_draft_is_rejected_without_network(self) -> None:
        with self.assertRaises(ValidationError):
            self.repo.create(dict(DRAFT, stroke="Butterfly kick"))
        with self.assertRaises(ValidationError):
            self.repo.create(dict(DRAFT, date="not a date"))
        self.assertEqual(self.repo.list(), [])
        self.assertEqual(self.store.calls, [])

    async def test_second_mutation_on_busy_record_is_rejected(self) -> None:
        await self._seed(session_row())
        record = self.repo.list()[0]
        self.store.gate = asyncio.Event()

        task = self.repo.update(record.id, dict(DRAFT, notes="first"))
        with self.assertRaises(MutationInProgressError):
            self.repo.update(record.id, dict(DRAFT, notes="second"))
        with self.assertRaises(MutationInProgressError):
            self.repo.delete(record.id, confirmed=True)

        self.store.gate.set()
        await task
        self.assertEqual(self.repo.get(record.id).notes, "first")
        await self.repo.update(record.id, dict(DRAFT, notes="second"))
        self.assertEqual(self.repo.get(record.id).notes, "second")

    async def test_pending_record_cannot_be_changed(self) -> None:
        self.store.gate = asyncio.Event()
        task = self.repo.create(DRAFT)
        pending = self.repo.list()[0]

        with self.assertRaises(MutationInProgressError):
            self.repo.update(pending.id, DRAFT)

        self.store.gate.set()
        await task

    async def test_unknown_record_is_rejected(self) -> None:
        with self.assertRaises(PreconditionError):
            self.repo.update("missing", DRAFT)

    async def test_list_is_sorted_by_date_descending(self) -> None:
        await self._seed(
            session_row(date="2024-01-05"),
            session_row(date="2024-03-01"),
            session_row(date="2024-02-10"),
        )
        await self.repo.create(dict(DRAFT, date="2024-02-01"))

        dates = [r.date for r in self.repo.list()]
        self.assertEqual(dates, sorted(dates, reverse=True))
        self.assertEqual(dates[0], date(2024, 3, 1))

    async def test_failed_load_keeps_current_records(self) -> None:
        await self._seed(session_row())
        before = self.repo.list()
        self.store.fail["list"] = "timeout"

        with self.assertRaises(RemoteOperationError):
            await self.repo.load()
        self.assertEqual(self.repo.list(), before)

    async def test_listeners_see_confirmations_and_rollbacks(self) -> None:
        seen: list[int] = []
        self.repo.subscribe(lambda repo: seen.append(len(repo.list())))

        await self.repo.create(DRAFT)
        self.assertEqual(seen, [1])

        self.store.fail["insert"] = "nope"
        with self.assertRaises(RemoteOperationError):
            await self.repo.create(DRAFT)
        # told about the rollback, never about the unconfirmed record
        self.assertEqual(seen, [1, 1])

    async def test_bulk_insert_writes_rows_for_owner(self) -> None:
        fields = normalize_session_draft(DRAFT)
        count = await self.repo.bulk_insert([fields, fields])

        self.assertEqual(count, 2)
        self.assertEqual(self.store.insert_many_sizes, [2])
        self.assertTrue(all(r["user_id"] == "u1" for r in self.store.tables["workouts"]))
        self.assertEqual(self.repo.list(), [])

    async def test_wait_idle_waits_for_outstanding_work(self) -> None:
        self.repo.create(DRAFT)
        self.repo.create(dict(DRAFT, notes="second"))
        await self.repo.wait_idle()
        self.assertTrue(all(isinstance(r.key, Confirmed) for r in self.repo.list()))


class RepositoryWithoutLoopTests(unittest.TestCase):
    def test_mutation_needs_running_loop_and_leaves_no_state(self) -> None:
        repo = SessionRepository(FakeStore(), lambda: "u1")
        with self.assertRaises(RuntimeError):
            repo.create(DRAFT)
        self.assertEqual(repo.list(), [])


class ResultRepositoryTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.store = FakeStore()
        self.repo = ResultRepository(self.store, lambda: "u1")

    async def test_result_defaults_and_clamps(self) -> None:
        created = await self.repo.create(
            {"date": "2024-03-01", "meet": " County ", "distance_m": "abc", "stroke": "Fly", "time_sec": 0}
        )
        self.assertEqual(created.meet, "County")
        self.assertEqual(created.distance_m, 50)
        self.assertEqual(created.time_sec, 40.0)

        clamped = await self.repo.create(
            {"date": "2024-03-01", "meet": "County", "distance_m": 10, "stroke": "IM", "time_sec": "0:00.50"}
        )
        self.assertEqual(clamped.distance_m, 25)
        self.assertEqual(clamped.time_sec, 1.0)

    async def test_result_rejects_drill_and_missing_meet(self) -> None:
        with self.assertRaises(ValidationError):
            self.repo.create({"date": "2024-03-01", "meet": "County", "stroke": "Drill", "time_sec": 30})
        with self.assertRaises(ValidationError):
            self.repo.create({"date": "2024-03-01", "meet": "  ", "stroke": "Free", "time_sec": 30})
        self.assertEqual(self.store.calls, [])

    async def test_load_decodes_numeric_strings(self) -> None:
        self.store.seed("competitions", result_row(time_sec="27.95"))
        results = await self.repo.load()
        self.assertEqual(results[0].time_sec, 27.95)


if __name__ == "__main__":
    unittest.main(verbosity=2)
