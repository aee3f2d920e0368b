"""Tests for the inline-edit save pipeline."""

import asyncio

import pytest

from sitebuilder.application.site import DebounceTimer, EditSession, PendingEdit, SaveQueue
from sitebuilder.domain.exceptions import SaveFieldFailure, TenantUnresolved

from conftest import FakeRowStore, GOLDEN_ID, SWEET_ID, seed_tables

DEBOUNCE = 0.1
# call_later may fire up to one clock tick early
EARLY_TOLERANCE = 0.01


def make_session(rows, tenant=SWEET_ID, debounce=DEBOUNCE):
    return EditSession(rows, lambda: tenant, debounce=debounce, editing=True)


def row(rows, table, record_id):
    return next(r for r in rows.tables[table] if r["id"] == record_id)


class TestSaveQueue:
    def test_last_write_wins_in_place(self):
        queue = SaveQueue()
        queue.put(PendingEdit("hero_content", "headline", "a", None, SWEET_ID))
        queue.put(PendingEdit("menu_items", "name", "x", "m1", SWEET_ID))
        queue.put(PendingEdit("hero_content", "headline", "b", None, SWEET_ID))

        assert len(queue) == 2
        edits = queue.drain()
        assert [e.value for e in edits] == ["b", "x"]
        assert len(queue) == 0

    def test_key_uses_record_or_tenant(self):
        assert PendingEdit("t", "f", 1, None, SWEET_ID).key == ("t", "f", SWEET_ID)
        assert PendingEdit("t", "f", 1, "r1", SWEET_ID).key == ("t", "f", "r1")


class TestDebounceTimer:
    @pytest.mark.asyncio
    async def test_fires_once_and_rearm_is_noop(self):
        fired = []
        timer = DebounceTimer(0.02, lambda: fired.append(True))

        timer.arm()
        timer.arm()
        assert timer.armed
        await asyncio.sleep(0.05)

        assert fired == [True]
        assert not timer.armed

    @pytest.mark.asyncio
    async def test_disarm(self):
        fired = []
        timer = DebounceTimer(0.02, lambda: fired.append(True))

        timer.arm()
        timer.disarm()
        await asyncio.sleep(0.05)

        assert fired == []


class TestFastPath:
    @pytest.mark.asyncio
    async def test_single_save_is_not_debounced(self, rows):
        session = make_session(rows, debounce=1.0)
        loop = asyncio.get_running_loop()

        start = loop.time()
        await session.save("hero_content", "headline", "Warm bread")
        elapsed = loop.time() - start

        assert elapsed < 0.5
        assert len(rows.writes) == 1
        assert row(rows, "hero_content", "hero-sweet")["headline"] == "Warm bread"
        assert session.has_changes is True
        assert session.state == "idle"

    @pytest.mark.asyncio
    async def test_write_scoped_to_tenant(self, rows):
        session = make_session(rows)
        await session.save("hero_content", "headline", "Only mine")

        _, table, values, record_id, parent_id = rows.writes[0]
        assert (table, values, record_id, parent_id) == (
            "hero_content", {"headline": "Only mine"}, None, SWEET_ID
        )
        assert row(rows, "hero_content", "hero-golden")["headline"] == "Golden"

    @pytest.mark.asyncio
    async def test_record_edit(self, rows):
        session = make_session(rows)
        await session.save("menu_items", "price", "$3.50", "m1")

        assert row(rows, "menu_items", "m1")["price"] == "$3.50"
        assert row(rows, "menu_items", "m2")["price"] == "$4"

    @pytest.mark.asyncio
    async def test_sequential_isolated_edits_each_write(self, rows):
        session = make_session(rows)
        await session.save("hero_content", "headline", "one")
        await session.save("hero_content", "headline", "two")

        assert [w[2]["headline"] for w in rows.writes] == ["one", "two"]


class TestBatchPath:
    @pytest.mark.asyncio
    async def test_same_key_three_times_writes_once_with_last_value(self, rows):
        session = make_session(rows)

        await asyncio.gather(
            session.save("hero_content", "headline", "v1"),
            session.save("hero_content", "headline", "v2"),
            session.save("hero_content", "headline", "v3"),
        )

        assert len(rows.writes) == 1
        assert rows.writes[0][2] == {"headline": "v3"}

    @pytest.mark.asyncio
    async def test_two_keys_written_after_debounce(self, rows):
        session = make_session(rows)
        loop = asyncio.get_running_loop()

        start = loop.time()
        await asyncio.gather(
            session.save("hero_content", "headline", "New headline"),
            session.save("hero_content", "subheadline", "New sub"),
        )

        assert len(rows.writes) == 2
        assert {tuple(w[2]) for w in rows.writes} == {("headline",), ("subheadline",)}
        assert all(w[0] - start >= DEBOUNCE - EARLY_TOLERANCE for w in rows.writes)

    @pytest.mark.asyncio
    async def test_idle_as_soon_as_batch_save_returns(self):
        rows = FakeRowStore(seed_tables(), latency=0.02)
        session = make_session(rows)

        await asyncio.gather(
            session.save("hero_content", "headline", "a"),
            session.save("hero_content", "subheadline", "b"),
        )

        assert session.state == "idle"

    @pytest.mark.asyncio
    async def test_merge_keeps_position_and_newest_value(self, rows):
        session = make_session(rows)

        await asyncio.gather(
            session.save("menu_items", "display_order", 2, "m1"),
            session.save("menu_items", "display_order", 1, "m2"),
            session.save("menu_items", "display_order", 3, "m1"),
        )

        assert [(w[3], w[2]["display_order"]) for w in rows.writes] == [("m1", 3), ("m2", 1)]

    @pytest.mark.asyncio
    async def test_edit_during_window_joins_without_resetting_timer(self, rows):
        session = make_session(rows)
        loop = asyncio.get_running_loop()
        start = loop.time()

        first = asyncio.gather(
            session.save("hero_content", "headline", "a"),
            session.save("hero_content", "subheadline", "b"),
        )
        await asyncio.sleep(DEBOUNCE / 2)
        assert session.state == "batch"

        late = asyncio.ensure_future(session.save("hero_content", "cta_text", "Order now"))
        await asyncio.gather(first, late)

        assert len(rows.writes) == 3
        # one flush, fired by the original timer
        assert max(w[0] for w in rows.writes) - start < DEBOUNCE * 1.5

    @pytest.mark.asyncio
    async def test_edit_during_flush_goes_to_next_cycle(self):
        rows = FakeRowStore(seed_tables(), latency=0.05)
        session = make_session(rows)

        first = asyncio.ensure_future(session.save("hero_content", "headline", "first"))
        await asyncio.sleep(0.01)
        assert session.state == "flushing"

        second = asyncio.ensure_future(session.save("hero_content", "headline", "second"))
        await asyncio.gather(first, second)

        assert [w[2]["headline"] for w in rows.writes] == ["first", "second"]
        assert rows.max_in_flight == 1
        assert row(rows, "hero_content", "hero-sweet")["headline"] == "second"
        assert session.state == "idle"


class TestFailures:
    @pytest.mark.asyncio
    async def test_no_tenant(self, rows):
        session = make_session(rows, tenant=None)

        with pytest.raises(TenantUnresolved):
            await session.save("hero_content", "headline", "x")
        assert rows.writes == []

    @pytest.mark.asyncio
    async def test_single_write_failure(self, rows):
        rows.fail("update_fields", "hero_content", "headline", RuntimeError("permission denied"))
        session = make_session(rows)

        with pytest.raises(SaveFieldFailure) as exc_info:
            await session.save("hero_content", "headline", "x")

        [failure] = exc_info.value.failures
        assert (failure.table, failure.field) == ("hero_content", "headline")
        assert "permission denied" in failure.message
        assert session.has_changes is False

    @pytest.mark.asyncio
    async def test_failure_isolated_within_batch(self, rows):
        rows.fail("update_fields", "hero_content", "headline")
        session = make_session(rows)

        results = await asyncio.gather(
            session.save("hero_content", "headline", "broken"),
            session.save("hero_content", "subheadline", "fine"),
            return_exceptions=True,
        )

        # every caller of the flush sees the aggregated failure
        assert all(isinstance(r, SaveFieldFailure) for r in results)
        assert [f.field for f in results[1].failures] == ["headline"]
        assert "hero_content.headline" in str(results[1])

        # the sibling still committed
        assert row(rows, "hero_content", "hero-sweet")["subheadline"] == "fine"
        assert session.has_changes is True

    @pytest.mark.asyncio
    async def test_missing_row_is_a_failure(self, rows):
        session = EditSession(rows, lambda: GOLDEN_ID)

        with pytest.raises(SaveFieldFailure) as exc_info:
            await session.save("menu_items", "name", "Not yours", "m1")

        assert exc_info.value.failures[0].message == "no matching row"
        assert row(rows, "menu_items", "m1")["name"] == "Croissant"

    @pytest.mark.asyncio
    async def test_failed_flush_does_not_poison_next(self, rows):
        rows.fail("update_fields", "hero_content", "headline")
        session = make_session(rows)

        with pytest.raises(SaveFieldFailure):
            await session.save("hero_content", "headline", "x")

        await session.save("hero_content", "subheadline", "ok")
        assert session.state == "idle"


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_aclose_flushes_pending_batch(self, rows):
        session = make_session(rows, debounce=60)

        pending = asyncio.gather(
            session.save("hero_content", "headline", "a"),
            session.save("hero_content", "subheadline", "b"),
        )
        await asyncio.sleep(0.01)
        assert session.state == "batch"

        await session.aclose()
        await pending

        assert len(rows.writes) == 2
        assert session.state == "idle"

    @pytest.mark.asyncio
    async def test_aclose_when_idle(self, rows):
        session = make_session(rows)
        await session.aclose()
        assert session.state == "idle"

    def test_flags(self, rows):
        session = EditSession(rows, lambda: SWEET_ID)
        assert session.is_editing is False

        session.set_editing(True)
        session.has_changes = True
        session.mark_clean()

        assert session.is_editing is True
        assert session.has_changes is False
