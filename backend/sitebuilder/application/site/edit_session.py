# sitebuilder/application/site/edit_session.py
"""
Inline-edit save pipeline.

Many independent controls call EditSession.save() as fast as the user types,
blurs or reorders. Edits are merged per (table, field, record) so the newest
value wins, then written:

- immediately, when a single key is queued (an isolated edit)
- after a short debounce window, when a burst queues two or more keys

A flush takes the whole queue for itself before its first write; anything
saved while it runs goes to the next flush, which starts writing only once
the running one is done.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from sitebuilder.domain.exceptions import FieldFailure, SaveFieldFailure, TenantUnresolved
from sitebuilder.storage import RowStore

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE = 0.1

EditKey = Tuple[str, str, str]


@dataclass(frozen=True)
class PendingEdit:
    table: str
    field: str
    value: Any
    record_id: Optional[str]
    tenant_id: str

    @property
    def key(self) -> EditKey:
        return (self.table, self.field, self.record_id or self.tenant_id)


class SaveQueue:
    """Insertion-ordered, at most one PendingEdit per key."""

    def __init__(self):
        self._edits: Dict[EditKey, PendingEdit] = {}

    def put(self, edit: PendingEdit) -> None:
        # Replacing an existing key keeps its original position
        self._edits[edit.key] = edit

    def drain(self) -> List[PendingEdit]:
        edits, self._edits = list(self._edits.values()), {}
        return edits

    def __len__(self) -> int:
        return len(self._edits)

    def __contains__(self, key: EditKey) -> bool:
        return key in self._edits

    def get(self, key: EditKey) -> Optional[PendingEdit]:
        return self._edits.get(key)


class DebounceTimer:
    """One-shot timer owned by its session. Arming an armed timer is a no-op."""

    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def arm(self) -> None:
        if self._handle is not None:
            return
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def disarm(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self.callback()


class _Cycle:
    """Edits collected for one flush, and the callers waiting on it."""

    def __init__(self):
        self.queue = SaveQueue()
        self.waiters: List[asyncio.Future] = []


class EditSession:
    """
    Editing-mode flag plus the save pipeline for one editor session.

    tenant_id is a callable returning the current website id (or None).
    """

    def __init__(
        self,
        rows: RowStore,
        tenant_id: Callable[[], Optional[str]],
        *,
        debounce: float = DEFAULT_DEBOUNCE,
        editing: bool = False,
    ):
        self.rows = rows
        self._tenant_id = tenant_id
        self.is_editing = editing
        self.has_changes = False

        self._cycle = _Cycle()
        self._timer = DebounceTimer(debounce, self._start_flush)
        self._decision: Optional[asyncio.Handle] = None
        self._inflight: set = set()
        self._last_flush: Optional[asyncio.Task] = None

    # ------------------------
    # Flags
    # ------------------------

    def set_editing(self, editing: bool) -> None:
        self.is_editing = editing

    def mark_clean(self) -> None:
        self.has_changes = False

    @property
    def state(self) -> str:
        if self._timer.armed:
            return "batch"
        if len(self._cycle.queue):
            return "enqueued"
        if self._inflight:
            return "flushing"
        return "idle"

    # ------------------------
    # Save
    # ------------------------

    async def save(
        self,
        table: str,
        field: str,
        value: Any,
        record_id: Optional[str] = None,
    ) -> None:
        """
        Queue one field edit and wait for the flush that carries it.

        Raises:
        - TenantUnresolved: no current website
        - SaveFieldFailure: any field of that flush failed (siblings may
          already be committed)
        """
        tenant_id = self._tenant_id()
        if not tenant_id:
            raise TenantUnresolved()

        loop = asyncio.get_running_loop()
        cycle = self._cycle

        cycle.queue.put(PendingEdit(table, field, value, record_id, tenant_id))
        waiter = loop.create_future()
        cycle.waiters.append(waiter)

        if self._decision is None and not self._timer.armed:
            # Decide once every save issued in this loop iteration is queued
            self._decision = loop.call_soon(self._decide)

        await waiter

    def _decide(self) -> None:
        self._decision = None
        queued = len(self._cycle.queue)

        if queued == 1:
            self._start_flush()
        elif queued > 1:
            self._timer.arm()

    def _start_flush(self) -> None:
        cycle, self._cycle = self._cycle, _Cycle()
        if not cycle.waiters:
            return

        previous = self._last_flush
        task = asyncio.get_running_loop().create_task(self._flush(cycle, previous))
        self._last_flush = task
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _flush(self, cycle: _Cycle, previous: Optional[asyncio.Task]) -> None:
        edits = cycle.queue.drain()
        failures: List[FieldFailure] = []

        try:
            # Same-key writes must land in flush order
            if previous is not None and not previous.done():
                await asyncio.wait({previous})

            for edit in edits:
                failure = await self._write(edit)
                if failure is not None:
                    failures.append(failure)
        except asyncio.CancelledError:
            for waiter in cycle.waiters:
                waiter.cancel()
            raise

        if failures:
            logger.error(
                "Flush of %d field(s) finished with %d failure(s)", len(edits), len(failures)
            )

        # Callers resuming from their waiter must already see this flush as over
        task = asyncio.current_task()
        self._inflight.discard(task)
        if self._last_flush is task:
            self._last_flush = None

        for waiter in cycle.waiters:
            if waiter.done():
                continue
            if failures:
                waiter.set_exception(SaveFieldFailure(failures))
            else:
                waiter.set_result(None)

    async def _write(self, edit: PendingEdit) -> Optional[FieldFailure]:
        try:
            touched = await self.rows.update_fields(
                edit.table,
                {edit.field: edit.value},
                record_id=edit.record_id,
                parent_id=edit.tenant_id,
            )
        except Exception as exc:
            logger.error(
                "Error saving %s.%s (record %s): %s",
                edit.table, edit.field, edit.record_id or "-", exc,
            )
            return FieldFailure(edit.table, edit.field, edit.record_id, str(exc))

        if not touched:
            logger.error(
                "Error saving %s.%s (record %s): no matching row",
                edit.table, edit.field, edit.record_id or "-",
            )
            return FieldFailure(edit.table, edit.field, edit.record_id, "no matching row")

        self.has_changes = True
        logger.debug("Saved %s.%s", edit.table, edit.field)
        return None

    # ------------------------
    # Lifecycle
    # ------------------------

    async def aclose(self) -> None:
        """Flush anything still queued now and wait for in-flight flushes."""
        self._timer.disarm()
        if self._decision is not None:
            self._decision.cancel()
            self._decision = None

        if len(self._cycle.queue):
            self._start_flush()

        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)
