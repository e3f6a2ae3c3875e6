"""Reconciling poller: periodic re-fetch that only propagates real changes.

There is no push channel. A view calls ``start()`` when it becomes
visible and ``stop()`` when it goes away; in between the poller re-fetches
on a fixed interval, compares a canonical serialization of the result with
the last one it applied, and only then replaces ``items`` and raises
``has_new_data``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Generic, TypeVar

from pydantic_core import to_jsonable_python

logger = logging.getLogger(__name__)

T = TypeVar("T")


def canonical_bytes(value: Any) -> bytes:
    """Stable byte serialization used for snapshot comparison."""
    return json.dumps(
        to_jsonable_python(value),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


class ReconcilingPoller(Generic[T]):
    """Poll ``fetch`` every ``interval`` seconds while active.

    - The first completed fetch is a baseline: it sets ``items`` but does
      not raise ``has_new_data``.
    - At most one fetch is in flight; a tick that finds one running is
      skipped, not queued.
    - ``stop()`` bumps the generation counter. A fetch started under an
      older generation may finish, but its result is dropped.
    - A failing initial fetch (``start``/``refresh``) raises; a failing
      timer fetch is logged and the loop keeps ticking.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[T]],
        interval: float = 10.0,
        *,
        serialize: Callable[[T], bytes] = canonical_bytes,
        on_update: Callable[[T], None] | None = None,
        on_new_data: Callable[[T], None] | None = None,
        name: str = "poller",
    ):
        self._fetch = fetch
        self.interval = interval
        self._serialize = serialize
        self._on_update = on_update
        self._on_new_data = on_new_data
        self.name = name

        self.items: T | None = None
        self.has_new_data = False
        self.change_count = 0
        self.fetch_count = 0

        self._snapshot: bytes | None = None
        self._generation = 0
        self._active = False
        self._timer: asyncio.Task | None = None
        self._inflight: asyncio.Task | None = None

    @property
    def active(self) -> bool:
        return self._active

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def state(self) -> str:
        if self._inflight is not None and not self._inflight.done():
            return "fetching"
        return "idle"

    # ── lifecycle ─────────────────────────────────────────

    async def start(self) -> None:
        """Fetch immediately, then arm the periodic timer.

        If the initial fetch fails the error propagates and the poller
        stays disarmed.
        """
        if self._active:
            return
        self._generation += 1
        self._active = True
        generation = self._generation
        try:
            await self._run(generation, surface_errors=True)
        except BaseException:
            if generation == self._generation:
                self._active = False
                self._generation += 1
            raise
        if generation == self._generation:
            self._timer = asyncio.create_task(self._tick_loop(generation), name=f"{self.name}-timer")

    def stop(self) -> None:
        """Disarm the timer. An in-flight fetch completes but is discarded."""
        if not self._active:
            return
        self._active = False
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def close(self) -> None:
        """``stop()`` and wait for the timer and any in-flight fetch to settle."""
        timer = self._timer
        self.stop()
        if timer is not None:
            await asyncio.gather(timer, return_exceptions=True)
        await self.join()

    async def refresh(self) -> bool:
        """Manual pull-to-refresh. Errors propagate to the caller."""
        if self._inflight is not None and not self._inflight.done():
            return await self._inflight
        return await self._run(self._generation, surface_errors=True)

    async def poll_once(self) -> bool:
        """One timer tick: skipped if a fetch is in flight, errors swallowed."""
        if self._inflight is not None and not self._inflight.done():
            logger.debug("%s: fetch still in flight, skipping tick", self.name)
            return False
        return await self._run(self._generation, surface_errors=False)

    async def join(self) -> None:
        """Wait for any in-flight fetch to settle."""
        if self._inflight is not None:
            await asyncio.gather(self._inflight, return_exceptions=True)

    def acknowledge(self) -> None:
        """Clear the has-new-data signal (e.g. the user opened the tab)."""
        self.has_new_data = False

    def reset(self) -> None:
        """Forget the baseline so the next fetch is treated as a first load."""
        self._snapshot = None
        self.has_new_data = False

    # ── internals ─────────────────────────────────────────

    async def _tick_loop(self, generation: int) -> None:
        while generation == self._generation:
            await asyncio.sleep(self.interval)
            if generation != self._generation:
                return
            if self._inflight is not None and not self._inflight.done():
                logger.debug("%s: fetch still in flight, skipping tick", self.name)
                continue
            task = asyncio.create_task(self._fetch_and_apply(generation, surface_errors=False))
            # nobody awaits a timer fetch
            task.add_done_callback(self._log_tick_failure)
            self._inflight = task

    def _log_tick_failure(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("%s: applying poll result failed", self.name, exc_info=error)

    async def _run(self, generation: int, surface_errors: bool) -> bool:
        if self._inflight is not None and not self._inflight.done():
            # a stale fetch from a previous generation; let it settle first
            await asyncio.gather(self._inflight, return_exceptions=True)
        self._inflight = asyncio.create_task(self._fetch_and_apply(generation, surface_errors))
        return await self._inflight

    async def _fetch_and_apply(self, generation: int, surface_errors: bool) -> bool:
        self.fetch_count += 1
        try:
            result = await self._fetch()
        except Exception:
            if surface_errors:
                raise
            logger.warning("%s: poll failed, will retry on next tick", self.name, exc_info=True)
            return False

        if generation != self._generation:
            logger.debug("%s: discarding stale fetch (generation %d != %d)", self.name, generation, self._generation)
            return False
        return self._apply(result)

    def _apply(self, result: T) -> bool:
        snapshot = self._serialize(result)
        if snapshot == self._snapshot:
            return False

        baseline = self._snapshot is None
        self._snapshot = snapshot
        self.items = result
        if self._on_update is not None:
            self._on_update(result)
        if not baseline:
            self.has_new_data = True
            self.change_count += 1
            logger.info("%s: new data", self.name)
            if self._on_new_data is not None:
                self._on_new_data(result)
        return True
