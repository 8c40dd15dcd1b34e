"""
Periodic reachability check against the data store, for the "live" indicator.

Runs as its own asyncio task, independent of any request. Whoever starts it
must stop it; stop() cancels the task and waits for it to finish.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import Optional

from buddyguard.services.data_store import DataStore

logger = logging.getLogger(__name__)

LIVENESS_INTERVAL: float = float(os.getenv("LIVENESS_INTERVAL", "30"))


class LivenessMonitor:

    def __init__(self, store: DataStore, interval: float = LIVENESS_INTERVAL):
        self._store = store
        self.interval = interval
        self.is_live = False
        self.checked_at: Optional[float] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def check(self) -> bool:
        live = await asyncio.to_thread(self._store.ping_reachable)
        if live != self.is_live:
            logger.info("Data store is now %s", "reachable" if live else "unreachable")
        self.is_live = live
        self.checked_at = time.time()
        return live

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="store-liveness")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while True:
            try:
                await self.check()
            except Exception as e:
                # ping_reachable never raises; anything here is a bug, keep polling
                logger.exception("Liveness check crashed: %s", e)
                self.is_live = False
            await asyncio.sleep(self.interval)
