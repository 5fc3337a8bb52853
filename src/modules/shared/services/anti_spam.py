from __future__ import annotations

import asyncio
import time
from typing import Dict, Hashable


class AntiSpamGuard:
    """
    Busy flag plus cooldown per key.

    Keys are admin user IDs, or shared names for operations that must not
    overlap between admins (a slug backfill, for one).
    """

    def __init__(self, cooldown_seconds: float = 2.0) -> None:
        self._cooldown = cooldown_seconds
        self._busy: set[Hashable] = set()
        self._last_action: Dict[Hashable, float] = {}
        self._lock = asyncio.Lock()

    async def try_acquire(self, key: Hashable, *, cooldown: bool = True) -> bool:
        now = time.monotonic()
        async with self._lock:
            last = self._last_action.get(key)
            too_soon = cooldown and last is not None and now - last < self._cooldown
            if key in self._busy or too_soon:
                # Rejected attempts restart the cooldown
                self._last_action[key] = now
                return False
            self._busy.add(key)
            self._last_action[key] = now
            return True

    async def release(self, key: Hashable) -> None:
        now = time.monotonic()
        async with self._lock:
            self._busy.discard(key)
            self._last_action[key] = now

    async def reset(self, key: Hashable) -> None:
        async with self._lock:
            self._busy.discard(key)
            self._last_action.pop(key, None)

    def is_busy(self, key: Hashable) -> bool:
        return key in self._busy
