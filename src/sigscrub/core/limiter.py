from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

MIN_CONCURRENT = 1
MAX_CONCURRENT = 255


class ConcurrencyLimiter:
    """
    Bounded admission for async units of work.

    ``admit`` suspends the caller while ``max_concurrent`` units are running and
    resumes as soon as any one of them finishes (completion order is whatever
    the loop delivers). A unit that raises is logged and counted; it never
    affects the others.
    """

    def __init__(self, max_concurrent: int):
        if not MIN_CONCURRENT <= max_concurrent <= MAX_CONCURRENT:
            raise ValueError(
                f"max_concurrent must be in [{MIN_CONCURRENT}, {MAX_CONCURRENT}], got {max_concurrent}"
            )
        self.max_concurrent = max_concurrent
        self.peak = 0
        self.faults = 0
        self._pending: set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        self._prune()
        return len(self._pending)

    def _prune(self) -> None:
        self._pending = {t for t in self._pending if not t.done()}

    async def _guard(self, fn: Callable[..., Awaitable[Any]], args: tuple) -> Any:
        try:
            return await fn(*args)
        except Exception:
            self.faults += 1
            target = args[0] if args else getattr(fn, "__name__", fn)
            logger.exception("Unit of work for %s failed", target)
            return None

    async def admit(self, fn: Callable[..., Awaitable[Any]], *args: Any) -> asyncio.Task:
        self._prune()
        while len(self._pending) >= self.max_concurrent:
            await asyncio.wait(self._pending, return_when=asyncio.FIRST_COMPLETED)
            self._prune()

        task = asyncio.create_task(self._guard(fn, args))
        self._pending.add(task)
        self.peak = max(self.peak, len(self._pending))
        return task

    async def drain(self) -> None:
        while self._pending:
            await asyncio.wait(self._pending)
            self._prune()
