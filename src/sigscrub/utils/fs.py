from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable

from sigscrub.core.limiter import ConcurrencyLimiter

logger = logging.getLogger(__name__)

UnitHandler = Callable[[Path, Any], Awaitable[Any]]


@dataclass(frozen=True)
class DirectoryRecord:
    path: str


class DirectoryWalker:
    """
    Depth-first walk driven by an explicit LIFO stack.

    Directories are listed one at a time by the caller (``pop`` then
    ``traverse``); files are handed to the limiter as they are found.
    Symlinked directories are followed, but each canonical path is queued
    once, so link cycles terminate.
    """

    def __init__(self, root: str | os.PathLike[str], limiter: ConcurrencyLimiter, *, drain_each_directory: bool = False):
        self.limiter = limiter
        self.drain_each_directory = drain_each_directory
        self.revisits = 0
        self._stack: list[DirectoryRecord] = []
        self._seen: set[str] = set()
        self.push(root)

    def __len__(self) -> int:
        return len(self._stack)

    def push(self, path: str | os.PathLike[str]) -> bool:
        real = os.path.realpath(path)
        if real in self._seen:
            self.revisits += 1
            logger.warning("Skipping %s: %s was already queued", path, real)
            return False
        self._seen.add(real)
        self._stack.append(DirectoryRecord(os.fspath(path)))
        return True

    def pop(self) -> DirectoryRecord | None:
        if not self._stack:
            return None
        return self._stack.pop()

    async def traverse(self, record: DirectoryRecord, handler: UnitHandler, context: Any) -> None:
        """
        List *record*'s immediate children. Raises ``OSError`` if the directory
        can't be read; whatever was admitted before the error keeps running.
        """
        with os.scandir(record.path) as entries:
            for entry in entries:
                if entry.is_dir():
                    self.push(entry.path)
                elif entry.is_file():
                    await self.limiter.admit(handler, Path(entry.path), context)

        if self.drain_each_directory:
            await self.limiter.drain()
