"""Pipeline: walk the tree and rewrite matching files, returning a RunSummary."""

from __future__ import annotations

import logging
from pathlib import Path

from sigscrub.core.config import Settings
from sigscrub.core.dispatcher import DispatchContext, dispatch
from sigscrub.core.limiter import ConcurrencyLimiter
from sigscrub.core.processor import ContentProcessor, build_processor
from sigscrub.core.schemas import RunSummary
from sigscrub.utils.fs import DirectoryWalker

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT = 100


async def run_tree(
    root: Path,
    settings: Settings,
    *,
    max_concurrent: int = DEFAULT_MAX_CONCURRENT,
    drain_each_directory: bool = False,
    processor: ContentProcessor | None = None,
    limiter: ConcurrencyLimiter | None = None,
) -> RunSummary:
    """
    Drain the directory stack under *root*, one directory listing at a time.

    A directory that can't be listed is logged and skipped; everything else
    queued keeps going.
    """
    summary = RunSummary(root=str(root))
    limiter = limiter or ConcurrencyLimiter(max_concurrent)
    context = DispatchContext(
        settings=settings,
        processor=processor or build_processor(settings),
        summary=summary,
    )
    walker = DirectoryWalker(root, limiter, drain_each_directory=drain_each_directory)

    while True:
        record = walker.pop()
        if record is None:
            break
        try:
            await walker.traverse(record, dispatch, context)
            summary.dirs_listed += 1
        except OSError as e:
            summary.dirs_unreadable += 1
            logger.error("%s could not be listed. Reason: %s", record.path, e)

    await limiter.drain()

    summary.dirs_revisited = walker.revisits
    summary.faults = limiter.faults
    summary.peak_in_flight = limiter.peak
    return summary
