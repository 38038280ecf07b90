from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from sigscrub.core.config import Settings
from sigscrub.core.processor import ContentProcessor
from sigscrub.core.schemas import ReplacementOutcome, RunSummary

logger = logging.getLogger(__name__)


@dataclass
class DispatchContext:
    settings: Settings
    processor: ContentProcessor
    summary: RunSummary


def file_extension(path: Path) -> str:
    """Last suffix without the dot, case preserved. ``""`` when there is none."""
    return path.suffix[1:]


async def dispatch(path: Path, context: DispatchContext) -> ReplacementOutcome | None:
    """
    Filter *path* by extension and run the processor on it.

    Runs inside the caller's admission slot, so the blocking rewrite (done in
    a worker thread) counts against the concurrency bound.
    """
    summary = context.summary
    summary.files_seen += 1
    if file_extension(path) not in context.settings.search_extensions:
        return None

    summary.files_matched += 1
    logger.info("Processing started: %s ...", path)

    outcome = await asyncio.to_thread(context.processor.process, path)
    if outcome.ok:
        summary.succeeded += 1
        logger.info("%s processed successfully.", path)
    else:
        summary.failed += 1
        hint = " The file may not be Shift_JIS or UTF-8 encoded." if outcome.kind == "decode_failure" else ""
        logger.error("%s was not processed (%s).%s Reason: %s", path, outcome.kind, hint, outcome.reason)
    return outcome
