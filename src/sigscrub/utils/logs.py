from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "sigscrub"
INFO_LOG = "replace.log"
ERROR_LOG = "replace_error.log"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


class _BelowError(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.ERROR


def setup_logging(log_dir: Path, level: int = logging.INFO) -> list[logging.Handler]:
    """
    Attach the two run logs to the package logger, truncating old ones.
    replace.log gets everything below ERROR, replace_error.log the rest.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)

    info = logging.FileHandler(log_dir / INFO_LOG, mode="w", encoding="utf-8")
    info.setLevel(level)
    info.addFilter(_BelowError())

    errors = logging.FileHandler(log_dir / ERROR_LOG, mode="w", encoding="utf-8")
    errors.setLevel(logging.ERROR)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for h in (info, errors):
        h.setFormatter(formatter)
        logger.addHandler(h)
    return [info, errors]


def close_logging(handlers: list[logging.Handler]) -> None:
    logger = logging.getLogger(LOGGER_NAME)
    for h in handlers:
        logger.removeHandler(h)
        h.close()
