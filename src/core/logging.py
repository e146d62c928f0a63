"""Logging setup shared by the API server and the CLI."""

import logging
import sys
from typing import TextIO

from src.core.config import Settings, get_config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers capped at WARNING regardless of the configured level.
QUIET_LOGGERS = ("urllib3", "PIL", "multipart")


def setup_logging(settings: Settings | None = None, stream: TextIO | None = None) -> None:
    """
    Configure application logging.

    Invariants:
    - The root logger level comes from settings.log_level (unknown names fall back to INFO).
    - Exactly one stream handler (stdout unless another stream is given) is attached; calling
      again replaces it instead of duplicating.
    """
    cfg = settings or get_config()
    level = logging.getLevelName(cfg.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    root = logging.getLogger()
    root.setLevel(level)
    # Remove existing handlers so we don't duplicate when called again
    for h in root.handlers[:]:
        root.removeHandler(h)

    console = logging.StreamHandler(stream or sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
