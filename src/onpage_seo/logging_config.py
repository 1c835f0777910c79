"""Logging setup for the onpage-seo command line tool."""

import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# HTTP and completion clients log every request at INFO
QUIET_LOGGERS = ('httpx', 'httpcore', 'openai', 'anthropic')


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: str = DEFAULT_FORMAT,
    quiet_loggers: Iterable[str] = QUIET_LOGGERS,
) -> None:
    """Configure root logging for an analysis run.

    Console output goes to stderr so that ``--json`` reports on stdout stay
    machine-readable.

    Args:
        level: Log level name; unknown names fall back to INFO
        log_file: Optional file that receives the same records
        format_string: Record format
        quiet_loggers: Library loggers capped at WARNING
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=format_string,
        handlers=handlers,
        force=True,
    )

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)
