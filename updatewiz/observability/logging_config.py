"""
Process-wide logging for update-wiz.

The CLI and the launcher call ``setup_logging`` once; modules just use
``logging.getLogger(__name__)``. Under the TUI there is no console handler
because Textual draws over the terminal, so set UPDATEWIZ_LOG_FILE to keep
a record of the run.
"""

import logging
import sys
from typing import Optional

_CONSOLE_FMT = "%(message)s"
_CONSOLE_DETAIL_FMT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_CONSOLE_DATEFMT = "%H:%M:%S"

_FILE_FMT = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Only shown at DEBUG.
_NOISY_LOGGERS = ("asyncio", "textual", "markdown_it")


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[str] = None,
    log_file_level: Optional[str] = None,
    console: bool = True,
) -> None:
    """Install handlers on the root logger, replacing any already there.

    ``log_file_level`` defaults to ``level``; the root logger runs at the
    lower of the two so the file can be more verbose than stderr.
    """
    console_level = _parse_level(level)
    root = logging.getLogger()
    root.handlers.clear()

    if console:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(console_level)
        if console_level < logging.WARNING:
            handler.setFormatter(logging.Formatter(_CONSOLE_DETAIL_FMT, datefmt=_CONSOLE_DATEFMT))
        else:
            handler.setFormatter(logging.Formatter(_CONSOLE_FMT))
        root.addHandler(handler)
    else:
        root.addHandler(logging.NullHandler())

    root_level = console_level
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        root_level = min(root_level, file_level)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(_FILE_FMT, datefmt=_FILE_DATEFMT))
        root.addHandler(file_handler)

    root.setLevel(root_level)

    if console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def _parse_level(level: Optional[str]) -> int:
    """Level name to number; anything unrecognised means WARNING."""
    numeric = getattr(logging, level.upper(), None) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
