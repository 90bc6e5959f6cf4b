# src/prioritizze/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path


class _ServiceOnlyFilter(logging.Filter):
    """Console shows every service record; other loggers only at ERROR and above."""

    def __init__(self, prefix: str = "prioritizze", foreign_level: int = logging.ERROR) -> None:
        super().__init__()
        self._prefix = prefix
        self._foreign_level = foreign_level

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == self._prefix or record.name.startswith(self._prefix + "."):
            return True
        return record.levelno >= self._foreign_level


def setup_logging(
    *,
    log_dir: str | Path = ".local/prioritizze",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure logging with:
    - Console handler: filtered, on stderr
    - File handler: full logs for debugging

    Call this ONCE, very early (before first logger.info).
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "prioritizze.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ServiceOnlyFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    logging.captureWarnings(True)

    # Request lines from httpx are noise at INFO, even in the file.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
