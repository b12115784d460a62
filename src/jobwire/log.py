"""Logging setup shared by the server and client.

All jobwire loggers live below the ``jobwire`` logger, which owns the
handlers: one stream handler on stderr, plus a file handler when a log
directory is configured (``JOBWIRE_LOG_DIR``). The process id is part of
every record so the server and client logs can be told apart when they
share a terminal.

Job output never goes through logging; it is written to the client's sinks.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

ROOT = "jobwire"
FORMAT = "%(asctime)s %(levelname)s [%(name)s] >>> %(process)d <<< %(message)s"

_file_handler: Optional[logging.Handler] = None


def get_logger(name: str = ROOT) -> logging.Logger:
    root = logging.getLogger(ROOT)
    if not root.handlers:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter(FORMAT))
        root.addHandler(stream_handler)
        root.setLevel(logging.INFO)
        root.propagate = False
    if name == ROOT:
        return root
    if not name.startswith(ROOT + "."):
        name = ROOT + "." + name
    return logging.getLogger(name)


def configure(settings) -> logging.Logger:
    """Apply the level and optional log directory from *settings*."""
    global _file_handler

    root = get_logger()
    root.setLevel(settings.log_level)

    log_dir = getattr(settings, "log_dir", None)
    if log_dir and _file_handler is None:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        _file_handler = logging.FileHandler(path / "jobwire.log", encoding="utf-8")
        _file_handler.setFormatter(logging.Formatter(FORMAT))
        root.addHandler(_file_handler)

    return root


__all__ = ["get_logger", "configure"]
