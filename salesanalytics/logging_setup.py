"""Log file setup and a per-request logger that tags lines with a session id."""

from __future__ import annotations

import logging
import os
import sys
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

LOGGER_NAME = "salesanalytics"

_LEVELS = {"INFO": logging.INFO, "WARN": logging.WARNING, "ERROR": logging.ERROR}
_MARKER = "_salesanalytics_file_handler"


def setup_logger(log_dir="./log"):
    """Send package log output to a timestamped file in ``log_dir``.

    The directory is created when missing. Any file handler installed by an
    earlier call is replaced. The new handler is returned so it can be closed.
    """
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"logfile_{datetime.now():%Y%m%d_%H%M%S}.log"

    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(filename)s:%(lineno)d: %(message)s",
            datefmt="%Y/%m/%d %H:%M:%S",
        )
    )
    setattr(handler, _MARKER, True)

    logger = logging.getLogger(LOGGER_NAME)
    for old in [h for h in logger.handlers if getattr(h, _MARKER, False)]:
        logger.removeHandler(old)
        old.close()
    logger.setLevel(logging.INFO)
    logger.addHandler(handler)
    return handler


def _sprint(args) -> str:
    """Join values, spacing two neighbours only when neither is a string."""
    pieces = []
    previous = None
    for position, value in enumerate(args):
        if position and not isinstance(value, str) and not isinstance(previous, str):
            pieces.append(" ")
        pieces.append(str(value))
        previous = value
    return "".join(pieces)


@dataclass
class RequestLogger:
    """Logger whose lines carry a session id, a reference and the caller."""

    sid: str = field(default_factory=lambda: uuid.uuid4().hex)
    reference: str = ""
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger(LOGGER_NAME), repr=False
    )

    def _log(self, level: str, args) -> str:
        if not self.sid:
            return ""
        frame = sys._getframe(2)
        code = frame.f_code
        source = Path(code.co_filename)
        file_short = os.path.join(source.parent.name, source.name)
        func_name = f"{source.stem}.{code.co_qualname}"
        message = _sprint(args).strip("[]")
        text = (
            f"[{level}] @@ {self.sid} @@ ({self.reference}) @@ {file_short} "
            f"@@ {func_name} @@ ln {frame.f_lineno} @@ {message}"
        )
        self.logger.log(_LEVELS[level], text, stacklevel=3)
        return text

    def info(self, *args):
        """Log at INFO level; return the line written, or "" when disabled."""
        return self._log("INFO", args)

    def warn(self, *args):
        """Log at WARNING level; return the line written, or "" when disabled."""
        return self._log("WARN", args)

    def error(self, *args):
        """Log at ERROR level; return the line written, or "" when disabled."""
        return self._log("ERROR", args)