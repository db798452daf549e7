from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Optional

LOG_EXTRA_FIELDS = (
    "request_id",
    "method",
    "path",
    "status",
    "duration_ms",
    "operation",
    "resource",
    "resource_id",
    "tool",
    "uri",
)

FALLBACK_LOG_DIR = Path.home() / "pipedrive-mcp-logs"

log = logging.getLogger("pipedrive_mcp.process")


class LogfmtFormatter(logging.Formatter):
    """Small logfmt-style formatter that tolerates missing extras."""

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - trivial
        kv: list[str] = [
            f"ts={self.formatTime(record, '%Y-%m-%dT%H:%M:%S')}",
            f"level={record.levelname.lower()}",
            f"logger={record.name}",
        ]

        msg = record.getMessage()
        if msg:
            kv.append(f"event={self._fmt_val(msg)}")

        for key in LOG_EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is None:
                continue
            kv.append(f"{key}={self._fmt_val(val)}")

        if record.exc_info and record.exc_info[0] is not None:
            kv.append(f"exc_type={record.exc_info[0].__name__}")

        return " ".join(kv)

    @staticmethod
    def _fmt_val(val: Any) -> str:
        if isinstance(val, (int, float, bool)):
            return str(val)
        s = str(val)
        if " " in s or "=" in s:
            s = '"' + s.replace('"', '\\"') + '"'
        return s


def _resolve_log_dir(log_dir: str | Path | None) -> Optional[Path]:
    """Create the log directory, falling back to ~/pipedrive-mcp-logs."""
    for candidate in (Path(log_dir) if log_dir else None, FALLBACK_LOG_DIR):
        if candidate is None:
            continue
        try:
            candidate.mkdir(parents=True, exist_ok=True)
            return candidate
        except OSError as exc:
            sys.stderr.write(f"Cannot create log directory {candidate}: {exc}\n")
    return None


def setup_logging(
    level: str | None = "INFO", *, log_dir: str | Path | None = None
) -> None:
    """
    Initialize root logging with logfmt output.

    Everything goes to stderr (stdout carries the stdio protocol). When
    ``log_dir`` is given, ``error.log`` (errors only) and ``all.log`` are
    appended there as well.
    """

    root = logging.getLogger()
    # Avoid duplicate handlers if called twice
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    formatter = LogfmtFormatter()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root.addHandler(handler)

    if log_dir is not None:
        directory = _resolve_log_dir(log_dir)
        if directory is not None:
            error_file = logging.FileHandler(directory / "error.log", encoding="utf-8")
            error_file.setLevel(logging.ERROR)
            error_file.setFormatter(formatter)
            root.addHandler(error_file)

            all_file = logging.FileHandler(directory / "all.log", encoding="utf-8")
            all_file.setFormatter(formatter)
            root.addHandler(all_file)

    root.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))


def _log_uncaught(exc_type, exc, tb) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc, tb)
        return
    log.critical("Uncaught exception: %s", exc, exc_info=(exc_type, exc, tb))
    sys.__excepthook__(exc_type, exc, tb)


def _log_unhandled_task_error(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    exc = context.get("exception")
    message = context.get("message", "Unhandled exception in event loop")
    if exc is not None:
        log.error("Unhandled rejection: %s", exc, exc_info=exc)
    else:
        log.error("Unhandled rejection: %s", message)


def install_process_handlers(loop: asyncio.AbstractEventLoop | None = None) -> None:
    """
    Uncaught exceptions are logged and terminate the process; exceptions that
    escape background tasks are logged and the loop keeps running.
    """
    sys.excepthook = _log_uncaught
    if loop is None:
        loop = asyncio.get_running_loop()
    loop.set_exception_handler(_log_unhandled_task_error)


__all__ = [
    "setup_logging",
    "install_process_handlers",
    "LogfmtFormatter",
    "LOG_EXTRA_FIELDS",
]
