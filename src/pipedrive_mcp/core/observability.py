from __future__ import annotations

import logging
from typing import Any, Dict, Optional

# LogRecord attributes that `extra` may not overwrite
RESERVED_LOG_KEYS = frozenset(
    {
        "name",
        "msg",
        "message",
        "asctime",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
    }
)

_default_log = logging.getLogger("pipedrive_mcp.observability")


def _clean_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        k: v for k, v in fields.items() if k not in RESERVED_LOG_KEYS and v is not None
    }


def log_event(
    event: str,
    logger: Optional[logging.Logger] = None,
    *,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Emit ``event`` with ``fields`` attached as LogRecord extras."""
    (logger or _default_log).log(level, event, extra=_clean_fields(fields))


def log_upstream_failure(
    operation: str,
    exc: BaseException,
    *,
    resource: Optional[str] = None,
    resource_id: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Record an upstream failure with the identifiers involved."""
    log_event(
        f"Error {operation}: {exc}",
        logger,
        level=logging.ERROR,
        operation=operation,
        resource=resource,
        resource_id=resource_id,
    )


__all__ = ["log_event", "log_upstream_failure", "RESERVED_LOG_KEYS"]
