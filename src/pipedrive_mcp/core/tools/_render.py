"""
Shared helpers for turning OperationResults into tool text.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Optional

from pipedrive_mcp.core.errors import UpstreamError
from pipedrive_mcp.core.operations import OperationResult

log = logging.getLogger("pipedrive_mcp.core.tools")


def to_json_text(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


async def render_result(
    action: str,
    call: Awaitable[OperationResult],
    *,
    success_prefix: Optional[str] = None,
) -> str:
    """
    Await ``call`` and render it as text. Failures are rendered, never raised:
    ``Error <action>: <message>``.
    """
    try:
        result = await call
    except UpstreamError as exc:
        # already logged with context by the operation core
        return f"Error {action}: {exc}"
    except Exception as exc:
        log.warning("Error %s: %s", action, exc, extra={"tool": action})
        return f"Error {action}: {exc}"

    if not result.found:
        return result.message or "Not found"

    text = to_json_text(result.data)
    return f"{success_prefix}: {text}" if success_prefix else text
