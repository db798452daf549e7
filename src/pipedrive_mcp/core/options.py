"""
Translate caller parameters (snake_case, loosely typed) into upstream options.

Only keys whose value is present are forwarded. Numeric fields accept ints or
numeric strings; anything that does not parse as an integer, and 0, is
treated as if it had not been supplied.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

log = logging.getLogger("pipedrive_mcp.core.options")

DEFAULT_LIMIT = 100
DEFAULT_START = 0

# external name -> upstream name
FIELD_MAP: Dict[str, str] = {
    "filter_id": "filterId",
    "user_id": "userId",
    "stage_id": "stageId",
    "deal_id": "dealId",
    "person_id": "personId",
    "org_id": "orgId",
    "pipeline_id": "pipelineId",
    "status": "status",
}

NUMERIC_FIELDS = frozenset(
    {"filter_id", "user_id", "stage_id", "deal_id", "person_id", "org_id", "pipeline_id"}
)


def parse_int(value: Any) -> Optional[int]:
    """Best-effort integer parse; returns None for absent or invalid input."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            return None
    return None


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def map_options(
    params: Optional[Mapping[str, Any]],
    fields: Optional[Iterable[str]] = None,
) -> Dict[str, Any]:
    """
    ``{"filter_id": "7", "status": "won"}`` -> ``{"filterId": 7, "status": "won"}``.

    ``fields`` restricts which external names are honoured; unknown or
    disallowed keys are ignored.
    """
    if not params:
        return {}
    allowed = set(FIELD_MAP) if fields is None else set(fields) & set(FIELD_MAP)

    opts: Dict[str, Any] = {}
    for name in FIELD_MAP:
        if name not in allowed or name not in params:
            continue
        value = params[name]
        if not _present(value):
            continue
        if name in NUMERIC_FIELDS:
            parsed = parse_int(value)
            if not parsed:
                log.debug("Ignoring absent or non-numeric %s=%r", name, value)
                continue
            value = parsed
        elif isinstance(value, str):
            value = value.strip()
        opts[FIELD_MAP[name]] = value
    return opts


def pagination_options(params: Optional[Mapping[str, Any]]) -> Dict[str, int]:
    """``limit`` (default 100, must be positive) and ``start`` (default 0)."""
    params = params or {}
    limit = parse_int(params.get("limit"))
    if limit is None or limit <= 0:
        limit = DEFAULT_LIMIT
    start = parse_int(params.get("start"))
    if start is None or start < 0:
        start = DEFAULT_START
    return {"limit": limit, "start": start}


def build_list_options(
    params: Optional[Mapping[str, Any]],
    fields: Iterable[str] = (),
    *,
    paginated: bool = True,
) -> Dict[str, Any]:
    opts: Dict[str, Any] = pagination_options(params) if paginated else {}
    opts.update(map_options(params, fields))
    return opts


__all__ = [
    "DEFAULT_LIMIT",
    "DEFAULT_START",
    "FIELD_MAP",
    "NUMERIC_FIELDS",
    "parse_int",
    "map_options",
    "pagination_options",
    "build_list_options",
]
