"""
Shared helpers for flattening Pipedrive list responses.

Paginated list endpoints may nest their items one level deeper
(``{"data": {"data": [...]}}``) while plain and legacy endpoints return a bare
array under ``data``. Callers only ever see the flat item list.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class NormalizedCollection:
    items: List[Dict[str, Any]] = field(default_factory=list)
    empty: bool = True
    pagination: Optional[Dict[str, Any]] = None

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


def _pagination_hint(*containers: Any) -> Optional[Dict[str, Any]]:
    for container in containers:
        if not isinstance(container, dict):
            continue
        additional = container.get("additional_data")
        if not isinstance(additional, dict):
            continue
        pagination = additional.get("pagination")
        if isinstance(pagination, dict):
            return pagination
        if "next_cursor" in additional:
            return {"next_cursor": additional.get("next_cursor")}
    return None


def _items(seq: List[Any]) -> List[Dict[str, Any]]:
    return [item for item in seq if isinstance(item, dict)]


def normalize(raw: Any) -> NormalizedCollection:
    """
    Extract the item list from a list response. Never raises.

    Priority: ``data.data`` when it is a list, then ``data`` when it is a list,
    otherwise an empty collection flagged ``empty=True``.
    """
    data = raw.get("data") if isinstance(raw, dict) else None

    if isinstance(data, dict) and isinstance(data.get("data"), list):
        items = _items(data["data"])
        return NormalizedCollection(
            items=items, empty=not items, pagination=_pagination_hint(data, raw)
        )

    if isinstance(data, list):
        items = _items(data)
        return NormalizedCollection(
            items=items, empty=not items, pagination=_pagination_hint(raw)
        )

    return NormalizedCollection(items=[], empty=True, pagination=_pagination_hint(raw))


def is_shape_mismatch(raw: Any) -> bool:
    """True when ``raw`` carries a non-null ``data`` that holds no item list."""
    if not isinstance(raw, dict) or raw.get("data") is None:
        return False
    data = raw["data"]
    if isinstance(data, list):
        return False
    return not (isinstance(data, dict) and isinstance(data.get("data"), list))


def single_item(raw: Any) -> Optional[Dict[str, Any]]:
    """Return ``data`` of a single-item response, or None when absent."""
    if not isinstance(raw, dict):
        return None
    data = raw.get("data")
    if isinstance(data, dict) and data:
        return data
    return None


__all__ = ["NormalizedCollection", "normalize", "is_shape_mismatch", "single_item"]
