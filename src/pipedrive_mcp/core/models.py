from __future__ import annotations

from typing import Any, Dict, Literal, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidInputError

T = TypeVar("T", bound=BaseModel)

DealStatus = Literal["open", "won", "lost"]


class _Payload(BaseModel):
    # Unknown keys are passed through to the upstream untouched
    model_config = ConfigDict(extra="allow")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


# --- Input Models (request bodies / tool payloads) ---


class DealCreateInput(_Payload):
    title: str = Field(min_length=1)
    value: Optional[int | float] = None
    currency: Optional[str] = None
    person_id: Optional[int] = None
    org_id: Optional[int] = None
    stage_id: Optional[int] = None
    status: Optional[DealStatus] = None


class DealUpdateInput(_Payload):
    title: Optional[str] = Field(default=None, min_length=1)
    value: Optional[int | float] = None
    currency: Optional[str] = None
    person_id: Optional[int] = None
    org_id: Optional[int] = None
    stage_id: Optional[int] = None
    status: Optional[DealStatus] = None


BODY_MODELS: Dict[tuple[str, str], Type[_Payload]] = {
    ("deals", "create"): DealCreateInput,
    ("deals", "update"): DealUpdateInput,
}


def validate_body(model: Type[T], body: Any) -> T:
    """Validate ``body`` against ``model``; raise InvalidInputError on failure."""
    if not isinstance(body, Mapping):
        raise InvalidInputError("Request body must be a JSON object")
    try:
        return model.model_validate(dict(body))
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
            for err in exc.errors()
        )
        raise InvalidInputError(f"Invalid request body: {problems}") from exc


def prepare_body(resource: str, action: str, body: Any) -> Dict[str, Any]:
    """Validate a create/update body where a model exists, else require an object."""
    model = BODY_MODELS.get((resource, action))
    if model is not None:
        return validate_body(model, body).to_payload()
    if not isinstance(body, Mapping):
        raise InvalidInputError("Request body must be a JSON object")
    return dict(body)


__all__ = [
    "DealStatus",
    "DealCreateInput",
    "DealUpdateInput",
    "validate_body",
    "prepare_body",
]
