"""Error envelope schemas shared across API handlers."""

from __future__ import annotations

from datetime import datetime
from datetime import timezone
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import SerializerFunctionWrapHandler
from pydantic import model_serializer
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WireModel(BaseModel):
    """Base for wire models: camelCase names, unset optional fields omitted.

    Omission applies to this model's own fields only, so ``None`` values
    inside a caller's payload survive serialization. Subclasses override
    ``_keeps_null`` for fields that are emitted even when null.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_serializer(mode="wrap")
    def _omit_absent_fields(self, handler: SerializerFunctionWrapHandler):
        serialized = handler(self)
        return {key: value for key, value in serialized.items() if value is not None or self._keeps_null(key)}

    def _keeps_null(self, key: str) -> bool:
        return False


class FieldError(WireModel):
    """Single violated constraint on a named input."""

    field: str
    message: str
    rejected_value: Any = None


class ErrorResponse(WireModel):
    """Failure payload carried in the ``data`` field of a failed envelope."""

    error_code: str
    message: str
    details: str | None = None
    timestamp: datetime = Field(default_factory=utc_now)
    path: str
    status: int
    field_errors: list[FieldError] | None = None
    metadata: dict[str, Any] | None = None
