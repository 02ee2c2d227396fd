"""Pydantic schemas for the error-code catalog."""

from __future__ import annotations

from faultline.core.error_codes import ErrorBand
from faultline.core.error_codes import ErrorCode
from faultline.schemas.error import WireModel


class ErrorCodeEntry(WireModel):
    """One published error code."""

    name: str
    code: str
    message: str
    status: int
    band: ErrorBand

    @classmethod
    def from_error_code(cls, error_code: ErrorCode) -> ErrorCodeEntry:
        return cls(
            name=error_code.name,
            code=error_code.code,
            message=error_code.message,
            status=error_code.status,
            band=error_code.band,
        )
