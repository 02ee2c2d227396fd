"""Uniform success/failure response envelope."""

from __future__ import annotations

from datetime import datetime
from typing import Generic
from typing import TypeVar

from pydantic import Field
from pydantic import model_validator

from faultline.schemas.error import ErrorResponse
from faultline.schemas.error import WireModel
from faultline.schemas.error import utc_now

T = TypeVar("T")

DEFAULT_SUCCESS_MESSAGE = "Operation completed successfully"


class ApiResponse(WireModel, Generic[T]):
    """Top-level API response envelope.

    ``success`` is false exactly when ``error_code`` is set; on failure ``data``
    holds the ``ErrorResponse``. A success envelope always carries ``data``,
    null when the operation has no result.
    """

    success: bool
    message: str
    data: T | None = None
    error_code: str | None = None
    path: str
    timestamp: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def _check_error_code_matches_outcome(self) -> ApiResponse[T]:
        if self.success and self.error_code is not None:
            raise ValueError("successful responses must not carry an error code")
        if not self.success and self.error_code is None:
            raise ValueError("failed responses must carry an error code")
        return self

    def _keeps_null(self, key: str) -> bool:
        return self.success and key == "data"

    @classmethod
    def ok(cls, data: T, *, path: str, message: str = DEFAULT_SUCCESS_MESSAGE) -> ApiResponse[T]:
        """Build a success envelope."""
        return cls(success=True, message=message, data=data, path=path)

    @classmethod
    def failure(cls, error: ErrorResponse, *, message: str | None = None) -> ApiResponse[ErrorResponse]:
        """Build a failure envelope sharing the error's code, path and timestamp."""
        return ApiResponse[ErrorResponse](
            success=False,
            message=message or error.message,
            data=error,
            error_code=error.error_code,
            path=error.path,
            timestamp=error.timestamp,
        )
