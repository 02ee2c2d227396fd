"""Mapping of any observed failure to the wire envelope and HTTP status.

``classify`` reduces an exception to one variant of ``Failure``; ``translate``
maps every variant to a ``Translation``. Translation never raises and always
records the failure on the module logger, which is the diagnostic channel.
"""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from http import HTTPStatus
import logging
from typing import Any
from typing import Union

from fastapi import status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from faultline.core.error_codes import ErrorCode
from faultline.core.error_codes import for_status
from faultline.core.faults import Fault
from faultline.schemas.envelope import ApiResponse
from faultline.schemas.error import ErrorResponse
from faultline.schemas.error import FieldError
from faultline.schemas.error import utc_now

logger = logging.getLogger(__name__)

VALIDATION_FAILED_MESSAGE = "Validation failed"
MALFORMED_BODY_MESSAGE = "Invalid request body format"
MISSING_BODY_REASON = "Required request body is missing"
MISSING_PARAMETER_MESSAGE = "Missing required parameter"
INVALID_PARAMETER_MESSAGE = "Invalid parameter type"
ENDPOINT_NOT_FOUND_MESSAGE = "Endpoint not found"
INTERNAL_ERROR_MESSAGE = "Internal server error"
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"

_PARAMETER_LOCATIONS = frozenset({"query", "path", "header", "cookie"})
_LOCATION_PREFIXES = _PARAMETER_LOCATIONS | {"body"}


@dataclass(frozen=True)
class BusinessFailure:
    error: Fault


@dataclass(frozen=True)
class ConstraintViolations:
    error: Exception
    violations: tuple[FieldError, ...]


@dataclass(frozen=True)
class MalformedBody:
    error: Exception
    reason: str


@dataclass(frozen=True)
class MissingParameter:
    error: Exception
    name: str


@dataclass(frozen=True)
class InvalidParameter:
    error: Exception
    name: str
    value: Any = None


@dataclass(frozen=True)
class UnsupportedMethod:
    error: Exception
    method: str
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RouteNotFound:
    error: Exception
    detail: str | None = None


@dataclass(frozen=True)
class HTTPFailure:
    """Framework HTTP error with a status outside the dedicated categories."""

    error: Exception
    status_code: int
    detail: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class DataFailure:
    error: SQLAlchemyError
    integrity: bool


@dataclass(frozen=True)
class UnexpectedFailure:
    error: BaseException


Failure = Union[
    BusinessFailure,
    ConstraintViolations,
    MalformedBody,
    MissingParameter,
    InvalidParameter,
    UnsupportedMethod,
    RouteNotFound,
    HTTPFailure,
    DataFailure,
    UnexpectedFailure,
]


@dataclass(frozen=True)
class Translation:
    """Wire status, envelope and extra response headers for one failure."""

    status_code: int
    body: ApiResponse[ErrorResponse]
    headers: Mapping[str, str] = field(default_factory=dict)

    def content(self) -> dict[str, Any]:
        return self.body.model_dump(mode="json", by_alias=True)


def classify(exc: BaseException, *, method: str | None = None) -> Failure:
    """Reduce an exception observed at the boundary to its failure category."""
    if isinstance(exc, Fault):
        return BusinessFailure(error=exc)
    if isinstance(exc, RequestValidationError):
        return _classify_request_validation(exc)
    if isinstance(exc, ValidationError):
        return ConstraintViolations(error=exc, violations=_field_errors(exc.errors()))
    if isinstance(exc, StarletteHTTPException):
        return _classify_http_exception(exc, method=method)
    if isinstance(exc, SQLAlchemyError):
        return DataFailure(error=exc, integrity=isinstance(exc, IntegrityError))
    return UnexpectedFailure(error=exc)


def translate(failure: Failure, *, path: str, expose_details: bool = True) -> Translation:
    """Build the failure envelope and wire status for a classified failure."""
    _record(failure, path)

    if isinstance(failure, BusinessFailure):
        code = failure.error.error_code
        details = failure.error.render_details() if expose_details else None
        return _translation(code, path=path, message=code.message, details=details)

    if isinstance(failure, ConstraintViolations):
        return _translation(
            ErrorCode.VALIDATION_ERROR,
            path=path,
            message=VALIDATION_FAILED_MESSAGE,
            field_errors=list(failure.violations),
        )

    if isinstance(failure, MalformedBody):
        return _translation(
            ErrorCode.INVALID_FORMAT,
            path=path,
            message=MALFORMED_BODY_MESSAGE,
            details=failure.reason,
        )

    if isinstance(failure, MissingParameter):
        return _translation(
            ErrorCode.MISSING_REQUIRED_FIELD,
            path=path,
            message=f"Required parameter '{failure.name}' is missing",
            summary=MISSING_PARAMETER_MESSAGE,
        )

    if isinstance(failure, InvalidParameter):
        return _translation(
            ErrorCode.INVALID_INPUT,
            path=path,
            message=f"Invalid value '{failure.value}' for parameter '{failure.name}'",
            summary=INVALID_PARAMETER_MESSAGE,
        )

    if isinstance(failure, UnsupportedMethod):
        return _translation(
            ErrorCode.METHOD_NOT_ALLOWED,
            path=path,
            message=f"Method '{failure.method}' is not supported",
            summary=ErrorCode.METHOD_NOT_ALLOWED.message,
            headers=failure.headers,
        )

    if isinstance(failure, RouteNotFound):
        return _translation(
            ErrorCode.NOT_FOUND,
            path=path,
            message=ENDPOINT_NOT_FOUND_MESSAGE,
            details=failure.detail,
        )

    if isinstance(failure, HTTPFailure):
        code = for_status(failure.status_code)
        return _translation(
            code,
            path=path,
            message=code.message,
            details=failure.detail,
            status_code=failure.status_code,
            headers=failure.headers,
        )

    if isinstance(failure, DataFailure):
        code = ErrorCode.DATA_INTEGRITY_VIOLATION if failure.integrity else ErrorCode.DATABASE_ERROR
        return _translation(code, path=path, message=code.message)

    return _translation(
        ErrorCode.INTERNAL_SERVER_ERROR,
        path=path,
        message=UNEXPECTED_ERROR_MESSAGE,
        summary=INTERNAL_ERROR_MESSAGE,
    )


def translate_exception(
    exc: BaseException,
    *,
    path: str,
    method: str | None = None,
    expose_details: bool = True,
) -> Translation:
    """Classify and translate in one step."""
    return translate(classify(exc, method=method), path=path, expose_details=expose_details)


def _translation(
    code: ErrorCode,
    *,
    path: str,
    message: str,
    summary: str | None = None,
    details: str | None = None,
    field_errors: list[FieldError] | None = None,
    status_code: int | None = None,
    headers: Mapping[str, str] | None = None,
) -> Translation:
    wire_status = status_code or code.status
    error = ErrorResponse(
        error_code=code.code,
        message=message,
        details=details,
        timestamp=utc_now(),
        path=path,
        status=wire_status,
        field_errors=field_errors,
    )
    return Translation(
        status_code=wire_status,
        body=ApiResponse.failure(error, message=summary or message),
        headers=dict(headers or {}),
    )


def _classify_request_validation(exc: RequestValidationError) -> Failure:
    issues = list(exc.errors())

    for issue in issues:
        location = tuple(issue.get("loc", ()))
        if issue.get("type") == "json_invalid":
            return MalformedBody(error=exc, reason=_json_error_reason(issue))
        if location == ("body",):
            reason = MISSING_BODY_REASON if issue.get("type") == "missing" else str(issue.get("msg", ""))
            return MalformedBody(error=exc, reason=reason)

    parameter_issues = [issue for issue in issues if _location_kind(issue) in _PARAMETER_LOCATIONS]
    for issue in parameter_issues:
        if issue.get("type") == "missing":
            return MissingParameter(error=exc, name=_format_location(issue.get("loc", ())))
    if parameter_issues:
        first = parameter_issues[0]
        return InvalidParameter(
            error=exc,
            name=_format_location(first.get("loc", ())),
            value=first.get("input"),
        )

    return ConstraintViolations(error=exc, violations=_field_errors(issues))


def _classify_http_exception(exc: StarletteHTTPException, *, method: str | None) -> Failure:
    headers = dict(exc.headers or {})
    detail = _custom_detail(exc)
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return UnsupportedMethod(error=exc, method=(method or "UNKNOWN").upper(), headers=headers)
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return RouteNotFound(error=exc, detail=detail)
    return HTTPFailure(error=exc, status_code=exc.status_code, detail=detail, headers=headers)


def _custom_detail(exc: StarletteHTTPException) -> str | None:
    """Return the exception detail unless it is the status's stock phrase."""
    if not isinstance(exc.detail, str) or not exc.detail:
        return None
    try:
        phrase = HTTPStatus(exc.status_code).phrase
    except ValueError:
        phrase = None
    return None if exc.detail == phrase else exc.detail


def _field_errors(issues: Sequence[Mapping[str, Any]]) -> tuple[FieldError, ...]:
    return tuple(
        FieldError(
            field=_format_location(issue.get("loc", ())),
            message=str(issue.get("msg", "Invalid value")),
            rejected_value=None if issue.get("type") == "missing" else _json_safe(issue.get("input")),
        )
        for issue in issues
    )


def _location_kind(issue: Mapping[str, Any]) -> str | None:
    location = issue.get("loc", ())
    if isinstance(location, (tuple, list)) and location:
        return str(location[0])
    return None


def _format_location(location: tuple[Any, ...] | list[Any] | Any) -> str:
    if not isinstance(location, (tuple, list)):
        return str(location)

    filtered = [str(part) for part in location if part not in _LOCATION_PREFIXES]
    if filtered:
        return ".".join(filtered)

    if not location:
        return "request"

    return str(location[0])


def _json_error_reason(issue: Mapping[str, Any]) -> str:
    context = issue.get("ctx") or {}
    reason = context.get("error") if isinstance(context, Mapping) else None
    return str(reason or issue.get("msg") or "JSON decode error")


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): _json_safe(item) for key, item in value.items()}
    return str(value)


def _record(failure: Failure, path: str) -> None:
    error = failure.error
    if isinstance(failure, UnexpectedFailure):
        logger.error("Unexpected failure at %s: %s", path, type(error).__name__, exc_info=error)
    elif isinstance(failure, DataFailure):
        logger.error("Database failure at %s: %s", path, error, exc_info=error)
    elif isinstance(failure, BusinessFailure):
        log = logger.error if failure.error.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.warning
        log(
            "Fault %s at %s: %s",
            failure.error.error_code.code,
            path,
            failure.error.render_details() or failure.error.message,
            exc_info=error,
        )
    else:
        logger.warning("%s at %s: %s", type(failure).__name__, path, error)
