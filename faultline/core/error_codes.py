"""Closed registry of error codes exposed to API consumers.

Codes are part of the public contract: once published, a code keeps its
meaning forever. New codes go into the band matching their broad cause.
"""

from __future__ import annotations

from enum import Enum
from enum import unique
from types import MappingProxyType
from typing import Mapping

from fastapi import status


class ErrorBand(str, Enum):
    GENERAL = "general"
    VALIDATION = "validation"
    BUSINESS = "business"
    DATA = "data"
    AUTH = "auth"
    EXTERNAL = "external"


_BANDS_BY_DIGIT: dict[str, ErrorBand] = {
    "1": ErrorBand.GENERAL,
    "2": ErrorBand.VALIDATION,
    "3": ErrorBand.BUSINESS,
    "4": ErrorBand.DATA,
    "5": ErrorBand.AUTH,
    "6": ErrorBand.EXTERNAL,
}


@unique
class ErrorCode(Enum):
    """Stable error identifiers with default message and wire status."""

    # General (1xxx)
    INTERNAL_SERVER_ERROR = ("ERR_1000", "Internal server error occurred", status.HTTP_500_INTERNAL_SERVER_ERROR)
    BAD_REQUEST = ("ERR_1001", "Bad request", status.HTTP_400_BAD_REQUEST)
    UNAUTHORIZED = ("ERR_1002", "Unauthorized access", status.HTTP_401_UNAUTHORIZED)
    FORBIDDEN = ("ERR_1003", "Access forbidden", status.HTTP_403_FORBIDDEN)
    NOT_FOUND = ("ERR_1004", "Resource not found", status.HTTP_404_NOT_FOUND)
    METHOD_NOT_ALLOWED = ("ERR_1005", "Method not allowed", status.HTTP_405_METHOD_NOT_ALLOWED)
    CONFLICT = ("ERR_1006", "Resource conflict", status.HTTP_409_CONFLICT)
    UNSUPPORTED_MEDIA_TYPE = ("ERR_1007", "Unsupported media type", status.HTTP_415_UNSUPPORTED_MEDIA_TYPE)
    TOO_MANY_REQUESTS = ("ERR_1008", "Too many requests", status.HTTP_429_TOO_MANY_REQUESTS)
    SERVICE_UNAVAILABLE = ("ERR_1009", "Service unavailable", status.HTTP_503_SERVICE_UNAVAILABLE)

    # Validation (2xxx)
    VALIDATION_ERROR = ("ERR_2000", "Validation error", status.HTTP_400_BAD_REQUEST)
    INVALID_INPUT = ("ERR_2001", "Invalid input provided", status.HTTP_400_BAD_REQUEST)
    MISSING_REQUIRED_FIELD = ("ERR_2002", "Required field is missing", status.HTTP_400_BAD_REQUEST)
    INVALID_FORMAT = ("ERR_2003", "Invalid format", status.HTTP_400_BAD_REQUEST)
    INVALID_DATE_RANGE = ("ERR_2004", "Invalid date range", status.HTTP_400_BAD_REQUEST)
    INVALID_EMAIL = ("ERR_2005", "Invalid email format", status.HTTP_400_BAD_REQUEST)
    INVALID_PHONE = ("ERR_2006", "Invalid phone number", status.HTTP_400_BAD_REQUEST)

    # Business rules (3xxx)
    BUSINESS_ERROR = ("ERR_3000", "Business logic error", status.HTTP_400_BAD_REQUEST)
    DUPLICATE_ENTRY = ("ERR_3001", "Duplicate entry found", status.HTTP_409_CONFLICT)
    INSUFFICIENT_BALANCE = ("ERR_3002", "Insufficient balance", status.HTTP_400_BAD_REQUEST)
    OPERATION_NOT_ALLOWED = ("ERR_3003", "Operation not allowed", status.HTTP_403_FORBIDDEN)
    RESOURCE_LOCKED = ("ERR_3004", "Resource is locked", status.HTTP_423_LOCKED)
    QUOTA_EXCEEDED = ("ERR_3005", "Quota exceeded", status.HTTP_429_TOO_MANY_REQUESTS)

    # Data and persistence (4xxx)
    DATA_NOT_FOUND = ("ERR_4000", "Data not found", status.HTTP_404_NOT_FOUND)
    DATA_INTEGRITY_VIOLATION = ("ERR_4001", "Data integrity violation", status.HTTP_409_CONFLICT)
    DATABASE_ERROR = ("ERR_4002", "Database error occurred", status.HTTP_500_INTERNAL_SERVER_ERROR)

    # Authentication and authorization (5xxx)
    INVALID_CREDENTIALS = ("ERR_5000", "Invalid credentials", status.HTTP_401_UNAUTHORIZED)
    TOKEN_EXPIRED = ("ERR_5001", "Token has expired", status.HTTP_401_UNAUTHORIZED)
    TOKEN_INVALID = ("ERR_5002", "Invalid token", status.HTTP_401_UNAUTHORIZED)
    INSUFFICIENT_PERMISSIONS = ("ERR_5003", "Insufficient permissions", status.HTTP_403_FORBIDDEN)
    ACCOUNT_LOCKED = ("ERR_5004", "Account is locked", status.HTTP_403_FORBIDDEN)
    ACCOUNT_DISABLED = ("ERR_5005", "Account is disabled", status.HTTP_403_FORBIDDEN)

    # External dependencies (6xxx)
    EXTERNAL_SERVICE_ERROR = ("ERR_6000", "External service error", status.HTTP_502_BAD_GATEWAY)
    EXTERNAL_SERVICE_TIMEOUT = ("ERR_6001", "External service timeout", status.HTTP_504_GATEWAY_TIMEOUT)
    EXTERNAL_SERVICE_UNAVAILABLE = ("ERR_6002", "External service unavailable", status.HTTP_503_SERVICE_UNAVAILABLE)

    def __init__(self, code: str, message: str, status_code: int) -> None:
        self.code = code
        self.message = message
        self.status = status_code

    @property
    def band(self) -> ErrorBand:
        """Advisory band derived from the first digit of the numeric part."""
        return _BANDS_BY_DIGIT[self.code.removeprefix("ERR_")[0]]


_BY_CODE: Mapping[str, ErrorCode] = MappingProxyType({member.code: member for member in ErrorCode})

# Framework-raised HTTP statuses that have a dedicated general-band code.
_BY_HTTP_STATUS: Mapping[int, ErrorCode] = MappingProxyType(
    {
        status.HTTP_400_BAD_REQUEST: ErrorCode.BAD_REQUEST,
        status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
        status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
        status.HTTP_405_METHOD_NOT_ALLOWED: ErrorCode.METHOD_NOT_ALLOWED,
        status.HTTP_409_CONFLICT: ErrorCode.CONFLICT,
        status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: ErrorCode.UNSUPPORTED_MEDIA_TYPE,
        status.HTTP_429_TOO_MANY_REQUESTS: ErrorCode.TOO_MANY_REQUESTS,
        status.HTTP_503_SERVICE_UNAVAILABLE: ErrorCode.SERVICE_UNAVAILABLE,
    }
)


def lookup(code: str) -> ErrorCode | None:
    """Return the registered error code for a stable identifier, if any."""
    return _BY_CODE.get(code)


def all_codes(band: ErrorBand | None = None) -> list[ErrorCode]:
    """List registered codes in declaration order, optionally for one band."""
    return [member for member in ErrorCode if band is None or member.band is band]


def for_status(status_code: int) -> ErrorCode:
    """Resolve the general-band code for an HTTP status raised by the framework."""
    mapped = _BY_HTTP_STATUS.get(status_code)
    if mapped is not None:
        return mapped
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return ErrorCode.INTERNAL_SERVER_ERROR
    return ErrorCode.BAD_REQUEST
