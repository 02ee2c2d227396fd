"""Precondition guards that raise a Fault when a business rule is violated."""

from __future__ import annotations

from collections.abc import Sized
import re
from typing import Any

from faultline.core.error_codes import ErrorCode
from faultline.core.faults import Fault

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
PHONE_PATTERN = re.compile(r"^[+]?[0-9]{10,15}$")
_PHONE_SEPARATORS = re.compile(r"[\s()-]")


def require_not_none(value: Any, message: str, code: ErrorCode = ErrorCode.VALIDATION_ERROR) -> None:
    if value is None:
        raise Fault(code, message)


def require_not_blank(value: str | None, message: str, code: ErrorCode = ErrorCode.VALIDATION_ERROR) -> None:
    if value is None or not value.strip():
        raise Fault(code, message)


def require_not_empty(value: Sized | None, message: str, code: ErrorCode = ErrorCode.VALIDATION_ERROR) -> None:
    """Reject ``None`` and empty collections or mappings."""
    if value is None or len(value) == 0:
        raise Fault(code, message)


def require_true(condition: bool, message: str, code: ErrorCode = ErrorCode.VALIDATION_ERROR) -> None:
    if not condition:
        raise Fault(code, message)


def require_false(condition: bool, message: str, code: ErrorCode = ErrorCode.VALIDATION_ERROR) -> None:
    if condition:
        raise Fault(code, message)


def require_equal(left: Any, right: Any, message: str, code: ErrorCode = ErrorCode.VALIDATION_ERROR) -> None:
    if left != right:
        raise Fault(code, message)


def require_in_range(
    value: int | float,
    minimum: int | float,
    maximum: int | float,
    message: str,
    code: ErrorCode = ErrorCode.VALIDATION_ERROR,
) -> None:
    """Inclusive on both ends."""
    if value < minimum or value > maximum:
        raise Fault(code, message)


def require_positive(value: int | float, message: str, code: ErrorCode = ErrorCode.VALIDATION_ERROR) -> None:
    if value <= 0:
        raise Fault(code, message)


def require_non_negative(value: int | float, message: str, code: ErrorCode = ErrorCode.VALIDATION_ERROR) -> None:
    if value < 0:
        raise Fault(code, message)


def is_valid_email(value: str | None) -> bool:
    return bool(value) and EMAIL_PATTERN.fullmatch(value) is not None


def is_valid_phone(value: str | None) -> bool:
    """Accept 10 to 15 digits with an optional leading ``+``; spaces, dashes and parentheses are ignored."""
    if not value:
        return False
    return PHONE_PATTERN.fullmatch(_PHONE_SEPARATORS.sub("", value)) is not None


def require_email(value: str | None, message: str) -> None:
    if not is_valid_email(value):
        raise Fault(ErrorCode.INVALID_EMAIL, message)


def require_phone(value: str | None, message: str) -> None:
    if not is_valid_phone(value):
        raise Fault(ErrorCode.INVALID_PHONE, message)
