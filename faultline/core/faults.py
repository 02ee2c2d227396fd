"""Business-level failure raised by application code."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from faultline.core.error_codes import ErrorCode


class Fault(Exception):
    """Classified failure carrying a stable error code.

    The client-facing message is always the code's default message. ``details``
    is free text for diagnostics and the envelope's ``details`` field; it never
    replaces ``message``. ``params`` are interpolated into ``details`` with
    ``str.format`` when the details are rendered.

    Construct from a code alone, a code plus details (and optional params),
    a code plus a wrapped ``cause`` (by keyword or in place of ``details``),
    or a bare message which maps to ``ErrorCode.BUSINESS_ERROR``.
    """

    def __init__(
        self,
        error_code: ErrorCode | str,
        details: str | BaseException | None = None,
        *params: Any,
        cause: BaseException | None = None,
    ) -> None:
        if isinstance(details, BaseException):
            if cause is not None:
                raise TypeError("cause given both positionally and by keyword")
            cause, details = details, None
        elif details is not None and not isinstance(details, str):
            raise TypeError(f"details must be a string, got {type(details).__name__}")

        if isinstance(error_code, ErrorCode):
            code = error_code
        elif not isinstance(error_code, str):
            raise TypeError(f"expected an ErrorCode or a message, got {type(error_code).__name__}")
        else:
            if details is not None:
                raise TypeError("details are only accepted together with an ErrorCode")
            code = ErrorCode.BUSINESS_ERROR
            details = error_code

        super().__init__(code.message)
        self.error_code = code
        self.details = details
        self.params: tuple[Any, ...] = tuple(params)
        if cause is not None:
            self.__cause__ = cause

    @property
    def message(self) -> str:
        return self.error_code.message

    @property
    def status_code(self) -> int:
        return self.error_code.status

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__

    def render_details(self) -> str | None:
        """Return details with params interpolated, tolerating mismatched templates."""
        if self.details is None or not self.params:
            return self.details
        try:
            return self.details.format(*self.params)
        except (AttributeError, IndexError, KeyError, TypeError, ValueError):
            return f"{self.details} {_join(self.params)}"

    def __repr__(self) -> str:
        return f"Fault({self.error_code.name}, details={self.details!r})"


def _join(values: Sequence[Any]) -> str:
    return ", ".join(str(value) for value in values)
