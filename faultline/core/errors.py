"""Exception handler registration for the API boundary.

Every failure reaching the boundary goes through ``translate_exception`` so
that clients always receive the same envelope shape.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from faultline.core.config import DEFAULT_EXPOSE_DETAILS
from faultline.core.config import get_fault_settings
from faultline.core.faults import Fault
from faultline.core.translation import Translation
from faultline.core.translation import translate_exception

logger = logging.getLogger(__name__)


def error_response(request: Request, exc: BaseException) -> JSONResponse:
    """Translate a failure raised while serving ``request`` into a JSON response."""
    translation = translate_exception(
        exc,
        path=request.url.path,
        method=request.method,
        expose_details=expose_details(),
    )
    return to_json_response(translation)


def expose_details() -> bool:
    """Return whether Fault details reach the wire, or the default when settings fail to load."""
    try:
        return get_fault_settings().expose_details
    except ValueError:
        logger.error("Invalid fault settings, using expose_details=%s", DEFAULT_EXPOSE_DETAILS, exc_info=True)
        return DEFAULT_EXPOSE_DETAILS


def to_json_response(translation: Translation) -> JSONResponse:
    return JSONResponse(
        status_code=translation.status_code,
        content=translation.content(),
        headers=dict(translation.headers) or None,
    )


async def fault_handler(request: Request, exc: Fault) -> JSONResponse:
    """Return business faults with their own code and status."""
    return error_response(request, exc)


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Split FastAPI request validation errors into their failure categories."""
    return error_response(request, exc)


async def model_validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Report model validation raised inside a handler as field errors."""
    return error_response(request, exc)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Normalize routing and HTTP exceptions (404, 405, ...) to the envelope."""
    return error_response(request, exc)


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Hide persistence errors behind the data-band codes."""
    return error_response(request, exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Avoid leaking internal exceptions while keeping response shape stable."""
    return error_response(request, exc)


def register_error_handlers(app: FastAPI) -> None:
    """Attach all failure translation handlers to a FastAPI app instance."""

    app.add_exception_handler(Fault, fault_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ValidationError, model_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
