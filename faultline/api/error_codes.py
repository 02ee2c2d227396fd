"""Error-code catalog routes."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Request
from fastapi.responses import JSONResponse

from faultline.core.error_codes import ErrorBand
from faultline.core.error_codes import ErrorCode
from faultline.core.error_codes import all_codes
from faultline.core.error_codes import lookup
from faultline.core.faults import Fault
from faultline.core.result import Err
from faultline.core.result import Ok
from faultline.core.result import Result
from faultline.core.result import map_ok
from faultline.core.result import to_response
from faultline.schemas.envelope import ApiResponse
from faultline.schemas.error import ErrorResponse
from faultline.schemas.error_code import ErrorCodeEntry

router = APIRouter(prefix="/api/v1", tags=["error-codes"])


def find_error_code(code: str) -> Result[ErrorCode]:
    """Look up a published code, returning a data-not-found fault when unknown."""
    error_code = lookup(code)
    if error_code is None:
        return Err(Fault(ErrorCode.DATA_NOT_FOUND, "Error code '{0}' is not registered", code))
    return Ok(error_code)


@router.get("/error-codes", response_model=ApiResponse[list[ErrorCodeEntry]])
def list_error_codes_endpoint(request: Request, band: ErrorBand | None = None) -> ApiResponse[list[ErrorCodeEntry]]:
    """List published error codes, optionally restricted to one band."""
    entries = [ErrorCodeEntry.from_error_code(error_code) for error_code in all_codes(band)]
    return ApiResponse[list[ErrorCodeEntry]].ok(entries, path=request.url.path)


@router.get(
    "/error-codes/{code}",
    response_model=ApiResponse[ErrorCodeEntry],
    responses={404: {"model": ApiResponse[ErrorResponse]}},
)
def get_error_code_endpoint(code: str, request: Request) -> JSONResponse:
    """Get a single published error code."""
    result = map_ok(find_error_code(code), ErrorCodeEntry.from_error_code)
    return to_response(result, request)
