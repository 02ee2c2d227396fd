"""Explicit success-or-fault return values.

Services may return ``Err(fault)`` instead of raising; the value travels up
unchanged and is converted once, at the API boundary, by ``to_response``
using the same translation as raised faults.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic
from typing import TypeVar
from typing import Union

from fastapi import Request
from fastapi.responses import JSONResponse

from faultline.core.errors import expose_details
from faultline.core.errors import to_json_response
from faultline.core.faults import Fault
from faultline.core.translation import BusinessFailure
from faultline.core.translation import translate
from faultline.schemas.envelope import DEFAULT_SUCCESS_MESSAGE
from faultline.schemas.envelope import ApiResponse

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    fault: Fault


Result = Union[Ok[T], Err]


def capture(operation: Callable[[], T]) -> Result[T]:
    """Run ``operation`` and turn a raised Fault into ``Err``.

    Other exceptions propagate; they are not business outcomes.
    """
    try:
        return Ok(operation())
    except Fault as fault:
        return Err(fault)


def map_ok(result: Result[T], fn: Callable[[T], U]) -> Result[U]:
    if isinstance(result, Ok):
        return Ok(fn(result.value))
    return result


def unwrap(result: Result[T]) -> T:
    """Return the success value or raise the carried fault."""
    if isinstance(result, Ok):
        return result.value
    raise result.fault


def to_response(
    result: Result[T],
    request: Request,
    *,
    message: str = DEFAULT_SUCCESS_MESSAGE,
    status_code: int = 200,
) -> JSONResponse:
    """Render a result as the success envelope or the translated failure."""
    if isinstance(result, Err):
        translation = translate(
            BusinessFailure(error=result.fault),
            path=request.url.path,
            expose_details=expose_details(),
        )
        return to_json_response(translation)

    envelope = ApiResponse.ok(result.value, path=request.url.path, message=message)
    return JSONResponse(status_code=status_code, content=envelope.model_dump(mode="json", by_alias=True))
