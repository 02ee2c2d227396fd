"""Unit tests for failure classification and translation."""

from __future__ import annotations

from datetime import datetime
from datetime import timezone
import logging

import pytest
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from faultline.core.error_codes import ErrorCode
from faultline.core.faults import Fault
from faultline.core.translation import BusinessFailure
from faultline.core.translation import ConstraintViolations
from faultline.core.translation import DataFailure
from faultline.core.translation import HTTPFailure
from faultline.core.translation import InvalidParameter
from faultline.core.translation import MalformedBody
from faultline.core.translation import MissingParameter
from faultline.core.translation import RouteNotFound
from faultline.core.translation import UnexpectedFailure
from faultline.core.translation import UnsupportedMethod
from faultline.core.translation import classify
from faultline.core.translation import translate
from faultline.core.translation import translate_exception

PATH = "/api/v1/orders"


class _Order(BaseModel):
    name: str = Field(min_length=3)
    quantity: int = Field(gt=0)


def _model_validation_error() -> ValidationError:
    try:
        _Order(name="ab", quantity=0)
    except ValidationError as exc:
        return exc
    raise AssertionError("expected a validation error")


def _json_invalid() -> RequestValidationError:
    return RequestValidationError(
        [
            {
                "type": "json_invalid",
                "loc": ("body", 9),
                "msg": "JSON decode error",
                "input": {},
                "ctx": {"error": "Expecting value"},
            }
        ]
    )


def _missing_query(name: str) -> RequestValidationError:
    return RequestValidationError([{"type": "missing", "loc": ("query", name), "msg": "Field required", "input": None}])


def _bad_query(name: str, value: str) -> RequestValidationError:
    return RequestValidationError(
        [
            {
                "type": "int_parsing",
                "loc": ("query", name),
                "msg": "Input should be a valid integer, unable to parse string as an integer",
                "input": value,
            }
        ]
    )


def _body_violations() -> RequestValidationError:
    return RequestValidationError(
        [
            {"type": "string_too_short", "loc": ("body", "name"), "msg": "too short", "input": "ab"},
            {"type": "greater_than", "loc": ("body", "quantity"), "msg": "must be > 0", "input": 0},
            {"type": "missing", "loc": ("body", "email"), "msg": "Field required", "input": {"name": "ab"}},
        ]
    )


@pytest.mark.parametrize(
    ("exc", "expected_code", "expected_status"),
    [
        (Fault(ErrorCode.DUPLICATE_ENTRY, "dup"), ErrorCode.DUPLICATE_ENTRY, 409),
        (Fault(ErrorCode.TOKEN_EXPIRED), ErrorCode.TOKEN_EXPIRED, 401),
        (_body_violations(), ErrorCode.VALIDATION_ERROR, 400),
        (_model_validation_error(), ErrorCode.VALIDATION_ERROR, 400),
        (_json_invalid(), ErrorCode.INVALID_FORMAT, 400),
        (_missing_query("limit"), ErrorCode.MISSING_REQUIRED_FIELD, 400),
        (_bad_query("limit", "abc"), ErrorCode.INVALID_INPUT, 400),
        (StarletteHTTPException(status_code=405), ErrorCode.METHOD_NOT_ALLOWED, 405),
        (StarletteHTTPException(status_code=404), ErrorCode.NOT_FOUND, 404),
        (StarletteHTTPException(status_code=403, detail="No access"), ErrorCode.FORBIDDEN, 403),
        (IntegrityError("INSERT", {}, Exception("duplicate key")), ErrorCode.DATA_INTEGRITY_VIOLATION, 409),
        (OperationalError("SELECT", {}, Exception("connection refused")), ErrorCode.DATABASE_ERROR, 500),
        (RuntimeError("boom"), ErrorCode.INTERNAL_SERVER_ERROR, 500),
    ],
)
def test_every_failure_category_maps_to_its_code_and_status(
    exc: Exception,
    expected_code: ErrorCode,
    expected_status: int,
) -> None:
    translation = translate_exception(exc, path=PATH, method="GET")
    payload = translation.content()

    assert translation.status_code == expected_status
    assert payload["success"] is False
    assert payload["errorCode"] == expected_code.code
    assert payload["path"] == PATH
    assert payload["data"]["errorCode"] == expected_code.code
    assert payload["data"]["status"] == expected_status
    assert payload["data"]["path"] == PATH


@pytest.mark.parametrize(
    ("exc", "variant"),
    [
        (Fault(ErrorCode.CONFLICT), BusinessFailure),
        (_body_violations(), ConstraintViolations),
        (_model_validation_error(), ConstraintViolations),
        (_json_invalid(), MalformedBody),
        (_missing_query("limit"), MissingParameter),
        (_bad_query("limit", "x"), InvalidParameter),
        (StarletteHTTPException(status_code=405), UnsupportedMethod),
        (StarletteHTTPException(status_code=404), RouteNotFound),
        (StarletteHTTPException(status_code=429), HTTPFailure),
        (IntegrityError("INSERT", {}, Exception("dup")), DataFailure),
        (ZeroDivisionError(), UnexpectedFailure),
    ],
)
def test_classify_picks_one_variant(exc: Exception, variant: type) -> None:
    assert isinstance(classify(exc), variant)


def test_business_fault_uses_code_message_and_rendered_details() -> None:
    fault = Fault(ErrorCode.DUPLICATE_ENTRY, "User {0} already exists", "ada")

    payload = translate_exception(fault, path=PATH).content()

    assert payload["message"] == "Duplicate entry found"
    assert payload["data"]["message"] == "Duplicate entry found"
    assert payload["data"]["details"] == "User ada already exists"
    assert "fieldErrors" not in payload["data"]


def test_business_fault_details_can_be_withheld() -> None:
    fault = Fault(ErrorCode.DUPLICATE_ENTRY, "User ada already exists")

    payload = translate_exception(fault, path=PATH, expose_details=False).content()

    assert "details" not in payload["data"]


def test_unformattable_details_fall_back_to_raw_text() -> None:
    fault = Fault(ErrorCode.BUSINESS_ERROR, "order {0.id} rejected", 5)

    translation = translate_exception(fault, path=PATH)

    assert translation.status_code == 400
    assert translation.content()["data"]["details"] == "order {0.id} rejected 5"


def test_positional_cause_is_translated_without_details() -> None:
    cause = TimeoutError("boom")
    fault = Fault(ErrorCode.EXTERNAL_SERVICE_ERROR, cause)

    translation = translate_exception(fault, path=PATH)

    assert translation.status_code == 502
    payload = translation.content()
    assert payload["errorCode"] == "ERR_6000"
    assert "details" not in payload["data"]
    assert "boom" not in str(payload)


def test_all_body_violations_are_reported_with_rejected_values() -> None:
    payload = translate_exception(_body_violations(), path=PATH).content()

    field_errors = payload["data"]["fieldErrors"]
    assert payload["message"] == "Validation failed"
    assert len(field_errors) == 3
    by_field = {item["field"]: item for item in field_errors}
    assert by_field["name"]["rejectedValue"] == "ab"
    assert by_field["quantity"]["rejectedValue"] == 0
    assert "rejectedValue" not in by_field["email"]


def test_model_validation_error_reports_each_constraint() -> None:
    failure = classify(_model_validation_error())

    assert isinstance(failure, ConstraintViolations)
    assert {violation.field for violation in failure.violations} == {"name", "quantity"}
    assert {violation.rejected_value for violation in failure.violations} == {"ab", 0}


def test_malformed_body_reports_parser_reason() -> None:
    payload = translate_exception(_json_invalid(), path=PATH).content()

    assert payload["message"] == "Invalid request body format"
    assert payload["data"]["details"] == "Expecting value"


def test_missing_body_is_malformed() -> None:
    exc = RequestValidationError([{"type": "missing", "loc": ("body",), "msg": "Field required", "input": None}])

    payload = translate_exception(exc, path=PATH).content()

    assert payload["errorCode"] == ErrorCode.INVALID_FORMAT.code
    assert payload["data"]["details"] == "Required request body is missing"


def test_missing_parameter_names_the_parameter() -> None:
    payload = translate_exception(_missing_query("limit"), path=PATH).content()

    assert payload["message"] == "Missing required parameter"
    assert payload["data"]["message"] == "Required parameter 'limit' is missing"


def test_invalid_parameter_names_value_and_parameter() -> None:
    payload = translate_exception(_bad_query("limit", "abc"), path=PATH).content()

    assert payload["message"] == "Invalid parameter type"
    assert payload["data"]["message"] == "Invalid value 'abc' for parameter 'limit'"


def test_unsupported_method_keeps_allow_header() -> None:
    exc = StarletteHTTPException(status_code=405, headers={"Allow": "GET"})

    translation = translate_exception(exc, path=PATH, method="delete")

    assert translation.headers == {"Allow": "GET"}
    assert translation.content()["data"]["message"] == "Method 'DELETE' is not supported"
    assert translation.content()["message"] == "Method not allowed"


def test_route_not_found_uses_fixed_message() -> None:
    payload = translate_exception(StarletteHTTPException(status_code=404), path="/nope").content()

    assert payload["message"] == "Endpoint not found"
    assert "details" not in payload["data"]


def test_uncaught_failure_does_not_leak_its_message() -> None:
    translation = translate_exception(RuntimeError("password=hunter2"), path=PATH)
    payload = translation.content()

    assert payload["message"] == "Internal server error"
    assert payload["data"]["message"] == "An unexpected error occurred"
    assert "hunter2" not in str(payload)


def test_database_failure_does_not_leak_its_message() -> None:
    exc = OperationalError("SELECT secret_column FROM users", {}, Exception("connection refused"))

    payload = translate_exception(exc, path=PATH).content()

    assert "secret_column" not in str(payload)
    assert payload["message"] == ErrorCode.DATABASE_ERROR.message


def test_uncaught_failure_is_recorded_with_traceback(caplog: pytest.LogCaptureFixture) -> None:
    error = RuntimeError("password=hunter2")

    with caplog.at_level(logging.ERROR, logger="faultline.core.translation"):
        translate(UnexpectedFailure(error=error), path=PATH)

    records = [record for record in caplog.records if record.name == "faultline.core.translation"]
    assert records
    assert records[0].exc_info is not None
    assert records[0].exc_info[1] is error


def test_timestamp_is_translation_instant() -> None:
    before = datetime.now(timezone.utc)
    translation = translate_exception(Fault(ErrorCode.CONFLICT), path=PATH)
    after = datetime.now(timezone.utc)

    assert before <= translation.body.timestamp <= after
    assert translation.body.data is not None
    assert translation.body.data.timestamp == translation.body.timestamp
