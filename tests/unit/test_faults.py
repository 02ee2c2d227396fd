"""Unit tests for Fault construction and rendering."""

from __future__ import annotations

import pytest

from faultline.core.error_codes import ErrorCode
from faultline.core.faults import Fault


def test_fault_from_code_alone_uses_default_message() -> None:
    fault = Fault(ErrorCode.DATA_NOT_FOUND)

    assert fault.error_code is ErrorCode.DATA_NOT_FOUND
    assert fault.message == "Data not found"
    assert str(fault) == "Data not found"
    assert fault.details is None
    assert fault.params == ()
    assert fault.cause is None
    assert fault.status_code == 404


def test_details_never_replace_message() -> None:
    fault = Fault(ErrorCode.INSUFFICIENT_BALANCE, "Account 42 has 3.50 left")

    assert fault.message == "Insufficient balance"
    assert fault.details == "Account 42 has 3.50 left"
    assert fault.render_details() == "Account 42 has 3.50 left"


def test_params_are_interpolated_into_details() -> None:
    fault = Fault(ErrorCode.DUPLICATE_ENTRY, "User {0} already exists in {1}", "ada", "tenant-7")

    assert fault.params == ("ada", "tenant-7")
    assert fault.render_details() == "User ada already exists in tenant-7"


def test_mismatched_template_still_renders() -> None:
    fault = Fault(ErrorCode.DUPLICATE_ENTRY, "User {0} in {1}", "ada")

    assert fault.render_details() == "User {0} in {1} ada"


def test_cause_is_kept_for_the_causal_chain() -> None:
    original = TimeoutError("upstream took too long")

    fault = Fault(ErrorCode.EXTERNAL_SERVICE_TIMEOUT, cause=original)

    assert fault.cause is original
    assert fault.__cause__ is original
    assert fault.message == "External service timeout"


def test_raise_from_sets_cause() -> None:
    original = KeyError("missing")

    with pytest.raises(Fault) as exc_info:
        try:
            raise original
        except KeyError as exc:
            raise Fault(ErrorCode.DATA_NOT_FOUND, "Lookup failed") from exc

    assert exc_info.value.cause is original


def test_bare_message_maps_to_business_error() -> None:
    fault = Fault("Order cannot be cancelled after shipping")

    assert fault.error_code is ErrorCode.BUSINESS_ERROR
    assert fault.details == "Order cannot be cancelled after shipping"
    assert fault.message == "Business logic error"


def test_bare_message_accepts_cause() -> None:
    original = ValueError("bad state")

    fault = Fault("Order is in an invalid state", cause=original)

    assert fault.error_code is ErrorCode.BUSINESS_ERROR
    assert fault.cause is original


def test_bare_message_rejects_separate_details() -> None:
    with pytest.raises(TypeError):
        Fault("message", "details")


def test_exception_in_details_position_becomes_the_cause() -> None:
    original = TimeoutError("upstream took too long")

    fault = Fault(ErrorCode.EXTERNAL_SERVICE_ERROR, original)

    assert fault.cause is original
    assert fault.details is None
    assert fault.render_details() is None


def test_cause_cannot_be_given_twice() -> None:
    with pytest.raises(TypeError):
        Fault(ErrorCode.EXTERNAL_SERVICE_ERROR, TimeoutError("a"), cause=TimeoutError("b"))


@pytest.mark.parametrize("details", [42, {"order": 7}, ["a"]])
def test_non_text_details_are_rejected(details: object) -> None:
    with pytest.raises(TypeError):
        Fault(ErrorCode.BUSINESS_ERROR, details)


@pytest.mark.parametrize(
    ("template", "params", "expected"),
    [
        ("order {0.id} rejected", (5,), "order {0.id} rejected 5"),
        ("limit {0:d}", ("ten",), "limit {0:d} ten"),
        ("user {name}", ("ada",), "user {name} ada"),
    ],
)
def test_broken_templates_fall_back_to_raw_text(template: str, params: tuple, expected: str) -> None:
    fault = Fault(ErrorCode.BUSINESS_ERROR, template, *params)

    assert fault.render_details() == expected
