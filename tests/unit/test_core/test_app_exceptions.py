"""Tests for the application exception hierarchy."""

from __future__ import annotations

import pytest

from flag_service.core.exceptions import (
    AppException,
    ConflictException,
    NotFoundException,
    default_title,
)
from flag_service.features.featureflags.service import FlagAlreadyExistsError, FlagNotFoundError


@pytest.mark.parametrize(
    ("exc_class", "status_code", "type_"),
    [
        (NotFoundException, 404, "not-found"),
        (ConflictException, 409, "conflict"),
    ],
)
def test_subclass_defaults(exc_class: type[AppException], status_code: int, type_: str) -> None:
    exc = exc_class("something went wrong")

    assert isinstance(exc, AppException)
    assert exc.status_code == status_code
    assert exc.type == type_
    assert exc.detail == "something went wrong"
    assert str(exc) == "something went wrong"
    assert exc.extra == {}


def test_app_exception_default_title() -> None:
    exc = AppException(status_code=409, detail="taken")

    assert exc.title == "Conflict"
    assert exc.type == "about:blank"
    assert default_title(503) == "Service Unavailable"
    assert default_title(418) == "Error"


def test_flag_errors_carry_key() -> None:
    missing = FlagNotFoundError("checkout")
    taken = FlagAlreadyExistsError("checkout")

    assert (missing.status_code, missing.type, missing.extra) == (404, "flag-not-found", {"key": "checkout"})
    assert (taken.status_code, taken.type, taken.extra) == (409, "flag-exists", {"key": "checkout"})
    assert "checkout" in missing.detail
