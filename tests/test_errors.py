"""Tests for the error taxonomy: default messages, cause hiding, translation constructors."""

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from recipe_catalog.core.errors import (
    AppError,
    DeserializationError,
    ErrorKind,
    GENERIC_MESSAGE,
)


@pytest.mark.parametrize(
    "kind,expected",
    (
        (ErrorKind.DB_ERROR, "An unexpected error has occurred"),
        (ErrorKind.NOT_FOUND, "The requested item was not found"),
        (ErrorKind.INVALID_FIELD, "Invalid field value provided"),
        (ErrorKind.IO_ERROR, "An unexpected error has occurred"),
    ),
)
def test_default_message_per_kind(kind, expected):
    err = AppError(kind, cause="internal detail")
    assert err.resolved_message == expected
    assert "internal detail" not in err.resolved_message


def test_explicit_message_wins_over_default():
    err = AppError(ErrorKind.NOT_FOUND, message="Recipe not found", cause="x")
    assert err.resolved_message == "Recipe not found"
    assert str(err) == "Recipe not found"


def test_to_dict_carries_one_kind_and_resolved_message():
    err = AppError.not_found(cause="no recipe titled 'Waffles'")
    assert err.to_dict() == {
        "message": "The requested item was not found",
        "extensions": {"kind": "NotFoundError"},
    }


def test_from_db_keeps_driver_text_as_cause_only():
    err = AppError.from_db(ServerSelectionTimeoutError("localhost:27017: connection refused"))
    assert err.kind is ErrorKind.DB_ERROR
    assert "connection refused" in err.cause
    assert err.resolved_message == GENERIC_MESSAGE


def test_from_decode_folds_into_db_error():
    err = AppError.from_decode(DeserializationError("title: Field required"))
    assert err.kind is ErrorKind.DB_ERROR
    assert err.cause == "title: Field required"
    assert err.to_dict()["extensions"]["kind"] == "DbError"


def test_from_io():
    err = AppError.from_io(FileNotFoundError(2, "No such file or directory", "data/a.json"))
    assert err.kind is ErrorKind.IO_ERROR
    assert "a.json" in err.cause
    assert err.resolved_message == GENERIC_MESSAGE


def test_invalid_field_with_message():
    err = AppError.invalid_field("Unknown field 'calories' on type Recipe")
    assert err.kind is ErrorKind.INVALID_FIELD
    assert err.resolved_message == "Unknown field 'calories' on type Recipe"
