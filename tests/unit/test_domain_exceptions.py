"""Tests for domain exceptions (error_code, message, details)."""

from fireeats.domain.exceptions import (
    DataIntegrityException,
    FireEatsException,
    IndexOutOfRangeException,
    ResourceNotFoundException,
    StoreNotConfiguredException,
    TransactionConflictException,
    TransactionFailedException,
    ValidationException,
)
from fireeats.infrastructure.exceptions import StoreUnavailableError, StoreWriteError


def test_fireeats_exception_default_error_code() -> None:
    """Base FireEatsException uses class name as error_code when not provided."""
    exc = FireEatsException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "FireEatsException"
    assert exc.details == {}


def test_fireeats_exception_to_dict() -> None:
    exc = FireEatsException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception() -> None:
    """ValidationException sets VALIDATION_ERROR and optional field in details."""
    exc = ValidationException("Invalid rating", field="rating")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "rating"}
    assert ValidationException("Invalid").details == {}


def test_resource_not_found_exception() -> None:
    exc = ResourceNotFoundException("restaurant", "r1")
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.message == "restaurant not found: r1"
    assert exc.details == {"resource_type": "restaurant", "resource_id": "r1"}


def test_index_out_of_range_is_index_error() -> None:
    exc = IndexOutOfRangeException(3, 2)
    assert isinstance(exc, IndexError)
    assert exc.error_code == "INDEX_OUT_OF_RANGE"
    assert exc.details == {"index": 3, "count": 2}


def test_data_integrity_exception_message() -> None:
    exc = DataIntegrityException("restaurants/r1")
    assert exc.message == "Unable to write to restaurant at path: restaurants/r1"
    assert exc.error_code == "DATA_INTEGRITY_ERROR"
    assert exc.details["path"] == "restaurants/r1"


def test_transaction_exceptions() -> None:
    assert TransactionConflictException("restaurants/r1").details == {"path": "restaurants/r1"}
    assert TransactionConflictException().details == {}
    failed = TransactionFailedException("gave up", attempts=5)
    assert failed.error_code == "TRANSACTION_FAILED"
    assert failed.details == {"attempts": 5}


def test_store_not_configured_exception() -> None:
    assert StoreNotConfiguredException().error_code == "SERVICE_UNAVAILABLE"


def test_store_errors_are_fireeats_exceptions() -> None:
    write = StoreWriteError("restaurants/r1", "denied")
    assert isinstance(write, FireEatsException)
    assert write.error_code == "STORE_WRITE_ERROR"
    unavailable = StoreUnavailableError("watch", "timeout")
    assert unavailable.details == {"operation": "watch", "reason": "timeout"}


def test_error_codes_map_to_http_statuses() -> None:
    """Integrity errors are conflicts; exhausted transactions and store outages are 503."""
    from fireeats.core.exception_handlers import status_for_error_code

    assert status_for_error_code(DataIntegrityException("restaurants/r1").error_code) == 409
    assert status_for_error_code(TransactionFailedException("gave up").error_code) == 503
    assert status_for_error_code(StoreWriteError("p", "r").error_code) == 503
    assert status_for_error_code(ResourceNotFoundException("restaurant", "x").error_code) == 404
    assert status_for_error_code("SOMETHING_ELSE") == 400
