"""
Unit tests for Result<T> pattern.
"""

import pytest

from onlineschool.models.result import ErrorKind, Result, ResultStatus


class TestResult:
    """Test cases for Result class."""

    def test_success_creation(self):
        """Test creating a successful result."""
        result = Result.success(42, "Operation completed")

        assert result.is_success
        assert not result.is_failure
        assert result.status == ResultStatus.SUCCESS
        assert result.value == 42
        assert result.message == "Operation completed"
        assert result.error is None
        assert result.kind is None

    def test_failure_creation(self):
        """Test creating a failure result."""
        error = ValueError("Invalid input")
        result = Result.failure("Operation failed", error)

        assert result.is_failure
        assert not result.is_success
        assert result.status == ResultStatus.FAILURE
        assert result.value is None
        assert result.message == "Operation failed"
        assert result.error == error

    def test_failure_kind_defaults(self):
        """An exception implies TRANSPORT, no exception implies VALIDATION."""
        assert Result.failure("boom", ConnectionError()).kind == ErrorKind.TRANSPORT
        assert Result.failure("Select a lesson").kind == ErrorKind.VALIDATION

    def test_failure_with_explicit_kind(self):
        result = Result.failure(
            "Lesson already completed",
            kind=ErrorKind.BUSINESS_RULE,
            status_code=409
        )

        assert result.kind == ErrorKind.BUSINESS_RULE
        assert result.status_code == 409

    def test_unwrap_success(self):
        """Test unwrapping successful result."""
        assert Result.success("data").unwrap() == "data"

    def test_unwrap_failure_raises(self):
        """Test unwrapping failure raises exception."""
        result = Result.failure("Error occurred")

        with pytest.raises(ValueError, match="Cannot unwrap failure result"):
            result.unwrap()

    def test_unwrap_or(self):
        assert Result.success(42).unwrap_or(0) == 42
        assert Result.failure("Error").unwrap_or(0) == 0

    def test_map_success(self):
        """Test mapping over successful result."""
        result = Result.success({"id": 3}, "ok")
        mapped = result.map(lambda d: d["id"])

        assert mapped.is_success
        assert mapped.value == 3
        assert mapped.message == "ok"

    def test_map_failure_keeps_kind_and_code(self):
        """Test mapping passes a failure through unchanged."""
        result = Result.failure("Not found", kind=ErrorKind.NOT_FOUND, status_code=404)
        mapped = result.map(lambda x: x * 2)

        assert mapped.is_failure
        assert mapped.message == "Not found"
        assert mapped.kind == ErrorKind.NOT_FOUND
        assert mapped.status_code == 404

    def test_map_with_exception(self):
        """A mapping error means the payload had the wrong shape."""
        result = Result.success({})
        mapped = result.map(lambda d: d["id"])

        assert mapped.is_failure
        assert mapped.kind == ErrorKind.VALIDATION
        assert "Unexpected response format" in mapped.message
        assert isinstance(mapped.error, KeyError)
