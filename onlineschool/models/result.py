"""
Result<T> Pattern for unified error handling.

Every backend call in this package returns a Result instead of raising,
so each page-level caller decides how to surface a failure (inline
message, alert, or empty list). Failures carry an ErrorKind so callers
can tell a dropped connection from a rejected transition.
"""

from dataclasses import dataclass
from typing import Optional, Generic, TypeVar, Callable
from enum import Enum


T = TypeVar('T')
U = TypeVar('U')


class ResultStatus(Enum):
    """Status of a Result."""
    SUCCESS = "success"
    FAILURE = "failure"


class ErrorKind(Enum):
    """
    Failure categories.

    TRANSPORT: connection refused, timeout, unreadable response body
    VALIDATION: rejected before sending, or HTTP 400 from the server
    BUSINESS_RULE: the server refused the action (409/422 or other 4xx)
    AUTH: missing or rejected credentials (401/403)
    NOT_FOUND: the resource does not exist (404)
    SERVER: the backend failed (5xx)
    """
    TRANSPORT = "transport"
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    SERVER = "server"


@dataclass
class Result(Generic[T]):
    """
    Unified result wrapper for operations that may succeed or fail.

    Attributes:
        status: Result status (SUCCESS or FAILURE)
        value: The result value if successful (None if failure)
        error: The exception that caused failure (None if success)
        message: Message describing the result. For server rejections this
            is the backend's ``error`` text, unchanged.
        kind: Failure category (None on success)
        status_code: HTTP status code when the failure came from a response

    Examples:
        >>> result = Result.success([1, 2], "Loaded 2 lessons")
        >>> result.is_success
        True

        >>> result = Result.failure(
        ...     "Lesson already completed",
        ...     kind=ErrorKind.BUSINESS_RULE,
        ...     status_code=409
        ... )
        >>> result.message
        'Lesson already completed'
    """

    status: ResultStatus
    value: Optional[T] = None
    error: Optional[Exception] = None
    message: Optional[str] = None
    kind: Optional[ErrorKind] = None
    status_code: Optional[int] = None

    @property
    def is_success(self) -> bool:
        """Check if the result represents success."""
        return self.status == ResultStatus.SUCCESS

    @property
    def is_failure(self) -> bool:
        """Check if the result represents failure."""
        return self.status == ResultStatus.FAILURE

    @classmethod
    def success(cls, value: T, message: Optional[str] = None) -> 'Result[T]':
        """
        Create a successful result.

        Args:
            value: The result value
            message: Optional success message

        Returns:
            Result instance with SUCCESS status
        """
        return cls(
            status=ResultStatus.SUCCESS,
            value=value,
            message=message
        )

    @classmethod
    def failure(
        cls,
        message: str,
        error: Optional[Exception] = None,
        kind: Optional[ErrorKind] = None,
        status_code: Optional[int] = None
    ) -> 'Result[T]':
        """
        Create a failure result.

        Args:
            message: Error message describing the failure
            error: Optional exception that caused the failure
            kind: Failure category (defaults to TRANSPORT when an
                exception is given, VALIDATION otherwise)
            status_code: HTTP status code, if any

        Returns:
            Result instance with FAILURE status
        """
        if kind is None:
            kind = ErrorKind.TRANSPORT if error is not None else ErrorKind.VALIDATION

        return cls(
            status=ResultStatus.FAILURE,
            message=message,
            error=error,
            kind=kind,
            status_code=status_code
        )

    def unwrap(self) -> T:
        """
        Unwrap the result value.

        Raises:
            ValueError: If the result is a failure
        """
        if self.is_failure:
            raise ValueError(
                f"Cannot unwrap failure result: {self.message}"
            )
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Return the value if successful, otherwise ``default``."""
        return self.value if self.is_success else default

    def map(self, func: Callable[[T], U]) -> 'Result[U]':
        """
        Map a function over the success value.

        A failure is passed through with its kind and status code intact.
        An exception raised by ``func`` becomes a VALIDATION failure, since
        it means the payload did not have the expected shape.

        Examples:
            >>> Result.success({"id": 3}).map(lambda d: d["id"]).value
            3
        """
        if self.is_failure:
            return Result.failure(
                self.message,
                self.error,
                kind=self.kind,
                status_code=self.status_code
            )

        try:
            new_value = func(self.value)
            return Result.success(new_value, self.message)
        except Exception as e:
            return Result.failure(
                f"Unexpected response format: {e}",
                e,
                kind=ErrorKind.VALIDATION
            )
