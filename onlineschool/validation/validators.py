"""
Validation framework with Strategy pattern.

This module provides:
- Abstract Validator interface
- ValidationResult for consistent validation reporting
- Field checks shared by the payload validators
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional


ISO_DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}')


@dataclass
class ValidationResult:
    """
    Result of data validation.

    Warnings never make a result invalid.

    Attributes:
        is_valid: Whether validation passed
        errors: List of error messages
        warnings: List of warning messages (non-fatal)
    """

    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> 'ValidationResult':
        """Add an error message and mark the result invalid."""
        self.errors.append(message)
        self.is_valid = False
        return self

    def add_warning(self, message: str) -> 'ValidationResult':
        self.warnings.append(message)
        return self

    def merge(self, other: 'ValidationResult', prefix: str = "") -> 'ValidationResult':
        """
        Fold another result into this one.

        Args:
            other: Result to merge
            prefix: Prepended to each merged message, e.g. "Question 2: "
        """
        for error in other.errors:
            self.add_error(f"{prefix}{error}")
        for warning in other.warnings:
            self.add_warning(f"{prefix}{warning}")
        return self

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def get_summary(self) -> str:
        """
        Get validation summary.

        Returns:
            Human-readable summary of validation results
        """
        if self.is_valid and not self.has_warnings:
            return "Validation passed"

        parts = []

        if self.has_errors:
            parts.append(f"Errors ({len(self.errors)}):")
            for error in self.errors:
                parts.append(f"  - {error}")

        if self.has_warnings:
            parts.append(f"Warnings ({len(self.warnings)}):")
            for warning in self.warnings:
                parts.append(f"  - {warning}")

        return "\n".join(parts)


class Validator(ABC):
    """
    Abstract base class for validators.

    Subclasses implement validate() for one payload shape and reuse the
    field checks below.
    """

    @abstractmethod
    def validate(self, data: Any) -> ValidationResult:
        """
        Validate data.

        Args:
            data: Data to validate

        Returns:
            ValidationResult with errors and warnings
        """
        pass

    def validate_required_fields(
        self,
        data: dict,
        required_fields: List[str]
    ) -> List[str]:
        """Return one error per missing or None field."""
        errors = []
        for name in required_fields:
            if name not in data or data[name] is None:
                errors.append(f"Missing required field: {name}")
        return errors

    def validate_iso_date(
        self,
        value: Any,
        field_name: str = "date"
    ) -> Optional[str]:
        """
        Validate that a value starts with an ISO date (YYYY-MM-DD).

        Full timestamps are accepted; only the date prefix is checked.
        """
        if not isinstance(value, str) or not ISO_DATE_PATTERN.match(value):
            return f"Invalid {field_name} format: {value} (expected YYYY-MM-DD)"
        return None

    def validate_positive_number(
        self,
        value: Any,
        field_name: str
    ) -> Optional[str]:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return f"{field_name} must be a number, got {type(value).__name__}"

        if value <= 0:
            return f"{field_name} must be positive, got {value}"

        return None

    @staticmethod
    def as_number(value: Any) -> Optional[float]:
        """Numeric value of a number or numeric string; None otherwise."""
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return value
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return None
        return None

    def validate_non_negative_number(
        self,
        value: Any,
        field_name: str
    ) -> Optional[str]:
        """Numeric strings such as "90000.00" are accepted."""
        number = self.as_number(value)
        if number is None:
            return f"{field_name} must be a number, got {value!r}"

        if number < 0:
            return f"{field_name} must not be negative, got {value}"

        return None

    def validate_string_length(
        self,
        value: Any,
        field_name: str,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None
    ) -> Optional[str]:
        """
        Validate string length after stripping whitespace.

        Returns:
            Error message if invalid, None if valid
        """
        if not isinstance(value, str):
            return f"{field_name} must be a string, got {type(value).__name__}"

        length = len(value.strip())

        if min_length is not None and length < min_length:
            if min_length == 1:
                return f"{field_name} must not be empty"
            return f"{field_name} must be at least {min_length} characters, got {length}"

        if max_length is not None and length > max_length:
            return f"{field_name} must be at most {max_length} characters, got {length}"

        return None
