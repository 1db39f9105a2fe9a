"""
Homework payload validators.

Pre-checks for the authoring and assignment calls, so obviously
incomplete forms are rejected before a request is sent.
"""

from typing import Any, Dict

from .validators import Validator, ValidationResult
from ..models.homework import LEVELS, QuestionDraft


class HomeworkShellValidator(Validator):
    """
    Validator for phase one of authoring (title, description, level).

    Examples:
        >>> HomeworkShellValidator().validate(
        ...     {"title": "Past Simple", "description": "", "level": "A2"}
        ... ).is_valid
        True
    """

    MAX_TITLE_LENGTH = 200

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        result = ValidationResult(is_valid=True)

        error = self.validate_string_length(
            data.get("title"),
            "title",
            min_length=1,
            max_length=self.MAX_TITLE_LENGTH
        )
        if error:
            result.add_error(error)

        description = data.get("description")
        if description is not None and not isinstance(description, str):
            result.add_error("description must be a string")

        level = data.get("level")
        if level not in LEVELS:
            result.add_error(
                f"Invalid level: {level} (must be one of: {', '.join(LEVELS)})"
            )

        return result


class QuestionValidator(Validator):
    """
    Validator for a single question draft.

    At least two options with text are required. Any number of options
    may be flagged correct; zero correct options only warns, since the
    question then scores nothing.
    """

    MIN_OPTIONS = 2

    def validate(self, data: QuestionDraft) -> ValidationResult:
        result = ValidationResult(is_valid=True)

        error = self.validate_string_length(data.text, "question text", min_length=1)
        if error:
            result.add_error(error)

        error = self.validate_positive_number(data.points, "points")
        if error:
            result.add_error(error)

        if len(data.options) < self.MIN_OPTIONS:
            result.add_error(
                f"At least {self.MIN_OPTIONS} options are required, got {len(data.options)}"
            )

        for index, option in enumerate(data.options, 1):
            if not option.text or not option.text.strip():
                result.add_error(f"Option {index} text must not be empty")

        if data.options and data.correct_count == 0:
            result.add_warning("No option is marked correct; this question cannot be scored")

        return result


class AssignmentRequestValidator(Validator):
    """
    Validator for an assign call: lesson, homework and due date are all required.
    """

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        result = ValidationResult(is_valid=True)

        if not data.get("lesson_id"):
            result.add_error("Select a lesson")

        if not data.get("homework_id"):
            result.add_error("Select a homework")

        due_date = data.get("due_date")
        if not due_date:
            result.add_error("Set a due date")
        else:
            error = self.validate_iso_date(due_date, "due_date")
            if error:
                result.add_error(error)

        return result
