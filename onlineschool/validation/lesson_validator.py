"""
Lesson history row validator.

Checks the shape of rows returned by the lesson-history endpoint before
they are turned into LessonHistoryItem objects.
"""

from typing import Any, Dict

from .validators import Validator, ValidationResult
from ..models.lesson import LessonStatus
from ..utils.formatting import parse_iso


class LessonHistoryValidator(Validator):
    """
    Validator for lesson history rows.

    An unknown status or a payout on a lesson that is not COMPLETED is a
    warning: the row still loads, it just offers no transitions or shows
    a payout the client cannot explain.

    Examples:
        >>> validator = LessonHistoryValidator()
        >>> result = validator.validate({
        ...     "lesson_id": 7,
        ...     "student_name": "Aziza Karimova",
        ...     "start_time": "2026-02-20T12:45:00Z",
        ...     "end_time": "2026-02-20T13:35:00Z",
        ...     "status": "PENDING",
        ...     "payout_status": "PENDING",
        ...     "payout_amount_uzs": 0
        ... })
        >>> result.is_valid
        True
    """

    VALID_PAYOUT_STATUSES = ["PENDING", "PAID"]

    REQUIRED_FIELDS = [
        "lesson_id",
        "student_name",
        "start_time",
        "status",
    ]

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        result = ValidationResult(is_valid=True)

        if not isinstance(data, dict):
            return result.add_error(f"Lesson row must be an object, got {type(data).__name__}")

        for error in self.validate_required_fields(data, self.REQUIRED_FIELDS):
            result.add_error(error)

        if not result.is_valid:
            return result

        lesson_id = data["lesson_id"]
        if isinstance(lesson_id, bool) or not isinstance(lesson_id, int):
            result.add_error(f"lesson_id must be an integer, got {lesson_id!r}")

        error = self.validate_iso_date(data["start_time"], "start_time")
        if error:
            result.add_error(error)

        end_time = data.get("end_time")
        if end_time is not None:
            error = self.validate_iso_date(end_time, "end_time")
            if error:
                result.add_error(error)
            else:
                start_dt = parse_iso(data["start_time"])
                end_dt = parse_iso(end_time)
                if start_dt and end_dt and end_dt < start_dt:
                    result.add_warning(
                        f"Lesson #{lesson_id} ends before it starts"
                    )

        status = data["status"]
        if not isinstance(status, str) or not status:
            result.add_error(f"Invalid status: {status!r}")
        elif LessonStatus.parse(status) is None:
            result.add_warning(f"Unknown status: {status}")

        payout_status = data.get("payout_status")
        if payout_status is not None and payout_status not in self.VALID_PAYOUT_STATUSES:
            result.add_error(
                f"Invalid payout_status: {payout_status} "
                f"(must be one of: {', '.join(self.VALID_PAYOUT_STATUSES)})"
            )

        teacher_rate = data.get("teacher_rate_uzs")
        if teacher_rate is not None:
            error = self.validate_non_negative_number(teacher_rate, "teacher_rate_uzs")
            if error:
                result.add_error(error)

        payout_amount = data.get("payout_amount_uzs")
        if payout_amount is not None:
            error = self.validate_non_negative_number(payout_amount, "payout_amount_uzs")
            if error:
                result.add_error(error)
            elif self.as_number(payout_amount) > 0 and status != LessonStatus.COMPLETED.value:
                result.add_warning(
                    f"Lesson #{lesson_id} has a payout but status is {status}"
                )

        return result
