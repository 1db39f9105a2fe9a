"""
Lesson history data models.

This module provides the TypedDict for the raw lesson-history payload
returned by the backend and the dataclass the rest of the client works
with.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Literal, Optional, TypedDict


# Type alias for payout status values
PayoutStatus = Literal["PENDING", "PAID"]


class LessonStatus(str, Enum):
    """Lesson lifecycle states known to the client."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    STUDENT_ABSENT = "STUDENT_ABSENT"
    CANCELLED = "CANCELLED"

    @property
    def label(self) -> str:
        """Human-readable label, e.g. ``Student Absent``."""
        return STATUS_LABELS[self]

    @classmethod
    def parse(cls, value: str) -> Optional['LessonStatus']:
        """Return the matching member, or None for a status the client does not know."""
        try:
            return cls(value)
        except ValueError:
            return None


STATUS_LABELS = {
    LessonStatus.COMPLETED: "Completed",
    LessonStatus.STUDENT_ABSENT: "Student Absent",
    LessonStatus.CANCELLED: "Cancelled",
    LessonStatus.PENDING: "Pending",
    LessonStatus.CONFIRMED: "Confirmed",
}


def status_label(status: str) -> str:
    """
    Label for a raw status string.

    Unknown statuses are shown as-is.

    Examples:
        >>> status_label("STUDENT_ABSENT")
        'Student Absent'
        >>> status_label("RESCHEDULED")
        'RESCHEDULED'
    """
    parsed = LessonStatus.parse(status)
    return parsed.label if parsed else status


def parse_amount(value: Any) -> int:
    """
    Whole UZS from a number or a numeric string.

    Decimal fields arrive as strings such as "90000.00". Missing values
    count as 0.

    Raises:
        ValueError: If the value is not numeric

    Examples:
        >>> parse_amount("90000.00")
        90000
        >>> parse_amount(None)
        0
    """
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise ValueError(f"Not an amount: {value!r}")
    try:
        return round(float(value))
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"Not an amount: {value!r}")


class LessonHistoryPayload(TypedDict):
    """
    Lesson history row as returned by ``GET /api/teacher/lesson-history/``.

    Examples:
        >>> row: LessonHistoryPayload = {
        ...     "lesson_id": 7,
        ...     "student_name": "Aziza Karimova",
        ...     "student_phone": "+998901234567",
        ...     "student_profile_picture_url": None,
        ...     "start_time": "2026-02-20T12:45:00Z",
        ...     "end_time": "2026-02-20T13:35:00Z",
        ...     "status": "PENDING",
        ...     "credits_consumed": False,
        ...     "teacher_rate_uzs": 90000,
        ...     "payout_amount_uzs": 0,
        ...     "payout_status": "PENDING",
        ...     "earnings_event_id": None,
        ...     "credit_transaction_id": None
        ... }
    """

    lesson_id: int
    student_name: str
    student_phone: str
    student_profile_picture_url: Optional[str]
    start_time: str
    end_time: str
    status: str
    credits_consumed: bool
    teacher_rate_uzs: int
    payout_amount_uzs: int
    payout_status: PayoutStatus
    earnings_event_id: Optional[int]
    credit_transaction_id: Optional[int]


@dataclass
class LessonHistoryItem:
    """
    One past or scheduled lesson in a teacher's history.

    ``status`` is kept as the raw server string so a status the client
    does not know about still loads; it simply offers no transitions.
    ``payout_status`` only means something once the lesson is COMPLETED.

    Attributes:
        lesson_id: Lesson identifier
        student_name: Student display name
        start_time: ISO 8601 start timestamp
        end_time: ISO 8601 end timestamp
        status: Raw lesson status
        credits_consumed: Whether a student credit was deducted
        teacher_rate_uzs: Teacher's rate per lesson
        payout_amount_uzs: Computed payout (0 until completed)
        payout_status: PENDING or PAID
    """

    lesson_id: int
    student_name: str
    start_time: str
    end_time: str
    status: str
    credits_consumed: bool = False
    teacher_rate_uzs: int = 0
    payout_amount_uzs: int = 0
    payout_status: PayoutStatus = "PENDING"
    student_phone: str = ""
    student_profile_picture_url: Optional[str] = None
    earnings_event_id: Optional[int] = None
    credit_transaction_id: Optional[int] = None

    @property
    def status_enum(self) -> Optional[LessonStatus]:
        """Status as an enum member, or None if unknown."""
        return LessonStatus.parse(self.status)

    @property
    def start_date(self) -> str:
        """ISO date prefix (YYYY-MM-DD) of the start timestamp."""
        return self.start_time[:10]

    @property
    def is_paid(self) -> bool:
        return self.payout_status == "PAID"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'LessonHistoryItem':
        """
        Create instance from a backend payload.

        Raises:
            KeyError: If an identifying field is missing
            ValueError: If an id or amount is not numeric
        """
        return cls(
            lesson_id=int(d["lesson_id"]),
            student_name=d.get("student_name") or "",
            start_time=d["start_time"],
            end_time=d.get("end_time") or d["start_time"],
            status=d["status"],
            credits_consumed=bool(d.get("credits_consumed", False)),
            teacher_rate_uzs=parse_amount(d.get("teacher_rate_uzs")),
            payout_amount_uzs=parse_amount(d.get("payout_amount_uzs")),
            payout_status=d.get("payout_status") or "PENDING",
            student_phone=d.get("student_phone") or "",
            student_profile_picture_url=d.get("student_profile_picture_url"),
            earnings_event_id=d.get("earnings_event_id"),
            credit_transaction_id=d.get("credit_transaction_id"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        return asdict(self)
