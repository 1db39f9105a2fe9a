"""
Teacher lesson history and the lesson status workflow.

This module provides:
- The closed table of status transitions a teacher may make
- Pure client-side filtering and summary statistics
- LessonHistoryService, which loads the history, applies a transition
  and reloads the whole list afterwards

Credit deduction and payout recording happen on the server when a lesson
is marked COMPLETED. The client never computes either; it only sees the
effect after reloading.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple, Union

from ..api.client import failure_message
from ..api.endpoints import endpoints
from ..api.interfaces import ApiTransport
from ..models.lesson import LessonHistoryItem, LessonStatus, status_label
from ..models.result import ErrorKind, Result
from ..validation.lesson_validator import LessonHistoryValidator
from .notifications import BusyFlag, Notifier


logger = logging.getLogger(__name__)

ALL_STATUSES = "ALL"

LOAD_FAILED_MESSAGE = "Failed to load lesson history. Please try again."
TRANSITION_FAILED_MESSAGE = "Failed to update lesson. Please try again."
COMPLETION_NOTICE = (
    "Marking as Completed will automatically deduct 1 credit from the student "
    "and record your payout."
)

_FROM_OPEN = (
    LessonStatus.COMPLETED,
    LessonStatus.STUDENT_ABSENT,
    LessonStatus.CANCELLED,
)

# Statuses missing from this table are terminal.
ALLOWED_NEXT: Mapping[LessonStatus, Tuple[LessonStatus, ...]] = MappingProxyType({
    LessonStatus.PENDING: _FROM_OPEN,
    LessonStatus.CONFIRMED: _FROM_OPEN,
})


def allowed_next(status: Union[str, LessonStatus]) -> Tuple[LessonStatus, ...]:
    """
    Statuses a lesson in ``status`` may move to, in display order.

    Examples:
        >>> [s.value for s in allowed_next("PENDING")]
        ['COMPLETED', 'STUDENT_ABSENT', 'CANCELLED']
        >>> allowed_next("COMPLETED")
        ()
        >>> allowed_next("SOMETHING_NEW")
        ()
    """
    if not isinstance(status, LessonStatus):
        status = LessonStatus.parse(status)
    if status is None:
        return ()
    return ALLOWED_NEXT.get(status, ())


def can_edit(lesson: LessonHistoryItem) -> bool:
    """
    True if the lesson offers at least one transition.

    Payout status plays no part in this.
    """
    return len(allowed_next(lesson.status)) > 0


@dataclass
class LessonFilter:
    """
    Filter settings for the lesson list.

    Attributes:
        status: Exact status to keep, or "ALL"
        search: Case-insensitive substring of the student name
        date_from: Inclusive lower bound on the start date (YYYY-MM-DD)
        date_to: Inclusive upper bound on the start date (YYYY-MM-DD)

    Empty strings disable the corresponding check.
    """

    status: str = ALL_STATUSES
    search: str = ""
    date_from: str = ""
    date_to: str = ""

    @property
    def is_active(self) -> bool:
        return (
            self.status != ALL_STATUSES
            or bool(self.search)
            or bool(self.date_from)
            or bool(self.date_to)
        )

    def matches(self, lesson: LessonHistoryItem) -> bool:
        if self.status != ALL_STATUSES and lesson.status != self.status:
            return False
        if self.search and self.search.lower() not in lesson.student_name.lower():
            return False
        # ISO dates sort lexicographically, so plain string comparison is a date comparison.
        start_date = lesson.start_date
        if self.date_from and start_date < self.date_from:
            return False
        if self.date_to and start_date > self.date_to:
            return False
        return True


def filter_lessons(
    lessons: Iterable[LessonHistoryItem],
    lesson_filter: Optional[LessonFilter] = None
) -> List[LessonHistoryItem]:
    """
    Return the lessons matching every active filter, preserving order.

    The input is not modified.

    Examples:
        >>> completed = filter_lessons(lessons, LessonFilter(status="COMPLETED"))
    """
    lesson_filter = lesson_filter or LessonFilter()
    return [lesson for lesson in lessons if lesson_filter.matches(lesson)]


@dataclass
class LessonStats:
    """
    Summary figures for the history page.

    Totals are over every loaded lesson; ``shown`` and
    ``unique_students`` describe the filtered view.
    """

    total_lessons: int
    completed: int
    student_absent: int
    total_earned_uzs: int
    shown: int
    unique_students: int

    @property
    def showing_label(self) -> str:
        return f"Showing {self.shown} of {self.total_lessons} lessons"


def compute_stats(
    lessons: List[LessonHistoryItem],
    visible: Optional[List[LessonHistoryItem]] = None
) -> LessonStats:
    if visible is None:
        visible = lessons
    return LessonStats(
        total_lessons=len(lessons),
        completed=sum(1 for l in lessons if l.status_enum == LessonStatus.COMPLETED),
        student_absent=sum(1 for l in lessons if l.status_enum == LessonStatus.STUDENT_ABSENT),
        total_earned_uzs=sum(l.payout_amount_uzs for l in lessons),
        shown=len(visible),
        unique_students=len({l.student_name for l in visible}),
    )


def transition_message(lesson_id: int, status: Union[str, LessonStatus]) -> str:
    """
    Toast text for a successful transition.

    Examples:
        >>> transition_message(7, LessonStatus.COMPLETED)
        'Lesson #7 updated to Completed'
    """
    value = status.value if isinstance(status, LessonStatus) else status
    return f"Lesson #{lesson_id} updated to {status_label(value)}"


class LessonHistoryService:
    """
    Loads a teacher's lesson history and applies status transitions.

    The service keeps the last loaded list. After a successful transition
    the whole list is fetched again; nothing is patched locally.

    Examples:
        >>> service = LessonHistoryService(client, notifier=Notifier())
        >>> service.load()
        >>> result = service.transition(7, "COMPLETED")
        >>> if result.is_failure:
        ...     print(result.message)  # server text, verbatim
    """

    def __init__(
        self,
        transport: ApiTransport,
        notifier: Optional[Notifier] = None,
        validator: Optional[LessonHistoryValidator] = None
    ):
        self.transport = transport
        self.notifier = notifier or Notifier()
        self.validator = validator or LessonHistoryValidator()
        self.saving = BusyFlag("lesson status update")

        self.lessons: List[LessonHistoryItem] = []
        self.error: Optional[str] = None

    def load(self) -> Result[List[LessonHistoryItem]]:
        """
        Fetch the full lesson history.

        On failure the list is emptied and ``error`` holds the message
        to display; nothing is raised.
        """
        self.error = None
        result = self.transport.get(endpoints.lessons.history)

        if result.is_failure:
            logger.error(f"Failed to load lesson history: {result.message}")
            self.lessons = []
            self.error = LOAD_FAILED_MESSAGE
            return Result.failure(
                LOAD_FAILED_MESSAGE,
                result.error,
                kind=result.kind,
                status_code=result.status_code
            )

        rows = result.value
        if not isinstance(rows, list):
            logger.error(f"Lesson history is not a list: {type(rows).__name__}")
            self.lessons = []
            self.error = LOAD_FAILED_MESSAGE
            return Result.failure(LOAD_FAILED_MESSAGE, kind=ErrorKind.TRANSPORT)

        lessons = []
        for index, row in enumerate(rows):
            validation = self.validator.validate(row)
            if not validation.is_valid:
                logger.warning(f"Skipping lesson row {index}:\n{validation.get_summary()}")
                continue
            for warning in validation.warnings:
                logger.debug(f"Lesson row {index}: {warning}")

            try:
                lessons.append(LessonHistoryItem.from_dict(row))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping lesson row {index}: {e}")

        self.lessons = lessons
        logger.info(f"Loaded {len(lessons)} lessons")
        return Result.success(lessons, f"Loaded {len(lessons)} lessons")

    def find(self, lesson_id: int) -> Optional[LessonHistoryItem]:
        for lesson in self.lessons:
            if lesson.lesson_id == lesson_id:
                return lesson
        return None

    def visible(self, lesson_filter: Optional[LessonFilter] = None) -> List[LessonHistoryItem]:
        return filter_lessons(self.lessons, lesson_filter)

    def stats(self, lesson_filter: Optional[LessonFilter] = None) -> LessonStats:
        return compute_stats(self.lessons, self.visible(lesson_filter))

    def transition(
        self,
        lesson_id: int,
        target: Union[str, LessonStatus]
    ) -> Result[Optional[LessonHistoryItem]]:
        """
        Move a lesson to ``target`` and reload the list.

        The target must be in the allowed-next set of the lesson's status
        as last loaded; otherwise nothing is sent. A server rejection is
        returned with the server's message unchanged.

        Returns:
            Result with the reloaded lesson (None if it vanished from the
            reloaded list)
        """
        if self.saving.busy:
            return Result.failure("An update is already in progress")

        lesson = self.find(lesson_id)
        if lesson is None:
            return Result.failure(
                f"Lesson #{lesson_id} not found",
                kind=ErrorKind.NOT_FOUND
            )

        target_status = target if isinstance(target, LessonStatus) else LessonStatus.parse(target)
        options = allowed_next(lesson.status)

        if not options:
            return Result.failure(
                f"No status changes are allowed for a {lesson.status} lesson."
            )

        if target_status not in options:
            return Result.failure(
                f"Cannot change a {status_label(lesson.status)} lesson to "
                f"{status_label(target_status.value if target_status else str(target))}"
            )

        logger.info(f"Updating lesson #{lesson_id}: {lesson.status} -> {target_status.value}")

        with self.saving:
            result = self.transport.patch(
                endpoints.lessons.transition(lesson_id),
                {"status": target_status.value}
            )

            if result.is_failure:
                message = failure_message(result, TRANSITION_FAILED_MESSAGE)
                logger.warning(f"Lesson #{lesson_id} update rejected: {message}")
                return Result.failure(
                    message,
                    result.error,
                    kind=result.kind,
                    status_code=result.status_code
                )

            toast = self.notifier.show(transition_message(lesson_id, target_status))

            reload_result = self.load()
            if reload_result.is_failure:
                logger.warning(f"Lesson #{lesson_id} updated but reload failed")

        return Result.success(self.find(lesson_id), toast.message)
