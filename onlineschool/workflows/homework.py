"""
Homework authoring, assignment, answering and results.

Flow:
1. An admin creates a template shell (title, description, level), then
   adds questions to it one call at a time (HomeworkBuilder).
2. A teacher assigns a template to one of their lessons with a due date.
3. The student opens the assignment, picks options and submits once
   (QuizSession). Scoring happens on the server.
4. The teacher opens the per-question breakdown on request.

There is no atomic multi-question creation: a shell with zero questions
is a reachable state. Assigning the same template twice creates two
assignments.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from ..api.client import failure_message
from ..api.endpoints import endpoints
from ..api.interfaces import ApiTransport
from ..models.homework import (
    DEFAULT_LEVEL,
    Assignment,
    AssignmentDetail,
    LessonOption,
    LibraryItem,
    QuestionDraft,
    QuizData,
    StudentAssignment,
    SubmissionResult,
)
from ..models.result import ErrorKind, Result
from ..validation.homework_validator import (
    AssignmentRequestValidator,
    HomeworkShellValidator,
    QuestionValidator,
)
from .notifications import BusyFlag, Notifier


logger = logging.getLogger(__name__)

ASSIGNMENTS_LOAD_FAILED = "Could not load assignments."
DETAILS_LOAD_FAILED = "Could not load details."
CREATE_FAILED = "Failed to create homework"
ADD_QUESTION_FAILED = "Failed to add question"
DELETE_FAILED = "Failed to delete"
ASSIGN_FAILED = "Failed to assign"
SUBMIT_FAILED = "Submission failed"
QUIZ_LOAD_FAILED = "Failed to load quiz"
INCOMPLETE_PROMPT = "You haven't answered all questions. Submit anyway?"

DueDate = Union[str, date, datetime]


def _pass_failure(result: Result, fallback: str) -> Result:
    """Re-wrap a failed call with the message the user should see."""
    return Result.failure(
        failure_message(result, fallback),
        result.error,
        kind=result.kind,
        status_code=result.status_code
    )


def _parse_list(result: Result, factory: Callable[[Dict[str, Any]], Any]) -> Result[list]:
    if result.is_failure:
        return result
    if not isinstance(result.value, list):
        return Result.failure(
            f"Expected a list, got {type(result.value).__name__}",
            kind=ErrorKind.TRANSPORT
        )
    return result.map(lambda rows: [factory(row) for row in rows])


def normalize_due_date(value: DueDate) -> str:
    """
    Convert a due date to an ISO 8601 UTC timestamp.

    A bare date means midnight UTC of that day.

    Examples:
        >>> normalize_due_date("2026-03-01")
        '2026-03-01T00:00:00+00:00'
        >>> normalize_due_date(datetime(2026, 3, 1, 18, 30, tzinfo=timezone.utc))
        '2026-03-01T18:30:00+00:00'
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).isoformat()


def search_assignments(assignments: Iterable[Assignment], term: str) -> List[Assignment]:
    """
    Case-insensitive match on student name or homework title.

    An empty term keeps everything.
    """
    needle = (term or "").lower()
    return [
        a for a in assignments
        if needle in a.student_name.lower() or needle in a.homework_title.lower()
    ]


def filter_pending(assignments: Iterable[StudentAssignment]) -> List[StudentAssignment]:
    return [a for a in assignments if not a.is_completed]


class HomeworkService:
    """
    All homework calls, each returning a Result.

    Examples:
        >>> service = HomeworkService(client)
        >>> library = service.list_library().unwrap_or([])
        >>> service.assign(lesson_id=12, homework_id=3, due_date="2026-03-01")
    """

    def __init__(
        self,
        transport: ApiTransport,
        notifier: Optional[Notifier] = None
    ):
        self.transport = transport
        self.notifier = notifier or Notifier()
        self.shell_validator = HomeworkShellValidator()
        self.question_validator = QuestionValidator()
        self.assignment_validator = AssignmentRequestValidator()
        self.assigning = BusyFlag("homework assignment")

    # Library and authoring

    def list_library(self) -> Result[List[LibraryItem]]:
        result = _parse_list(self.transport.get(endpoints.homework.library), LibraryItem.from_dict)
        if result.is_failure:
            logger.error(f"Failed to fetch homework library: {result.message}")
        return result

    def create_homework(
        self,
        title: str,
        description: str = "",
        level: str = DEFAULT_LEVEL
    ) -> Result[int]:
        """
        Phase one of authoring: create an empty template.

        Returns:
            Result with the new template id
        """
        payload = {"title": title, "description": description, "level": level}
        validation = self.shell_validator.validate(payload)
        if not validation.is_valid:
            return Result.failure("; ".join(validation.errors))

        result = self.transport.post(endpoints.homework.create, payload)
        if result.is_failure:
            logger.error(f"Failed to create homework {title!r}: {result.message}")
            return _pass_failure(result, CREATE_FAILED)

        id_result = result.map(lambda body: int(body["id"]))
        if id_result.is_success:
            logger.info(f"Created homework #{id_result.value}: {title}")
            self.notifier.show("Homework created. Now add questions.")
        return id_result

    def add_question(self, homework_id: int, question: QuestionDraft) -> Result[None]:
        """
        Phase two of authoring: append one question to a template.

        Validation warnings (e.g. no correct option) do not block the call.
        """
        validation = self.question_validator.validate(question)
        if not validation.is_valid:
            return Result.failure("; ".join(validation.errors))
        for warning in validation.warnings:
            logger.warning(f"Homework #{homework_id}: {warning}")

        result = self.transport.post(
            endpoints.homework.add_question(homework_id),
            question.to_payload()
        )
        if result.is_failure:
            logger.error(f"Failed to add question to homework #{homework_id}: {result.message}")
            return _pass_failure(result, ADD_QUESTION_FAILED)

        self.notifier.show("Question Added!")
        return Result.success(None, "Question added")

    def delete_homework(self, homework_id: int) -> Result[None]:
        result = self.transport.delete(endpoints.homework.delete(homework_id))
        if result.is_failure:
            logger.error(f"Failed to delete homework #{homework_id}: {result.message}")
            return _pass_failure(result, DELETE_FAILED)

        logger.info(f"Deleted homework #{homework_id}")
        return Result.success(None, f"Homework #{homework_id} deleted")

    # Assignment

    def list_my_lessons(self) -> Result[List[LessonOption]]:
        return _parse_list(self.transport.get(endpoints.lessons.my_lessons), LessonOption.from_dict)

    def assign(
        self,
        lesson_id: int,
        homework_id: int,
        due_date: DueDate
    ) -> Result[Any]:
        """
        Assign a template to one lesson's student.

        No duplicate check is made; calling twice creates two assignments.
        A second call while one is in flight is refused.
        """
        if self.assigning.busy:
            return Result.failure("An assignment is already being created")

        due_text = due_date.isoformat() if isinstance(due_date, (date, datetime)) else due_date
        validation = self.assignment_validator.validate(
            {"lesson_id": lesson_id, "homework_id": homework_id, "due_date": due_text}
        )
        if not validation.is_valid:
            return Result.failure("; ".join(validation.errors))

        try:
            due_iso = normalize_due_date(due_date)
        except ValueError as e:
            return Result.failure(f"Invalid due date: {due_date}", e, kind=ErrorKind.VALIDATION)

        with self.assigning:
            result = self.transport.post(
                endpoints.homework.assign(lesson_id),
                {"homework_id": homework_id, "due_date": due_iso}
            )

        if result.is_failure:
            logger.error(f"Failed to assign homework #{homework_id} to lesson #{lesson_id}: {result.message}")
            return _pass_failure(result, ASSIGN_FAILED)

        logger.info(f"Assigned homework #{homework_id} to lesson #{lesson_id}, due {due_iso}")
        self.notifier.show("Homework assigned successfully!")
        return Result.success(result.value, "Homework assigned")

    def list_teacher_assignments(self) -> Result[List[Assignment]]:
        result = _parse_list(
            self.transport.get(endpoints.homework.teacher_assignments),
            Assignment.from_dict
        )
        if result.is_failure:
            logger.error(f"Failed to load assignments: {result.message}")
            return _pass_failure(result, ASSIGNMENTS_LOAD_FAILED)
        return result

    def list_my_assignments(self, pending_only: bool = False) -> Result[List[StudentAssignment]]:
        result = _parse_list(
            self.transport.get(endpoints.homework.my_assignments),
            StudentAssignment.from_dict
        )
        if result.is_failure:
            logger.error(f"Failed to load homework: {result.message}")
            return Result.failure(
                ASSIGNMENTS_LOAD_FAILED,
                result.error,
                kind=result.kind,
                status_code=result.status_code
            )
        if pending_only:
            return Result.success(filter_pending(result.value), result.message)
        return result

    # Answering and results

    def open_quiz(self, assignment_id: int) -> Result['QuizSession']:
        result = self.transport.get(endpoints.homework.assignment(assignment_id))
        if result.is_failure:
            logger.error(f"Failed to load assignment #{assignment_id}: {result.message}")
            return _pass_failure(result, QUIZ_LOAD_FAILED)

        return result.map(QuizData.from_dict).map(
            lambda quiz: QuizSession(self.transport, quiz)
        )

    def get_assignment_details(self, assignment_id: int) -> Result[AssignmentDetail]:
        """
        Fetch the graded per-question breakdown of one assignment.

        Only called when the teacher asks for it, never for a whole list.
        """
        result = self.transport.get(endpoints.homework.details(assignment_id))
        if result.is_failure:
            logger.error(f"Failed to load results for assignment #{assignment_id}: {result.message}")
            return _pass_failure(result, DETAILS_LOAD_FAILED)
        return result.map(AssignmentDetail.from_dict)


class HomeworkBuilder:
    """
    Two-phase template authoring.

    ``create()`` makes the shell; each ``add_question()`` appends one
    question. A failed question leaves the questions already added in
    place.

    Examples:
        >>> builder = HomeworkBuilder(service, "Past Simple", level="A2")
        >>> builder.create()
        >>> builder.add_question(QuestionDraft("went or goed?", 1, [...]))
        >>> builder.question_count
        1
    """

    def __init__(
        self,
        service: HomeworkService,
        title: str,
        description: str = "",
        level: str = DEFAULT_LEVEL
    ):
        self.service = service
        self.title = title
        self.description = description
        self.level = level
        self.homework_id: Optional[int] = None
        self.questions: List[QuestionDraft] = []

    @property
    def is_created(self) -> bool:
        return self.homework_id is not None

    @property
    def question_count(self) -> int:
        return len(self.questions)

    def create(self) -> Result[int]:
        if self.is_created:
            return Result.success(self.homework_id, "Homework already created")

        result = self.service.create_homework(self.title, self.description, self.level)
        if result.is_success:
            self.homework_id = result.value
        return result

    def add_question(self, question: QuestionDraft) -> Result[None]:
        if not self.is_created:
            return Result.failure("Create the homework before adding questions")

        result = self.service.add_question(self.homework_id, question)
        if result.is_success:
            self.questions.append(question)
        return result


class QuizSession:
    """
    A student's answers to one assignment.

    Answers can be changed freely until submission. Submission happens
    once; afterwards the session is locked. Submitting with unanswered
    questions requires the ``confirm`` callback to return True.

    Examples:
        >>> session = service.open_quiz(42).unwrap()
        >>> session.select(question_id=1, option_id=3)
        >>> result = session.submit(confirm=lambda prompt: True)
        >>> result.value.score, result.value.total
        (4, 5)
    """

    def __init__(self, transport: ApiTransport, quiz: QuizData):
        self.transport = transport
        self.quiz = quiz
        self.answers: Dict[int, int] = {}
        self.submitting = BusyFlag("homework submission")
        self.result: Optional[SubmissionResult] = None

        if quiz.is_completed:
            self.result = SubmissionResult(score=quiz.score, total=quiz.total_points)

    @property
    def is_completed(self) -> bool:
        return self.quiz.is_completed

    @property
    def unanswered_count(self) -> int:
        return len(self.quiz.questions) - len(self.answers)

    def is_complete_answer_set(self) -> bool:
        return self.unanswered_count <= 0

    def select(self, question_id: int, option_id: int) -> Result[None]:
        """Record (or change) the chosen option for a question."""
        if self.is_completed:
            return Result.failure("This homework has already been submitted")

        question = self.quiz.question(question_id)
        if question is None:
            return Result.failure(f"Unknown question #{question_id}")

        if not question.has_option(option_id):
            return Result.failure(f"Question #{question_id} has no option #{option_id}")

        self.answers[question_id] = option_id
        return Result.success(None)

    def payload(self) -> Dict[str, Any]:
        return {
            "answers": [
                {"question_id": question_id, "option_id": option_id}
                for question_id, option_id in self.answers.items()
            ]
        }

    def submit(
        self,
        confirm: Optional[Callable[[str], bool]] = None
    ) -> Result[SubmissionResult]:
        """
        Send the answers for grading.

        Args:
            confirm: Asked with INCOMPLETE_PROMPT when some questions are
                unanswered; submission goes ahead only if it returns True

        Returns:
            Result with the score and total
        """
        if self.is_completed:
            return Result.failure("This homework has already been submitted")

        if self.submitting.busy:
            return Result.failure("Submission already in progress")

        if not self.is_complete_answer_set():
            if confirm is None or not confirm(INCOMPLETE_PROMPT):
                logger.info(f"Submission of assignment #{self.quiz.id} cancelled by user")
                return Result.failure("Submission cancelled")

        with self.submitting:
            result = self.transport.post(
                endpoints.homework.submit(self.quiz.id),
                self.payload()
            )

        if result.is_failure:
            logger.error(f"Submission of assignment #{self.quiz.id} failed: {result.message}")
            return _pass_failure(result, SUBMIT_FAILED)

        # Graded server-side from here on; never allow a second POST.
        self.quiz.is_completed = True

        submission = result.map(SubmissionResult.from_dict)
        if submission.is_failure:
            logger.warning(
                f"Assignment #{self.quiz.id} submitted but the score could not be read: "
                f"{submission.message}"
            )
            return submission

        self.quiz.score = submission.value.score
        self.result = submission.value
        logger.info(
            f"Assignment #{self.quiz.id} submitted: "
            f"{submission.value.score}/{submission.value.total}"
        )
        return submission
