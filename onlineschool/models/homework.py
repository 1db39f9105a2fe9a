"""
Homework data models.

Templates (library items) are authored by admins, assigned by teachers
to a student's lesson, answered by the student and graded server-side.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Literal, Optional


# Question types understood by the backend. Only single choice is authored here.
QuestionType = Literal["SC"]

# Answer breakdown types reported by the details endpoint
AnswerType = Literal["quiz", "gap_fill", "matching"]

DEFAULT_LEVEL = "A1"
LEVELS = ["A1", "A2", "B1", "B2", "C1", "C2"]


@dataclass
class OptionDraft:
    """Answer option as sent when authoring a question."""

    text: str
    is_correct: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "is_correct": self.is_correct}


@dataclass
class QuestionDraft:
    """
    One question for the add-question call.

    Any number of options may be flagged correct, including none.

    Examples:
        >>> q = QuestionDraft(
        ...     text="Choose the past tense of 'go'",
        ...     points=2,
        ...     options=[OptionDraft("went", True), OptionDraft("goed")]
        ... )
        >>> q.correct_count
        1
    """

    text: str
    points: int = 1
    options: List[OptionDraft] = field(default_factory=list)
    question_type: QuestionType = "SC"

    @property
    def correct_count(self) -> int:
        return sum(1 for option in self.options if option.is_correct)

    def to_payload(self) -> Dict[str, Any]:
        """Body for ``POST /api/homework/{id}/add_question/``."""
        return {
            "text": self.text,
            "question_type": self.question_type,
            "points": self.points,
            "options": [option.to_dict() for option in self.options],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'QuestionDraft':
        return cls(
            text=d.get("text", ""),
            points=int(d.get("points", 1)),
            options=[
                OptionDraft(text=o.get("text", ""), is_correct=bool(o.get("is_correct", False)))
                for o in d.get("options", [])
            ],
            question_type=d.get("question_type", "SC"),
        )


@dataclass
class LibraryItem:
    """Homework template as listed in the library."""

    id: int
    title: str
    level: str = DEFAULT_LEVEL
    description: str = ""
    created_at: Optional[str] = None
    question_count: Optional[int] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'LibraryItem':
        questions = d.get("questions")
        return cls(
            id=int(d["id"]),
            title=d.get("title", ""),
            level=d.get("level") or DEFAULT_LEVEL,
            description=d.get("description") or "",
            created_at=d.get("created_at"),
            question_count=len(questions) if isinstance(questions, list) else d.get("question_count"),
        )


@dataclass
class Assignment:
    """Assignment row in the teacher's sent-assignments list."""

    id: int
    student_name: str
    homework_title: str
    due_date: Optional[str]
    is_completed: bool = False
    score: float = 0
    percentage: float = 0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'Assignment':
        return cls(
            id=int(d["id"]),
            student_name=d.get("student_name", ""),
            homework_title=d.get("homework_title", ""),
            due_date=d.get("due_date"),
            is_completed=bool(d.get("is_completed", False)),
            score=d.get("score") or 0,
            percentage=d.get("percentage") or 0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StudentAssignment:
    """Assignment row in the student's own homework list."""

    id: int
    title: str
    teacher_name: str
    due_date: Optional[str]
    is_completed: bool = False
    score: float = 0
    percentage: float = 0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'StudentAssignment':
        return cls(
            id=int(d["id"]),
            title=d.get("title", ""),
            teacher_name=d.get("teacher_name", ""),
            due_date=d.get("due_date"),
            is_completed=bool(d.get("is_completed", False)),
            score=d.get("score") or 0,
            percentage=d.get("percentage") or 0,
        )


@dataclass
class LessonOption:
    """A teacher's lesson that homework can be assigned to."""

    id: int
    student_name: str
    start_time: str

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'LessonOption':
        return cls(
            id=int(d["id"]),
            student_name=d.get("student_name", ""),
            start_time=d.get("start_time", ""),
        )


@dataclass
class QuizOption:
    id: int
    text: str


@dataclass
class QuizQuestion:
    id: int
    text: str
    points: int
    options: List[QuizOption] = field(default_factory=list)

    def has_option(self, option_id: int) -> bool:
        return any(option.id == option_id for option in self.options)


@dataclass
class QuizData:
    """
    An assignment as the student sees it (no correctness flags).

    ``total_points`` falls back to 100 when the backend omits it.
    """

    id: int
    title: str
    description: str
    is_completed: bool
    score: float
    questions: List[QuizQuestion] = field(default_factory=list)
    total_points: float = 100

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'QuizData':
        questions = [
            QuizQuestion(
                id=int(q["id"]),
                text=q.get("text", ""),
                points=int(q.get("points", 1)),
                options=[
                    QuizOption(id=int(o["id"]), text=o.get("text", ""))
                    for o in q.get("options", [])
                ],
            )
            for q in d.get("questions", [])
        ]
        return cls(
            id=int(d["id"]),
            title=d.get("title", ""),
            description=d.get("description") or "",
            is_completed=bool(d.get("is_completed", False)),
            score=d.get("score") or 0,
            questions=questions,
            total_points=d.get("total_points") or 100,
        )

    def question(self, question_id: int) -> Optional[QuizQuestion]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None


@dataclass
class SubmissionResult:
    """Score returned by the submit endpoint."""

    score: float
    total: float
    percentage: Optional[float] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'SubmissionResult':
        return cls(
            score=d.get("score") or 0,
            total=d.get("total") or d.get("total_points") or 0,
            percentage=d.get("percentage"),
        )


@dataclass
class AnswerBreakdown:
    """Per-question line of a graded assignment."""

    question_text: str
    student_answer: str
    correct_answer: str
    is_correct: bool
    points_earned: float
    max_points: float
    type: AnswerType = "quiz"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'AnswerBreakdown':
        return cls(
            question_text=d.get("question_text", ""),
            student_answer=d.get("student_answer") or "",
            correct_answer=d.get("correct_answer") or "",
            is_correct=bool(d.get("is_correct", False)),
            points_earned=d.get("points_earned") or 0,
            max_points=d.get("max_points") or 0,
            type=d.get("type") or "quiz",
        )


@dataclass
class AssignmentDetail:
    """Graded breakdown of a completed assignment, fetched on request."""

    id: int
    student_name: str
    homework_title: str
    score: float
    percentage: float
    answers: List[AnswerBreakdown] = field(default_factory=list)

    @property
    def correct_count(self) -> int:
        return sum(1 for a in self.answers if a.is_correct)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'AssignmentDetail':
        return cls(
            id=int(d["id"]),
            student_name=d.get("student_name", ""),
            homework_title=d.get("homework_title", ""),
            score=d.get("score") or 0,
            percentage=d.get("percentage") or 0,
            answers=[AnswerBreakdown.from_dict(a) for a in d.get("answers", [])],
        )
