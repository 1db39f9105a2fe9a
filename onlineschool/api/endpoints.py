"""
OnlineSchool REST endpoints.

This module centralizes every backend path the client calls, so a route
change on the server is a one-line change here.

Usage:
    >>> from onlineschool.api.endpoints import endpoints
    >>> endpoints.lessons.transition(7)
    '/api/teacher/lesson-history/7/'
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class AuthEndpoints:
    """Token issue and current-user lookup."""

    token: str = "/api/token/"
    me: str = "/api/me/"


@dataclass(frozen=True)
class LessonEndpoints:
    """Teacher lesson history and lesson pickers."""

    history: str = "/api/teacher/lesson-history/"
    my_lessons: str = "/api/my-lessons/"

    def transition(self, lesson_id: int) -> str:
        return f"{self.history}{lesson_id}/"


@dataclass(frozen=True)
class HomeworkEndpoints:
    """Homework library, authoring, assignment and grading."""

    library: str = "/api/homework/library/"
    create: str = "/api/homework/create/"
    teacher_assignments: str = "/api/homework/teacher-assignments/"
    my_assignments: str = "/api/homework/my-assignments/"

    def add_question(self, homework_id: int) -> str:
        return f"/api/homework/{homework_id}/add_question/"

    def delete(self, homework_id: int) -> str:
        return f"/api/homework/{homework_id}/delete/"

    def assign(self, lesson_id: int) -> str:
        return f"/api/homework/assign/{lesson_id}/"

    def assignment(self, assignment_id: int) -> str:
        return f"/api/homework/assignment/{assignment_id}/"

    def submit(self, assignment_id: int) -> str:
        return f"/api/homework/assignment/{assignment_id}/submit/"

    def details(self, assignment_id: int) -> str:
        return f"/api/homework/assignment/{assignment_id}/details/"


@dataclass(frozen=True)
class Endpoints:
    """All endpoint groups."""

    auth: AuthEndpoints = field(default_factory=AuthEndpoints)
    lessons: LessonEndpoints = field(default_factory=LessonEndpoints)
    homework: HomeworkEndpoints = field(default_factory=HomeworkEndpoints)


endpoints = Endpoints()
