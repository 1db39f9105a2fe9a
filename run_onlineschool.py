#!/usr/bin/env python3
"""
OnlineSchool command-line client.

Teacher lesson history with status updates, and the homework workflow
(authoring, assigning, answering, results).

Usage:
    python run_onlineschool.py [--username USER] [--password PASS] COMMAND ...

Examples:
    # Show the current user
    python run_onlineschool.py whoami

    # Completed lessons in February, exported to CSV
    python run_onlineschool.py lessons list --status COMPLETED \\
        --from 2026-02-01 --to 2026-02-28 --export csv

    # Mark lesson 7 as completed
    python run_onlineschool.py lessons update 7 COMPLETED

    # Create a homework and add its questions from a JSON file
    python run_onlineschool.py homework create --title "Past Simple" \\
        --level A2 --questions questions.json

    # Assign homework 3 to lesson 12
    python run_onlineschool.py homework assign --lesson 12 --homework 3 --due 2026-03-01

    # Answer an assignment as a student
    python run_onlineschool.py homework take 42

    # Use a token instead of a password
    export ONLINESCHOOL_ACCESS_TOKEN="eyJ..."
    python run_onlineschool.py homework mine --pending
"""

import sys
import json
import argparse
import logging
from pathlib import Path
from typing import Callable, List

from onlineschool.api.client import ApiClient
from onlineschool.api.session import AuthSession
from onlineschool.models.homework import LEVELS, DEFAULT_LEVEL, OptionDraft, QuestionDraft
from onlineschool.models.lesson import LessonHistoryItem, LessonStatus, status_label
from onlineschool.models.result import Result
from onlineschool.utils.config import Config, SecureString
from onlineschool.utils.file_utils import export_assignments, export_lessons
from onlineschool.utils.formatting import (
    format_datetime,
    format_date,
    format_month_day,
    format_time,
    format_uzs,
    format_uzs_compact,
    get_user_tz,
)
from onlineschool.utils.logger import setup_logger
from onlineschool.workflows.homework import (
    HomeworkBuilder,
    HomeworkService,
    QuizSession,
    search_assignments,
)
from onlineschool.workflows.lesson_history import (
    COMPLETION_NOTICE,
    LessonFilter,
    LessonHistoryService,
    allowed_next,
    can_edit,
)
from onlineschool.workflows.notifications import Notifier


logger = logging.getLogger("onlineschool.cli")


def parse_arguments(argv=None):
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="OnlineSchool lesson and homework client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        "--username",
        help="Login username (overrides ONLINESCHOOL_USERNAME env var)"
    )

    parser.add_argument(
        "--password",
        help="Login password (overrides ONLINESCHOOL_PASSWORD env var)"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: LOG_LEVEL env var or INFO)"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("whoami", help="Show the logged-in user")

    # lessons
    lessons = commands.add_parser("lessons", help="Teacher lesson history")
    lesson_commands = lessons.add_subparsers(dest="action", required=True)

    lesson_list = lesson_commands.add_parser("list", help="List lessons with filters and totals")
    lesson_list.add_argument("--status", default="ALL", help="Exact status or ALL (default: ALL)")
    lesson_list.add_argument("--search", default="", help="Part of the student name")
    lesson_list.add_argument("--from", dest="date_from", default="", help="Earliest start date (YYYY-MM-DD)")
    lesson_list.add_argument("--to", dest="date_to", default="", help="Latest start date (YYYY-MM-DD)")
    lesson_list.add_argument("--export", choices=["csv", "json"], help="Write the filtered list to a file")

    lesson_update = lesson_commands.add_parser("update", help="Change a lesson's status")
    lesson_update.add_argument("lesson_id", type=int)
    lesson_update.add_argument("status", choices=[s.value for s in LessonStatus])
    lesson_update.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    # homework
    homework = commands.add_parser("homework", help="Homework library, assignments and answers")
    hw_commands = homework.add_subparsers(dest="action", required=True)

    hw_commands.add_parser("library", help="List homework templates")

    hw_create = hw_commands.add_parser("create", help="Create a homework template")
    hw_create.add_argument("--title", required=True)
    hw_create.add_argument("--description", default="")
    hw_create.add_argument("--level", choices=LEVELS, default=DEFAULT_LEVEL)
    hw_create.add_argument("--questions", type=Path, help="JSON file with a list of questions to add")

    hw_question = hw_commands.add_parser("add-question", help="Add one question to a template")
    hw_question.add_argument("homework_id", type=int)
    hw_question.add_argument("--text", help="Question text")
    hw_question.add_argument("--points", type=int, default=1)
    hw_question.add_argument("--option", action="append", default=[], help="Option text (repeat)")
    hw_question.add_argument(
        "--correct", type=int, action="append", default=[],
        help="1-based number of a correct option (repeat)"
    )
    hw_question.add_argument("--file", type=Path, help="JSON file with one question or a list of them")

    hw_delete = hw_commands.add_parser("delete", help="Delete a homework template")
    hw_delete.add_argument("homework_id", type=int)
    hw_delete.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    hw_commands.add_parser("lessons", help="List lessons homework can be assigned to")

    hw_assign = hw_commands.add_parser("assign", help="Assign a template to a lesson")
    hw_assign.add_argument("--lesson", type=int, required=True, dest="lesson_id")
    hw_assign.add_argument("--homework", type=int, required=True, dest="homework_id")
    hw_assign.add_argument("--due", required=True, dest="due_date", help="Due date (YYYY-MM-DD or ISO timestamp)")

    hw_sent = hw_commands.add_parser("sent", help="Assignments you have sent")
    hw_sent.add_argument("--search", default="", help="Part of the student name or homework title")
    hw_sent.add_argument("--export", action="store_true", help="Write the list to CSV")

    hw_details = hw_commands.add_parser("details", help="Graded breakdown of one assignment")
    hw_details.add_argument("assignment_id", type=int)

    hw_mine = hw_commands.add_parser("mine", help="Your own homework (students)")
    hw_mine.add_argument("--pending", action="store_true", help="Only show unfinished homework")

    hw_take = hw_commands.add_parser("take", help="Answer and submit an assignment")
    hw_take.add_argument("assignment_id", type=int)

    return parser.parse_args(argv)


def ask_yes_no(prompt: str) -> bool:
    """
    Ask user a yes/no question.

    Returns:
        True if user confirms
    """
    response = input(f"{prompt} (y/n): ").strip().lower()
    return response in ['y', 'yes']


def report_failure(result: Result, action: str) -> int:
    logger.error(f"{action} failed: {result.message}")
    print(f"ERROR: {result.message}")
    return 1


def authenticate(args, config: Config, session: AuthSession) -> Result:
    """
    Log in with the best credentials available.

    Command-line credentials take precedence over the environment; a
    pre-issued token is used when no password is available.
    """
    username = args.username or config.username

    if args.password:
        logger.info("Using password from command-line argument")
        return session.login(username, SecureString(args.password))

    if username and config.password:
        logger.info("Using password from environment variable")
        return session.login(username, config.password)

    if not config.has_credentials:
        return Result.failure(
            "Credentials are required. Use --username/--password or set "
            "ONLINESCHOOL_USERNAME/ONLINESCHOOL_PASSWORD or ONLINESCHOOL_ACCESS_TOKEN"
        )

    logger.info("Using access token from environment variable")
    return session.use_token(config.access_token)


# Lessons

def display_lessons(lessons: List[LessonHistoryItem], tz: str):
    print("-" * 96)
    print(f"{'#':>6}  {'Start':18s}  {'Student':22s}  {'Status':15s}  {'Payout':>14s}  {'Paid':4s}  Edit")
    print("-" * 96)
    for lesson in lessons:
        edit = ",".join(s.value for s in allowed_next(lesson.status)) if can_edit(lesson) else "-"
        print(
            f"{lesson.lesson_id:>6}  {format_datetime(lesson.start_time, tz):18s}  "
            f"{lesson.student_name[:22]:22s}  {status_label(lesson.status):15s}  "
            f"{format_uzs(lesson.payout_amount_uzs):>14s}  "
            f"{'yes' if lesson.is_paid else 'no':4s}  {edit}"
        )
    print("-" * 96)


def cmd_lessons_list(args, client: ApiClient, config: Config, tz: str) -> int:
    service = LessonHistoryService(client)
    load_result = service.load()
    if load_result.is_failure:
        return report_failure(load_result, "Loading lesson history")

    lesson_filter = LessonFilter(
        status=args.status,
        search=args.search,
        date_from=args.date_from,
        date_to=args.date_to
    )
    visible = service.visible(lesson_filter)
    stats = service.stats(lesson_filter)

    print("\n" + "=" * 60)
    print("LESSON HISTORY")
    print("=" * 60)
    print(f"Total lessons:            {stats.total_lessons}")
    print(f"Completed:                {stats.completed}")
    print(f"Student absent:           {stats.student_absent}")
    print(f"Total earned:             {format_uzs_compact(stats.total_earned_uzs)}")
    print(f"Unique students:          {stats.unique_students}")
    print("=" * 60)

    if not visible:
        print("\nNo lessons match the current filters." if lesson_filter.is_active else "\nNo lessons yet.")
    else:
        display_lessons(visible, tz)
    print(stats.showing_label)

    if args.export:
        path = export_lessons(visible, config.output_dir / "reports", fmt=args.export)
        print(f"\nExported to: {path}")

    return 0


def cmd_lessons_update(args, client: ApiClient, tz: str) -> int:
    notifier = Notifier()
    notifier.subscribe(lambda message: print(f"✓ {message}"))
    service = LessonHistoryService(client, notifier=notifier)

    load_result = service.load()
    if load_result.is_failure:
        return report_failure(load_result, "Loading lesson history")

    lesson = service.find(args.lesson_id)
    if lesson is None:
        print(f"ERROR: Lesson #{args.lesson_id} not found")
        return 1

    print(f"\nLesson #{lesson.lesson_id} with {lesson.student_name}")
    print(
        f"  {format_date(lesson.start_time, tz)} "
        f"{format_time(lesson.start_time, tz)}-{format_time(lesson.end_time, tz)} | "
        f"{status_label(lesson.status)}"
    )

    if not can_edit(lesson):
        print(f"ERROR: No status changes are allowed for a {status_label(lesson.status)} lesson")
        return 1

    targets = allowed_next(lesson.status)
    print(f"  Allowed: {', '.join(s.label for s in targets)}")
    if args.status not in [s.value for s in targets]:
        print(f"ERROR: Cannot change a {status_label(lesson.status)} lesson to {status_label(args.status)}")
        return 1

    if args.status == LessonStatus.COMPLETED.value:
        print(f"\nNote: {COMPLETION_NOTICE}")

    if not args.yes and not ask_yes_no(f"Change status to {status_label(args.status)}?"):
        print("Cancelled")
        return 0

    result = service.transition(args.lesson_id, args.status)
    if result.is_failure:
        return report_failure(result, f"Updating lesson #{args.lesson_id}")

    updated = result.value
    if updated is not None:
        print(
            f"  Now: {status_label(updated.status)} | "
            f"payout {format_uzs(updated.payout_amount_uzs)} ({updated.payout_status})"
        )
    return 0


# Homework

def load_questions(path: Path) -> List[QuestionDraft]:
    """
    Read question drafts from a JSON file.

    The file holds one question object or a list of them, each shaped
    like ``{"text": ..., "points": 1, "options": [{"text": ..., "is_correct": true}]}``.

    Raises:
        ValueError: If the file is not a question object or a list of them
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a question object or a list of them")

    for index, item in enumerate(data, 1):
        if not isinstance(item, dict):
            raise ValueError(f"{path}: question {index} must be a JSON object")
        options = item.get("options", [])
        if not isinstance(options, list) or not all(isinstance(o, dict) for o in options):
            raise ValueError(f"{path}: options of question {index} must be a list of objects")
    return [QuestionDraft.from_dict(item) for item in data]


def question_from_args(args) -> QuestionDraft:
    correct = set(args.correct)
    return QuestionDraft(
        text=args.text or "",
        points=args.points,
        options=[
            OptionDraft(text=text, is_correct=index in correct)
            for index, text in enumerate(args.option, 1)
        ]
    )


def add_questions(add: Callable[[QuestionDraft], Result], questions: List[QuestionDraft]) -> int:
    """Add questions one at a time; stop at the first failure."""
    for index, question in enumerate(questions, 1):
        result = add(question)
        if result.is_failure:
            print(f"  ✗ Question {index}: {result.message}")
            return 1
        print(f"  ✓ Question {index} added")
    return 0


def cmd_homework_library(service: HomeworkService) -> int:
    result = service.list_library()
    if result.is_failure:
        return report_failure(result, "Loading homework library")

    items = result.value
    if not items:
        print("No homework templates yet.")
        return 0

    for item in items:
        count = f"{item.question_count} questions" if item.question_count is not None else ""
        print(f"{item.id:>5}  [{item.level}] {item.title}  {count}")
    return 0


def cmd_homework_create(args, service: HomeworkService) -> int:
    questions = load_questions(args.questions) if args.questions else []

    builder = HomeworkBuilder(service, args.title, args.description, args.level)
    result = builder.create()
    if result.is_failure:
        return report_failure(result, "Creating homework")

    print(f"✓ Homework #{builder.homework_id} created")
    status = add_questions(builder.add_question, questions)
    print(f"Homework #{builder.homework_id} has {builder.question_count} question(s)")
    return status


def cmd_homework_add_question(args, service: HomeworkService) -> int:
    if args.file:
        questions = load_questions(args.file)
    else:
        questions = [question_from_args(args)]

    return add_questions(
        lambda question: service.add_question(args.homework_id, question),
        questions
    )


def cmd_homework_delete(args, service: HomeworkService) -> int:
    if not args.yes and not ask_yes_no(f"Delete homework #{args.homework_id}?"):
        print("Cancelled")
        return 0

    result = service.delete_homework(args.homework_id)
    if result.is_failure:
        return report_failure(result, "Deleting homework")

    print(f"✓ {result.message}")
    return 0


def cmd_homework_lessons(service: HomeworkService, tz: str) -> int:
    result = service.list_my_lessons()
    if result.is_failure:
        return report_failure(result, "Loading lessons")

    for lesson in result.value:
        print(f"{lesson.id:>6}  {format_datetime(lesson.start_time, tz):18s}  {lesson.student_name}")
    return 0


def cmd_homework_assign(args, service: HomeworkService) -> int:
    result = service.assign(args.lesson_id, args.homework_id, args.due_date)
    if result.is_failure:
        return report_failure(result, "Assigning homework")
    return 0


def cmd_homework_sent(args, service: HomeworkService, config: Config, tz: str) -> int:
    result = service.list_teacher_assignments()
    if result.is_failure:
        print(result.message)
        return 1

    assignments = search_assignments(result.value, args.search)
    if not assignments:
        print("No assignments found.")
        return 0

    for a in assignments:
        outcome = f"{a.percentage}%" if a.is_completed else "pending"
        print(
            f"{a.id:>6}  {a.student_name[:22]:22s}  {a.homework_title[:30]:30s}  "
            f"due {format_date(a.due_date, tz):12s}  {outcome}"
        )

    if args.export:
        path = export_assignments(assignments, config.output_dir / "reports")
        print(f"\nExported to: {path}")
    return 0


def cmd_homework_details(args, service: HomeworkService) -> int:
    result = service.get_assignment_details(args.assignment_id)
    if result.is_failure:
        return report_failure(result, "Loading results")

    detail = result.value
    print(f"\n{detail.homework_title} - {detail.student_name}")
    print(f"Score: {detail.score} ({detail.percentage}%), {detail.correct_count}/{len(detail.answers)} correct")
    print("-" * 60)
    for index, answer in enumerate(detail.answers, 1):
        mark = "✓" if answer.is_correct else "✗"
        print(f"{index:2d}. {mark} {answer.question_text}")
        print(f"      answered: {answer.student_answer or '-'}")
        if not answer.is_correct:
            print(f"      correct:  {answer.correct_answer}")
        print(f"      {answer.points_earned}/{answer.max_points} pts")
    return 0


def cmd_homework_mine(args, service: HomeworkService, tz: str) -> int:
    result = service.list_my_assignments(pending_only=args.pending)
    if result.is_failure:
        print(result.message)
        return 1

    if not result.value:
        print("No homework assigned." if not args.pending else "No pending homework.")
        return 0

    for a in result.value:
        outcome = f"{a.score} ({a.percentage}%)" if a.is_completed else "to do"
        print(f"{a.id:>6}  {a.title[:30]:30s}  {a.teacher_name[:20]:20s}  due {format_month_day(a.due_date, tz):12s}  {outcome}")
    return 0


def answer_interactively(quiz: QuizSession):
    """Prompt for one option per question; an empty answer skips it."""
    for index, question in enumerate(quiz.quiz.questions, 1):
        print(f"\n{index}. {question.text} ({question.points} pts)")
        for number, option in enumerate(question.options, 1):
            print(f"   {number}) {option.text}")

        while True:
            raw = input("Your answer (Enter to skip): ").strip()
            if not raw:
                break
            if raw.isdigit() and 1 <= int(raw) <= len(question.options):
                quiz.select(question.id, question.options[int(raw) - 1].id)
                break
            print(f"   Enter a number from 1 to {len(question.options)}")


def cmd_homework_take(args, service: HomeworkService) -> int:
    open_result = service.open_quiz(args.assignment_id)
    if open_result.is_failure:
        return report_failure(open_result, "Loading homework")

    quiz = open_result.value
    print(f"\n{quiz.quiz.title}")
    if quiz.quiz.description:
        print(quiz.quiz.description)

    if quiz.is_completed:
        print(f"\nAlready submitted. Score: {quiz.result.score}/{quiz.result.total}")
        return 0

    answer_interactively(quiz)

    submit_result = quiz.submit(confirm=ask_yes_no)
    if submit_result.is_failure:
        print(submit_result.message)
        return 0 if submit_result.message == "Submission cancelled" else 1

    print(f"\n✓ Submitted. Score: {submit_result.value.score}/{submit_result.value.total}")
    return 0


def dispatch(args, client: ApiClient, config: Config, tz: str) -> int:
    if args.command == "lessons":
        if args.action == "list":
            return cmd_lessons_list(args, client, config, tz)
        return cmd_lessons_update(args, client, tz)

    notifier = Notifier()
    notifier.subscribe(lambda message: print(f"✓ {message}"))
    service = HomeworkService(client, notifier=notifier)

    handlers = {
        "library": lambda: cmd_homework_library(service),
        "create": lambda: cmd_homework_create(args, service),
        "add-question": lambda: cmd_homework_add_question(args, service),
        "delete": lambda: cmd_homework_delete(args, service),
        "lessons": lambda: cmd_homework_lessons(service, tz),
        "assign": lambda: cmd_homework_assign(args, service),
        "sent": lambda: cmd_homework_sent(args, service, config, tz),
        "details": lambda: cmd_homework_details(args, service),
        "mine": lambda: cmd_homework_mine(args, service, tz),
        "take": lambda: cmd_homework_take(args, service),
    }
    return handlers[args.action]()


def main(argv=None):
    """Main execution function."""
    args = parse_arguments(argv)

    try:
        config = Config()
        log_level = args.log_level or config.log_level

        setup_logger(
            "onlineschool",
            level=getattr(logging, log_level, logging.INFO),
            log_file=str(config.output_dir / "logs" / "onlineschool.log")
        )

        logger.info("Validating configuration")
        config.validate()
        config.create_output_directories()

        with ApiClient(config.api_url, timeout=config.request_timeout) as client:
            session = AuthSession(client)

            auth_result = authenticate(args, config, session)
            if auth_result.is_failure:
                return report_failure(auth_result, "Login")
            logger.debug(f"Session: {session.get_session_info()}")

            try:
                user = auth_result.value
                tz = get_user_tz(user.timezone or config.timezone)

                if args.command == "whoami":
                    print(f"{user.display_name} ({user.role}) <{user.email}>")
                    print(f"Timezone: {tz}")
                    return 0

                return dispatch(args, client, config, tz)
            finally:
                session.logout()

    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        logger.info("Interrupted by user")
        return 130

    except (ValueError, OSError) as e:
        logger.error(f"Error: {e}", exc_info=True)
        print(f"\nERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
