"""
Report export utilities.

Writes lesson history and assignment lists to JSON or CSV on explicit
request from the command line. Nothing here is read back by the client.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List

import pandas as pd

from ..models.homework import Assignment
from ..models.lesson import LessonHistoryItem, status_label
from .formatting import duration_minutes


logger = logging.getLogger(__name__)

LESSON_COLUMNS = [
    "lesson_id",
    "start_time",
    "end_time",
    "duration_min",
    "student_name",
    "status",
    "status_label",
    "credits_consumed",
    "teacher_rate_uzs",
    "payout_amount_uzs",
    "payout_status",
]


def save_json(data: Dict[str, Any], filepath: Path) -> bool:
    """
    Save data to a JSON file, creating parent directories.

    Returns:
        True if save successful, False otherwise
    """
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

        logger.debug(f"Saved JSON file: {filepath}")
        return True

    except (OSError, TypeError) as e:
        logger.error(f"Failed to save JSON file {filepath}: {e}", exc_info=True)
        return False


def save_csv(df: pd.DataFrame, filepath: Path) -> bool:
    """
    Save DataFrame to a UTF-8 CSV file.

    Returns:
        True if save successful, False otherwise
    """
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(filepath, index=False, encoding='utf-8')

        logger.debug(f"Saved CSV file: {filepath}")
        return True

    except OSError as e:
        logger.error(f"Failed to save CSV file {filepath}: {e}", exc_info=True)
        return False


def generate_filename(prefix: str, extension: str) -> str:
    """
    Generate timestamped filename, e.g. "lesson_history_20260220_174500.csv".
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}.{extension}"


def lessons_to_dataframe(lessons: Iterable[LessonHistoryItem]) -> pd.DataFrame:
    """
    Flatten lessons into a DataFrame with a fixed column order.

    An empty input yields an empty frame that still has the columns.
    """
    rows = [
        {
            "lesson_id": lesson.lesson_id,
            "start_time": lesson.start_time,
            "end_time": lesson.end_time,
            "duration_min": duration_minutes(lesson.start_time, lesson.end_time),
            "student_name": lesson.student_name,
            "status": lesson.status,
            "status_label": status_label(lesson.status),
            "credits_consumed": lesson.credits_consumed,
            "teacher_rate_uzs": lesson.teacher_rate_uzs,
            "payout_amount_uzs": lesson.payout_amount_uzs,
            "payout_status": lesson.payout_status,
        }
        for lesson in lessons
    ]
    return pd.DataFrame(rows, columns=LESSON_COLUMNS)


def assignments_to_dataframe(assignments: Iterable[Assignment]) -> pd.DataFrame:
    rows = [assignment.to_dict() for assignment in assignments]
    return pd.DataFrame(
        rows,
        columns=["id", "student_name", "homework_title", "due_date", "is_completed", "score", "percentage"],
    )


def export_lessons(
    lessons: List[LessonHistoryItem],
    output_dir: Path,
    fmt: str = "csv"
) -> Path:
    """
    Write lessons to ``output_dir`` as CSV or JSON.

    Args:
        lessons: Lessons to export (typically the filtered view)
        output_dir: Target directory
        fmt: "csv" or "json"

    Returns:
        Path of the written file

    Raises:
        ValueError: If ``fmt`` is not supported
        OSError: If the file could not be written
    """
    if fmt not in ("csv", "json"):
        raise ValueError(f"Unsupported export format: {fmt}")

    filepath = output_dir / generate_filename("lesson_history", fmt)

    if fmt == "csv":
        ok = save_csv(lessons_to_dataframe(lessons), filepath)
    else:
        ok = save_json(
            {
                "exported_at": datetime.now().isoformat(),
                "count": len(lessons),
                "lessons": [lesson.to_dict() for lesson in lessons],
            },
            filepath
        )

    if not ok:
        raise OSError(f"Could not write {filepath}")

    logger.info(f"Exported {len(lessons)} lessons to {filepath}")
    return filepath


def export_assignments(assignments: List[Assignment], output_dir: Path) -> Path:
    """
    Write the teacher's assignment list to a CSV file.

    Raises:
        OSError: If the file could not be written
    """
    filepath = output_dir / generate_filename("assignments", "csv")
    if not save_csv(assignments_to_dataframe(assignments), filepath):
        raise OSError(f"Could not write {filepath}")

    logger.info(f"Exported {len(assignments)} assignments to {filepath}")
    return filepath
