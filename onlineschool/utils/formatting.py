"""
Date/time and currency formatting.

All displayed timestamps go through these functions. Timestamps are shown
in the user's timezone (Asia/Tashkent by default) as "20 Feb 2026, 17:45".
Monetary values are in UZS (Uzbek so'm).
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import DEFAULT_TIMEZONE


logger = logging.getLogger(__name__)

Amount = Union[int, float, str, None]

MISSING = "-"
MISSING_UZS = "— UZS"


def get_user_tz(user_timezone: Optional[str] = None) -> str:
    """
    Return the user's IANA timezone, falling back to the default.

    Examples:
        >>> get_user_tz("  ")
        'Asia/Tashkent'
        >>> get_user_tz("Europe/London")
        'Europe/London'
    """
    if user_timezone and user_timezone.strip():
        return user_timezone.strip()
    return DEFAULT_TIMEZONE


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO 8601 string, returning None if it is invalid.

    A trailing ``Z`` is accepted. Timestamps without an offset are
    taken as UTC.
    """
    if not value:
        return None

    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable timestamp: {value!r}")
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _localize(value: str, tz: Optional[str]) -> Optional[datetime]:
    parsed = parse_iso(value)
    if parsed is None:
        return None

    try:
        zone = ZoneInfo(tz or DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {tz!r}, using {DEFAULT_TIMEZONE}")
        zone = ZoneInfo(DEFAULT_TIMEZONE)

    return parsed.astimezone(zone)


def format_datetime(value: str, tz: Optional[str] = None) -> str:
    """
    Full date and time, 24-hour.

    Examples:
        >>> format_datetime("2026-02-20T12:45:00Z")
        '20 Feb 2026, 17:45'
        >>> format_datetime("not a date")
        '-'
    """
    local = _localize(value, tz)
    if local is None:
        return MISSING
    return local.strftime("%d %b %Y, %H:%M")


def format_date(value: str, tz: Optional[str] = None) -> str:
    """
    Date only, e.g. "20 Feb 2026".
    """
    local = _localize(value, tz)
    if local is None:
        return MISSING
    return local.strftime("%d %b %Y")


def format_time(value: str, tz: Optional[str] = None) -> str:
    """Time only (24-hour), e.g. "17:45"."""
    local = _localize(value, tz)
    if local is None:
        return MISSING
    return local.strftime("%H:%M")


def format_month_day(value: str, tz: Optional[str] = None) -> str:
    """Day and long month, e.g. "20 February"."""
    local = _localize(value, tz)
    if local is None:
        return MISSING
    return f"{local.day} {local.strftime('%B')}"


def duration_minutes(start: str, end: str) -> int:
    """
    Whole minutes between two ISO timestamps, rounded.

    Returns 0 if either timestamp is invalid.

    Examples:
        >>> duration_minutes("2026-02-20T12:00:00Z", "2026-02-20T12:50:00Z")
        50
    """
    start_dt = parse_iso(start)
    end_dt = parse_iso(end)
    if start_dt is None or end_dt is None:
        return 0
    return round((end_dt - start_dt).total_seconds() / 60)


def _to_number(amount: Amount) -> Optional[float]:
    if amount is None:
        return None
    if isinstance(amount, str):
        try:
            return float(amount)
        except ValueError:
            return None
    number = float(amount)
    if number != number:  # NaN
        return None
    return number


def format_uzs(amount: Amount) -> str:
    """
    Format an amount as whole UZS with space-grouped thousands.

    Examples:
        >>> format_uzs(1800000)
        '1 800 000 UZS'
        >>> format_uzs("90000.4")
        '90 000 UZS'
        >>> format_uzs(None)
        '— UZS'
    """
    number = _to_number(amount)
    if number is None:
        return MISSING_UZS
    return f"{round(number):,}".replace(",", " ") + " UZS"


def format_uzs_compact(amount: Amount) -> str:
    """
    Compact UZS for summary cards.

    Examples:
        >>> format_uzs_compact(1800000)
        '1.8M UZS'
        >>> format_uzs_compact(45000)
        '45K UZS'
        >>> format_uzs_compact(500)
        '500 UZS'
    """
    number = _to_number(amount)
    if number is None:
        return MISSING_UZS

    if number >= 1_000_000_000:
        return f"{number / 1_000_000_000:.1f}B UZS"
    if number >= 1_000_000:
        return f"{number / 1_000_000:.1f}M UZS"
    if number >= 1_000:
        return f"{number / 1_000:.0f}K UZS"
    if number.is_integer():
        return f"{int(number)} UZS"
    return f"{number} UZS"
