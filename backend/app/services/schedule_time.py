from __future__ import annotations

import re

from app.core.exceptions import ScheduleValidationError, ValidationKind

# Hour may be written with one or two digits ("8:00" and "08:00").
TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")
MINUTES_PER_DAY = 24 * 60
MAX_TIME_LENGTH = len("HH:MM")


def _shown(value: object) -> str:
    text = repr(value)
    return text if len(text) <= 16 else f"{text[:16]}..."


def parse_time(value: str, field: str | None = None) -> int:
    """Convert an ``HH:MM`` wall-clock string to minutes since midnight.

    Numbers, ``None`` and strings longer than ``HH:MM`` are malformed too.
    """
    match = None
    if isinstance(value, str) and len(value) <= MAX_TIME_LENGTH:
        match = TIME_PATTERN.fullmatch(value)
    if match is None:
        raise ScheduleValidationError(
            f"Time {_shown(value)} must be in HH:MM 24-hour format",
            kind=ValidationKind.malformed_time,
            field=field,
        )
    hours, minutes = match.groups()
    return int(hours) * 60 + int(minutes)


def format_minutes(minutes: int) -> str:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"Minute of day out of range: {minutes}")
    hours, rest = divmod(minutes, 60)
    return f"{hours:02d}:{rest:02d}"


def normalize_time(value: str, field: str | None = None) -> str:
    return format_minutes(parse_time(value, field=field))


def is_valid_range(start: str, end: str) -> bool:
    """True when both ends parse and the range has a positive length.

    Malformed input raises instead of returning False.
    """
    start_minutes = parse_time(start, field="startTime")
    return parse_time(end, field="endTime") > start_minutes
