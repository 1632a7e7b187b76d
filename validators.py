import datetime
from dataclasses import dataclass
from typing import Any, Optional

from errors import ValidationError

DATE_FORMAT = "%Y-%m-%d"

# largest value SQLite can bind as an INTEGER
SQLITE_MAX_INTEGER = 2**63 - 1


@dataclass(frozen=True)
class LogFilters:
    """Optional bounds narrowing a log query."""

    date_from: Optional[str] = None
    date_to: Optional[str] = None
    limit: Optional[int] = None


@dataclass(frozen=True)
class NewExercise:
    description: str
    duration: int
    date: str


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_date(value: str, field: str) -> str:
    """Return ``value`` normalised to ``YYYY-MM-DD``."""
    try:
        parsed = datetime.datetime.strptime(value.strip(), DATE_FORMAT).date()
    except (AttributeError, ValueError):
        raise ValidationError(
            f"The parameter '{field}' must be provided in the format YYYY-MM-DD. "
            f"You provided '{value}'"
        )
    return parsed.isoformat()


def parse_limit(value: Any) -> Optional[int]:
    """Parse a row limit. Negative limits mean no limit, as in SQLite."""
    text = str(value).strip()
    digits = text[1:] if text.startswith("-") else text
    if not digits.isdecimal():
        raise ValidationError(
            f"The parameter 'limit' must be a whole number. You provided '{value}'"
        )
    limit = int(text)
    if limit < 0:
        return None
    return min(limit, SQLITE_MAX_INTEGER)


def parse_user_id(value: Any) -> int:
    text = str(value).strip()
    if not text.isdecimal():
        raise ValidationError(
            f"The user id must be a whole number. You provided '{value}'"
        )
    return int(text)


def parse_duration(value: Any) -> int:
    # bool is an int subclass and JSON true must not count as one minute
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        valid = False
    elif isinstance(value, float):
        valid = value.is_integer() and value > 0
    else:
        valid = value > 0
    if not valid:
        raise ValidationError(
            "Exercise duration should be a positive whole number. "
            f"You provided '{value}'"
        )
    return int(value)


def require_username(value: Any) -> str:
    if _blank(value):
        raise ValidationError("Username not provided")
    if not isinstance(value, str):
        raise ValidationError(f"Username must be a string. You provided '{value}'")
    return value.strip()


def validate_exercise(payload: dict, today: Optional[datetime.date] = None) -> NewExercise:
    """Validate the body of an exercise creation request."""
    description = payload.get("description")
    duration = payload.get("duration")
    date = payload.get("date")

    if not description or not duration:
        raise ValidationError("Please provide exercise description and duration")
    if not isinstance(description, str) or not description.strip():
        raise ValidationError(
            f"Exercise description should be text. You provided '{description}'"
        )
    minutes = parse_duration(duration)

    if date is not None and not isinstance(date, str):
        raise ValidationError(
            "The parameter 'date' should be a string in YYYY-MM-DD (ISO) format. "
            f"You provided '{date}'"
        )
    if _blank(date):
        day = (today or datetime.date.today()).isoformat()
    else:
        day = parse_date(date, "date")
    return NewExercise(description.strip(), minutes, day)


def validate_log_filters(
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    limit: Optional[str] = None,
) -> LogFilters:
    """Turn raw query string values into :class:`LogFilters`.

    Empty values are treated as absent. When both dates are supplied the
    lower bound has to be strictly before the upper one.
    """
    start = None if _blank(date_from) else parse_date(date_from, "from")
    end = None if _blank(date_to) else parse_date(date_to, "to")
    count = None if _blank(limit) else parse_limit(limit)
    if start and end and start >= end:
        raise ValidationError("'from' must be a date before 'to'!")
    return LogFilters(start, end, count)
