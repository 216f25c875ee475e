"""Parser for the date and time texts published on the academic calendar.

The calendar uses a small closed set of templates, told apart by their
whitespace token count:

    July 4, 2020                                  (3 tokens)
    August 23, 2019, Friday                       (4 tokens)
    September 26 – 28, 2019                       (5 tokens)
    August 26, 2019, Monday, 8 AM                 (6 tokens)
    October 14 & 15, 2019, Monday & Tuesday       (8 tokens)
    April 10, 2020, Friday, 9 AM – 5 PM           (9 tokens)

Weekday names are informational and never checked against the date.
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Sequence

logger = logging.getLogger(__name__)

DATE_FORMATS = [
    '%B %d %Y',      # Full month name
    '%b %d %Y',      # Abbreviated month name
]

TIME_FORMATS = [
    '%I %p',         # e.g. 8 AM
    '%I:%M %p',      # e.g. 8:30 AM
]

WEEKDAY_FORMATS = [
    '%A',            # Full weekday name
    '%a',            # Abbreviated weekday name
]

DASHES = ('–', '-')
AMPERSAND = ('&',)


class UnrecognizedDateFormat(ValueError):
    """Raised when a date text matches none of the calendar templates."""

    def __init__(self, text: str, reason: str = 'not in expected format'):
        super().__init__(f"Input {text!r} {reason}.")
        self.text = text
        self.reason = reason


def _field(token: str, comma: bool, text: str) -> str:
    """
    Check a token's trailing comma against the template and strip it.

    Args:
        token: Token as split from the date text
        comma: Whether the template puts a comma after this token
        text: Original date text, used for error reporting

    Returns:
        Token without its trailing comma

    Raises:
        UnrecognizedDateFormat: If the comma is missing or unexpected
    """
    if token.endswith(',') != comma:
        expected = 'a comma after' if comma else 'no comma after'
        raise UnrecognizedDateFormat(text, f"should have {expected} {token.rstrip(',')!r}")
    return token.rstrip(',')


def _check_separator(token: str, allowed: Sequence[str], text: str) -> None:
    """
    Check that a range separator token is one the template allows.

    Args:
        token: Separator token (e.g. "–" or "&")
        allowed: Accepted separators for this shape
        text: Original date text, used for error reporting

    Raises:
        UnrecognizedDateFormat: If the token is not an allowed separator
    """
    if token not in allowed:
        raise UnrecognizedDateFormat(text, f"has an unexpected separator {token!r}")


def _check_weekday(token: str, text: str) -> None:
    """
    Check that a token names a weekday.

    The weekday is not compared with the computed date.

    Args:
        token: Weekday token without its trailing comma
        text: Original date text, used for error reporting

    Raises:
        UnrecognizedDateFormat: If the token is not a weekday name
    """
    for fmt in WEEKDAY_FORMATS:
        try:
            datetime.strptime(token, fmt)
            return
        except ValueError:
            continue

    raise UnrecognizedDateFormat(text, f"has an invalid weekday {token!r}")


def _parse_day(month: str, day: str, year: str, text: str) -> datetime:
    """
    Parse a month/day/year token triple into a datetime at midnight.

    Args:
        month: Month name token
        day: Day of month token, trailing comma already checked and stripped
        year: Year token, trailing comma already checked and stripped
        text: Original date text, used for error reporting

    Returns:
        Parsed datetime

    Raises:
        UnrecognizedDateFormat: If no date format matches
    """
    value = f"{month} {day} {year}"

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    raise UnrecognizedDateFormat(text, f"has an invalid date {value!r}")


def _parse_time(tokens: Sequence[str], text: str) -> timedelta:
    """
    Parse hour (and optional minutes) plus AM/PM tokens.

    Args:
        tokens: Time tokens (e.g. ["8", "AM"] or ["8:30", "PM"])
        text: Original date text, used for error reporting

    Returns:
        Offset from midnight

    Raises:
        UnrecognizedDateFormat: If no time format matches
    """
    value = ' '.join(tokens).upper()

    for fmt in TIME_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
            return timedelta(hours=parsed.hour, minutes=parsed.minute)
        except ValueError:
            continue

    raise UnrecognizedDateFormat(text, f"has an invalid time {value!r}")


def _expand_range(start: datetime, end: datetime, text: str) -> List[datetime]:
    """Return every day from start to end, both inclusive."""
    if end < start:
        raise UnrecognizedDateFormat(text, 'has a range ending before it starts')

    days = (end - start).days
    return [start + timedelta(days=offset) for offset in range(days + 1)]


def _parse_dated_prefix(tokens: Sequence[str], text: str, weekday_comma: bool) -> datetime:
    """
    Parse the `Month D, YYYY, Weekday` prefix shared by the timed shapes.

    Args:
        tokens: At least four tokens
        text: Original date text, used for error reporting
        weekday_comma: Whether the template puts a comma after the weekday

    Returns:
        Parsed datetime at midnight
    """
    day = _field(tokens[1], True, text)
    year = _field(tokens[2], True, text)
    _check_weekday(_field(tokens[3], weekday_comma, text), text)
    return _parse_day(tokens[0], day, year, text)


def parse_single_date(tokens: Sequence[str], text: str) -> List[datetime]:
    """Shapes `Month D, YYYY` and `Month D, YYYY, Weekday`."""
    if len(tokens) == 4:
        return [_parse_dated_prefix(tokens, text, weekday_comma=False)]

    day = _field(tokens[1], True, text)
    year = _field(tokens[2], False, text)
    return [_parse_day(tokens[0], day, year, text)]


def parse_date_range(tokens: Sequence[str], text: str) -> List[datetime]:
    """Shapes `Month D – D2, YYYY` and `Month D1 & D2, YYYY, Weekday1 & Weekday2`."""
    weekdays = len(tokens) == 8

    _check_separator(tokens[2], AMPERSAND if weekdays else DASHES, text)
    first = _field(tokens[1], False, text)
    last = _field(tokens[3], True, text)
    year = _field(tokens[4], weekdays, text)

    if weekdays:
        _check_weekday(_field(tokens[5], False, text), text)
        _check_separator(tokens[6], AMPERSAND, text)
        _check_weekday(_field(tokens[7], False, text), text)

    start = _parse_day(tokens[0], first, year, text)
    end = _parse_day(tokens[0], last, year, text)
    return _expand_range(start, end, text)


def parse_date_with_time(tokens: Sequence[str], text: str) -> List[datetime]:
    """Shape `Month D, YYYY, Weekday, H AM/PM`."""
    day = _parse_dated_prefix(tokens, text, weekday_comma=True)
    return [day + _parse_time(tokens[4:6], text)]


def parse_date_with_time_range(
    tokens: Sequence[str],
    text: str,
    keep_start_time: bool = True
) -> List[datetime]:
    """
    Shape `Month D, YYYY, Weekday, H1 AM/PM – H2 AM/PM`.

    The whole template is checked, then the end time is dropped. With
    keep_start_time the result carries the start time, otherwise only
    the date.
    """
    day = _parse_dated_prefix(tokens, text, weekday_comma=True)
    start_time = _parse_time(tokens[4:6], text)
    _check_separator(tokens[6], DASHES, text)
    _parse_time(tokens[7:9], text)

    if keep_start_time:
        return [day + start_time]
    return [day]


SHAPES: Dict[int, Callable[[Sequence[str], str], List[datetime]]] = {
    3: parse_single_date,
    4: parse_single_date,
    5: parse_date_range,
    6: parse_date_with_time,
    8: parse_date_range,
}


def parse_date_text(text: str, keep_start_time: bool = True) -> List[datetime]:
    """
    Convert one calendar date text into one or more datetimes.

    Args:
        text: Date text as published (e.g. "September 26 – 28, 2019")
        keep_start_time: For the 9-token time range shape, keep the start
            time (True) or reduce to the date only (False)

    Returns:
        Non-empty list of datetimes in ascending order; date-only shapes
        yield midnight

    Raises:
        UnrecognizedDateFormat: If the token count is not a known shape or
            the tokens do not parse within their shape
    """
    tokens = text.split()

    try:
        if len(tokens) == 9:
            return parse_date_with_time_range(tokens, text, keep_start_time)

        shape = SHAPES.get(len(tokens))
        if shape is None:
            raise UnrecognizedDateFormat(text)

        return shape(tokens, text)

    except UnrecognizedDateFormat as e:
        logger.error(str(e))
        raise
