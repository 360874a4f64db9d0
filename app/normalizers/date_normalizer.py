"""
app/normalizers/date_normalizer.py

Ordered chain of date-format strategies producing ``YYYY-MM-DD`` strings.

Each strategy is independent; the chain order lives in DEFAULT_DATE_STRATEGIES,
so adding or reordering a format is a change to that tuple only.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Sequence

from dateutil import parser as dateutil_parser

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DOTTED_DAY_FIRST = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$")
_SLASHED_MONTH_FIRST = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")

# Two distinct fallbacks: a component missing from the input shows up as a
# difference between the two parses.
_PROBE_DEFAULTS = (datetime(2000, 1, 1), datetime(2004, 12, 28))


@dataclass(frozen=True)
class DateStrategy:
    """
    One named date format. ``parse`` returns ISO text or None when the input
    is not in this format.
    """

    name: str
    parse: Callable[[str], "str | None"]


def _to_iso(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def parse_iso_date(value: str) -> str | None:
    """
    Already in storage form: passed through as-is, without a calendar check.
    """

    return value if _ISO_DATE.match(value) else None


def parse_dotted_day_first(value: str) -> str | None:
    match = _DOTTED_DAY_FIRST.match(value)
    if match is None:
        return None
    day, month, year = (int(part) for part in match.groups())
    return _to_iso(year, month, day)


def parse_slashed_month_first(value: str) -> str | None:
    match = _SLASHED_MONTH_FIRST.match(value)
    if match is None:
        return None
    month, day, year = (int(part) for part in match.groups())
    return _to_iso(year, month, day)


def parse_generic_calendar(value: str) -> str | None:
    """
    Free-form calendar parse. Timezone-aware values are moved to UTC before
    the calendar fields are read; inputs without a full year, month and day
    are refused.
    """

    parsed: list[datetime] = []
    for default in _PROBE_DEFAULTS:
        try:
            parsed.append(dateutil_parser.parse(value, default=default))
        except (ValueError, OverflowError):
            return None

    first, second = parsed
    if first.date() != second.date():
        return None
    if first.tzinfo is not None:
        first = first.astimezone(timezone.utc)
    return first.date().isoformat()


ISO_DATE = DateStrategy(name="iso_date", parse=parse_iso_date)
DOTTED_DAY_FIRST = DateStrategy(name="dotted_day_first", parse=parse_dotted_day_first)
SLASHED_MONTH_FIRST = DateStrategy(name="slashed_month_first", parse=parse_slashed_month_first)
GENERIC_CALENDAR = DateStrategy(name="generic_calendar", parse=parse_generic_calendar)

DEFAULT_DATE_STRATEGIES: tuple[DateStrategy, ...] = (
    ISO_DATE,
    DOTTED_DAY_FIRST,
    SLASHED_MONTH_FIRST,
    GENERIC_CALENDAR,
)


class DateNormalizer:
    """
    Runs strategies in order; the first non-None result wins.
    """

    def __init__(self, strategies: Sequence[DateStrategy] = DEFAULT_DATE_STRATEGIES) -> None:
        self._strategies = tuple(strategies)

    @property
    def strategies(self) -> tuple[DateStrategy, ...]:
        return self._strategies

    def normalize(self, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        if not text:
            return None
        for strategy in self._strategies:
            result = strategy.parse(text)
            if result is not None:
                return result
        return None
