from __future__ import annotations

import dataclasses
import enum
import re
from datetime import datetime
from datetime import timedelta
from typing import Union

PERIOD_PATTERN = re.compile(r"(-)?(\d{1,6})([smhd])", re.IGNORECASE | re.ASCII)


class InvalidRule(ValueError):
    """Raised when a selection rule is malformed or contradicts itself."""


class TimeUnit(enum.Enum):
    """Units accepted by a relative period."""

    SECONDS = "s"
    MINUTES = "m"
    HOURS = "h"
    DAYS = "d"

    @property
    def seconds(self) -> int:
        """Return the length of one unit in seconds."""
        return _UNIT_SECONDS[self]


_UNIT_SECONDS = {
    TimeUnit.SECONDS: 1,
    TimeUnit.MINUTES: 60,
    TimeUnit.HOURS: 3600,
    TimeUnit.DAYS: 86400,
}


class Direction(enum.Enum):
    """Which side of a relative period cutoff is kept."""

    WITHIN = "within"
    OLDER = "older"


@dataclasses.dataclass(frozen=True)
class _CountRule:
    count: int

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise InvalidRule unless count is a non-negative integer."""
        if isinstance(self.count, bool) or not isinstance(self.count, int):
            raise InvalidRule(f"{type(self).__name__} count must be an integer: {self.count!r}")

        if self.count < 0:
            raise InvalidRule(f"{type(self).__name__} count cannot be negative: {self.count}")


@dataclasses.dataclass(frozen=True)
class Oldest(_CountRule):
    """Keep the `count` records with the smallest timestamps."""


@dataclasses.dataclass(frozen=True)
class Newest(_CountRule):
    """Keep the `count` records with the largest timestamps."""


@dataclasses.dataclass(frozen=True)
class SkipOldest(_CountRule):
    """Drop the `count` records with the smallest timestamps."""


@dataclasses.dataclass(frozen=True)
class SkipNewest(_CountRule):
    """Drop the `count` records with the largest timestamps."""


@dataclasses.dataclass(frozen=True)
class RelativePeriod:
    """Keep records on one side of `now - amount * unit`."""

    amount: int
    unit: TimeUnit
    direction: Direction

    def __post_init__(self) -> None:
        self.validate()

    def __str__(self) -> str:
        """Return the period in its compact expression form, e.g. -2h."""
        sign = "-" if self.direction is Direction.WITHIN else ""
        return f"{sign}{self.amount}{self.unit.value}"

    def validate(self) -> None:
        """Raise InvalidRule for a non-positive amount or unknown unit."""
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise InvalidRule(f"Period amount must be an integer: {self.amount!r}")

        if self.amount <= 0:
            raise InvalidRule(f"Period amount must be positive: {self.amount}")

        if not isinstance(self.unit, TimeUnit):
            raise InvalidRule(f"Unrecognized period unit: {self.unit!r}")

        if not isinstance(self.direction, Direction):
            raise InvalidRule(f"Unrecognized period direction: {self.direction!r}")

    def cutoff(self, now: datetime) -> datetime:
        """Return the moment the period reaches back to from `now`."""
        return now - timedelta(seconds=self.amount * self.unit.seconds)

    @classmethod
    def parse(cls, expression: str) -> RelativePeriod:
        """
        Parse a compact period expression such as "-2h" or "30d".

        A leading "-" keeps files inside the period (newer than the cutoff),
        no sign keeps files older than the period.

        Raises:
            InvalidRule
        """
        match = PERIOD_PATTERN.fullmatch(expression)
        if not match:
            raise InvalidRule(f"Invalid period expression: {expression!r}")

        sign, amount, unit = match.groups()
        direction = Direction.WITHIN if sign else Direction.OLDER

        return cls(int(amount), TimeUnit(unit.lower()), direction)


@dataclasses.dataclass(frozen=True)
class DateRange:
    """
    Keep records strictly between `start` and `end`.

    Timezone aware endpoints are converted to naive local time, the same
    clock file timestamps are read in.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _naive_local(self.start))
        object.__setattr__(self, "end", _naive_local(self.end))
        self.validate()

    def validate(self) -> None:
        """Raise InvalidRule unless start is strictly before end."""
        try:
            ordered = self.start < self.end
        except TypeError:
            # Naive and timezone aware datetimes cannot be compared
            raise InvalidRule(f"Cannot compare range dates: {self.start!r} - {self.end!r}") from None

        if not ordered:
            raise InvalidRule(f"Date range start must be before end: {self.start} - {self.end}")


def _naive_local(value: datetime) -> datetime:
    if not isinstance(value, datetime) or value.tzinfo is None:
        return value

    try:
        return value.astimezone().replace(tzinfo=None)
    except (OverflowError, ValueError):
        raise InvalidRule(f"Date out of range for local time: {value!r}") from None


@dataclasses.dataclass(frozen=True)
class All:
    """Keep every record."""

    def validate(self) -> None:
        """All is always valid."""


SelectionRule = Union[Oldest, Newest, SkipOldest, SkipNewest, RelativePeriod, DateRange, All]
RULE_TYPES = (Oldest, Newest, SkipOldest, SkipNewest, RelativePeriod, DateRange, All)

_COUNT_KEYWORDS = {
    "oldest": Oldest,
    "newest": Newest,
    "skip-oldest": SkipOldest,
    "skip-newest": SkipNewest,
}


def parse_date(value: str) -> datetime:
    """
    Parse an ISO-8601 date or datetime.

    Raises:
        InvalidRule
    """
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise InvalidRule(f"Invalid date: {value!r}") from None


def parse_rule(text: str) -> SelectionRule:
    """
    Parse the compact rule form used in configuration files.

    Accepted forms:
        all
        oldest N | newest N | skip-oldest N | skip-newest N
        period EXPR
        between START END

    Raises:
        InvalidRule
    """
    keyword, *args = text.split() or [""]
    keyword = keyword.lower()

    if keyword == "all" and not args:
        return All()

    if keyword in _COUNT_KEYWORDS and len(args) == 1:
        if not args[0].isdecimal():
            raise InvalidRule(f"Invalid count in rule: {text!r}")
        return _COUNT_KEYWORDS[keyword](int(args[0]))

    if keyword == "period" and len(args) == 1:
        return RelativePeriod.parse(args[0])

    if keyword == "between" and len(args) == 2:
        return DateRange(parse_date(args[0]), parse_date(args[1]))

    raise InvalidRule(f"Unrecognized rule: {text!r}")
