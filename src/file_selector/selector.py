from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable
from typing import Sequence

from .selectormodel import DateProperty
from .selectormodel import FileRecord
from .selectorrule import All
from .selectorrule import DateRange
from .selectorrule import Direction
from .selectorrule import InvalidRule
from .selectorrule import Newest
from .selectorrule import Oldest
from .selectorrule import RULE_TYPES
from .selectorrule import RelativePeriod
from .selectorrule import SelectionRule
from .selectorrule import SkipNewest
from .selectorrule import SkipOldest


class FileSelector:
    """Select a chronologically ordered subset of file records."""

    logger = logging.getLogger(__name__)

    def __init__(
        self,
        date_property: DateProperty = DateProperty.LAST_WRITE,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """
        Initialize a new FileSelector.

        Args:
            date_property: The timestamp every record is compared by.

        Keyword Args:
            clock: Returns the reference "now" for relative periods. It is
                read once per call to select().
        """
        self._date_property = date_property
        self._clock = clock

    @property
    def date_property(self) -> DateProperty:
        """Return the timestamp records are compared by."""
        return self._date_property

    def select(
        self,
        records: Sequence[FileRecord],
        rule: SelectionRule,
    ) -> list[FileRecord]:
        """
        Return the records the rule keeps, ascending by timestamp.

        Records with equal timestamps keep their input order. Counts larger
        than the number of records are clamped.

        Raises:
            InvalidRule: The rule is malformed. Raised before any filtering.
        """
        if not isinstance(rule, RULE_TYPES):
            raise InvalidRule(f"Unrecognized selection rule: {rule!r}")
        rule.validate()

        now = self._clock()
        ordered = sorted(records, key=self._timestamp)

        if isinstance(rule, DateRange):
            self._check_comparable(ordered, rule.start)
        elif isinstance(rule, RelativePeriod):
            self._check_comparable(ordered, now)

        selected = self._apply(ordered, rule, now)

        self.logger.debug(
            "Selected %s of %s records with %s by %s",
            len(selected),
            len(ordered),
            rule,
            self._date_property.value,
        )
        return selected

    def _timestamp(self, record: FileRecord) -> datetime:
        return record.timestamp(self._date_property)

    def _check_comparable(self, ordered: list[FileRecord], reference: datetime) -> None:
        """Raise InvalidRule if a record timestamp cannot be compared to the reference."""
        reference_aware = reference.tzinfo is not None

        for record in ordered:
            if (self._timestamp(record).tzinfo is not None) != reference_aware:
                raise InvalidRule(
                    f"Cannot compare {record.path} timestamp with {reference!r}: "
                    "mixed naive and timezone aware datetimes"
                )

    def _apply(
        self,
        ordered: list[FileRecord],
        rule: SelectionRule,
        now: datetime,
    ) -> list[FileRecord]:
        """Apply the rule to records already sorted ascending."""
        if isinstance(rule, Oldest):
            return ordered[: rule.count]

        if isinstance(rule, Newest):
            # ordered[-0:] is the whole list
            return ordered[len(ordered) - min(rule.count, len(ordered)) :]

        if isinstance(rule, SkipOldest):
            return ordered[rule.count :]

        if isinstance(rule, SkipNewest):
            return ordered[: max(len(ordered) - rule.count, 0)]

        if isinstance(rule, RelativePeriod):
            cutoff = rule.cutoff(now)
            if rule.direction is Direction.WITHIN:
                return [rec for rec in ordered if self._timestamp(rec) > cutoff]
            return [rec for rec in ordered if self._timestamp(rec) < cutoff]

        if isinstance(rule, DateRange):
            return [
                rec
                for rec in ordered
                if rule.start < self._timestamp(rec) < rule.end
            ]

        if isinstance(rule, All):
            return ordered

        raise InvalidRule(f"Unrecognized selection rule: {rule!r}")


def select(
    records: Sequence[FileRecord],
    rule: SelectionRule,
    date_property: DateProperty = DateProperty.LAST_WRITE,
    *,
    now: datetime | None = None,
) -> list[FileRecord]:
    """Select records with a one-off FileSelector. See FileSelector.select()."""
    clock = (lambda: now) if now is not None else datetime.now
    return FileSelector(date_property, clock=clock).select(records, rule)
