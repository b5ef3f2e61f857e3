from __future__ import annotations

import dataclasses
import logging
import os
from typing import Sequence

from .selector import FileSelector
from .selectormodel import FileRecord
from .selectorrule import All
from .selectorrule import Direction
from .selectorrule import InvalidRule
from .selectorrule import Newest
from .selectorrule import RelativePeriod
from .selectorrule import SelectionRule
from .selectorrule import TimeUnit
from .selectorrule import parse_rule


@dataclasses.dataclass(frozen=True)
class RetentionResult:
    """The outcome of a retention run over one batch of records."""

    kept: list[FileRecord]
    removed: list[FileRecord]
    failed: list[FileRecord]


def keep_rule_from_settings(
    keep_count: int | None = None,
    keep_days: int | None = None,
    keep_rule: str | None = None,
) -> SelectionRule:
    """
    Build the rule describing which files retention keeps.

    Exactly one setting must be given:
        keep_count: keep the newest N files.
        keep_days: keep files written within the last N days.
        keep_rule: any rule in the compact text form, see parse_rule().

    Raises:
        InvalidRule
    """
    given = [value for value in (keep_count, keep_days, keep_rule) if value is not None]
    if len(given) != 1:
        raise InvalidRule(
            "Exactly one of keep_count, keep_days, keep_rule is required: "
            f"keep_count={keep_count!r} keep_days={keep_days!r} keep_rule={keep_rule!r}"
        )

    if keep_count is not None:
        return Newest(keep_count)

    if keep_days is not None:
        return RelativePeriod(keep_days, TimeUnit.DAYS, Direction.WITHIN)

    return parse_rule(str(keep_rule))


class RetentionCleaner:
    """Delete every record a keep rule does not select."""

    logger = logging.getLogger(__name__)

    def __init__(self, selector: FileSelector, *, dry_run: bool = False) -> None:
        """
        Initialize a new RetentionCleaner.

        Args:
            selector: Selects the records to keep.

        Keyword Args:
            dry_run: Log what would be removed without deleting anything.
        """
        self._selector = selector
        self._dry_run = dry_run

    def plan(self, records: Sequence[FileRecord], keep_rule: SelectionRule) -> list[FileRecord]:
        """
        Return the records to remove, ascending by timestamp.

        Raises:
            InvalidRule
        """
        _, to_remove = self._partition(records, keep_rule)
        return to_remove

    def _partition(
        self,
        records: Sequence[FileRecord],
        keep_rule: SelectionRule,
    ) -> tuple[list[FileRecord], list[FileRecord]]:
        """Split records into the kept set and its complement."""
        kept = self._selector.select(records, keep_rule)
        kept_paths = {record.path for record in kept}
        ordered = self._selector.select(records, All())
        return kept, [record for record in ordered if record.path not in kept_paths]

    def clean(self, records: Sequence[FileRecord], keep_rule: SelectionRule) -> RetentionResult:
        """
        Remove the records the keep rule does not select.

        Files that already vanished count as removed. Other errors are logged
        and reported in the result; the remaining files are still processed.

        Raises:
            InvalidRule
        """
        kept, to_remove = self._partition(records, keep_rule)

        removed: list[FileRecord] = []
        failed: list[FileRecord] = []

        for record in to_remove:
            if self._dry_run:
                self.logger.info("Would remove '%s'", record.path)
                removed.append(record)
                continue

            try:
                os.remove(record.path)

            except FileNotFoundError:
                self.logger.debug("'%s' already removed.", record.path)

            except OSError as error:
                self.logger.error("Failed to remove '%s': %s", record.path, error)
                failed.append(record)
                continue

            self.logger.info("Removed '%s'", record.path)
            removed.append(record)

        self.logger.info(
            "Retention kept %s, removed %s, failed %s files",
            len(kept),
            len(removed),
            len(failed),
        )
        return RetentionResult(kept=kept, removed=removed, failed=failed)
