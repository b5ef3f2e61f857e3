from __future__ import annotations

import dataclasses
import logging
import re
from typing import Sequence

from .selectormodel import FileRecord
from .selectorrule import InvalidRule


@dataclasses.dataclass(frozen=True)
class SearchMatch:
    """A line of a file that matched the search pattern."""

    path: str
    line_number: int
    line: str

    def __str__(self) -> str:
        """Return the match as path:line_number:line."""
        return f"{self.path}:{self.line_number}:{self.line}"


class ContentSearcher:
    """Search the contents of file records for a regular expression."""

    logger = logging.getLogger(__name__)

    def __init__(
        self,
        pattern: str,
        *,
        ignore_case: bool = False,
        encoding: str = "utf-8",
    ) -> None:
        """
        Initialize a new ContentSearcher.

        Raises:
            InvalidRule: The pattern is not a valid regular expression.
        """
        flags = re.IGNORECASE if ignore_case else 0
        try:
            self._pattern = re.compile(pattern, flags)
        except re.error as error:
            raise InvalidRule(f"Invalid search pattern {pattern!r}: {error}") from error

        self._encoding = encoding

    def search(self, records: Sequence[FileRecord]) -> list[SearchMatch]:
        """Return every matching line, in record order then line order."""
        matches: list[SearchMatch] = []

        for record in records:
            try:
                matches.extend(self._search_file(record.path))

            except OSError as error:
                self.logger.warning("Skipping unreadable file '%s': %s", record.path, error)

        self.logger.debug("Found %s matches in %s files", len(matches), len(records))
        return matches

    def _search_file(self, path: str) -> list[SearchMatch]:
        """
        Search a single file.

        Raises:
            OSError
        """
        matches: list[SearchMatch] = []

        with open(path, encoding=self._encoding, errors="replace") as file_in:
            for line_number, line in enumerate(file_in, start=1):
                line = line.rstrip("\r\n")
                if self._pattern.search(line):
                    matches.append(SearchMatch(path, line_number, line))

        return matches
