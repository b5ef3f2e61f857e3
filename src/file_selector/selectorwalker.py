from __future__ import annotations

import fnmatch
import logging
import os
import re

from .selectormodel import FileRecord
from .selectorrule import InvalidRule


class FileWalker:
    """Enumerate the files below a root directory as FileRecords."""

    logger = logging.getLogger(__name__)

    def __init__(
        self,
        root: str,
        *,
        recurse: bool = False,
        name_filter: str = "*",
        exclude_directory_pattern: str | None = None,
    ) -> None:
        """
        Initialize a new FileWalker.

        Args:
            root: The directory to enumerate.

        Keyword Args:
            recurse: Descend into subdirectories. Defaults to False.
            name_filter: Glob matched against file names, case-insensitive.
            exclude_directory_pattern: Regular expression matched against the
                full directory path. Matching directories are skipped.

        Raises:
            InvalidRule: The exclude pattern is not a valid regular expression.
        """
        self._root = root
        self._recurse = recurse
        self._name_filter = name_filter or "*"
        self._exclude_directory = None

        if exclude_directory_pattern:
            try:
                self._exclude_directory = re.compile(exclude_directory_pattern)
            except re.error as error:
                raise InvalidRule(
                    f"Invalid exclude pattern {exclude_directory_pattern!r}: {error}"
                ) from None

    @property
    def root(self) -> str:
        """Return the root directory being walked."""
        return self._root

    def walk(self) -> list[FileRecord]:
        """
        Walk the root directory and return the matching files.

        Raises:
            FileNotFoundError: The root directory does not exist.
        """
        if not os.path.isdir(self._root):
            raise FileNotFoundError(f"Root directory not found: {self._root}")

        self.logger.debug("Walking directory: %s", self._root)
        records: list[FileRecord] = []

        for dirpath, dirnames, filenames in os.walk(os.path.abspath(self._root)):
            if not self._recurse:
                dirnames.clear()

            if self._is_ignored_directory(dirpath):
                self.logger.debug("Ignoring directory '%s'", dirpath)
                dirnames.clear()
                continue

            records.extend(self._build_records(dirpath, filenames))

        self.logger.debug("Found %s files below %s", len(records), self._root)
        return records

    def _is_ignored_filename(self, filename: str) -> bool:
        """True if the filename does not match the name filter."""
        return not fnmatch.fnmatch(filename.lower(), self._name_filter.lower())

    def _is_ignored_directory(self, dirpath: str) -> bool:
        """True if the directory path is in the excluded pattern."""
        ptn = self._exclude_directory
        if ptn is not None and ptn.search(dirpath):
            return True

        return False

    def _build_records(self, dirpath: str, filenames: list[str]) -> list[FileRecord]:
        """Parses the filenames into FileRecord objects."""
        records: list[FileRecord] = []

        for filename in filenames:
            if self._is_ignored_filename(filename):
                continue

            filepath = os.path.join(dirpath, filename)

            try:
                records.append(FileRecord.from_path(filepath))

            except FileNotFoundError:
                # The file has been moved after the walk listed it
                self.logger.debug("'%s' moved during walk.", filepath)
                continue

        return records
