from __future__ import annotations

import logging
from collections import deque

from .selectormodel import DateProperty
from .selectormodel import FileRecord
from .selectorsearch import SearchMatch


class SelectorEmitter:
    """Queue result lines and emit them to stdout and/or a file."""

    logger = logging.getLogger(__name__)

    def __init__(self, *, stdout: bool = True, output_file: str | None = None) -> None:
        """
        Initialize the emitter.

        Keyword Args:
            stdout: Print lines to stdout. Defaults to True.
            output_file: Append lines to this file when set.
        """
        self._stdout = stdout
        self._output_file = output_file
        self._lines: deque[str] = deque()

    def add_record(self, record: FileRecord, date_property: DateProperty) -> None:
        """Add a file record line using the timestamp of the date property."""
        timestamp = record.timestamp(date_property).strftime("%Y-%m-%d %H:%M:%S")
        self._lines.append(f"{timestamp} {record.size:>12} {record.path}")

    def add_match(self, match: SearchMatch) -> None:
        """Add a search match line."""
        self._lines.append(str(match))

    def emit(self, *, batch_size: int = 500) -> int:
        """
        Emit all stored lines to the configured targets. Empties the queue.

        Keyword Args:
            batch_size: The number of lines to emit at a time. Defaults to 500.

        Returns:
            The number of lines emitted.
        """
        count = 0
        while self._lines:
            lines = self._get_lines(batch_size)

            self.to_stdout(lines)
            self.to_file(lines)

            count += len(lines)

        self.logger.debug("Emitted %d lines.", count)
        return count

    def _get_lines(self, max_lines: int) -> list[str]:
        """Build a list of lines to emit, removing them from the emitter."""
        lines: list[str] = []
        while self._lines and len(lines) < max_lines:
            lines.append(self._lines.popleft())

        return lines

    def to_file(self, lines: list[str]) -> None:
        """Append lines to the output file, if one is configured."""
        if not self._output_file or not lines:
            return

        with open(self._output_file, "a", encoding="utf-8") as file_out:
            file_out.write("\n".join(lines) + "\n")

        self.logger.debug("Emitted %d lines to %s", len(lines), self._output_file)

    def to_stdout(self, lines: list[str]) -> None:
        """Print lines to stdout, if enabled."""
        if not self._stdout or not lines:
            return

        print("\n".join(lines))
