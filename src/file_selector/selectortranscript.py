from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import TYPE_CHECKING
from typing import Callable

from .selector import FileSelector
from .selectormodel import DateProperty
from .selectorretention import RetentionCleaner
from .selectorretention import RetentionResult
from .selectorrule import Newest
from .selectorwalker import FileWalker

if TYPE_CHECKING:
    from types import TracebackType

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class Transcript:
    """A per-run log file with a rolling window of previous runs."""

    logger = logging.getLogger(__name__)

    def __init__(
        self,
        directory: str,
        *,
        prefix: str = "file_selector",
        keep_count: int = 10,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """
        Initialize a new Transcript.

        Use with the `with` statement so the log handler is always detached
        and old transcripts are cleaned up:

            with Transcript("logs") as transcript:
                ...

        Args:
            directory: The directory transcripts are written to.

        Keyword Args:
            prefix: Transcript file names are <prefix>_<timestamp>.log.
            keep_count: The number of transcripts to keep, including the
                current one. Must be at least 1.
            clock: Returns the time used to name the transcript.
        """
        if keep_count < 1:
            raise ValueError(f"keep_count must be at least 1: {keep_count}")

        self._directory = directory
        self._prefix = prefix
        self._keep_count = keep_count
        self._clock = clock
        self._handler: logging.FileHandler | None = None
        self.path: str | None = None

    def __enter__(self) -> Transcript:
        """Enter a context manager."""
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Exit a context manager."""
        self.stop()
        self.clean_old_transcripts()

    def start(self) -> None:
        """Attach a file handler for a new transcript to the root logger."""
        os.makedirs(self._directory, exist_ok=True)

        stamp = self._clock().strftime("%Y%m%d_%H%M%S_%f")
        self.path = os.path.join(self._directory, f"{self._prefix}_{stamp}.log")

        self._handler = logging.FileHandler(self.path, encoding="utf-8")
        self._handler.setLevel(logging.DEBUG)
        self._handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logging.getLogger().addHandler(self._handler)

        self.logger.info("Transcript started: %s", self.path)

    def stop(self) -> None:
        """Detach and close the transcript file handler."""
        if self._handler is None:
            return

        self.logger.info("Transcript stopped: %s", self.path)
        logging.getLogger().removeHandler(self._handler)
        self._handler.close()
        self._handler = None

    def clean_old_transcripts(self) -> RetentionResult:
        """Remove all but the newest keep_count transcripts."""
        walker = FileWalker(self._directory, name_filter=f"{self._prefix}_*.log")
        cleaner = RetentionCleaner(FileSelector(DateProperty.LAST_WRITE))
        return cleaner.clean(walker.walk(), Newest(self._keep_count))
