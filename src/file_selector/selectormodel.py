from __future__ import annotations

import dataclasses
import enum
import os
from datetime import datetime


class DateProperty(enum.Enum):
    """The file timestamp used when comparing records."""

    CREATION = "creation"
    LAST_WRITE = "last_write"
    LAST_ACCESS = "last_access"


@dataclasses.dataclass(frozen=True)
class FileRecord:
    """A single file as seen by a selection."""

    path: str
    size: int
    creation_time: datetime
    last_write_time: datetime
    last_access_time: datetime

    def __str__(self) -> str:
        """Return a string representation of the file."""
        lastwrite = self.last_write_time.strftime("%Y-%m-%d %H:%M:%S")
        return f"{lastwrite} {self.size} {self.path}"

    def timestamp(self, date_property: DateProperty) -> datetime:
        """Return the timestamp for the given date property."""
        if date_property is DateProperty.CREATION:
            return self.creation_time

        if date_property is DateProperty.LAST_ACCESS:
            return self.last_access_time

        return self.last_write_time

    @classmethod
    def from_path(cls, path: str) -> FileRecord:
        """
        Build a record from the file at the given path.

        Raises:
            FileNotFoundError
        """
        stat = os.stat(path)

        # st_birthtime is only reported on some platforms, st_ctime is the
        # creation time on Windows and the metadata change time elsewhere.
        created = getattr(stat, "st_birthtime", stat.st_ctime)

        return cls(
            path=os.path.abspath(path),
            size=stat.st_size,
            creation_time=datetime.fromtimestamp(created),
            last_write_time=datetime.fromtimestamp(stat.st_mtime),
            last_access_time=datetime.fromtimestamp(stat.st_atime),
        )
