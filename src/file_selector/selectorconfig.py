from __future__ import annotations

import logging
import os
from configparser import ConfigParser

from .selectormodel import DateProperty
from .selectorretention import keep_rule_from_settings
from .selectorrule import SelectionRule

NEW_CONFIG = """\
[retention]
# Directories to clean, one per line. Each directory is cleaned independently.
directories =
    {log_directory}
# Glob matched against file names, case-insensitive.
filter = *.log
recurse = false

# Exclude directories from the walk.
# The following are regular expressions and are matched against the full path.
# Multiline values are combined into a single regular expression.
exclude_directories =

# One of: creation, last_write, last_access
date_property = last_write

# Set exactly one of the keep options. Files not kept are removed.
#   keep_count = 10         keep the newest 10 files
#   keep_days = 30          keep files from the last 30 days
#   keep_rule = oldest 5    any rule: all, oldest N, newest N, skip-oldest N,
#                           skip-newest N, period EXPR, between START END
keep_count = 10

[transcript]
# Record each cleanup run to a log file in this directory. Leave empty to disable.
directory = {transcript_directory}
prefix = file_selector
keep_count = 10

    """


class SelectorConfig:
    """Configuration for a retention cleanup run."""

    logger = logging.getLogger(__name__)

    def __init__(self, filepath: str) -> None:
        """Load the configuration from the given file."""
        self._config = ConfigParser()
        success = self._config.read(filepath)

        if not success:
            raise ValueError(f"Could not read config file at {filepath}")

        self.logger.debug("Loaded config from %s", filepath)

    @property
    def directories(self) -> list[str]:
        """Return the directories to clean. Will raise if not set."""
        config_line = self._config.get("retention", "directories")
        return [line.strip() for line in config_line.splitlines() if line.strip()]

    @property
    def name_filter(self) -> str:
        """Return the glob file names must match."""
        return self._config.get("retention", "filter", fallback="*") or "*"

    @property
    def recurse(self) -> bool:
        """Return whether to descend into subdirectories."""
        return self._config.getboolean("retention", "recurse", fallback=False)

    @property
    def exclude_directory_pattern(self) -> str | None:
        """Return the pattern to exclude directories from the walk."""
        config_line = self._config.get("retention", "exclude_directories", fallback="")
        lines = [line.strip() for line in config_line.splitlines() if line.strip()]
        return "|".join(lines) or None

    @property
    def date_property(self) -> DateProperty:
        """Return the timestamp files are compared by. Will raise if invalid."""
        value = self._config.get("retention", "date_property", fallback="last_write")
        try:
            return DateProperty(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown date_property: {value!r}") from None

    @property
    def keep_rule(self) -> SelectionRule:
        """Return the rule describing which files are kept. Will raise if invalid."""
        return keep_rule_from_settings(
            keep_count=self._optional_int("keep_count"),
            keep_days=self._optional_int("keep_days"),
            keep_rule=self._optional("keep_rule"),
        )

    def _optional(self, option: str) -> str | None:
        """Return a retention option, treating an empty value as unset."""
        value = self._config.get("retention", option, fallback="").strip()
        return value or None

    def _optional_int(self, option: str) -> int | None:
        value = self._optional(option)
        if value is None:
            return None

        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{option} must be an integer: {value!r}") from None

    @property
    def transcript_directory(self) -> str | None:
        """Return the transcript directory, or None when transcripts are disabled."""
        return self._config.get("transcript", "directory", fallback="").strip() or None

    @property
    def transcript_prefix(self) -> str:
        """Return the transcript file name prefix."""
        return self._config.get("transcript", "prefix", fallback="file_selector")

    @property
    def transcript_keep_count(self) -> int:
        """Return the number of transcripts to keep."""
        return self._config.getint("transcript", "keep_count", fallback=10)


def write_new_config(filename: str) -> None:
    """Write a new config file if one does not exist."""
    if os.path.exists(filename):
        return

    log_directory = os.path.join(os.path.dirname(os.path.abspath(filename)), "logs")
    config = NEW_CONFIG.format(
        log_directory=log_directory,
        transcript_directory=os.path.join(log_directory, "transcripts"),
    )

    with open(filename, "w") as config_file:
        config_file.write(config)
