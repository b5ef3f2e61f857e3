from __future__ import annotations

import configparser
import os
import tempfile
from pathlib import Path

import pytest

from file_selector.selectorconfig import NEW_CONFIG
from file_selector.selectorconfig import SelectorConfig
from file_selector.selectorconfig import write_new_config
from file_selector.selectormodel import DateProperty
from file_selector.selectorrule import Direction
from file_selector.selectorrule import InvalidRule
from file_selector.selectorrule import Newest
from file_selector.selectorrule import RelativePeriod
from file_selector.selectorrule import SkipOldest
from file_selector.selectorrule import TimeUnit

CONFIG_PATH = "tests/test_config.ini"


def write_config(tmp_path: Path, content: str) -> SelectorConfig:
    filepath = tmp_path / "config.ini"
    filepath.write_text(content)
    return SelectorConfig(str(filepath))


def test_selectorconfig_raises_on_invalid_config_path() -> None:
    with pytest.raises(ValueError):
        SelectorConfig("foo/bar")


def test_selectorconfig_loads_test_fixture_completely() -> None:
    config = SelectorConfig(CONFIG_PATH)

    assert config.directories == ["tests/fixture/logs", "tests/fixture/missing"]
    assert config.name_filter == "*.log"
    assert config.recurse is True
    assert config.exclude_directory_pattern == "archive$|old$"
    assert config.date_property is DateProperty.CREATION
    assert config.keep_rule == Newest(3)

    assert config.transcript_directory == "tests/fixture/transcripts"
    assert config.transcript_prefix == "test_selector"
    assert config.transcript_keep_count == 2


def test_selectorconfig_fallbacks(tmp_path: Path) -> None:
    config = write_config(tmp_path, "[retention]\ndirectories = logs\nkeep_days = 7\n")

    assert config.name_filter == "*"
    assert config.recurse is False
    assert config.exclude_directory_pattern is None
    assert config.date_property is DateProperty.LAST_WRITE
    assert config.keep_rule == RelativePeriod(7, TimeUnit.DAYS, Direction.WITHIN)
    assert config.transcript_directory is None
    assert config.transcript_prefix == "file_selector"
    assert config.transcript_keep_count == 10


def test_keep_rule_text(tmp_path: Path) -> None:
    config = write_config(tmp_path, "[retention]\nkeep_rule = skip-oldest 4\nkeep_count =\n")

    assert config.keep_rule == SkipOldest(4)


def test_keep_rule_requires_one_setting(tmp_path: Path) -> None:
    config = write_config(tmp_path, "[retention]\nkeep_count = 2\nkeep_days = 2\n")

    with pytest.raises(InvalidRule):
        config.keep_rule


def test_keep_count_must_be_integer(tmp_path: Path) -> None:
    config = write_config(tmp_path, "[retention]\nkeep_count = ten\n")

    with pytest.raises(ValueError, match="keep_count must be an integer"):
        config.keep_rule


def test_unknown_date_property_raises(tmp_path: Path) -> None:
    config = write_config(tmp_path, "[retention]\ndate_property = modified\n")

    with pytest.raises(ValueError, match="Unknown date_property"):
        config.date_property


def test_missing_directories_raises(tmp_path: Path) -> None:
    config = write_config(tmp_path, "[retention]\nkeep_count = 1\n")

    with pytest.raises(configparser.NoOptionError):
        config.directories


def test_write_new_config() -> None:
    try:
        fd, filename = tempfile.mkstemp(suffix=".ini")
        os.close(fd)
        os.remove(filename)
        log_directory = os.path.join(os.path.dirname(os.path.abspath(filename)), "logs")
        expected = NEW_CONFIG.format(
            log_directory=log_directory,
            transcript_directory=os.path.join(log_directory, "transcripts"),
        )

        write_new_config(filename)

        with open(filename) as f:
            content = f.read()

        assert content == expected

        config = SelectorConfig(filename)
        assert config.directories == [log_directory]
        assert config.keep_rule == Newest(10)

    finally:
        os.remove(filename)


def test_write_new_config_early_exit_when_exists() -> None:
    try:
        fd, filename = tempfile.mkstemp(suffix=".ini")
        os.close(fd)

        write_new_config(filename)

        with open(filename) as f:
            content = f.read()

        assert content == ""

    finally:
        os.remove(filename)
