from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from file_selector.selectorrule import InvalidRule
from file_selector.selectorwalker import FileWalker


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """
    Build a small directory tree:

        root/a.log
        root/b.LOG
        root/notes.txt
        root/archive/c.log
        root/archive/deep/d.log
        root/skip_me/e.log
    """
    (tmp_path / "archive" / "deep").mkdir(parents=True)
    (tmp_path / "skip_me").mkdir()
    for relative in [
        "a.log",
        "b.LOG",
        "notes.txt",
        "archive/c.log",
        "archive/deep/d.log",
        "skip_me/e.log",
    ]:
        (tmp_path / relative).write_text(relative)

    return tmp_path


def basenames(walker: FileWalker) -> list[str]:
    return sorted(os.path.basename(record.path) for record in walker.walk())


def test_walk_top_directory_only(tree: Path) -> None:
    walker = FileWalker(str(tree))

    assert basenames(walker) == ["a.log", "b.LOG", "notes.txt"]


def test_walk_recursive(tree: Path) -> None:
    walker = FileWalker(str(tree), recurse=True)

    assert basenames(walker) == ["a.log", "b.LOG", "c.log", "d.log", "e.log", "notes.txt"]


def test_walk_name_filter_is_case_insensitive(tree: Path) -> None:
    walker = FileWalker(str(tree), name_filter="*.log")

    assert basenames(walker) == ["a.log", "b.LOG"]


def test_walk_excludes_directories(tree: Path) -> None:
    walker = FileWalker(
        str(tree),
        recurse=True,
        name_filter="*.log",
        exclude_directory_pattern=r"skip_me|deep$",
    )

    assert basenames(walker) == ["a.log", "b.LOG", "c.log"]


def test_walk_returns_absolute_paths(tree: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tree)
    walker = FileWalker(".", name_filter="a.log")

    records = walker.walk()

    assert len(records) == 1
    assert os.path.isabs(records[0].path)
    assert os.path.samefile(records[0].path, tree / "a.log")


def test_invalid_exclude_pattern_raises(tmp_path: Path) -> None:
    with pytest.raises(InvalidRule, match="Invalid exclude pattern"):
        FileWalker(str(tmp_path), exclude_directory_pattern="(")


def test_walk_missing_root_raises(tmp_path: Path) -> None:
    walker = FileWalker(str(tmp_path / "missing"))

    with pytest.raises(FileNotFoundError, match="Root directory not found"):
        walker.walk()


def test_walk_skips_files_removed_during_walk(tree: Path) -> None:
    walker = FileWalker(str(tree), name_filter="*.log")
    real_stat = os.stat

    def flaky_stat(path: str, *args: object, **kwargs: object) -> os.stat_result:
        if str(path).endswith("a.log"):
            raise FileNotFoundError(path)
        return real_stat(path, *args, **kwargs)  # type: ignore[arg-type]

    with patch("file_selector.selectormodel.os.stat", side_effect=flaky_stat):
        result = walker.walk()

    assert [os.path.basename(record.path) for record in result] == ["b.LOG"]


def test_empty_name_filter_matches_everything(tree: Path) -> None:
    walker = FileWalker(str(tree), name_filter="")

    assert len(walker.walk()) == 3
    assert walker.root == str(tree)
