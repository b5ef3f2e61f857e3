from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path

import pytest

from file_selector.selectortranscript import Transcript

CLOCK_TIME = datetime(2024, 2, 3, 4, 5, 6, 789)


def make_old_transcripts(directory: Path, count: int) -> None:
    for index in range(count):
        filepath = directory / f"file_selector_2024010{index}_000000_000000.log"
        filepath.write_text("old\n")
        written = 1700000000 + index * 60
        os.utime(filepath, (written, written))


def test_transcript_writes_log_file(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    logger = logging.getLogger("file_selector.transcript_test")

    with Transcript(str(tmp_path), clock=lambda: CLOCK_TIME) as transcript:
        logger.info("inside the transcript")

    assert transcript.path == str(tmp_path / "file_selector_20240203_040506_000789.log")
    content = Path(transcript.path).read_text()
    assert "inside the transcript" in content
    assert "Transcript started" in content
    assert "Transcript stopped" in content


def test_transcript_detaches_handler(tmp_path: Path) -> None:
    before = list(logging.getLogger().handlers)

    with Transcript(str(tmp_path)):
        assert len(logging.getLogger().handlers) == len(before) + 1

    assert logging.getLogger().handlers == before


def test_transcript_creates_directory(tmp_path: Path) -> None:
    directory = tmp_path / "logs" / "transcripts"

    with Transcript(str(directory)):
        pass

    assert directory.is_dir()


def test_transcript_keeps_newest(tmp_path: Path) -> None:
    make_old_transcripts(tmp_path, 5)
    (tmp_path / "unrelated.log").write_text("keep me\n")

    with Transcript(str(tmp_path), keep_count=3) as transcript:
        pass

    remaining = sorted(os.listdir(tmp_path))
    assert os.path.basename(str(transcript.path)) in remaining
    assert "unrelated.log" in remaining
    assert "file_selector_20240103_000000_000000.log" in remaining
    assert "file_selector_20240104_000000_000000.log" in remaining
    assert len(remaining) == 4


def test_transcript_cleanup_runs_when_body_raises(tmp_path: Path) -> None:
    make_old_transcripts(tmp_path, 3)

    with pytest.raises(RuntimeError):
        with Transcript(str(tmp_path), keep_count=1):
            raise RuntimeError("boom")

    assert len(os.listdir(tmp_path)) == 1


def test_transcript_custom_prefix(tmp_path: Path) -> None:
    with Transcript(str(tmp_path), prefix="nightly", clock=lambda: CLOCK_TIME) as transcript:
        pass

    assert os.path.basename(str(transcript.path)).startswith("nightly_")


def test_transcript_rejects_keep_count_below_one(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        Transcript(str(tmp_path), keep_count=0)


def test_stop_without_start_is_noop(tmp_path: Path) -> None:
    transcript = Transcript(str(tmp_path))

    transcript.stop()

    assert transcript.path is None
