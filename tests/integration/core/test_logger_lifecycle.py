from __future__ import annotations

"""
Integration tests for the Logger.

Exercises the writer, the rotation triggered through scheduler ticks,
compression, retention and the close lifecycle against a real filesystem.
"""

import glob
import gzip
import json
import os
import re
import threading
import time
from datetime import timedelta
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from chronolog.core.logger import Logger
from chronolog.core.scheduler import SchedulerState
from chronolog.domain.config import LoggerConfig
from chronolog.domain.models import LoggerClosedError, LoggerInitError, LogLevel

PLAIN_RE = re.compile(r"^(?P<ts>\S+) - \[(?P<level>[A-Z]+)\]: (?P<msg>.*)$")


def _archives(log_path: str) -> list:
    return sorted(p for p in glob.glob(glob.escape(log_path) + ".*") if not p.endswith(".gz"))


def _lines(path: str) -> list:
    with open(path, "r", encoding="utf-8") as f:
        return f.read().splitlines()


# -----------------------------------------------------------------------------
# WRITING
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("level", list(LogLevel))
def test_plain_lines_preserve_level_and_message(make_logger, log_path, level) -> None:
    log = make_logger()
    log.write(level, "some message: [with] brackets")

    (line,) = _lines(log_path)
    match = PLAIN_RE.match(line)
    assert match is not None
    assert match.group("level") == level.name
    assert match.group("msg") == "some message: [with] brackets"


def test_structured_hello(make_logger, log_path) -> None:
    log = make_logger(json_format=True)
    log.info("hello")

    (line,) = _lines(log_path)
    payload = json.loads(line)
    assert payload["message"] == "hello"
    assert payload["level"] == "INFO"
    assert set(payload) == {"timestamp", "level", "message"}


def test_leveled_helpers(make_logger, log_path) -> None:
    log = make_logger()
    log.debug("d")
    log.info("i")
    log.warning("w")
    log.error("e")
    log.fatal("f")

    levels = [PLAIN_RE.match(line).group("level") for line in _lines(log_path)]
    assert levels == ["DEBUG", "INFO", "WARNING", "ERROR", "FATAL"]


def test_level_names_are_accepted(make_logger, log_path) -> None:
    log = make_logger()
    log.write("warn", "via name")

    assert "[WARNING]: via name" in _lines(log_path)[0]


def test_unknown_level_is_dropped(make_logger, log_path, caplog) -> None:
    log = make_logger()
    log.write("chatty", "never written")

    assert _lines(log_path) == []
    assert "unknown log level" in caplog.text


def test_counter_tracks_bytes_written(make_logger, log_path) -> None:
    log = make_logger(timestamp_format="%H:%M:%S")
    for i in range(3):
        log.info(f"message {i}")

    assert log.size == os.path.getsize(log_path)


def test_existing_content_counts_toward_threshold(make_logger, log_path) -> None:
    os.makedirs(os.path.dirname(log_path))
    with open(log_path, "wb") as f:
        f.write(b"x" * 89 + b"\n")

    log = make_logger(max_size=100)
    assert log.size == 90
    assert log.check_rotation() is False

    log.info("tip over")
    assert log.check_rotation() is True
    assert _lines(_archives(log_path)[0])[0] == "x" * 89


def test_undecodable_text_is_written_through(make_logger, log_path, caplog) -> None:
    log = make_logger()
    log.info("bytes \udcff from surrogateescape")

    with open(log_path, "rb") as f:
        data = f.read()
    assert data.endswith(b"[INFO]: bytes \xff from surrogateescape\n")
    assert log.size == len(data)
    assert "failed to format" not in caplog.text


def test_undecodable_text_in_json_mode(make_logger, log_path) -> None:
    log = make_logger(json_format=True)
    log.info("bytes \udcff from surrogateescape")

    with open(log_path, "rb") as f:
        (line,) = f.read().splitlines()
    assert json.loads(line)["message"] == "bytes \udcff from surrogateescape"


def test_write_failure_is_reported_not_raised(make_logger, log_path, caplog) -> None:
    log = make_logger()
    log.info("before")
    size = log.size

    broken = MagicMock()
    broken.write.side_effect = OSError("I/O error")
    with patch.object(log, "_file", broken):
        log.info("lost")

    assert log.size == size
    assert "failed to write to log file: I/O error" in caplog.text
    log.info("after")
    assert [PLAIN_RE.match(x).group("msg") for x in _lines(log_path)] == ["before", "after"]


# -----------------------------------------------------------------------------
# ROTATION
# -----------------------------------------------------------------------------

def test_rotation_scenario_four_then_one(make_logger, log_path) -> None:
    # "%H:%M:%S - [INFO]: rec-N\n" is 25 bytes
    log = make_logger(max_size=100, timestamp_format="%H:%M:%S")

    for i in range(1, 5):
        log.info(f"rec-{i}")
    assert log.size == 100
    log._scheduler.tick()
    log.info("rec-5")

    archives = _archives(log_path)
    assert len(archives) == 1
    assert [PLAIN_RE.match(x).group("msg") for x in _lines(archives[0])] == [
        "rec-1", "rec-2", "rec-3", "rec-4",
    ]
    assert [PLAIN_RE.match(x).group("msg") for x in _lines(log_path)] == ["rec-5"]
    assert log.size == 25


def test_below_threshold_never_rotates(make_logger, log_path) -> None:
    log = make_logger(max_size=100, timestamp_format="%H:%M:%S")
    for i in range(3):
        log.info(f"rec-{i}")
        log._scheduler.tick()

    assert _archives(log_path) == []
    assert len(_lines(log_path)) == 3


def test_post_rotation_file_holds_only_new_writes(make_logger, log_path) -> None:
    log = make_logger(max_size=10)
    log.info("old content")
    assert log.check_rotation() is True

    log.info("new content")
    with open(log_path, "rb") as f:
        live = f.read()
    assert b"old content" not in live
    assert live.count(b"\n") == 1
    assert live.endswith(b"new content\n")


def test_background_scheduler_rotates(make_logger, log_path) -> None:
    log = make_logger(max_size=10, rotation_check_interval=timedelta(milliseconds=20))
    log.info("enough bytes to cross the threshold")

    deadline = time.monotonic() + 5
    while not _archives(log_path) and time.monotonic() < deadline:
        time.sleep(0.01)

    assert len(_archives(log_path)) == 1
    assert log.size == 0


def test_explicit_rotate_ignores_threshold(make_logger, log_path) -> None:
    log = make_logger()
    log.info("tiny")
    assert log.rotate() is True
    assert len(_archives(log_path)) == 1


def test_failed_reopen_is_fatal_until_intervention(make_logger, log_path, caplog) -> None:
    log = make_logger(max_size=1)
    log.info("pre")

    with patch(
        "chronolog.core.rotator.open_log_file",
        side_effect=LoggerInitError("failed to open log file: EACCES"),
    ):
        assert log.check_rotation() is False

    assert "failed to rotate log file" in caplog.text
    assert not os.path.exists(log_path)

    caplog.clear()
    log.info("dropped")
    assert "log file is not open" in caplog.text
    assert not os.path.exists(log_path)

    assert log.check_rotation() is False
    log.close()


# -----------------------------------------------------------------------------
# COMPRESSION AND RETENTION
# -----------------------------------------------------------------------------

def test_compression_round_trip(make_logger, log_path) -> None:
    log = make_logger(max_size=1, compress=True)
    for i in range(20):
        log.info(f"line {i}")
    with open(log_path, "rb") as f:
        original = f.read()

    assert log.check_rotation() is True
    assert log.wait_for_maintenance(timeout=10)

    assert _archives(log_path) == []
    (gz,) = glob.glob(glob.escape(log_path) + ".*.gz")
    with gzip.open(gz, "rb") as f:
        assert f.read() == original


def test_rotation_sweeps_expired_archives(make_logger, log_path) -> None:
    log = make_logger(max_size=1, max_age=timedelta(days=7))
    expired = log_path + ".2000-01-01T00:00:00Z.gz"
    recent = log_path + ".2000-01-02T00:00:00Z.gz"
    for path, age_days in ((expired, 30), (recent, 1)):
        Path(path).write_bytes(b"")
        stamp = time.time() - age_days * 86400
        os.utime(path, (stamp, stamp))

    log.info("trigger")
    assert log.check_rotation() is True
    assert log.wait_for_maintenance(timeout=10)

    assert not os.path.exists(expired)
    assert os.path.exists(recent)


def test_close_drains_pending_compression(log_path) -> None:
    log = Logger(LoggerConfig(
        file_path=log_path,
        max_size=1,
        compress=True,
        rotation_check_interval=timedelta(hours=1),
    ))
    log.info("payload")
    log.rotate()
    log.close()

    assert len(glob.glob(glob.escape(log_path) + ".*.gz")) == 1
    assert _archives(log_path) == []


# -----------------------------------------------------------------------------
# LIFECYCLE
# -----------------------------------------------------------------------------

def test_constructor_failure_raises_and_starts_nothing(tmp_path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file")
    before = {t.name for t in threading.enumerate()}

    with pytest.raises(LoggerInitError, match="failed to create log directory"):
        Logger(LoggerConfig(file_path=str(blocker / "app.log")))

    after = {t.name for t in threading.enumerate()}
    assert "ChronologRotationChecker" not in after - before


def test_constructor_creates_parent_directories(make_logger, log_path) -> None:
    make_logger()
    assert os.path.isfile(log_path)


def test_close_is_single_use(make_logger) -> None:
    log = make_logger()
    log.close()

    assert log.closed
    assert log.scheduler_state is SchedulerState.STOPPED
    with pytest.raises(LoggerClosedError):
        log.close()


def test_write_after_close_is_dropped(make_logger, log_path, caplog) -> None:
    log = make_logger()
    log.info("kept")
    log.close()

    log.info("dropped")
    assert len(_lines(log_path)) == 1
    assert "log file is closed" in caplog.text
    assert log.check_rotation() is False


def test_context_manager_closes(log_path) -> None:
    cfg = LoggerConfig(file_path=log_path, rotation_check_interval=timedelta(hours=1))
    with Logger(cfg) as log:
        log.info("inside")
        assert log.scheduler_state is SchedulerState.RUNNING

    assert log.closed
    assert len(_lines(log_path)) == 1


def test_concurrent_writers_keep_lines_intact(make_logger, log_path) -> None:
    log = make_logger(json_format=True)

    def worker(tag: int) -> None:
        for i in range(200):
            log.info(f"worker-{tag}-{i}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    lines = _lines(log_path)
    assert len(lines) == 800
    assert all(json.loads(line)["message"].startswith("worker-") for line in lines)
    assert log.size == os.path.getsize(log_path)
