import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

from blinda.logging_handlers import DateStampedFileHandler, cleanup_old_logs


def test_date_stamped_file_handler_creates_expected_path(tmp_path) -> None:
    current = datetime(2024, 5, 26, 12, 34, 56, tzinfo=timezone.utc)
    handler = DateStampedFileHandler(
        directory=tmp_path / "app",
        prefix="app",
        tz_name="America/New_York",
        current_time=current,
    )
    try:
        expected_dir = (tmp_path / "app" / "2024-05-26").resolve()
        expected_file = expected_dir / "app_2024-05-26_08-34-56_EDT.log"
        file_path = Path(handler.baseFilename)
        assert file_path == expected_file
        assert file_path.exists()

        record = logging.LogRecord(
            name="test",
            level=logging.INFO,
            pathname=__file__,
            lineno=0,
            msg="hello world",
            args=(),
            exc_info=None,
        )
        handler.emit(record)

        contents = file_path.read_text(encoding="utf-8")
        assert "hello world" in contents
    finally:
        handler.close()


def test_handler_defaults_to_utc(tmp_path) -> None:
    current = datetime(2023, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    handler = DateStampedFileHandler(tmp_path, prefix="blinda", current_time=current)
    try:
        expected = (tmp_path / "2023-01-02" / "blinda_2023-01-02_03-04-05_UTC.log").resolve()
        assert Path(handler.baseFilename) == expected
    finally:
        handler.close()


def test_unknown_timezone_falls_back_to_utc(tmp_path) -> None:
    current = datetime(2023, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    handler = DateStampedFileHandler(
        tmp_path, tz_name="Not/AZone", current_time=current
    )
    try:
        assert Path(handler.baseFilename).name == "app_2023-01-02_03-04-05_UTC.log"
    finally:
        handler.close()


def test_cleanup_old_logs(tmp_path) -> None:
    """Old log files are deleted and their empty date folders removed."""
    log_dir = tmp_path / "logs" / "app"
    old_dir = log_dir / "2020-01-01"
    old_dir.mkdir(parents=True)
    now = datetime.now(timezone.utc)

    old_file = old_dir / "app_old.log"
    old_file.write_text("old content")
    old_time = (now - timedelta(days=3)).timestamp()
    os.utime(old_file, (old_time, old_time))

    recent_file = log_dir / "recent.log"
    recent_file.write_text("recent content")
    recent_time = (now - timedelta(days=1)).timestamp()
    os.utime(recent_file, (recent_time, recent_time))

    other_file = log_dir / "notes.txt"
    other_file.write_text("not a log")
    os.utime(other_file, (old_time, old_time))

    deleted, errors = cleanup_old_logs([log_dir], retention_hours=48)

    assert deleted == 1
    assert errors == 0
    assert not old_file.exists()
    assert not old_dir.exists()
    assert recent_file.exists()
    assert other_file.exists()


def test_cleanup_disabled_with_zero_retention(tmp_path) -> None:
    log_file = tmp_path / "ancient.log"
    log_file.write_text("content")
    ancient = (datetime.now(timezone.utc) - timedelta(days=365)).timestamp()
    os.utime(log_file, (ancient, ancient))

    assert cleanup_old_logs([tmp_path], retention_hours=0) == (0, 0)
    assert log_file.exists()


def test_cleanup_skips_missing_directories(tmp_path) -> None:
    assert cleanup_old_logs([tmp_path / "missing"], retention_hours=1) == (0, 0)
