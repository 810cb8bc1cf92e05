"""Tests for logging and formatting helpers."""
from jdex.utils import Logger, format_file_size, now_ms


def test_logger_prints_and_appends_to_file(tmp_path, capsys):
    log_file = tmp_path / "logs" / "jdex.log"
    logger = Logger(str(log_file))
    logger.warning("disk almost full")

    assert "[WARNING] disk almost full" in capsys.readouterr().out
    assert "[WARNING] disk almost full" in log_file.read_text(encoding="utf-8")


def test_logger_listeners():
    logger = Logger()
    seen = []
    logger.add_listener(lambda message, level: seen.append((level, message)))
    logger.info("hello")
    logger.log("quiet", "debug")
    assert seen == [("INFO", "hello"), ("DEBUG", "quiet")]


def test_removed_listener_stops_receiving():
    logger = Logger()
    seen = []
    listener = lambda message, level: seen.append(message)
    logger.add_listener(listener)
    logger.remove_listener(listener)
    logger.remove_listener(listener)
    logger.error("boom")
    assert seen == []


def test_unwritable_log_file_does_not_raise(tmp_path, capsys):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    logger = Logger(str(blocker / "nested.log"))
    logger.info("still printed")
    out = capsys.readouterr().out
    assert "still printed" in out
    assert "Cannot write log file" in out


def test_format_file_size():
    assert format_file_size(None) == ""
    assert format_file_size(512) == "512.0 B"
    assert format_file_size(2048) == "2.0 KB"
    assert format_file_size(5 * 1024 ** 3) == "5.0 GB"


def test_now_ms_is_epoch_milliseconds():
    assert now_ms() > 1_600_000_000_000
