"""Tests for logging setup and the capped log files."""

import logging

import pytest
import structlog

from alfred_feeds.observability.logging import ERROR_LOG_FILE, CappedFileHandler, setup_logging

from conftest import make_settings


@pytest.fixture(autouse=True)
def reset_root_logger():
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    structlog.reset_defaults()


def _record(message: str, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord("test", level, __file__, 1, message, None, None)


class TestCappedFileHandler:
    def test_appends_below_cap(self, tmp_path):
        handler = CappedFileHandler(tmp_path / "logs" / "a.log", max_bytes=10_000, max_lines=10)

        for i in range(3):
            handler.emit(_record(f"line {i}"))
        handler.close()

        assert (tmp_path / "logs" / "a.log").read_text().splitlines() == [
            "line 0",
            "line 1",
            "line 2",
        ]

    def test_trims_to_last_lines_when_over_cap(self, tmp_path):
        path = tmp_path / "a.log"
        handler = CappedFileHandler(path, max_bytes=200, max_lines=5)

        for i in range(50):
            handler.emit(_record(f"line {i:02d}"))
        handler.close()

        lines = path.read_text().splitlines()
        assert len(lines) <= 20
        assert lines[-1] == "line 49"
        assert "line 00" not in lines


class TestSetupLogging:
    def test_warnings_go_to_error_log(self, tmp_path):
        settings = make_settings(tmp_path, log_level="INFO")
        setup_logging(settings)

        log = structlog.get_logger("alfred_feeds.test")
        log.info("Fetched", source="gh")
        log.warning("Fetch failed", source="li")

        content = (settings.log_dir / ERROR_LOG_FILE).read_text()
        assert "Fetch failed" in content
        assert "Fetched" not in content

    def test_refresh_log_file_gets_everything(self, tmp_path):
        settings = make_settings(tmp_path, log_level="DEBUG")
        setup_logging(settings, log_file="github-refresh.log")

        structlog.get_logger("alfred_feeds.test").debug("Refresh started")

        assert "Refresh started" in (settings.log_dir / "github-refresh.log").read_text()

    def test_nothing_written_to_stdout(self, tmp_path, capsys):
        setup_logging(make_settings(tmp_path))

        structlog.get_logger("alfred_feeds.test").error("Boom")

        assert capsys.readouterr().out == ""
