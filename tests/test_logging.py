"""
Tests for logging setup and the sanitizing filter
"""

import logging
import os
import time

import pytest

from utils.logging import (
    TRACE,
    SanitizingFilter,
    cleanup_logs,
    get_log_mode,
    get_logger,
    log_event,
    log_section,
    setup_logging,
)


def make_record(msg, level=logging.INFO):
    return logging.LogRecord("tracer", level, __file__, 1, msg, None, None)


class TestSanitizingFilter:
    """Verbosity modes and path sanitizing"""

    def test_customer_mode_drops_debug(self):
        flt = SanitizingFilter(production_mode=False, log_mode='customer')
        assert not flt.filter(make_record("details", logging.DEBUG))
        assert flt.filter(make_record("Loaded 30 labeled samples"))

    @pytest.mark.parametrize("msg", [
        "[timing] Averages for 10 classes: 1.00ms",
        "[class] '1': min_score = 0.75",
        "Adding new class '7' with index 3",
        "=" * 80,
    ])
    def test_customer_mode_drops_chatter(self, msg):
        flt = SanitizingFilter(production_mode=False, log_mode='customer')
        assert not flt.filter(make_record(msg, logging.INFO))

    def test_verbose_mode(self):
        flt = SanitizingFilter(production_mode=False, log_mode='verbose')
        assert flt.filter(make_record("[timing] x", logging.DEBUG))
        assert not flt.filter(make_record("[avg] x", TRACE))

    def test_debug_mode_keeps_trace(self):
        flt = SanitizingFilter(production_mode=False, log_mode='debug')
        assert flt.filter(make_record("[score] x", TRACE))

    def test_production_mode_strips_paths(self):
        flt = SanitizingFilter(production_mode=True, log_mode='verbose')
        record = make_record("Saved 10 templates to /home/user/templates/averages")
        assert flt.filter(record)
        assert "/home/user" not in record.getMessage()
        assert "[PATH]" in record.getMessage()


class TestSetupLogging:
    """Root logger configuration"""

    def test_writes_session_log(self, restore_root_logger, isolated_data_dir):
        log_file = setup_logging('verbose', production_mode=False)
        assert log_file is not None
        assert log_file.parent == isolated_data_dir / "logs"
        get_logger().info("hello from the trainer")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "hello from the trainer" in log_file.read_text(encoding="utf-8")
        assert get_log_mode() == 'verbose'

    def test_without_file(self, restore_root_logger):
        assert setup_logging('customer', production_mode=False, log_to_file=False) is None
        assert logging.getLogger().level == TRACE
        assert get_log_mode() == 'customer'

    def test_trace_method(self, caplog):
        with caplog.at_level(TRACE):
            get_logger().trace("[avg] deep detail")
        assert "deep detail" in caplog.text


class TestPrettyHelpers:
    def test_log_section_customer(self, caplog):
        with caplog.at_level(logging.INFO):
            log_section(get_logger(), "Outliers removed", "🧹", {"Kept": 9}, mode='customer')
        assert "Outliers removed (Kept: 9)" in caplog.text

    def test_log_section_verbose(self, caplog):
        with caplog.at_level(logging.INFO):
            log_section(get_logger(), "Outliers removed", "🧹", {"Kept": 9}, mode='verbose')
        assert "OUTLIERS REMOVED" in caplog.text
        assert "Kept: 9" in caplog.text

    def test_log_event(self, caplog):
        with caplog.at_level(logging.INFO):
            log_event(get_logger(), "Model padded", "➕", {"Classes": 10})
        assert "Model padded" in caplog.text
        assert "Classes: 10" in caplog.text


class TestCleanupLogs:
    def test_removes_only_old_session_logs(self, isolated_data_dir):
        logs_dir = isolated_data_dir / "logs"
        logs_dir.mkdir(parents=True)
        old = logs_dir / "symbolrecog_01-01-2020_00-00-00.log"
        fresh = logs_dir / "symbolrecog_02-01-2020_00-00-00.log"
        other = logs_dir / "notes.txt"
        for path in (old, fresh, other):
            path.write_text("x", encoding="utf-8")
        two_days_ago = time.time() - 2 * 24 * 60 * 60
        os.utime(old, (two_days_ago, two_days_ago))
        os.utime(other, (two_days_ago, two_days_ago))

        cleanup_logs()

        assert not old.exists()
        assert fresh.exists()
        assert other.exists()

    def test_missing_logs_dir(self, isolated_data_dir):
        cleanup_logs()
        assert not (isolated_data_dir / "logs").exists()
