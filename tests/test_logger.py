"""Tests for logging setup."""

import json
import logging

import pytest

from uptime_monitor.utils.logger import get_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.mark.unit
def test_logger_utility():
    """Test logger utility."""
    logger = get_logger("test")

    assert logger is not None
    assert logger.name == "test"


@pytest.mark.unit
def test_json_log_file_carries_extra_fields(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "worker.log"
    setup_logging(level="debug", log_format="json", log_file=str(log_file), console=False)

    get_logger("uptime_monitor.test").info(
        "Probe completed",
        extra={"check_id": "a" * 20, "duration": 0.25}
    )
    for handler in logging.getLogger().handlers:
        handler.flush()

    entry = json.loads(log_file.read_text().splitlines()[-1])
    assert entry["message"] == "Probe completed"
    assert entry["check_id"] == "a" * 20
    assert entry["duration"] == 0.25
    assert logging.getLogger().level == logging.DEBUG


@pytest.mark.unit
def test_text_format_and_quiet_libraries(tmp_path, restore_root_logger):
    log_file = tmp_path / "worker.log"
    setup_logging(level="INFO", log_format="text", log_file=str(log_file), console=False)

    get_logger("uptime_monitor.test").warning("Could not find any checks to process")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert " - uptime_monitor.test - WARNING - Could not find any checks to process" in log_file.read_text()
    assert logging.getLogger("apscheduler").level == logging.WARNING
