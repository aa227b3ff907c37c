"""Pytest configuration and fixtures."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from uptime_monitor.config import WorkerConfig
from uptime_monitor.core.alerts import TwilioSmsSender
from uptime_monitor.core.probe import ProbeExecutor
from uptime_monitor.core.processor import OutcomeProcessor
from uptime_monitor.models.check import Check
from uptime_monitor.storage.base import LogSink, RecordStore

from tests.factories import EARLIER_MS, NOW_MS, make_check_record


@pytest.fixture
def check_record() -> dict:
    """Valid check record that has never been evaluated."""
    return make_check_record()


@pytest.fixture
def checked_record() -> dict:
    """Valid check record evaluated before and currently down."""
    return make_check_record(state="down", lastChecked=EARLIER_MS)


@pytest.fixture
def check(check_record) -> Check:
    return Check.model_validate(check_record)


@pytest.fixture
def mock_store():
    """Create mock record store."""
    store = MagicMock(spec=RecordStore)
    store.read = AsyncMock()
    store.update = AsyncMock()
    store.list = AsyncMock(return_value=[])
    return store


@pytest.fixture
def mock_log_sink():
    """Create mock log sink."""
    sink = MagicMock(spec=LogSink)
    sink.append = AsyncMock()
    return sink


@pytest.fixture
def mock_alert_sender():
    """Create mock alert sender that always succeeds."""
    sender = MagicMock(spec=TwilioSmsSender)
    sender.send = AsyncMock(return_value=True)
    return sender


@pytest.fixture
def processor(mock_store, mock_log_sink, mock_alert_sender) -> OutcomeProcessor:
    """Outcome processor with mocked collaborators and a fixed clock."""
    return OutcomeProcessor(
        mock_store,
        mock_log_sink,
        mock_alert_sender,
        clock=lambda: NOW_MS
    )


@pytest.fixture
def mock_probe_executor():
    """Create mock probe executor."""
    executor = MagicMock(spec=ProbeExecutor)
    executor.start = AsyncMock()
    executor.close = AsyncMock()
    executor.probe = AsyncMock()
    return executor


@pytest.fixture
def worker_config() -> WorkerConfig:
    return WorkerConfig(interval_seconds=60, max_overlapping_cycles=3)
