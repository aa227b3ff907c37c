"""Prometheus metrics collection for the uptime monitor worker."""

from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    start_http_server,
)

from uptime_monitor.models.check import CheckState
from uptime_monitor.models.outcome import Outcome
from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)


class MetricsCollector:
    """Prometheus metrics collector for cycles, probes, state and alerts."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize metrics collector.

        Args:
            registry: Optional custom registry
        """
        self.registry = registry or CollectorRegistry()
        self._setup_metrics()
        logger.info("Prometheus metrics collector initialized")

    def _setup_metrics(self) -> None:
        """Setup all Prometheus metrics."""
        self.cycles_total = Counter(
            'uptime_monitor_cycles_total',
            'Total number of scheduler cycles',
            ['status'],
            registry=self.registry
        )

        self.probes_total = Counter(
            'uptime_monitor_probes_total',
            'Total number of probes performed',
            ['result'],
            registry=self.registry
        )

        self.probe_duration = Histogram(
            'uptime_monitor_probe_duration_seconds',
            'Probe duration in seconds',
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 3.0, 4.0, 5.0),
            registry=self.registry
        )

        self.check_state = Gauge(
            'uptime_monitor_check_state',
            'Current check state (1=up, 0=down)',
            ['check_id'],
            registry=self.registry
        )

        self.alerts_total = Counter(
            'uptime_monitor_alerts_total',
            'Total number of state change alerts',
            ['status'],
            registry=self.registry
        )

        self.store_errors_total = Counter(
            'uptime_monitor_store_errors_total',
            'Total number of record store and log sink failures',
            ['operation'],
            registry=self.registry
        )

    def record_cycle(self, status: str) -> None:
        self.cycles_total.labels(status=status).inc()

    def record_probe(self, outcome: Outcome, duration: float) -> None:
        if outcome.timed_out:
            result = "timeout"
        elif outcome.error:
            result = "error"
        else:
            result = "response"
        self.probes_total.labels(result=result).inc()
        self.probe_duration.observe(duration)

    def record_state(self, check_id: str, state: CheckState) -> None:
        self.check_state.labels(check_id=check_id).set(1 if state == CheckState.UP else 0)

    def record_alert(self, sent: bool) -> None:
        self.alerts_total.labels(status="sent" if sent else "failed").inc()

    def record_store_error(self, operation: str) -> None:
        self.store_errors_total.labels(operation=operation).inc()

    def start_server(self, port: int) -> None:
        """Expose metrics over HTTP on the given port."""
        start_http_server(port, registry=self.registry)
        logger.info("Metrics server started", extra={"port": port})

    def get_metrics(self) -> bytes:
        """
        Get metrics in Prometheus text format.

        Returns:
            bytes: Metrics data
        """
        return generate_latest(self.registry)
