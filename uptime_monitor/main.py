"""Worker process entry point for Uptime Monitor."""

import asyncio
import signal
from typing import Optional, Union

from uptime_monitor import __version__
from uptime_monitor.config import Config, load_config
from uptime_monitor.core.alerts import TwilioSmsSender
from uptime_monitor.core.metrics import MetricsCollector
from uptime_monitor.core.probe import ProbeExecutor
from uptime_monitor.core.processor import OutcomeProcessor
from uptime_monitor.core.scheduler import MonitoringScheduler, get_scheduler, set_scheduler
from uptime_monitor.storage.file_store import FileRecordStore
from uptime_monitor.storage.log_sink import FileLogSink
from uptime_monitor.storage.sql_store import SQLRecordStore
from uptime_monitor.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def build_store(config: Config) -> Union[FileRecordStore, SQLRecordStore]:
    """Create the record store selected by ``storage.backend``."""
    if config.storage.backend == "database":
        return SQLRecordStore(config.storage.database_url, echo=config.storage.echo)
    return FileRecordStore(config.storage.data_dir)


def build_scheduler(config: Config, metrics: Optional[MetricsCollector] = None) -> MonitoringScheduler:
    """
    Wire adapters, probe executor and outcome processor into a scheduler.

    Args:
        config: Application configuration
        metrics: Optional metrics collector

    Returns:
        MonitoringScheduler: Scheduler ready for ``init()``
    """
    store = build_store(config)
    log_sink = FileLogSink(config.log_sink.log_dir)
    alert_sender = TwilioSmsSender(config.twilio)

    probe_executor = ProbeExecutor(
        max_concurrent=config.worker.max_concurrent_probes,
        metrics=metrics
    )
    processor = OutcomeProcessor(store, log_sink, alert_sender, metrics=metrics)

    return MonitoringScheduler(
        config=config.worker,
        store=store,
        probe_executor=probe_executor,
        processor=processor,
        metrics=metrics
    )


async def init() -> MonitoringScheduler:
    """
    Start the background workers.

    Loads configuration, prepares the record store and log directory, runs
    the first check cycle immediately and arms the periodic cycle.
    """
    config = load_config()

    setup_logging(
        level=config.logging.level,
        log_format=config.logging.format,
        log_file=config.logging.file,
        console=config.logging.console
    )

    logger.info("Starting Uptime Monitor worker", extra={"version": __version__})

    metrics = None
    if config.prometheus.enabled:
        metrics = MetricsCollector()
        metrics.start_server(config.prometheus.port)

    scheduler = build_scheduler(config, metrics)

    await scheduler.store.init()
    await scheduler.processor.log_sink.init()
    await scheduler.init()

    set_scheduler(scheduler)
    return scheduler


async def shutdown() -> None:
    """Stop the running scheduler and release its store."""
    scheduler = get_scheduler()
    if scheduler is None:
        return

    await scheduler.stop()
    await scheduler.store.close()
    set_scheduler(None)

    logger.info("Uptime Monitor worker stopped")


async def serve() -> None:
    """Run the workers until SIGINT or SIGTERM."""
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Signal handlers are unavailable on Windows event loops
            pass

    await init()
    try:
        await stop_event.wait()
    finally:
        await shutdown()


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
