"""Scheduler for periodic check cycles using APScheduler."""

import asyncio
import sys
from datetime import datetime, timezone
from typing import List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from uptime_monitor.config import WorkerConfig
from uptime_monitor.core.probe import ProbeExecutor
from uptime_monitor.core.processor import CHECKS_COLLECTION, OutcomeProcessor, ProcessResult
from uptime_monitor.core.validator import InvalidCheckError, validate_check_data
from uptime_monitor.storage.base import RecordNotFoundError, RecordStore, StorageError
from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)

CYCLE_JOB_ID = "check_cycle"


class CycleReport:
    """Summary of one scheduler cycle."""

    COMPLETED = "completed"
    NO_CHECKS = "no_checks"
    LIST_FAILED = "list_failed"

    def __init__(self, status: str, total: int = 0, processed: int = 0, skipped: int = 0):
        self.status = status
        self.total = total
        self.processed = processed
        self.skipped = skipped

    def __repr__(self) -> str:
        return (
            f"<CycleReport(status={self.status!r}, total={self.total}, "
            f"processed={self.processed}, skipped={self.skipped})>"
        )


class MonitoringScheduler:
    """
    Drives the periodic check cycle.

    Every ``interval_seconds`` the scheduler lists all checks and runs
    read, validate, probe and process for each of them concurrently.
    The first cycle runs as soon as the scheduler starts. Cycles are not
    serialized: a new tick starts even if the previous cycle still has
    probes in flight. ``max_overlapping_cycles`` optionally caps how many
    cycles may run at once; without it there is no cap.
    """

    def __init__(
        self,
        config: WorkerConfig,
        store: RecordStore,
        probe_executor: ProbeExecutor,
        processor: OutcomeProcessor,
        metrics=None
    ):
        """
        Initialize monitoring scheduler.

        Args:
            config: Worker configuration
            store: Record store holding the checks collection
            probe_executor: Probe executor instance
            processor: Outcome processor instance
            metrics: Optional MetricsCollector
        """
        self.config = config
        self.store = store
        self.probe_executor = probe_executor
        self.processor = processor
        self.metrics = metrics
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.job_id: Optional[str] = None

        logger.info(
            "Monitoring scheduler initialized",
            extra={"interval_seconds": config.interval_seconds}
        )

    @property
    def running(self) -> bool:
        return self.scheduler.running

    @property
    def max_instances(self) -> int:
        """Concurrent cycle limit passed to APScheduler."""
        if self.config.max_overlapping_cycles is None:
            return sys.maxsize
        return self.config.max_overlapping_cycles

    async def init(self) -> None:
        """Run the first cycle immediately and then every interval."""
        if self.job_id is not None:
            logger.warning("Monitoring scheduler already initialized")
            return

        await self.probe_executor.start()

        job = self.scheduler.add_job(
            self.run_cycle,
            trigger=IntervalTrigger(seconds=self.config.interval_seconds),
            id=CYCLE_JOB_ID,
            name="Gather all checks",
            next_run_time=datetime.now(timezone.utc),
            max_instances=self.max_instances,
            coalesce=False,
            replace_existing=True
        )
        self.job_id = job.id

        self.scheduler.start()

        logger.info(
            "Monitoring scheduler started",
            extra={
                "interval_seconds": self.config.interval_seconds,
                "max_overlapping_cycles": self.config.max_overlapping_cycles
            }
        )

    async def stop(self) -> None:
        """Stop the scheduler and cleanup resources."""
        logger.info("Stopping monitoring scheduler")

        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        self.job_id = None

        await self.probe_executor.close()

        logger.info("Monitoring scheduler stopped")

    async def run_cycle(self) -> CycleReport:
        """
        Gather all checks and process each one concurrently.

        Returns:
            CycleReport: Cycle status and per-check counts
        """
        try:
            check_ids = await self.store.list(CHECKS_COLLECTION)
        except StorageError as e:
            logger.error(
                "Could not list checks, skipping cycle",
                extra={"error": str(e)}
            )
            return self._finish(CycleReport(CycleReport.LIST_FAILED))

        if not check_ids:
            logger.warning("Could not find any checks to process")
            return self._finish(CycleReport(CycleReport.NO_CHECKS))

        logger.info("Starting check cycle", extra={"count": len(check_ids)})

        results: List = await asyncio.gather(
            *(self.process_check(check_id) for check_id in check_ids),
            return_exceptions=True
        )

        for check_id, result in zip(check_ids, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Check workflow failed",
                    exc_info=result,
                    extra={"check_id": check_id, "error": repr(result)}
                )

        processed = sum(1 for r in results if isinstance(r, ProcessResult))
        report = CycleReport(
            CycleReport.COMPLETED,
            total=len(check_ids),
            processed=processed,
            skipped=len(check_ids) - processed
        )

        logger.info(
            "Completed check cycle",
            extra={
                "total": report.total,
                "processed": report.processed,
                "skipped": report.skipped
            }
        )

        return self._finish(report)

    async def process_check(self, check_id: str) -> Optional[ProcessResult]:
        """
        Read, validate, probe and process a single check.

        Read and validation failures skip the check for this cycle. Nothing
        is raised; every failure is logged here.

        Args:
            check_id: Key of the check record

        Returns:
            ProcessResult, or None if the check was skipped
        """
        try:
            raw = await self.store.read(CHECKS_COLLECTION, check_id)
        except RecordNotFoundError:
            logger.error("Check record not found", extra={"check_id": check_id})
            return None
        except StorageError as e:
            logger.error(
                "Could not read the check data",
                extra={"check_id": check_id, "error": str(e)}
            )
            if self.metrics:
                self.metrics.record_store_error("read")
            return None
        except Exception as e:
            logger.exception(
                "Unexpected error reading check data",
                extra={"check_id": check_id, "error": str(e)}
            )
            return None

        try:
            check = validate_check_data(raw)
        except InvalidCheckError as e:
            logger.error(
                "Check data is invalid",
                extra={"check_id": check_id, "errors": e.errors}
            )
            return None
        except Exception as e:
            logger.exception(
                "Unexpected error validating check data",
                extra={"check_id": check_id, "error": str(e)}
            )
            return None

        try:
            outcome = await self.probe_executor.probe(check)
            return await self.processor.process(check, outcome)
        except Exception as e:
            logger.exception(
                "Error during scheduled check",
                extra={"check_id": check_id, "error": str(e)}
            )
            return None

    def _finish(self, report: CycleReport) -> CycleReport:
        if self.metrics:
            self.metrics.record_cycle(report.status)
        return report

    def get_job_status(self) -> Optional[dict]:
        """
        Get status of the cycle job.

        Returns:
            dict: Job status information or None if not scheduled
        """
        if self.job_id is None:
            return None

        job = self.scheduler.get_job(self.job_id)
        if not job:
            return None

        return {
            "job_id": job.id,
            "name": job.name,
            "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
            "trigger": str(job.trigger),
        }


# Scheduler instance started by the host process
_scheduler: Optional[MonitoringScheduler] = None


def get_scheduler() -> Optional[MonitoringScheduler]:
    """
    Get global scheduler instance.

    Returns:
        MonitoringScheduler: Scheduler instance or None if not initialized
    """
    return _scheduler


def set_scheduler(scheduler: Optional[MonitoringScheduler]) -> None:
    """
    Set global scheduler instance.

    Args:
        scheduler: Scheduler instance to set
    """
    global _scheduler
    _scheduler = scheduler
