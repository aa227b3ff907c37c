"""Outcome processor: up/down state machine, persistence, logging and alerting."""

from typing import Callable, Optional

from uptime_monitor.core.alerts import AlertSender
from uptime_monitor.models.check import Check, CheckState
from uptime_monitor.models.outcome import LogEntry, Outcome
from uptime_monitor.storage.base import LogSink, RecordStore
from uptime_monitor.utils.logger import get_logger
from uptime_monitor.utils.time import now_ms

logger = get_logger(__name__)

CHECKS_COLLECTION = "checks"
ALERT_TEMPLATE = "Alert: Your check for {method} {protocol}://{url} is currently {state}"


def determine_state(check: Check, outcome: Outcome) -> CheckState:
    """A check is up only if a response arrived with one of its success codes."""
    if not outcome.error and outcome.response_code in check.success_codes:
        return CheckState.UP
    return CheckState.DOWN


def should_alert(check: Check, new_state: CheckState) -> bool:
    """Alert on a state change, except on the first evaluation of a check."""
    return check.was_checked and check.state != new_state


def format_alert_message(check: Check, state: CheckState) -> str:
    return ALERT_TEMPLATE.format(
        method=check.method.value.upper(),
        protocol=check.protocol.value,
        url=check.url,
        state=state.value
    )


class ProcessResult:
    """What happened while processing one outcome."""

    def __init__(
        self,
        check_id: str,
        state: CheckState,
        alert: bool,
        persisted: bool = False,
        logged: bool = False,
        alert_sent: bool = False
    ):
        self.check_id = check_id
        self.state = state
        self.alert = alert
        self.persisted = persisted
        self.logged = logged
        self.alert_sent = alert_sent

    def __repr__(self) -> str:
        return (
            f"<ProcessResult(check_id={self.check_id!r}, state={self.state.value}, "
            f"alert={self.alert}, persisted={self.persisted}, "
            f"logged={self.logged}, alert_sent={self.alert_sent})>"
        )


class OutcomeProcessor:
    """
    Applies a probe outcome to its check.

    Side effects run in order (persist, log, alert) and each one is
    attempted regardless of whether the previous one failed. Failures are
    logged and reflected in the returned ProcessResult; none is raised.
    """

    def __init__(
        self,
        store: RecordStore,
        log_sink: LogSink,
        alert_sender: AlertSender,
        metrics=None,
        clock: Callable[[], int] = now_ms
    ):
        """
        Initialize outcome processor.

        Args:
            store: Record store holding the checks collection
            log_sink: Per-check log streams
            alert_sender: SMS alert sender
            metrics: Optional MetricsCollector
            clock: Millisecond timestamp source
        """
        self.store = store
        self.log_sink = log_sink
        self.alert_sender = alert_sender
        self.metrics = metrics
        self.clock = clock

    async def process(self, check: Check, outcome: Outcome) -> ProcessResult:
        """
        Decide the new state and apply persistence, logging and alerting.

        Args:
            check: Check as read and validated this cycle
            outcome: Result of probing the check

        Returns:
            ProcessResult: New state and which side effects succeeded
        """
        checked_at = self.clock()
        new_state = determine_state(check, outcome)
        alert = should_alert(check, new_state)
        result = ProcessResult(check.id, new_state, alert)

        if self.metrics:
            self.metrics.record_state(check.id, new_state)

        result.persisted = await self._persist(check, new_state, checked_at)
        result.logged = await self._log(check, outcome, new_state, alert, checked_at)

        if alert:
            result.alert_sent = await self._alert(check, new_state)
        else:
            logger.debug(
                "Check outcome unchanged, no alert needed",
                extra={"check_id": check.id, "state": new_state.value}
            )

        return result

    async def _persist(self, check: Check, state: CheckState, checked_at: int) -> bool:
        try:
            await self.store.update(CHECKS_COLLECTION, check.id, check.with_result(state, checked_at))
            return True
        except Exception as e:
            logger.error(
                "Failed to save check data while processing check outcome",
                extra={"check_id": check.id, "error": str(e)}
            )
            if self.metrics:
                self.metrics.record_store_error("update")
            return False

    async def _log(
        self,
        check: Check,
        outcome: Outcome,
        state: CheckState,
        alert: bool,
        checked_at: int
    ) -> bool:
        entry = LogEntry(
            check=check.to_record(),
            outcome=outcome.to_dict(),
            state=state,
            alert=alert,
            time=checked_at
        )
        try:
            await self.log_sink.append(check.id, entry.to_line())
            return True
        except Exception as e:
            logger.error(
                "Failed to write check log entry",
                extra={"check_id": check.id, "error": str(e)}
            )
            if self.metrics:
                self.metrics.record_store_error("log")
            return False

    async def _alert(self, check: Check, state: CheckState) -> bool:
        message = format_alert_message(check, state)
        try:
            sent = bool(await self.alert_sender.send(check.user_phone, message))
        except Exception as e:
            logger.error(
                "Alert sender raised while alerting user to status change",
                extra={"check_id": check.id, "error": str(e)}
            )
            sent = False

        if sent:
            logger.info(
                "User was alerted to a status change in their check",
                extra={"check_id": check.id, "state": state.value, "alert_message": message}
            )
        else:
            logger.error(
                "Failed to alert user who had a status change in their check",
                extra={"check_id": check.id, "state": state.value}
            )

        if self.metrics:
            self.metrics.record_alert(sent)

        return sent
