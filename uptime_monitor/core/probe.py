"""Probe executor: one outbound HTTP(S) request per check under a hard deadline."""

import asyncio
import time
from typing import Optional

import aiohttp

from uptime_monitor.models.check import Check
from uptime_monitor.models.outcome import Outcome
from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)


class OutcomeSlot:
    """
    Single-assignment holder for a probe's outcome.

    The response, the request error and the deadline timer all offer an
    outcome; the first offer wins and every later one is dropped.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._future: asyncio.Future = (loop or asyncio.get_running_loop()).create_future()

    @property
    def filled(self) -> bool:
        return self._future.done()

    def offer(self, outcome: Outcome) -> bool:
        """
        Offer an outcome.

        Returns:
            bool: True if this offer was accepted, False if one already was
        """
        if self._future.done():
            logger.debug(
                "Suppressed late probe completion",
                extra={"outcome": outcome.to_dict()}
            )
            return False
        self._future.set_result(outcome)
        return True

    async def wait(self) -> Outcome:
        return await self._future


class ProbeExecutor:
    """
    Executes probes for checks with aiohttp.

    One shared client session is used for every probe. Each probe races the
    request against a timer of ``timeout_seconds``; the outcome slot makes
    sure exactly one outcome is reported per probe.
    """

    def __init__(self, max_concurrent: int = 50, metrics=None):
        """
        Initialize probe executor.

        Args:
            max_concurrent: Connection limit of the shared session
            metrics: Optional MetricsCollector
        """
        self.max_concurrent = max_concurrent
        self.metrics = metrics
        self.session: Optional[aiohttp.ClientSession] = None

        logger.info(
            "Probe executor initialized",
            extra={"max_concurrent": max_concurrent}
        )

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self) -> None:
        """Start the HTTP session."""
        if self.session is None:
            # Deadlines are enforced per probe, not by the session
            timeout = aiohttp.ClientTimeout(total=None)
            connector = aiohttp.TCPConnector(limit=self.max_concurrent)
            self.session = aiohttp.ClientSession(
                timeout=timeout,
                connector=connector
            )
            logger.info("HTTP session started")

    async def close(self) -> None:
        """Close the HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None
            logger.info("HTTP session closed")

    async def probe(self, check: Check) -> Outcome:
        """
        Probe a check's endpoint and classify the result.

        Args:
            check: Validated check

        Returns:
            Outcome: response code, network error, or timeout
        """
        if not self.session:
            await self.start()

        loop = asyncio.get_running_loop()
        slot = OutcomeSlot(loop)
        start_time = time.monotonic()

        request_task = asyncio.create_task(self._request(check, slot))
        timer = loop.call_later(check.timeout_seconds, slot.offer, Outcome.timeout())

        try:
            outcome = await slot.wait()
        finally:
            timer.cancel()
            if not request_task.done():
                request_task.cancel()
            await asyncio.gather(request_task, return_exceptions=True)

        duration = time.monotonic() - start_time

        if self.metrics:
            self.metrics.record_probe(outcome, duration)

        logger.info(
            "Probe completed",
            extra={
                "check_id": check.id,
                "url": check.target_url,
                "method": check.method.value,
                "outcome": outcome.to_dict(),
                "duration": duration
            }
        )

        return outcome

    async def _request(self, check: Check, slot: OutcomeSlot) -> None:
        """Issue the request and offer its result to the slot."""
        try:
            async with self.session.request(
                method=check.method.value.upper(),
                url=check.target_url,
                allow_redirects=False
            ) as response:
                slot.offer(Outcome.response(response.status))

        except asyncio.CancelledError:
            raise

        except aiohttp.ClientConnectorError as e:
            logger.warning(
                "Probe connection error",
                extra={"check_id": check.id, "url": check.target_url, "error": str(e)}
            )
            slot.offer(Outcome.failure(f"Connection error: {e}"))

        except aiohttp.ClientError as e:
            logger.warning(
                "Probe client error",
                extra={"check_id": check.id, "url": check.target_url, "error": str(e)}
            )
            slot.offer(Outcome.failure(f"Client error: {e}"))

        except Exception as e:
            # Malformed URLs and SSL setup problems surface as ValueError/OSError
            logger.exception(
                "Probe unexpected error",
                extra={"check_id": check.id, "url": check.target_url, "error": str(e)}
            )
            slot.offer(Outcome.failure(f"Unexpected error: {e}"))
