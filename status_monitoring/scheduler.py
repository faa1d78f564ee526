"""Concurrent probe scheduling for one check cycle."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

import aiohttp

from .classifier import classify
from .exceptions import SchedulerStartError
from .models import Endpoint, EndpointStatus, ProbeOutcome, ProbeResult
from .probe import DEFAULT_PROBE_TIMEOUT, probe

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def default_session_factory(timeout: float) -> aiohttp.ClientSession:
    """Create the per-cycle HTTP session.

    The connector has no connection cap so probes never queue behind each
    other and a cycle stays bounded by a single probe timeout.
    """
    return aiohttp.ClientSession(
        connector=aiohttp.TCPConnector(limit=0),
        timeout=aiohttp.ClientTimeout(total=timeout),
    )


class ProbeScheduler:
    """Fans probes out over all endpoints and joins them in input order."""

    def __init__(
        self,
        per_probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
        measure_response_time: bool = True,
        grace_seconds: float = 1.0,
        session_factory: Optional[Callable[[float], aiohttp.ClientSession]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the scheduler.

        Args:
            per_probe_timeout: Deadline for every individual request in seconds
            measure_response_time: Issue a second, independent request per
                endpoint to measure response time
            grace_seconds: Slack added to the probe timeout for the cycle-level
                join deadline
            session_factory: Callable building the HTTP session from the timeout
            clock: Source of check timestamps
        """
        if per_probe_timeout <= 0:
            raise ValueError(f"per_probe_timeout must be positive, got {per_probe_timeout}")
        if grace_seconds < 0:
            raise ValueError(f"grace_seconds must not be negative, got {grace_seconds}")

        self.per_probe_timeout = per_probe_timeout
        self.measure_response_time = measure_response_time
        self.grace_seconds = grace_seconds
        self.session_factory = session_factory or default_session_factory
        self.clock = clock

    @property
    def cycle_deadline(self) -> float:
        """Upper bound in seconds on how long a cycle waits for its workers."""
        return self.per_probe_timeout + self.grace_seconds

    async def run_cycle(self, endpoints: Iterable[Endpoint]) -> List[ProbeResult]:
        """Probe every endpoint concurrently.

        Waits for all workers; workers still running at the cycle deadline are
        cancelled and reported offline. Results are in input order.

        Args:
            endpoints: Endpoints to probe

        Returns:
            One ProbeResult per endpoint, in the order given

        Raises:
            SchedulerStartError: If the session or the workers cannot be started
        """
        endpoints = list(endpoints)
        if not endpoints:
            return []

        try:
            session = self.session_factory(self.per_probe_timeout)
        except Exception as e:
            raise SchedulerStartError(
                f"Could not create HTTP session: {e}",
                details={'error_type': type(e).__name__}
            ) from e

        try:
            return await self._run_workers(session, endpoints)
        finally:
            await session.close()

    async def _run_workers(self, session: aiohttp.ClientSession,
                           endpoints: List[Endpoint]) -> List[ProbeResult]:
        tasks: List[asyncio.Task] = []
        try:
            for endpoint in endpoints:
                tasks.append(asyncio.create_task(
                    self._check_endpoint(session, endpoint),
                    name=f"probe:{endpoint.id}"
                ))
        except Exception as e:
            await self._cancel_all(tasks)
            raise SchedulerStartError(
                f"Could not schedule probe workers: {e}",
                details={'scheduled': len(tasks), 'requested': len(endpoints)}
            ) from e

        try:
            _, pending = await asyncio.wait(tasks, timeout=self.cycle_deadline)
        except asyncio.CancelledError:
            await self._cancel_all(tasks)
            raise

        if pending:
            logger.warning(f"{len(pending)} probe worker(s) still running after "
                           f"{self.cycle_deadline}s, cancelling")
            await self._cancel_all(pending)

        return [self._collect(endpoint, task) for endpoint, task in zip(endpoints, tasks)]

    async def _check_endpoint(self, session: aiohttp.ClientSession,
                              endpoint: Endpoint) -> ProbeResult:
        """Status probe and response-time probe for one endpoint."""
        timing_task = None
        if self.measure_response_time:
            timing_task = asyncio.create_task(probe(session, endpoint, self.per_probe_timeout))

        try:
            outcome = await probe(session, endpoint, self.per_probe_timeout)
            checked_at = self.clock()
            status = classify(outcome)

            if status == EndpointStatus.OFFLINE:
                response_time = 0
            elif timing_task is None:
                response_time = outcome.elapsed_millis or 0
            else:
                timing = await timing_task
                if timing.succeeded:
                    response_time = timing.elapsed_millis or 0
                else:
                    logger.debug(f"Response time measurement for {endpoint.id} failed: "
                                 f"{timing.failure_reason.value}")
                    response_time = 0
        finally:
            if timing_task is not None and not timing_task.done():
                timing_task.cancel()
                await asyncio.gather(timing_task, return_exceptions=True)

        return ProbeResult(
            endpoint=endpoint,
            outcome=outcome,
            status=status,
            response_time_millis=response_time,
            checked_at=checked_at,
        )

    def _collect(self, endpoint: Endpoint, task: asyncio.Task) -> ProbeResult:
        if task.cancelled():
            return self._synthesized(endpoint, ProbeOutcome.timeout(
                f"Cancelled at cycle deadline of {self.cycle_deadline}s"
            ))

        error = task.exception()
        if error is not None:
            logger.error(f"Probe worker for {endpoint.id} crashed: {type(error).__name__}: {error}")
            return self._synthesized(endpoint, ProbeOutcome.network_error(
                f"{type(error).__name__}: {error}"
            ))

        return task.result()

    def _synthesized(self, endpoint: Endpoint, outcome: ProbeOutcome) -> ProbeResult:
        return ProbeResult(
            endpoint=endpoint,
            outcome=outcome,
            status=classify(outcome),
            response_time_millis=0,
            checked_at=self.clock(),
        )

    @staticmethod
    async def _cancel_all(tasks) -> None:
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
