"""Roll per-endpoint results up into a system-wide report."""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional, Sequence

from .classifier import classify
from .models import (
    Endpoint,
    EndpointHealth,
    EndpointStatus,
    ProbeOutcome,
    ProbeResult,
    StatusSummary,
    SystemHealthReport,
    SystemStatus,
)

logger = logging.getLogger(__name__)


def system_status_for(statuses: Iterable[EndpointStatus]) -> SystemStatus:
    """Determine overall system status.

    Args:
        statuses: Endpoint statuses of one cycle

    Returns:
        CRITICAL if any endpoint is offline, WARNING if any is degraded,
        HEALTHY otherwise (including when there are no endpoints)
    """
    statuses = set(statuses)

    if EndpointStatus.OFFLINE in statuses:
        return SystemStatus.CRITICAL

    if EndpointStatus.DEGRADED in statuses:
        return SystemStatus.WARNING

    return SystemStatus.HEALTHY


def summarize(statuses: Iterable[EndpointStatus]) -> StatusSummary:
    """Count endpoints per status."""
    statuses = list(statuses)
    return StatusSummary(
        total=len(statuses),
        online=statuses.count(EndpointStatus.ONLINE),
        degraded=statuses.count(EndpointStatus.DEGRADED),
        offline=statuses.count(EndpointStatus.OFFLINE),
    )


def aggregate(
    results: Iterable[ProbeResult],
    endpoints: Sequence[Endpoint],
    timestamp: Optional[datetime] = None,
) -> SystemHealthReport:
    """Build the report for one cycle.

    The report follows ``endpoints`` order whatever order ``results`` arrive
    in. An endpoint without a result is reported offline so the report always
    covers every endpoint.

    Args:
        results: Classified results from the scheduler
        endpoints: Endpoints of the cycle, in registry order
        timestamp: Report timestamp, defaults to now (UTC)

    Returns:
        SystemHealthReport for the cycle
    """
    timestamp = timestamp or datetime.now(timezone.utc)

    by_id: Dict[str, ProbeResult] = {}
    known_ids = {endpoint.id for endpoint in endpoints}
    for result in results:
        if result.endpoint.id not in known_ids:
            logger.warning(f"Ignoring result for unregistered endpoint {result.endpoint.id}")
            continue
        by_id[result.endpoint.id] = result

    health = []
    for endpoint in endpoints:
        result = by_id.get(endpoint.id)
        if result is None:
            logger.warning(f"No result for endpoint {endpoint.id}, reporting it offline")
            health.append(EndpointHealth(
                endpoint_id=endpoint.id,
                status=classify(ProbeOutcome.timeout("No result in cycle")),
                response_time_millis=0,
                checked_at=timestamp,
            ))
            continue

        health.append(EndpointHealth(
            endpoint_id=endpoint.id,
            status=result.status,
            response_time_millis=0 if result.status == EndpointStatus.OFFLINE else result.response_time_millis,
            checked_at=result.checked_at,
        ))

    statuses = [h.status for h in health]
    return SystemHealthReport(
        system_status=system_status_for(statuses),
        timestamp=timestamp,
        endpoints=tuple(health),
        summary=summarize(statuses),
    )
