"""Status check cycle orchestration."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .aggregator import aggregate
from .enrichment import DEFAULT_ENRICHMENT_TIMEOUT, Enrichment, MetricsEnricher, enrich_all
from .exceptions import CycleFailedError, RegistryError
from .models import Endpoint, ProbeResult, SystemHealthReport
from .registry import EndpointRegistry, build_registry
from .scheduler import ProbeScheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleReport:
    """Everything one cycle produced, ready for presentation."""
    report: SystemHealthReport
    endpoints: Tuple[Endpoint, ...]
    results: Tuple[ProbeResult, ...]
    enrichments: Tuple[Enrichment, ...]
    duration_ms: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the structured record served to the dashboard."""
        results_by_id = {result.endpoint.id: result for result in self.results}
        servers = []

        for endpoint, health, enrichment in zip(self.endpoints, self.report.endpoints, self.enrichments):
            result = results_by_id.get(endpoint.id)
            outcome = result.outcome if result else None

            server = {
                'id': endpoint.id,
                'name': endpoint.name,
                'url': endpoint.url,
                'status': health.status.value,
                'uptime': endpoint.declared_uptime,
                'responseTime': health.response_time_millis,
                'lastChecked': health.checked_at.isoformat(),
                'httpStatus': outcome.http_status_code if outcome else None,
                'failureReason': outcome.failure_reason.value if outcome else 'timeout',
            }
            server.update(enrichment.to_dict())
            servers.append(server)

        return {
            'status': self.report.system_status.value,
            'timestamp': self.report.timestamp.isoformat(),
            'servers': servers,
            'summary': self.report.summary.to_dict(),
        }


class StatusCheckManager:
    """Runs check cycles over the registered endpoints."""

    def __init__(
        self,
        registry: EndpointRegistry,
        scheduler: Optional[ProbeScheduler] = None,
        enricher: Optional[MetricsEnricher] = None,
        enrichment_timeout: float = DEFAULT_ENRICHMENT_TIMEOUT,
    ):
        """Initialize status check manager.

        Args:
            registry: Source of endpoints, read once per cycle
            scheduler: Probe scheduler (a default one is built if omitted)
            enricher: Optional supplementary metrics collaborator
            enrichment_timeout: Deadline for each enrichment call in seconds
        """
        self.registry = registry
        self.scheduler = scheduler or ProbeScheduler()
        self.enricher = enricher
        self.enrichment_timeout = enrichment_timeout

    @classmethod
    def from_config(cls, config, enricher: Optional[MetricsEnricher] = None) -> 'StatusCheckManager':
        """Build a manager from application configuration."""
        scheduler = ProbeScheduler(
            per_probe_timeout=config.probe_timeout_seconds,
            measure_response_time=config.measure_response_time,
            grace_seconds=config.cycle_grace_seconds,
        )
        return cls(
            registry=build_registry(config),
            scheduler=scheduler,
            enricher=enricher,
            enrichment_timeout=config.enrichment_timeout_seconds,
        )

    async def run_cycle(self) -> CycleReport:
        """Run one complete check cycle.

        Returns:
            CycleReport covering every registered endpoint

        Raises:
            CycleFailedError: If endpoints cannot be loaded or probes cannot
                be scheduled
        """
        start_time = time.time()

        try:
            endpoints = self.registry.load()
        except CycleFailedError:
            raise
        except Exception as e:
            raise RegistryError(
                f"Could not load endpoints: {e}",
                details={'error_type': type(e).__name__}
            ) from e

        logger.info(f"Starting status check cycle over {len(endpoints)} endpoint(s)")

        results: List[ProbeResult] = await self.scheduler.run_cycle(endpoints)
        report = aggregate(results, endpoints)

        enrichments = await enrich_all(
            self.enricher,
            endpoints,
            [health.status for health in report.endpoints],
            timeout=self.enrichment_timeout,
        )

        duration_ms = round((time.time() - start_time) * 1000, 2)
        summary = report.summary
        logger.info(
            f"Status check cycle finished in {duration_ms}ms: {report.system_status.value} "
            f"(total={summary.total}, online={summary.online}, "
            f"degraded={summary.degraded}, offline={summary.offline})"
        )

        return CycleReport(
            report=report,
            endpoints=tuple(endpoints),
            results=tuple(results),
            enrichments=tuple(enrichments),
            duration_ms=duration_ms,
        )
