"""Server status monitoring: concurrent endpoint probing and health rollup."""

from .aggregator import aggregate
from .classifier import classify
from .enrichment import UNKNOWN_ENRICHMENT, Enrichment, MetricsEnricher
from .exceptions import CycleFailedError, RegistryError, SchedulerStartError
from .models import (
    Endpoint,
    EndpointHealth,
    EndpointStatus,
    FailureReason,
    ProbeOutcome,
    SystemHealthReport,
    SystemStatus,
)
from .probe import probe
from .registry import EndpointRegistry, JsonFileEndpointRegistry, StaticEndpointRegistry
from .scheduler import ProbeScheduler
from .status_manager import CycleReport, StatusCheckManager
from .status_routes import init_status_monitoring

__all__ = [
    'aggregate',
    'classify',
    'probe',
    'CycleFailedError',
    'CycleReport',
    'Endpoint',
    'EndpointHealth',
    'EndpointRegistry',
    'EndpointStatus',
    'Enrichment',
    'FailureReason',
    'JsonFileEndpointRegistry',
    'MetricsEnricher',
    'ProbeOutcome',
    'ProbeScheduler',
    'RegistryError',
    'SchedulerStartError',
    'StaticEndpointRegistry',
    'StatusCheckManager',
    'SystemHealthReport',
    'SystemStatus',
    'UNKNOWN_ENRICHMENT',
    'init_status_monitoring',
]
