"""Supplementary per-endpoint metrics supplied by an external collaborator.

SSL validity, availability windows, last downtime and response history are
not computed here. A ``MetricsEnricher`` implementation backed by a real
certificate inspector or metrics store is plugged in instead; the cycle calls
it once per endpoint after the status is final and treats it as best effort.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, ValidationError, field_validator

from .models import Endpoint, EndpointStatus

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"
DEFAULT_ENRICHMENT_TIMEOUT = 2.0


def _number_to_string(v):
    """Metrics stores often report percentages and durations as numbers."""
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


class SslInfo(BaseModel):
    """Certificate validity as reported by the enricher."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    is_valid: Optional[bool] = Field(default=None, alias="isValid")
    expires_in: str = Field(default=UNKNOWN, alias="expiresIn")

    @field_validator('expires_in', mode='before')
    @classmethod
    def coerce_expires_in(cls, v):
        return _number_to_string(v)


class Availability(BaseModel):
    """Availability percentages over recent windows."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    last24h: str = UNKNOWN
    last7d: str = UNKNOWN

    @field_validator('last24h', 'last7d', mode='before')
    @classmethod
    def coerce_windows(cls, v):
        return _number_to_string(v)


class Enrichment(BaseModel):
    """Supplementary data merged into an endpoint's entry in the report."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ssl_info: SslInfo = Field(default_factory=SslInfo, alias="sslInfo")
    availability: Availability = Field(default_factory=Availability)
    last_downtime: str = Field(default=UNKNOWN, alias="lastDowntime")
    response_history: List[NonNegativeInt] = Field(default_factory=list, alias="responseHistory")

    @field_validator('last_downtime', mode='before')
    @classmethod
    def coerce_last_downtime(cls, v):
        return _number_to_string(v)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase shape used in the report."""
        return self.model_dump(by_alias=True)


UNKNOWN_ENRICHMENT = Enrichment()


class MetricsEnricher(ABC):
    """Collaborator supplying supplementary data for an endpoint."""

    @abstractmethod
    async def enrich(self, endpoint: Endpoint,
                     status: EndpointStatus) -> Union[Enrichment, Dict[str, Any]]:
        """Return supplementary data for an endpoint.

        Args:
            endpoint: The endpoint that was checked
            status: Its final status for this cycle

        Returns:
            An Enrichment, or a mapping in the same (camelCase or snake_case) shape
        """


async def enrich_safely(
    enricher: Optional[MetricsEnricher],
    endpoint: Endpoint,
    status: EndpointStatus,
    timeout: float = DEFAULT_ENRICHMENT_TIMEOUT,
) -> Enrichment:
    """Call the enricher once, never letting it fail the cycle.

    Returns:
        The validated enrichment, or ``UNKNOWN_ENRICHMENT`` when there is no
        enricher or it is slow, raises, or returns invalid data
    """
    if enricher is None:
        return UNKNOWN_ENRICHMENT

    try:
        data = await asyncio.wait_for(enricher.enrich(endpoint, status), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Enrichment for {endpoint.id} timed out after {timeout}s")
        return UNKNOWN_ENRICHMENT
    except Exception as e:
        logger.warning(f"Enrichment for {endpoint.id} failed: {type(e).__name__}: {e}")
        return UNKNOWN_ENRICHMENT

    if isinstance(data, Enrichment):
        return data

    try:
        return Enrichment.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Enrichment for {endpoint.id} returned invalid data: {e.error_count()} error(s)")
        return UNKNOWN_ENRICHMENT


async def enrich_all(
    enricher: Optional[MetricsEnricher],
    endpoints: Sequence[Endpoint],
    statuses: Sequence[EndpointStatus],
    timeout: float = DEFAULT_ENRICHMENT_TIMEOUT,
) -> List[Enrichment]:
    """Enrich every endpoint concurrently, preserving order."""
    if enricher is None:
        return [UNKNOWN_ENRICHMENT for _ in endpoints]

    return list(await asyncio.gather(*[
        enrich_safely(enricher, endpoint, status, timeout)
        for endpoint, status in zip(endpoints, statuses)
    ]))
