"""Status check data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EndpointStatus(Enum):
    """Tri-state status of a single endpoint."""
    ONLINE = "online"
    DEGRADED = "degraded"
    OFFLINE = "offline"


class SystemStatus(Enum):
    """Rollup status across all endpoints of a cycle."""
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class FailureReason(Enum):
    """Why a probe did not receive a response."""
    NONE = "none"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network-error"


class Endpoint(BaseModel):
    """A monitored endpoint."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Unique, stable identifier")
    name: str = Field(..., description="Display label")
    url: str = Field(..., description="Probe target")
    declared_uptime: str = Field(
        default="unknown",
        alias="uptime",
        description="Historical uptime string, passed through untouched"
    )

    @field_validator('id', 'name', mode='before')
    @classmethod
    def coerce_to_string(cls, v):
        """Accept numeric ids/names from JSON files."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Only http(s) targets can be probed."""
        if not v.lower().startswith(('http://', 'https://')):
            raise ValueError(f"url must start with http:// or https://: {v!r}")
        return v


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of one reachability attempt."""
    succeeded: bool
    http_status_code: Optional[int] = None
    elapsed_millis: Optional[int] = None
    failure_reason: FailureReason = FailureReason.NONE
    detail: Optional[str] = None

    @classmethod
    def response(cls, status_code: int, elapsed_millis: int) -> 'ProbeOutcome':
        """Outcome for a response received before the deadline."""
        return cls(
            succeeded=True,
            http_status_code=status_code,
            elapsed_millis=max(0, int(elapsed_millis)),
        )

    @classmethod
    def timeout(cls, detail: Optional[str] = None) -> 'ProbeOutcome':
        """Outcome for a probe whose deadline elapsed first."""
        return cls(succeeded=False, failure_reason=FailureReason.TIMEOUT, detail=detail)

    @classmethod
    def network_error(cls, detail: Optional[str] = None) -> 'ProbeOutcome':
        """Outcome for a transport failure before the deadline."""
        return cls(succeeded=False, failure_reason=FailureReason.NETWORK_ERROR, detail=detail)


@dataclass(frozen=True)
class ProbeResult:
    """A classified probe outcome for one endpoint, as produced by the scheduler."""
    endpoint: Endpoint
    outcome: ProbeOutcome
    status: EndpointStatus
    response_time_millis: int
    checked_at: datetime


@dataclass(frozen=True)
class EndpointHealth:
    """Per-endpoint judgment for one cycle."""
    endpoint_id: str
    status: EndpointStatus
    response_time_millis: int
    checked_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.endpoint_id,
            'status': self.status.value,
            'responseTime': self.response_time_millis,
            'lastChecked': self.checked_at.isoformat(),
        }

    @property
    def is_online(self) -> bool:
        return self.status == EndpointStatus.ONLINE

    @property
    def is_degraded(self) -> bool:
        return self.status == EndpointStatus.DEGRADED

    @property
    def is_offline(self) -> bool:
        return self.status == EndpointStatus.OFFLINE


@dataclass(frozen=True)
class StatusSummary:
    """Endpoint counts by status."""
    total: int = 0
    online: int = 0
    degraded: int = 0
    offline: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'total': self.total,
            'online': self.online,
            'degraded': self.degraded,
            'offline': self.offline,
        }


@dataclass(frozen=True)
class SystemHealthReport:
    """Aggregate result of one check cycle."""
    system_status: SystemStatus
    timestamp: datetime
    endpoints: Tuple[EndpointHealth, ...]
    summary: StatusSummary

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'status': self.system_status.value,
            'timestamp': self.timestamp.isoformat(),
            'servers': [health.to_dict() for health in self.endpoints],
            'summary': self.summary.to_dict(),
        }
