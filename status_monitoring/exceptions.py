"""Exceptions raised by status monitoring.

Endpoint-local failures (timeouts, refused connections, HTTP errors) never
raise; they become offline or degraded results. Only failures that stop a
whole check cycle from completing are raised to the caller.
"""

from typing import Any, Dict, Optional


class StatusMonitoringError(Exception):
    """Base exception for status monitoring errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize exception.

        Args:
            message: Error message
            details: Additional error details
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging and JSON responses."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'details': self.details,
        }


class CycleFailedError(StatusMonitoringError):
    """A check cycle could not produce a complete report."""


class RegistryError(CycleFailedError):
    """The monitored endpoints could not be enumerated."""


class SchedulerStartError(CycleFailedError):
    """Probe workers could not be started."""
