"""Map probe outcomes to endpoint status."""

from .models import EndpointStatus, ProbeOutcome


def classify(outcome: ProbeOutcome) -> EndpointStatus:
    """Classify a probe outcome.

    Only total unreachability is offline. Any received response outside
    2xx/3xx, including 4xx, 5xx and protocol anomalies, is degraded.

    Args:
        outcome: Outcome of a single probe

    Returns:
        Endpoint status for the outcome
    """
    if not outcome.succeeded:
        return EndpointStatus.OFFLINE

    code = outcome.http_status_code
    if code is not None and 200 <= code <= 399:
        return EndpointStatus.ONLINE

    # 4xx/5xx, and anything else that arrived (1xx, 6xx, missing code)
    return EndpointStatus.DEGRADED
