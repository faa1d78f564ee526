"""Single HTTP reachability probe."""

import asyncio
import logging
import time

import aiohttp

from .models import Endpoint, ProbeOutcome

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 5.0


async def _request_status(session: aiohttp.ClientSession, url: str) -> int:
    """Issue the request and return the status code without reading the body."""
    async with session.get(url, allow_redirects=False) as response:
        return response.status


async def probe(
    session: aiohttp.ClientSession,
    endpoint: Endpoint,
    timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> ProbeOutcome:
    """Probe an endpoint once under a hard deadline.

    The request is wrapped in ``asyncio.wait_for`` so it is cancelled when the
    deadline passes, including while stuck on a hung connection. Endpoint
    failures are returned as outcomes and never raised; only cancellation by
    the caller propagates.

    Args:
        session: Shared HTTP session
        endpoint: Endpoint to probe
        timeout: Deadline in seconds, must be positive

    Returns:
        ProbeOutcome describing what happened
    """
    if timeout <= 0:
        raise ValueError(f"Probe timeout must be positive, got {timeout}")

    start_time = time.monotonic()

    try:
        status_code = await asyncio.wait_for(
            _request_status(session, endpoint.url),
            timeout=timeout
        )
    except asyncio.TimeoutError:
        # aiohttp's own read/connect timeouts subclass TimeoutError too
        logger.debug(f"Probe of {endpoint.id} ({endpoint.url}) timed out after {timeout}s")
        return ProbeOutcome.timeout(f"No response within {timeout}s")
    except (aiohttp.ClientError, OSError, ValueError) as e:
        # ValueError covers hosts that fail IDNA encoding during resolution
        logger.debug(f"Probe of {endpoint.id} ({endpoint.url}) failed: {type(e).__name__}: {e}")
        return ProbeOutcome.network_error(f"{type(e).__name__}: {e}")

    elapsed_ms = round((time.monotonic() - start_time) * 1000)
    return ProbeOutcome.response(status_code, elapsed_ms)
