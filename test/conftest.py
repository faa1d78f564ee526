"""
Pytest configuration for all tests.
Sets up environment variables and fixtures used across test modules.
"""

import asyncio
import os

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer, unused_port


# Set environment variable BEFORE any other imports
# This must happen at module import time to affect app.py initialization
os.environ['TESTING'] = 'true'
os.environ.setdefault('RATE_LIMIT_ENABLED', 'false')

from status_monitoring.models import Endpoint  # noqa: E402


async def _ok(request):
    await asyncio.sleep(float(request.query.get('delay', 0)))
    return web.Response(text='ok')


async def _status(request):
    await asyncio.sleep(float(request.query.get('delay', 0)))
    return web.Response(status=int(request.match_info['code']), text='status')


async def _hang(request):
    # Longer than any probe timeout used in tests, short enough for shutdown
    await asyncio.sleep(float(request.query.get('delay', 2.0)))
    return web.Response(text='late')


async def _redirect(request):
    raise web.HTTPFound('/ok')


@pytest_asyncio.fixture
async def target_server():
    """Local HTTP server acting as the monitored endpoints.

    Routes:
        /ok?delay=s            200 after an optional delay
        /status/{code}?delay=s the given status code after an optional delay
        /hang?delay=s          responds only after ``delay`` (default 2s)
        /redirect              302 to /ok
    """
    app = web.Application()
    app.router.add_get('/ok', _ok)
    app.router.add_get('/status/{code}', _status)
    app.router.add_get('/hang', _hang)
    app.router.add_get('/redirect', _redirect)

    server = TestServer(app)
    await server.start_server()
    yield server
    await server.close()


@pytest.fixture
def refused_url():
    """URL of a local port nothing listens on."""
    return f"http://127.0.0.1:{unused_port()}/"


@pytest.fixture
def make_endpoint():
    """Factory for endpoints with sensible defaults."""
    def _make(endpoint_id, url, name=None, uptime='99.9%'):
        return Endpoint(id=endpoint_id, name=name or f"Server {endpoint_id}",
                        url=url, declared_uptime=uptime)
    return _make
