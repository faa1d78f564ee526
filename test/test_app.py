"""
Tests for the Flask application and status routes.

Tests cover:
- /api/server-status report and status codes
- /api/server-status/metrics text output
- Cycle failure handling
- Initialization failures
- Log handler formats
"""

import logging
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest
from flask import Flask

from app import app
from status_monitoring.exceptions import RegistryError
from status_monitoring.models import EndpointStatus, ProbeOutcome, ProbeResult
from status_monitoring.registry import StaticEndpointRegistry
from status_monitoring.scheduler import ProbeScheduler
from status_monitoring.status_manager import StatusCheckManager
from status_monitoring.status_routes import init_status_monitoring

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def build_manager(statuses):
    """Manager over one endpoint per status, with a stubbed scheduler."""
    codes = {EndpointStatus.ONLINE: 200, EndpointStatus.DEGRADED: 503}
    registry = StaticEndpointRegistry([
        {'id': f's{i}', 'name': f'Server {i}', 'url': f'http://s{i}.test/'} for i in range(len(statuses))
    ])
    results = []
    for endpoint, status in zip(registry.load(), statuses):
        if status == EndpointStatus.OFFLINE:
            outcome, response_time = ProbeOutcome.timeout(), 0
        else:
            outcome, response_time = ProbeOutcome.response(codes[status], 40), 42
        results.append(ProbeResult(endpoint, outcome, status, response_time, NOW))

    scheduler = Mock(spec=ProbeScheduler)
    scheduler.run_cycle = AsyncMock(return_value=results)
    return StatusCheckManager(registry, scheduler)


@pytest.fixture
def client():
    """Create Flask test client, restoring the real manager afterwards."""
    app.config['TESTING'] = True
    original_manager = app.status_manager

    with app.test_client() as client:
        yield client

    app.status_manager = original_manager


class TestServerStatusRoute:
    """Test GET /api/server-status."""

    def test_default_configuration_has_no_endpoints(self, client):
        response = client.get('/api/server-status')

        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'healthy'
        assert data['servers'] == []
        assert data['summary'] == {'total': 0, 'online': 0, 'degraded': 0, 'offline': 0}

    def test_trailing_slash(self, client):
        assert client.get('/api/server-status/').status_code == 200

    def test_critical_report_is_still_200(self, client):
        app.status_manager = build_manager([EndpointStatus.ONLINE, EndpointStatus.DEGRADED, EndpointStatus.OFFLINE])

        response = client.get('/api/server-status')

        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'critical'
        assert data['summary'] == {'total': 3, 'online': 1, 'degraded': 1, 'offline': 1}
        assert [s['status'] for s in data['servers']] == ['online', 'degraded', 'offline']
        assert data['servers'][2]['responseTime'] == 0
        assert data['servers'][2]['failureReason'] == 'timeout'
        assert 'sslInfo' in data['servers'][0]

    def test_cycle_failure_is_503(self, client):
        manager = Mock()
        manager.run_cycle = AsyncMock(side_effect=RegistryError("Endpoints file not found: x.json"))
        app.status_manager = manager

        response = client.get('/api/server-status')

        assert response.status_code == 503
        data = response.get_json()
        assert data['status'] == 'error'
        assert 'Endpoints file not found' in data['message']
        assert data['error']['error_type'] == 'RegistryError'

    def test_unexpected_error_is_503(self, client):
        manager = Mock()
        manager.run_cycle = AsyncMock(side_effect=RuntimeError("boom"))
        app.status_manager = manager

        response = client.get('/api/server-status')

        assert response.status_code == 503
        assert response.get_json()['status'] == 'error'

    def test_monitoring_unavailable(self, client):
        app.status_manager = None

        response = client.get('/api/server-status')

        assert response.status_code == 503
        assert 'not available' in response.get_json()['message']


class TestMetricsRoute:
    """Test GET /api/server-status/metrics."""

    def test_metrics(self, client):
        app.status_manager = build_manager([EndpointStatus.ONLINE, EndpointStatus.DEGRADED])

        response = client.get('/api/server-status/metrics')

        assert response.status_code == 200
        assert response.content_type.startswith('text/plain')
        lines = response.get_data(as_text=True).splitlines()
        assert 'server_status{server="s0"} 1.0' in lines
        assert 'server_status{server="s1"} 0.5' in lines
        assert 'server_response_time_ms{server="s0"} 42' in lines
        assert 'system_status 0.5' in lines
        assert 'servers_total 2' in lines
        assert 'servers_degraded 1' in lines

    def test_metrics_cycle_failure(self, client):
        manager = Mock()
        manager.run_cycle = AsyncMock(side_effect=RegistryError("unreadable"))
        app.status_manager = manager

        response = client.get('/api/server-status/metrics')

        assert response.status_code == 503
        assert 'status_monitoring_error 1' in response.get_data(as_text=True)

    def test_metrics_unavailable(self, client):
        app.status_manager = None

        response = client.get('/api/server-status/metrics')

        assert response.status_code == 503
        assert response.get_data(as_text=True) == 'status_monitoring_available 0\n'


class TestIndex:
    """Test the index route."""

    def test_index(self, client):
        data = client.get('/').get_json()
        assert data['endpoints']['status'] == '/api/server-status'


class TestInitStatusMonitoring:
    """Test init_status_monitoring()."""

    def test_bad_endpoint_config_leaves_routes_answering_503(self):
        test_app = Flask('status-init-test')
        config = Mock(
            probe_timeout_seconds=5.0,
            measure_response_time=True,
            cycle_grace_seconds=1.0,
            enrichment_timeout_seconds=2.0,
            endpoints_file=None,
            endpoints=[{'id': '1', 'name': 'bad', 'url': 'not-a-url'}],
        )

        init_status_monitoring(test_app, config)

        assert test_app.status_manager is None
        response = test_app.test_client().get('/api/server-status')
        assert response.status_code == 503


class TestLogging:
    """Test the application log handlers."""

    def test_console_handler_format(self):
        import app as app_module

        status_logger = logging.getLogger('status_monitoring')
        assert app_module.console_handler in status_logger.handlers
        assert app_module.console_handler.formatter._fmt == app_module.CONSOLE_LOG_FORMAT

    def test_file_format_records_source_location(self):
        import app as app_module

        record = logging.LogRecord('status_monitoring.scheduler', logging.WARNING,
                                   '/srv/status_monitoring/scheduler.py', 42,
                                   'worker for %s timed out', ('db',), None)
        line = logging.Formatter(app_module.FILE_LOG_FORMAT).format(record)

        assert 'WARNING: worker for db timed out' in line
        assert line.endswith('[in /srv/status_monitoring/scheduler.py:42]')
