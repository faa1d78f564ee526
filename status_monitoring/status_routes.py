"""Flask routes for server status."""

import asyncio

from flask import Blueprint, current_app, jsonify

from .exceptions import CycleFailedError
from .models import EndpointStatus, SystemStatus
from .status_manager import StatusCheckManager

# Create blueprint
status_bp = Blueprint('server_status', __name__, url_prefix='/api/server-status')

ENDPOINT_STATUS_VALUES = {
    EndpointStatus.ONLINE: 1.0,
    EndpointStatus.DEGRADED: 0.5,
    EndpointStatus.OFFLINE: 0.0,
}

SYSTEM_STATUS_VALUES = {
    SystemStatus.HEALTHY: 1.0,
    SystemStatus.WARNING: 0.5,
    SystemStatus.CRITICAL: 0.0,
}


def init_status_monitoring(app, config, enricher=None):
    """Initialize status monitoring.

    Args:
        app: Flask application instance
        config: Application configuration
        enricher: Optional MetricsEnricher for supplementary server data
    """
    try:
        app.status_manager = StatusCheckManager.from_config(config, enricher)
        app.logger.info("Status monitoring initialized successfully")
    except Exception as e:
        app.logger.error(f"Failed to initialize status monitoring: {e}")
        # Don't fail app startup; the routes answer 503 until fixed
        app.status_manager = None

    app.register_blueprint(status_bp)


def _get_manager():
    return getattr(current_app, 'status_manager', None)


@status_bp.route('/')
@status_bp.route('')
def server_status():
    """Run one check cycle and return the full status report."""
    manager = _get_manager()
    if not manager:
        return jsonify({
            'status': 'error',
            'message': 'Status monitoring not available'
        }), 503

    try:
        cycle = asyncio.run(manager.run_cycle())
        return jsonify(cycle.to_dict())

    except CycleFailedError as e:
        current_app.logger.error(f"Status check cycle failed: {e}")
        return jsonify({
            'status': 'error',
            'message': f'Status check cycle failed: {e.message}',
            'error': e.to_dict()
        }), 503

    except Exception as e:
        current_app.logger.exception("Unexpected error during status check cycle")
        return jsonify({
            'status': 'error',
            'message': f'Status check error: {str(e)}'
        }), 503


@status_bp.route('/metrics')
def status_metrics():
    """Prometheus-style metrics endpoint."""
    manager = _get_manager()
    if not manager:
        return 'status_monitoring_available 0\n', 503, {'Content-Type': 'text/plain'}

    try:
        cycle = asyncio.run(manager.run_cycle())
    except Exception as e:
        current_app.logger.error(f"Status metrics cycle failed: {e}")
        return f'status_monitoring_error 1\n# Error: {str(e)}\n', 503, {'Content-Type': 'text/plain'}

    metrics = ['# Server status metrics']

    for endpoint, health in zip(cycle.endpoints, cycle.report.endpoints):
        label = endpoint.id.replace('\\', '\\\\').replace('"', '\\"')
        metrics.append(f'server_status{{server="{label}"}} {ENDPOINT_STATUS_VALUES[health.status]}')
        metrics.append(f'server_response_time_ms{{server="{label}"}} {health.response_time_millis}')

    summary = cycle.report.summary
    metrics.append(f'system_status {SYSTEM_STATUS_VALUES[cycle.report.system_status]}')
    metrics.append(f'servers_total {summary.total}')
    metrics.append(f'servers_online {summary.online}')
    metrics.append(f'servers_degraded {summary.degraded}')
    metrics.append(f'servers_offline {summary.offline}')

    return '\n'.join(metrics) + '\n', 200, {'Content-Type': 'text/plain'}
