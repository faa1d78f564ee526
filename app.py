"""
Flask Web Application for the Server Status Monitor

Serves the aggregated server status report consumed by the status dashboard.
"""

import logging
from logging.handlers import RotatingFileHandler
import os
import sys

from flask import Flask, jsonify
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_cors import CORS

from config import get_config
from status_integration import setup_status_monitoring
from status_monitoring.status_routes import status_bp

# Load configuration
config = get_config()

app = Flask(__name__)
app.config['TESTING'] = config.testing

# Initialize limiter - will be enabled/disabled based on runtime configuration
limiter = Limiter(
    app=app,
    key_func=get_remote_address,
    default_limits=[],  # Set per-endpoint limits instead
    storage_uri="memory://",
    strategy="fixed-window"
)


def should_limit():
    """Check if rate limiting should be applied (not in testing mode)."""
    # Use app.config['TESTING'] so tests can modify it dynamically
    return not app.config.get('TESTING', False) and config.rate_limit_enabled


# Configure CORS
if config.cors_enabled:
    CORS(app,
         origins=config.cors_origins,
         methods=['GET', 'OPTIONS'],
         allow_headers=['Content-Type'],
         max_age=600)


# Configure logging
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

CONSOLE_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_LOG_FORMAT = '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'

# Package loggers share the application handlers
status_logger = logging.getLogger('status_monitoring')
status_logger.setLevel(getattr(logging, config.log_level))

# Console handler
console_handler = logging.StreamHandler()
console_handler.setLevel(logging.INFO)
console_formatter = logging.Formatter(CONSOLE_LOG_FORMAT)
console_handler.setFormatter(console_formatter)
logger.addHandler(console_handler)
status_logger.addHandler(console_handler)

# File handler for production (if not in debug mode)
if not app.debug and not config.testing:
    # Create logs directory if it doesn't exist
    os.makedirs(os.path.dirname(config.log_file) or '.', exist_ok=True)
    file_handler = RotatingFileHandler(config.log_file, maxBytes=config.log_max_bytes, backupCount=config.log_backup_count)
    file_handler.setLevel(getattr(logging, config.log_level))
    file_formatter = logging.Formatter(FILE_LOG_FORMAT)
    file_handler.setFormatter(file_formatter)
    logger.addHandler(file_handler)
    status_logger.addHandler(file_handler)
    logger.info('Server Status Monitor startup')


# Every status request probes all servers, so rate limit the whole blueprint
limiter.limit(config.rate_limit_status, exempt_when=lambda: not should_limit())(status_bp)

# Initialize status monitoring system
setup_status_monitoring(app, config)


@app.route('/')
def index():
    """Service description with links to the status endpoints."""
    return jsonify({
        'service': 'Server Status Monitor',
        'endpoints': {
            'status': '/api/server-status',
            'metrics': '/api/server-status/metrics'
        }
    })


if __name__ == '__main__':
    debug_mode = '--debug' in sys.argv or config.flask_debug

    logger.info(f'Starting Server Status Monitor on http://{config.flask_host}:{config.flask_port}')
    logger.info(f'Debug mode: {debug_mode}')
    logger.info(f'Probe timeout: {config.probe_timeout_seconds}s, '
                f'response time measurement: {config.measure_response_time}')

    if debug_mode:
        logger.warning('Running in DEBUG mode - not suitable for production!')

    if not config.endpoints_file and not config.endpoints:
        logger.warning('No endpoints configured (set ENDPOINTS_FILE or ENDPOINTS)')

    app.run(debug=debug_mode, host=config.flask_host, port=config.flask_port)
