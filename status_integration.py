"""Integration layer for status monitoring in Flask application."""

from status_monitoring.status_routes import init_status_monitoring


def setup_status_monitoring(app, config, enricher=None):
    """Setup status monitoring for the Flask application.

    Args:
        app: Flask application instance
        config: Application configuration
        enricher: Optional MetricsEnricher for supplementary server data
    """
    init_status_monitoring(app, config, enricher)


def update_status_enricher(app, enricher):
    """Swap the metrics enricher used by subsequent cycles.

    Args:
        app: Flask application instance
        enricher: New MetricsEnricher, or None to report placeholders
    """
    if hasattr(app, 'status_manager') and app.status_manager:
        app.status_manager.enricher = enricher
