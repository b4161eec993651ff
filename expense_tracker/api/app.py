"""
Flask Application Factory

DESIGN DECISION: The app is built by create_app() from explicit settings
and components. Nothing is configured at import time, so tests build as
many isolated apps (each with its own in-memory database) as they need.
"""

import time
from typing import Optional

import structlog
from flask import Flask, g, request
from flask_cors import CORS

from expense_tracker.api.errors import register_error_handlers
from expense_tracker.api.middleware import EXTENSION_KEY
from expense_tracker.api.routes import expenses, system, users
from expense_tracker.audit import configure_logging, create_correlation_id
from expense_tracker.config import Settings, get_settings
from expense_tracker.orchestrator import AppComponents, create_app_components


logger = structlog.get_logger("expense_tracker.api")


def create_app(
    settings: Optional[Settings] = None,
    components: Optional[AppComponents] = None,
) -> Flask:
    """
    Build the HTTP application.

    Args:
        settings: Resolved settings; taken from components, then the
            process-wide settings, when omitted
        components: Pre-built components (tests inject these)
    """
    if settings is None:
        settings = components.settings if components else get_settings()

    configure_logging(settings.app.log_level)
    components = components or create_app_components(settings)

    app = Flask(__name__)
    app.json.sort_keys = False
    app.extensions[EXTENSION_KEY] = components

    prefix = settings.app.api_prefix
    CORS(app, resources={f"{prefix}/*": {"origins": settings.app.cors_origins_list}})

    app.register_blueprint(system.bp, url_prefix=prefix or None)
    app.register_blueprint(users.bp, url_prefix=f"{prefix}/users")
    app.register_blueprint(expenses.bp, url_prefix=f"{prefix}/expenses")

    register_error_handlers(app)

    @app.before_request
    def start_request():
        g.correlation_id = create_correlation_id()
        g.started_at = time.perf_counter()

    @app.after_request
    def log_request(response):
        started_at = g.get("started_at")
        duration_ms = (time.perf_counter() - started_at) * 1000 if started_at else None
        logger.info(
            "http_request",
            method=request.method,
            path=request.path,
            status=response.status_code,
            duration_ms=round(duration_ms, 2) if duration_ms is not None else None,
            correlation_id=str(g.get("correlation_id", "")),
        )
        if g.get("correlation_id"):
            response.headers["X-Correlation-ID"] = str(g.correlation_id)
        return response

    logger.info(
        "app_created",
        environment=settings.app.app_environment,
        api_prefix=prefix,
        database=components.database.engine.url.render_as_string(hide_password=True),
    )
    return app


def main() -> None:
    """Console entry point: serve the API with Flask's built-in server."""
    settings = get_settings()
    app = create_app(settings)
    app.run(host=settings.app.api_host, port=settings.app.api_port)


if __name__ == "__main__":
    main()
