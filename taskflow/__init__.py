"""
Task Status Workflow
Flask Application Factory.

The workflow engine itself (taskflow.services.workflow_policy) is plain
Python and needs no app. create_app() wires the ambient pieces a hosting
service uses around it: configuration, logging, and error handlers that turn
rejected status changes into form errors.

Usage:
    from taskflow import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask

from taskflow.config import config
from taskflow.middleware.error_handlers import init_error_handlers
from taskflow.middleware.logging_config import configure_logging
from taskflow.services.workflow_policy import DEFAULT_POLICY

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__)
    # Instantiate so ProductionConfig can refuse to start without SECRET_KEY
    app.config.from_object(config[config_name]())

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Workflow policy ──────────────────────────────────────────────────
    app.extensions["workflow_policy"] = DEFAULT_POLICY

    # ── Error handlers ───────────────────────────────────────────────────
    init_error_handlers(app)

    logger.debug("Workflow policy loaded: %d terminal statuses",
                 len(DEFAULT_POLICY.terminal_statuses()))
    return app
