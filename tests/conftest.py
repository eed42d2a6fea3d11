"""
Shared pytest fixtures for the Task Status Workflow test suite.

Provides:
    - app: Flask application (session-scoped)
    - client: Flask test client (function-scoped)
    - policy: the default WorkflowPolicy
"""

import pytest

from taskflow import create_app
from taskflow.services.workflow_policy import DEFAULT_POLICY


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def policy():
    return DEFAULT_POLICY
