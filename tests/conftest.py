"""Shared test fixtures."""

import pytest
import structlog

from ehr_domain import cli


@pytest.fixture(autouse=True)
def quiet_logging():
    """Apply the CLI's logging configuration, then restore structlog defaults."""
    cli.configure_logging("warning")
    yield
    structlog.reset_defaults()
