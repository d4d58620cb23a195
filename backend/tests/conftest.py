"""Shared pytest configuration."""

import pytest

from regcompat.config import CompatConfig
from regcompat.core.logging import configure_logging


@pytest.fixture(autouse=True)
def _configure_logging():
    """Route structlog through stdlib logging so stdout stays clean."""
    configure_logging(environment="testing", log_level="WARNING")
    yield


@pytest.fixture
def strict_config():
    """Engine configuration that rejects overlapping documents."""
    return CompatConfig(environment="testing", strict_decode=True)


@pytest.fixture
def repair_config():
    """Engine configuration that repairs overlapping documents."""
    return CompatConfig(environment="testing", strict_decode=False)


@pytest.fixture
def scenario_a_document():
    """Document after registering 0.1.0-beta.1 and 0.1.0-beta.2."""
    return """["*"]
DepB = "0.1"
julia = "1.10-1"

["0 - 0.1.0-beta.1"]
DepA = "0.1"

["0.1.0-beta.2 - *"]
DepA = "0.1-0.2"
"""


@pytest.fixture
def overlapping_document():
    """Document in which DepA is defined twice for 0.1.0-beta.2."""
    return """["*"]
DepA = "0.1"
DepB = "0.1"

["0.1.0-beta.2 - *"]
DepA = "0.1-0.2"
"""
