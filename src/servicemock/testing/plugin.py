"""
pytest plugin.

Registered through the ``pytest11`` entry point. Provides the
``service_mocker`` fixture, a fresh ServiceMocker per test, configured from
``--servicemock-config``, ``SERVICEMOCK_CONFIG`` or ``./servicemock.yaml``.
Override ``service_mock_config`` in a conftest to configure it in code.
"""

from pathlib import Path

import pytest

from servicemock.assembler.orchestrator import ServiceMocker
from servicemock.config.loader import load_config
from servicemock.config.models import ServiceMockConfig


def pytest_addoption(parser):
    group = parser.getgroup("servicemock")
    group.addoption(
        "--servicemock-config",
        action="store",
        default=None,
        help="Path to a servicemock YAML configuration file",
    )


@pytest.fixture
def service_mock_config(pytestconfig) -> ServiceMockConfig:
    """Configuration used by ``service_mocker``."""
    path = pytestconfig.getoption("servicemock_config")
    return load_config(Path(path) if path else None)


@pytest.fixture
def service_mocker(service_mock_config) -> ServiceMocker:
    """A ServiceMocker with an empty registry."""
    return ServiceMocker(service_mock_config)
