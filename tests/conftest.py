"""Shared pytest configuration and fixtures for the vmservice-mdns test suite."""

import sys
from pathlib import Path

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "network: mark test as requiring a real multicast-capable network"
    )


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-network",
        action="store_true",
        default=False,
        help="Run tests that open real mDNS sockets",
    )


def pytest_collection_modifyitems(config, items):
    """Skip network tests unless --run-network is specified."""
    if config.getoption("--run-network"):
        return

    skip_network = pytest.mark.skip(reason="Need --run-network option to run")
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip_network)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def sample_txt() -> str:
    """Wire text for a session with a Dev Tools Daemon endpoint."""
    return (
        "hostname=host\n"
        "project_name=project\n"
        "device_name=device\n"
        "device_id=device_id\n"
        "target_platform=android\n"
        "mode=debug\n"
        "ws_uri=http://127.0.0.1:1234/auth/\n"
        "epoch=0\n"
        "pid=1\n"
        "flutter_version=1.0.0\n"
        "dart_version=2.0.0\n"
        "dtdUri=http://127.0.0.1:4321/auth/"
    )
