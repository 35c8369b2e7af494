"""Unit test fixtures for isolated, fast test execution.

Every collaborator of the advertiser (transport, bot detector, device,
clock) is replaced with an in-memory fake so no socket is ever opened.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from vmservice_mdns.core import config_manager, paths
from vmservice_mdns.core.discovery.advertiser import MdnsAdvertiser
from vmservice_mdns.core.discovery.metadata import FixedClock, VersionInfo
from vmservice_mdns.core.discovery.observation import MdnsObservation
from vmservice_mdns.core.logging_utils import TRACE
from tests.infrastructure.mocks.discovery_mocks import FakeBotDetector, FakeDevice, FakeTransport


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def fake_device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
def make_advertiser(fake_transport, fake_device) -> Callable[..., MdnsAdvertiser]:
    """Factory for advertisers wired to fakes.

    Example:
        def test_x(make_advertiser):
            advertiser = make_advertiser(bot_detector=FakeBotDetector(True))
    """
    def factory(
        bot_detector: Any = None,
        *,
        transport: Any = None,
        enable_local_discovery: bool = True,
        device: Any = None,
        **kwargs: Any,
    ) -> MdnsAdvertiser:
        kwargs.setdefault("versions", VersionInfo(framework_version="1.0.0", sdk_version="2.0.0"))
        kwargs.setdefault("clock", FixedClock(1672531200000))
        kwargs.setdefault("hostname", "test-host")
        kwargs.setdefault("pid", 4242)
        return MdnsAdvertiser(
            transport if transport is not None else fake_transport,
            bot_detector if bot_detector is not None else FakeBotDetector(False),
            device=device if device is not None else fake_device,
            enable_local_discovery=enable_local_discovery,
            **kwargs,
        )

    return factory


@pytest.fixture
def observation() -> MdnsObservation:
    return MdnsObservation(
        hostname="host",
        project_name="project",
        device_name="device",
        device_id="device_id",
        target_platform="android",
        mode="debug",
        ws_uri="ws://127.0.0.1:1234/auth/ws",
        epoch=0,
        pid=1,
        flutter_version="1.0.0",
        dart_version="2.0.0",
        dtd_uri="ws://127.0.0.1:4321/auth/ws",
    )


@pytest.fixture
def trace_caplog(caplog) -> pytest.LogCaptureFixture:
    """caplog capturing everything down to TRACE."""
    caplog.set_level(TRACE)
    return caplog


@pytest.fixture
def isolated_state_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the per-user state directory at a temp dir."""
    state_dir = tmp_path / "state"
    monkeypatch.setenv("VMSERVICE_MDNS_STATE_DIR", str(state_dir))
    # paths are resolved at import, so repoint the already-loaded modules too
    monkeypatch.setattr(paths, "USER_STATE_DIR", state_dir)
    monkeypatch.setattr(paths, "USER_CONFIG_OVERRIDES_DIR", state_dir / "config_overrides")
    monkeypatch.setattr(config_manager, "USER_CONFIG_OVERRIDES_DIR", state_dir / "config_overrides")
    return state_dir
