"""Tests for the command-line entry point."""

import importlib
import json

import pytest

cli_main = importlib.import_module("vmservice_mdns.cli.main")
from vmservice_mdns.cli.main import build_parser, run_advertise, run_discover
from tests.infrastructure.mocks.discovery_mocks import FakeTransport


class TestParser:

    def test_advertise_arguments(self):
        args = build_parser().parse_args([
            "advertise",
            "--app-name", "my_app",
            "--vm-service-uri", "http://127.0.0.1:1234/auth/",
            "--dtd-uri", "ws://127.0.0.1:4321/auth/",
            "--log-level", "trace",
        ])

        assert args.command == "advertise"
        assert args.app_name == "my_app"
        assert args.vm_service_uri == "http://127.0.0.1:1234/auth/"
        assert args.dtd_uri == "ws://127.0.0.1:4321/auth/"
        assert args.log_level == "trace"
        assert args.assume_interactive is False

    def test_blank_app_name_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["advertise", "--app-name", " ", "--vm-service-uri", "x"])

    def test_discover_timeout_must_be_positive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["discover", "--timeout", "0"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestRunDiscover:

    @pytest.mark.asyncio
    async def test_prints_json_lines(self, monkeypatch, capsys, observation, tmp_path):
        seen = {}

        async def fake_discover(service_type, timeout):
            seen["args"] = (service_type, timeout)
            return [observation]

        monkeypatch.setattr(cli_main, "discover_observations", fake_discover)
        config_path = tmp_path / "config.txt"
        config_path.write_text("browse_timeout = 0.5\n", encoding="utf-8")
        args = build_parser().parse_args(["discover", "--config", str(config_path)])

        assert await run_discover(args) == 0

        assert seen["args"][1] == 0.5
        line = capsys.readouterr().out.strip()
        assert json.loads(line) == observation.to_json()


class TestRunAdvertise:

    @pytest.mark.asyncio
    async def test_disabled_discovery_exits_nonzero(self, monkeypatch, tmp_path):
        transport = FakeTransport()
        monkeypatch.setattr(cli_main, "ZeroconfTransport", lambda *args, **kwargs: transport)
        monkeypatch.setattr(cli_main, "install_signal_handlers", lambda stop_event, loop: None)
        config_path = tmp_path / "config.txt"
        config_path.write_text("enable_local_discovery = false\n", encoding="utf-8")
        args = build_parser().parse_args([
            "advertise",
            "--app-name", "my_app",
            "--vm-service-uri", "http://127.0.0.1:1234/auth/",
            "--assume-interactive",
            "--config", str(config_path),
        ])

        assert await run_advertise(args) == 1

        assert transport.started == []
        assert transport.closed is True
