"""Command-line entry point: ``advertise`` a session or ``discover`` sessions."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Optional, Sequence

from vmservice_mdns.cli.common import (
    add_common_cli_arguments,
    install_signal_handlers,
    non_empty_str,
    positive_float,
)
from vmservice_mdns.core.discovery import (
    EnvironmentBotDetector,
    HostDevice,
    MdnsAdvertiser,
    StaticBotDetector,
    VersionInfo,
    ZeroconfTransport,
    discover_observations,
    load_discovery_settings,
)
from vmservice_mdns.core.logging_config import configure_logging
from vmservice_mdns.core.logging_utils import get_module_logger

logger = get_module_logger("CLI")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vmservice-mdns",
        description="Advertise or discover debug sessions on the local network over mDNS.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    advertise = subparsers.add_parser("advertise", help="Advertise a session until interrupted")
    add_common_cli_arguments(advertise)
    advertise.add_argument("--app-name", required=True, type=non_empty_str, help="Project name to advertise")
    advertise.add_argument("--vm-service-uri", required=True, help="VM service URI, published verbatim")
    advertise.add_argument("--dtd-uri", default=None, help="Optional Dev Tools Daemon URI")
    advertise.add_argument("--device-name", default=None, help="Device name (default: host name)")
    advertise.add_argument("--device-id", default=None, help="Device id (default: host OS name)")
    advertise.add_argument("--mode", default=None, help="Build mode (default: from config, else 'debug')")
    advertise.add_argument(
        "--assume-interactive",
        action="store_true",
        help="Skip CI/bot detection and treat this process as interactive",
    )

    discover = subparsers.add_parser("discover", help="Print advertised sessions as JSON lines")
    add_common_cli_arguments(discover)
    discover.add_argument(
        "--timeout",
        type=positive_float,
        default=None,
        help="Seconds to browse (default: from config, else 3)",
    )

    return parser


async def run_advertise(args: argparse.Namespace) -> int:
    settings = await load_discovery_settings(args.config)
    bot_detector = StaticBotDetector(False) if args.assume_interactive else EnvironmentBotDetector()
    transport = ZeroconfTransport(settings.service_type, ipv6=settings.ipv6)

    advertiser = MdnsAdvertiser(
        transport,
        bot_detector,
        device=HostDevice(name=args.device_name, device_id=args.device_id),
        versions=VersionInfo.current(),
        enable_local_discovery=settings.enable_local_discovery,
        mode=args.mode or settings.mode,
    )

    stop_event = asyncio.Event()
    install_signal_handlers(stop_event, asyncio.get_running_loop())

    async with advertiser:
        await advertiser.advertise(args.app_name, args.vm_service_uri, args.dtd_uri)
        if args.app_name not in advertiser.advertised:
            logger.info("Not advertising (%s)", advertiser.state.value)
            return 1
        logger.info("Advertising %s; press Ctrl+C to stop", args.app_name)
        await stop_event.wait()
    return 0


async def run_discover(args: argparse.Namespace) -> int:
    settings = await load_discovery_settings(args.config)
    timeout = args.timeout if args.timeout is not None else settings.browse_timeout
    observations = await discover_observations(settings.service_type, timeout)
    for observation in observations:
        print(json.dumps(observation.to_json(), sort_keys=True))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    configure_logging(args.log_level, force=True, log_file=args.log_file)

    runner = run_advertise if args.command == "advertise" else run_discover
    try:
        return asyncio.run(runner(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
