"""Command line entry point.

    ui-probe routes            print the discovered route table
    ui-probe login             log in with ADMIN_EMAIL / ADMIN_PASSWORD and report the verdict

Exit codes: 0 passed, 1 failed or skipped, 2 configuration or reachability problem.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

import anyio

from ui_probe.config import settings
from ui_probe.errors import ConfigurationError, TargetUnreachable
from ui_probe.routes import RouteCache
from ui_probe.scenario import Scenario, Verdict
from ui_probe.sessions import PlaywrightClient, SessionManager, check_target
from ui_probe.workflows import login

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else settings.log_level
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def _routes_command() -> int:
    await check_target()
    async with PlaywrightClient() as client:
        async with SessionManager(client.browser) as manager:
            handle = await manager.anonymous_session()
            sc = Scenario("route discovery", handle.page, cache=RouteCache())
            routes = await sc.discover_routes()
    print(json.dumps(routes.as_dict(), indent=2))
    return 0


async def _login_command() -> int:
    email, password = settings.require_admin()
    await check_target()
    async with PlaywrightClient() as client:
        async with SessionManager(client.browser) as manager:
            handle = await manager.anonymous_session()
            async with Scenario("admin login", handle.page, cache=RouteCache()) as sc:
                await login(sc, email, password)
    print(sc.result.summary())
    return 0 if sc.result.verdict is Verdict.PASSED else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ui-probe",
        description="Probe a web application's auth routes and login flow",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Origin of the application (default: $UI_BASE_URL or http://localhost:5173)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log probe attempts (DEBUG)")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("routes", help="Discover and print the route table")
    sub.add_parser("login", help="Check that the configured admin can log in")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    if args.base_url:
        settings.profile.base_url = args.base_url

    command = _routes_command if args.command == "routes" else _login_command
    try:
        return anyio.run(command)
    except (ConfigurationError, TargetUnreachable) as exc:
        logger.error(str(exc))
        return 2


if __name__ == "__main__":
    sys.exit(main())
