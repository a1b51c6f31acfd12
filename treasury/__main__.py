# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""``python -m treasury``: run the backend with an operator shell."""

from __future__ import annotations

import argparse
import os
import signal
import sys
from collections.abc import Sequence

from werkzeug.serving import make_server

from treasury.container import Container
from treasury.infrastructure.db import Database
from treasury.server import ShutdownCoordinator
from treasury.shell import OperatorShell
from treasury.shared.config import AppConfig, load_config
from treasury.shared.logging import logger, setup_logging


def _parse_flag(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got {value!r}")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="treasury", description="Treasury backend server")
    parser.add_argument("--address", help="IP address to listen on")
    parser.add_argument("--port", type=int, help="port to listen on")
    parser.add_argument(
        "--securecookies",
        type=_parse_flag,
        metavar="BOOL",
        help="set the Secure attribute on session cookies",
    )
    return parser.parse_args(argv)


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    server_update: dict[str, object] = {}
    if args.address is not None:
        server_update["ip_address"] = args.address
    if args.port is not None:
        server_update["port"] = args.port

    update: dict[str, object] = {}
    if server_update:
        update["server"] = config.server.model_copy(update=server_update)
    if args.securecookies is not None:
        update["security"] = config.security.model_copy(
            update={"cookie_secure": args.securecookies}
        )
    return config.model_copy(update=update) if update else config


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    config = apply_overrides(load_config(), args)
    setup_logging(config.logging, debug_mode=config.debug_logging)
    logger.info(f"Working directory: {os.getcwd()}")

    database = Database.open(config.database)
    container = Container(config, database)

    host, port = config.server.ip_address, config.server.port
    try:
        server = make_server(host, port, container.wsgi_app, threaded=True)
    except OSError as exc:
        logger.error(f"server: cannot listen on {host}:{port}: {exc}")
        container.state.close_database()
        return 1

    coordinator = ShutdownCoordinator(
        state=container.state,
        sessions=container.session_registry,
        server=server,
        tracker=container.wsgi_app,
        grace_period=config.server.shutdown_grace_period,
        sweep_interval=config.security.session_sweep_interval,
    )

    def _on_signal(signum, _frame) -> None:
        coordinator.request_shutdown(signal.Signals(signum).name)

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    OperatorShell(
        request_shutdown=coordinator.request_shutdown,
        accounts=container.account_service,
        sessions=container.session_registry,
    ).start()

    logger.info(f"server: listening on http://{host}:{port}")
    coordinator.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
