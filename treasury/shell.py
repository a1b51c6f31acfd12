# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Operator console on stdin."""

from __future__ import annotations

import sys
import threading
from collections.abc import Callable
from datetime import timedelta
from typing import TextIO

from treasury.application.services.account_service import AccountService
from treasury.infrastructure.sessions import SessionRegistry
from treasury.shared.errors import AppError
from treasury.shared.logging import logger

HELP_TEXT = """\
Commands:
  help                 show this message
  claimcode [HOURS]    create a claim code, optionally expiring after HOURS
  sessions             number of live sessions
  exit | quit | stop   shut the server down gracefully"""


class OperatorShell:
    """Reads administrative commands line by line.

    The shell only ever asks for a shutdown through ``request_shutdown``;
    closing the store is left to the coordinator. End of input stops the
    shell without stopping the server.
    """

    def __init__(
        self,
        *,
        request_shutdown: Callable[[str], None],
        accounts: AccountService,
        sessions: SessionRegistry,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self._request_shutdown = request_shutdown
        self._accounts = accounts
        self._sessions = sessions
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        self._thread = threading.Thread(target=self.run, daemon=True, name="OperatorShell")
        self._thread.start()

    def run(self) -> None:
        self._write("Type 'help' for a list of commands.")
        for line in self._stdin:
            if not self.handle(line):
                return
        logger.info("shell: input closed")

    def handle(self, line: str) -> bool:
        """Execute one command line; False means the shell should stop reading."""
        parts = line.split()
        if not parts:
            return True
        command, args = parts[0].lower(), parts[1:]

        if command in ("exit", "quit", "stop"):
            self._request_shutdown("operator shell")
            return False
        if command == "help":
            self._write(HELP_TEXT)
        elif command == "claimcode":
            self._claim_code(args)
        elif command == "sessions":
            self._write(f"{self._sessions.active_count()} active sessions")
        else:
            self._write(f"Unknown command '{command}'. Type 'help'.")
        return True

    def _claim_code(self, args: list[str]) -> None:
        expires_in = None
        if args:
            try:
                hours = float(args[0])
            except ValueError:
                self._write("HOURS must be a number")
                return
            if hours <= 0:
                self._write("HOURS must be positive")
                return
            expires_in = timedelta(hours=hours)

        try:
            claim = self._accounts.generate_claim_code(expires_in)
        except AppError as exc:
            logger.warning(f"shell.claimcode: failed code={exc.code}")
            self._write(f"Could not create claim code: {exc.code}")
            return

        suffix = f" (expires {claim.expires_at:%Y-%m-%d %H:%M} UTC)" if claim.expires_at else ""
        self._write(f"New claim code: {claim.code}{suffix}")

    def _write(self, text: str) -> None:
        print(text, file=self._stdout, flush=True)


__all__ = ["HELP_TEXT", "OperatorShell"]
