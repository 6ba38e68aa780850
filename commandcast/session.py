from __future__ import annotations
import asyncio
import time
from typing import Optional

import asyncssh

from .errors import HostConnectionError
from .models import HostTarget, ExecutionResult, SessionState


class RemoteSession:
    """One SSH connection to one host, used for exactly one command.

    Lifecycle is UNOPENED -> OPEN -> CLOSED.  A session is never reopened;
    the dispatcher builds a fresh one for every host on every run.
    """

    def __init__(self, target: HostTarget):
        self.target = target
        self._conn: Optional[asyncssh.SSHClientConnection] = None
        self._state = SessionState.UNOPENED

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is SessionState.OPEN and self._conn is not None

    # ── Connection ───────────────────────────────────────────────

    async def open(self) -> None:
        """Connect to the target, bounded by the target's timeout."""
        if self._state is not SessionState.UNOPENED:
            raise HostConnectionError(
                self.target.display_name, f"session is {self._state.value}"
            )

        try:
            self._conn = await asyncio.wait_for(
                asyncssh.connect(
                    self.target.hostname,
                    self.target.port,
                    options=self.target.options,
                ),
                timeout=self.target.timeout,
            )
        except asyncio.TimeoutError as e:
            self._state = SessionState.CLOSED
            raise HostConnectionError(
                self.target.display_name,
                f"connection timed out after {self.target.timeout}s",
            ) from e
        except (asyncssh.Error, OSError, ValueError, OverflowError) as e:
            self._state = SessionState.CLOSED
            raise HostConnectionError(self.target.display_name, str(e)) from e

        self._state = SessionState.OPEN

    # ── Command execution ────────────────────────────────────────

    async def run(self, command: str) -> ExecutionResult:
        """
        Run ``command`` and capture its stdout.

        The remote exit status is recorded on the result but never turns it
        into a failure.  Only a session that could not run the command at all
        raises HostConnectionError.
        """
        if not self.is_open:
            raise HostConnectionError(self.target.display_name, "not connected")

        start = time.monotonic()
        try:
            # Raw bytes; decoded below with replacement characters
            completed = await self._conn.run(command, check=False, encoding=None)
        except (asyncssh.Error, OSError) as e:
            raise HostConnectionError(self.target.display_name, str(e)) from e

        output = completed.stdout or ""
        if isinstance(output, bytes):
            output = output.decode(errors="replace")

        return ExecutionResult.ok(
            self.target,
            command,
            output,
            exit_status=completed.exit_status,
            duration=time.monotonic() - start,
        )

    # ── Lifecycle ────────────────────────────────────────────────

    async def close(self) -> None:
        conn, self._conn = self._conn, None
        self._state = SessionState.CLOSED
        if conn is None:
            return
        # Release the transport before waiting, so a cancelled wait
        # still leaves the connection closed
        conn.close()
        try:
            await conn.wait_closed()
        except (asyncssh.Error, OSError):
            # The transport is already closed; nothing left to release
            return

    async def __aenter__(self) -> RemoteSession:
        await self.open()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()
