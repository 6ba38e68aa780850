from __future__ import annotations
import asyncio
import time
from typing import Optional, Callable, Awaitable, AsyncIterator

from .errors import HostConnectionError
from .logger import SessionLogger
from .models import HostTarget, ExecutionResult, RunReport
from .session import RemoteSession


ResultCallback = Callable[[ExecutionResult], Awaitable[None]]
TimeoutCallback = Callable[[list[HostTarget]], Awaitable[None]]


class ResultCollector:
    """
    Drains a result queue until ``expected`` results arrived or the deadline
    (in event loop time) passes, whichever comes first.

    Results are yielded in arrival order.  After iteration, ``timed_out``
    tells whether the deadline cut collection short.
    """

    def __init__(self, results: asyncio.Queue, expected: int, deadline: float):
        self._results = results
        self._expected = expected
        self._deadline = deadline
        self.received = 0
        self.timed_out = False

    def __aiter__(self) -> AsyncIterator[ExecutionResult]:
        return self._drain()

    async def _drain(self) -> AsyncIterator[ExecutionResult]:
        loop = asyncio.get_running_loop()
        while self.received < self._expected:
            remaining = self._deadline - loop.time()
            if remaining <= 0:
                self.timed_out = True
                return
            try:
                result = await asyncio.wait_for(self._results.get(), timeout=remaining)
            except asyncio.TimeoutError:
                self.timed_out = True
                return
            self.received += 1
            yield result


class Dispatcher:
    """Fans one command out to many hosts and collects what comes back in time."""

    def __init__(
        self,
        max_concurrency: int = 0,
        log_dir: Optional[str] = None,
        enable_logging: bool = False,
    ):
        self._max_concurrency = max_concurrency
        self._on_result: Optional[ResultCallback] = None
        self._on_timeout: Optional[TimeoutCallback] = None

        self._logger: Optional[SessionLogger] = None
        if enable_logging:
            self._logger = SessionLogger(log_dir or "./commandcast_logs")

    @property
    def log_error(self) -> Optional[OSError]:
        """The error that stopped file logging, if any."""
        return self._logger.error if self._logger else None

    # ── Sinks ────────────────────────────────────────────────────

    def on_result(self, callback: ResultCallback) -> None:
        self._on_result = callback

    def on_timeout(self, callback: TimeoutCallback) -> None:
        self._on_timeout = callback

    # ── Per-host task ────────────────────────────────────────────

    async def _run_on_host(
        self,
        target: HostTarget,
        command: str,
        limit: asyncio.Semaphore,
        results: asyncio.Queue,
    ) -> None:
        async with limit:
            start = time.monotonic()
            session = RemoteSession(target)
            try:
                await session.open()
                result = await session.run(command)
            except HostConnectionError as e:
                result = ExecutionResult.connection_failed(
                    target, command, str(e), duration=time.monotonic() - start
                )
            except Exception as e:
                # Anything else still has to surface as this host's result
                result = ExecutionResult.connection_failed(
                    target,
                    command,
                    f"Unexpected error on {target.display_name}: {type(e).__name__}: {e}",
                    duration=time.monotonic() - start,
                )
            finally:
                await session.close()
            results.put_nowait(result)

    # ── Command execution ────────────────────────────────────────

    async def execute(
        self,
        command: str,
        targets: list[HostTarget],
        timeout: float,
    ) -> RunReport:
        """
        Run ``command`` on every target concurrently.

        A single deadline of ``timeout`` seconds covers the whole run.  Hosts
        that have not reported when it passes are cancelled, their sessions
        closed, and they are listed in ``RunReport.missing``.
        """
        loop = asyncio.get_running_loop()
        start = time.monotonic()
        deadline = loop.time() + timeout

        # Every task publishes at most once, so put_nowait never blocks
        results: asyncio.Queue = asyncio.Queue(maxsize=max(len(targets), 1))
        limit = asyncio.Semaphore(self._max_concurrency or max(len(targets), 1))

        tasks = [
            asyncio.create_task(self._run_on_host(t, command, limit, results))
            for t in targets
        ]

        collected: list[ExecutionResult] = []
        collector = ResultCollector(results, len(targets), deadline)
        try:
            async for result in collector:
                collected.append(result)
                if self._on_result:
                    await self._on_result(result)
                if self._logger:
                    await self._logger.log_result(result)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        reported = {id(r.target) for r in collected}
        report = RunReport(
            command=command,
            results=collected,
            total_hosts=len(targets),
            timed_out=collector.timed_out,
            missing=[t for t in targets if id(t) not in reported],
            duration=time.monotonic() - start,
        )

        if report.timed_out and self._on_timeout:
            await self._on_timeout(report.missing)
        if self._logger:
            await self._logger.log_run(report)

        return report
