from __future__ import annotations
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
import asyncio
import aiofiles

from .models import ExecutionResult, RunReport


class SessionLogger:
    """
    Appends per-host results and per-run summaries to plain-text logs.

    Directory layout:
        log_dir/
        ├── hosts/
        │   ├── deploy_web-1.example.com.log
        │   └── deploy_db-1.example.com_2222.log
        └── sessions.log             # Run summaries and connection events
    """

    def __init__(self, log_dir: str | Path = "./commandcast_logs"):
        self.log_dir = Path(log_dir)
        self.hosts_dir = self.log_dir / "hosts"
        self.session_log_path = self.log_dir / "sessions.log"
        self._lock = asyncio.Lock()
        self._initialized = False
        # First write failure; logging stops after it, the run does not
        self.error: Optional[OSError] = None

    async def initialize(self) -> None:
        """Create log directories."""
        if self._initialized or self.error:
            return
        try:
            self.hosts_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.error = e
            return
        self._initialized = True

    def _sanitize_filename(self, name: str) -> str:
        """Convert a host display name into a safe filename."""
        return "".join(c if c.isalnum() or c in "-_." else "_" for c in name)

    def host_log_path(self, host_name: str) -> Path:
        return self.hosts_dir / f"{self._sanitize_filename(host_name)}.log"

    def _timestamp(self) -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")

    async def _append(self, path: Path, text: str) -> None:
        async with self._lock:
            if self.error or not self._initialized:
                return
            try:
                async with aiofiles.open(path, mode="a") as f:
                    await f.write(text)
            except OSError as e:
                self.error = e

    # ── Per-host log ─────────────────────────────────────────────

    async def log_result(self, result: ExecutionResult) -> None:
        """Write a single host result to that host's log."""
        await self.initialize()
        ts = self._timestamp()

        lines = [
            f"\n{'='*72}",
            f"[{ts}] Command: {result.command}",
            f"Status: {result.status.value} | Exit: {result.exit_status} "
            f"| Duration: {result.duration:.2f}s",
        ]
        if result.error:
            lines.append(f"Error: {result.error}")
        if result.output.strip():
            lines.append("--- STDOUT ---")
            lines.append(result.output.rstrip())
        lines.append(f"{'='*72}")

        await self._append(self.host_log_path(result.host), "\n".join(lines) + "\n")

        if not result.success:
            await self.log_connection_event(result.host, "CONNECTION_FAILED", result.error)

    # ── Run log ──────────────────────────────────────────────────

    async def log_run(self, report: RunReport) -> None:
        """Append a summary line for a finished run to the session log."""
        await self.initialize()
        for target in report.missing:
            await self.log_connection_event(
                target.display_name, "ABANDONED", "no result before deadline"
            )

        ts = self._timestamp()
        summary = (
            f"[{ts}] CMD: {report.command!r} | "
            f"Hosts: {report.total_hosts} | "
            f"OK: {report.successful} | "
            f"FAIL: {report.failed} | "
            f"MISSING: {len(report.missing)} | "
            f"Duration: {report.duration:.2f}s"
            + (" | TIMED OUT" if report.timed_out else "")
            + "\n"
        )
        await self._append(self.session_log_path, summary)

    # ── Connection events ────────────────────────────────────────

    async def log_connection_event(
        self,
        host_name: str,
        event: str,
        detail: Optional[str] = None,
    ) -> None:
        """Log connection failures and abandoned hosts."""
        await self.initialize()
        ts = self._timestamp()
        msg = f"[{ts}] [{host_name}] {event}"
        if detail:
            msg += f" - {detail}"
        msg += "\n"
        await self._append(self.session_log_path, msg)
