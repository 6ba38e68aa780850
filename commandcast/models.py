from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
import time


DEFAULT_PORT = 22


class SessionState(Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


class ResultStatus(Enum):
    OK = "ok"
    CONNECTION_FAILED = "connection_failed"


def _parse_port(port_str: str) -> int:
    if not port_str:
        return DEFAULT_PORT
    port = int(port_str)
    if not 1 <= port <= 65535:
        raise ValueError(f"port must be 1-65535, got {port}")
    return port


def split_host_port(host: str) -> tuple[str, int]:
    """
    Split ``host[:port]`` (or ``[v6addr]:port``) into its parts.

    Raises ValueError for a port that is not a number in 1-65535.
    """
    if host.startswith("["):
        addr, _, rest = host[1:].partition("]")
        port_str = rest[1:] if rest.startswith(":") else ""
        return addr, _parse_port(port_str)

    # A bare IPv6 address has more than one colon and no port
    if host.count(":") != 1:
        return host, DEFAULT_PORT

    hostname, _, port_str = host.partition(":")
    return hostname, _parse_port(port_str)


def clean_command(command: str) -> str:
    """Trim surrounding whitespace and newlines from a command line."""
    return command.strip()


@dataclass(frozen=True)
class HostTarget:
    """One remote host plus the identity used to reach it for a run."""
    host: str
    username: str
    timeout: float = 15.0
    # asyncssh.SSHClientConnectionOptions bundling user + client keys
    options: Any = field(default=None, compare=False, repr=False)

    @property
    def hostname(self) -> str:
        return split_host_port(self.host)[0]

    @property
    def port(self) -> int:
        return split_host_port(self.host)[1]

    @property
    def display_name(self) -> str:
        return f"{self.username}@{self.host}"

    def __str__(self) -> str:
        return self.display_name


@dataclass
class ExecutionResult:
    """Outcome of running the command on a single host.

    Either ``OK`` with the captured stdout and remote exit status, or
    ``CONNECTION_FAILED`` with the reason the command never ran.  A non-zero
    exit status is still an ``OK`` result.
    """
    target: HostTarget
    command: str
    status: ResultStatus
    output: str = ""
    exit_status: Optional[int] = None
    error: Optional[str] = None
    duration: float = 0.0
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def ok(
        cls,
        target: HostTarget,
        command: str,
        output: str,
        exit_status: Optional[int] = 0,
        duration: float = 0.0,
    ) -> ExecutionResult:
        return cls(
            target=target,
            command=command,
            status=ResultStatus.OK,
            output=output,
            exit_status=exit_status,
            duration=duration,
        )

    @classmethod
    def connection_failed(
        cls,
        target: HostTarget,
        command: str,
        error: str,
        duration: float = 0.0,
    ) -> ExecutionResult:
        return cls(
            target=target,
            command=command,
            status=ResultStatus.CONNECTION_FAILED,
            error=error,
            duration=duration,
        )

    @property
    def success(self) -> bool:
        return self.status is ResultStatus.OK

    @property
    def host(self) -> str:
        return self.target.display_name


@dataclass
class RunReport:
    """Everything collected for one command across all dispatched hosts."""
    command: str
    results: list[ExecutionResult] = field(default_factory=list)
    total_hosts: int = 0
    timed_out: bool = False
    missing: list[HostTarget] = field(default_factory=list)
    duration: float = 0.0

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return len(self.results) - self.successful

    def summary(self) -> dict:
        return {
            "command": self.command,
            "total": self.total_hosts,
            "successful": self.successful,
            "failed": self.failed,
            "missing": len(self.missing),
            "timed_out": self.timed_out,
            "duration": f"{self.duration:.2f}s",
        }
