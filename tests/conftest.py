"""Shared fixtures: an in-memory stand-in for the SSH network."""

import asyncio
from dataclasses import dataclass
from unittest.mock import patch

import asyncssh
import pytest

from commandcast.models import HostTarget


@dataclass
class FakeHost:
    output: str | bytes = ""
    exit_status: int = 0
    delay: float = 0.0
    connect_delay: float = 0.0
    refuse: bool = False
    crash: bool = False


class FakeCompletedProcess:
    def __init__(self, stdout, exit_status: int):
        self.stdout = stdout
        self.stderr = ""
        self.exit_status = exit_status


class FakeConnection:
    def __init__(self, network: "FakeNetwork", host: str, behavior: FakeHost):
        self._network = network
        self.host = host
        self.behavior = behavior
        self.closed = False
        self.commands: list[str] = []

    async def run(self, command, check=False, encoding="utf-8"):
        self.commands.append(command)
        await asyncio.sleep(self.behavior.delay)
        output = self.behavior.output
        if encoding is None and isinstance(output, str):
            output = output.encode()
        elif encoding is not None and isinstance(output, bytes):
            # Strict decoding drops undecodable output
            try:
                output = output.decode(encoding)
            except UnicodeDecodeError:
                output = ""
        return FakeCompletedProcess(output, self.behavior.exit_status)

    def close(self):
        if not self.closed:
            self.closed = True
            self._network.active -= 1

    async def wait_closed(self):
        pass


class FakeNetwork:
    """Hosts keyed by hostname; records every connection attempt."""

    def __init__(self):
        self.hosts: dict[str, FakeHost] = {}
        self.connect_calls: list[tuple] = []
        self.connections: list[FakeConnection] = []
        self.active = 0
        self.max_active = 0

    def add(self, host: str, **kwargs) -> FakeHost:
        self.hosts[host] = FakeHost(**kwargs)
        return self.hosts[host]

    async def connect(self, host, port=22, **kwargs):
        self.connect_calls.append((host, port, kwargs))
        behavior = self.hosts.get(host)
        if behavior is None or behavior.refuse:
            raise ConnectionRefusedError(111, f"Connect call failed ('{host}', {port})")
        if behavior.crash:
            raise RuntimeError("unexpected failure in connect")
        await asyncio.sleep(behavior.connect_delay)

        conn = FakeConnection(self, host, behavior)
        self.connections.append(conn)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        return conn

    def connections_to(self, host: str) -> list[FakeConnection]:
        return [c for c in self.connections if c.host == host]


@pytest.fixture
def network():
    """Patch asyncssh.connect as seen by the session module."""
    net = FakeNetwork()
    with patch("commandcast.session.asyncssh.connect", new=net.connect):
        yield net


@pytest.fixture
def make_target():
    def _make(host: str, timeout: float = 5.0, username: str = "deploy") -> HostTarget:
        return HostTarget(host=host, username=username, timeout=timeout)
    return _make


@pytest.fixture
def key_file(tmp_path):
    """A freshly generated, unencrypted private key on disk."""
    path = tmp_path / "id_ed25519"
    key = asyncssh.generate_private_key("ssh-ed25519")
    key.write_private_key(str(path))
    return path
