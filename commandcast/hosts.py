from __future__ import annotations
from pathlib import Path
from typing import Optional

import asyncssh

from .credentials import build_client_options
from .models import HostTarget


def parse_host_list(hosts: str) -> list[str]:
    """Split a comma-separated host list, trimming blanks."""
    return [h.strip() for h in hosts.split(",") if h.strip()]


def read_hosts_file(path: str | Path) -> Optional[list[str]]:
    """
    Read a hosts file, one ``host[:port]`` per line.

    Blank lines are dropped and surrounding whitespace trimmed; order is
    kept.  Returns None when the file cannot be read.
    """
    try:
        with open(Path(path).expanduser()) as f:
            text = f.read()
    except OSError:
        return None
    return [line.strip() for line in text.splitlines() if line.strip()]


def resolve_hosts(
    hosts: Optional[str] = None,
    hostfile: Optional[str | Path] = None,
) -> list[str]:
    """The host file wins when it is given and readable, else the comma list."""
    if hostfile:
        from_file = read_hosts_file(hostfile)
        if from_file is not None:
            return from_file
    return parse_host_list(hosts or "")


def build_targets(
    hosts: list[str],
    username: str,
    keys: list[asyncssh.SSHKey],
    timeout: float,
) -> list[HostTarget]:
    options = build_client_options(username, keys, timeout)
    return [
        HostTarget(host=h, username=username, timeout=timeout, options=options)
        for h in hosts
    ]
