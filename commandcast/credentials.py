from __future__ import annotations
import os
from typing import Iterable

import asyncssh

from .errors import CredentialError


DEFAULT_KEY_FILES = (
    "~/.ssh/id_dsa",
    "~/.ssh/id_rsa",
    "~/.ssh/id_ecdsa",
    "~/.ssh/id_ed25519",
)


def split_key_paths(keys: str) -> list[str]:
    """Split a comma-separated key list, dropping empty entries."""
    return [k.strip() for k in keys.split(",") if k.strip()]


def load_private_key(path: str) -> asyncssh.SSHKey | None:
    """Read one private key, or None if it is missing or cannot be parsed."""
    try:
        return asyncssh.read_private_key(os.path.expanduser(path))
    except (OSError, asyncssh.KeyImportError, asyncssh.KeyEncryptionError):
        return None


def resolve_keys(paths: Iterable[str]) -> list[asyncssh.SSHKey]:
    """
    Load every readable key in ``paths``, in order.

    Keys that fail to load are skipped.  Raises CredentialError when none of
    them could be loaded, so a run aborts before opening any connection.
    """
    keys = [key for key in (load_private_key(p) for p in paths) if key is not None]
    if not keys:
        raise CredentialError("Key(s) doesn't exist.")
    return keys


def build_client_options(
    username: str,
    keys: list[asyncssh.SSHKey],
    timeout: float,
) -> asyncssh.SSHClientConnectionOptions:
    """Bundle user and client keys into reusable asyncssh connection options."""
    return asyncssh.SSHClientConnectionOptions(
        username=username,
        client_keys=keys,
        known_hosts=None,
        login_timeout=timeout,
    )
