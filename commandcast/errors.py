from __future__ import annotations


class CredentialError(Exception):
    """No usable private key could be loaded."""


class HostConnectionError(ConnectionError):
    """Connecting to, or opening a session on, a single host failed."""

    def __init__(self, host: str, reason: str):
        super().__init__(f"Failed to connect to {host}: {reason}")
        self.host = host
        self.reason = reason


class ConfigError(ValueError):
    """The YAML config file is malformed or references an unset variable."""
