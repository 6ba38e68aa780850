"""commandcast: run one command on many SSH hosts at once."""

from .dispatcher import Dispatcher, ResultCollector
from .errors import ConfigError, CredentialError, HostConnectionError
from .models import ExecutionResult, HostTarget, ResultStatus, RunReport
from .session import RemoteSession

__all__ = [
    "Dispatcher",
    "ResultCollector",
    "RemoteSession",
    "HostTarget",
    "ExecutionResult",
    "ResultStatus",
    "RunReport",
    "CredentialError",
    "HostConnectionError",
    "ConfigError",
]
