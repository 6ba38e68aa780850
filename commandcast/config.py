from __future__ import annotations
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ConfigError


_ENV_VAR_PATTERN = re.compile(r"\$\{(\w+)\}")


@dataclass
class RunDefaults:
    """Defaults read from a YAML config file; CLI options override them."""
    user: Optional[str] = None
    keys: list[str] = field(default_factory=list)
    timeout: Optional[float] = None
    concurrency: Optional[int] = None
    log_dir: Optional[str] = None
    hosts: list[str] = field(default_factory=list)


def _resolve_env_vars(value: Any) -> Any:
    """Replace ${VAR_NAME} with environment variable values."""
    if not isinstance(value, str):
        return value
    def _replacer(match):
        var_name = match.group(1)
        env_val = os.environ.get(var_name)
        if env_val is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set "
                f"(referenced in config)"
            )
        return env_val
    return _ENV_VAR_PATTERN.sub(_replacer, value)


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return [str(_resolve_env_vars(v)).strip() for v in value]


def load_config(path: str | Path) -> RunDefaults:
    """
    Load run defaults from a YAML file.

    Format:
        defaults:
          user: deploy
          keys: [~/.ssh/id_ed25519]
          timeout: 20
          concurrency: 25
          log_dir: ./logs
        hosts:
          - web-1.example.com
          - db-1.example.com:2222
    """
    try:
        with open(Path(path).expanduser()) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping")

    defaults = data.get("defaults") or {}
    if not isinstance(defaults, dict):
        raise ConfigError("'defaults' must be a mapping")
    defaults = {k: _resolve_env_vars(v) for k, v in defaults.items()}

    try:
        timeout = defaults.get("timeout")
        concurrency = defaults.get("concurrency")
        return RunDefaults(
            user=defaults.get("user"),
            keys=_as_list(defaults.get("keys")),
            timeout=float(timeout) if timeout is not None else None,
            concurrency=int(concurrency) if concurrency is not None else None,
            log_dir=defaults.get("log_dir"),
            hosts=_as_list(data.get("hosts")),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value in config {path}: {e}") from e
