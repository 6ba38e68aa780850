"""Tests for the YAML defaults file."""

import pytest

from commandcast.config import load_config
from commandcast.errors import ConfigError


def test_load_defaults_and_hosts(tmp_path, monkeypatch):
    monkeypatch.setenv("DEPLOY_USER", "deploy")
    path = tmp_path / "commandcast.yaml"
    path.write_text(
        "defaults:\n"
        "  user: ${DEPLOY_USER}\n"
        "  keys: ~/.ssh/id_ed25519, ~/.ssh/id_rsa\n"
        "  timeout: 20\n"
        "  concurrency: 5\n"
        "hosts:\n"
        "  - web-1\n"
        "  - db-1:2222\n"
    )

    cfg = load_config(path)

    assert cfg.user == "deploy"
    assert cfg.keys == ["~/.ssh/id_ed25519", "~/.ssh/id_rsa"]
    assert cfg.timeout == 20.0
    assert cfg.concurrency == 5
    assert cfg.log_dir is None
    assert cfg.hosts == ["web-1", "db-1:2222"]


def test_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    cfg = load_config(path)
    assert cfg.user is None
    assert cfg.hosts == []


def test_unset_env_var(tmp_path, monkeypatch):
    monkeypatch.delenv("NOT_SET_ANYWHERE", raising=False)
    path = tmp_path / "c.yaml"
    path.write_text("defaults:\n  user: ${NOT_SET_ANYWHERE}\n")

    with pytest.raises(ConfigError, match="NOT_SET_ANYWHERE"):
        load_config(path)


def test_bad_timeout(tmp_path):
    path = tmp_path / "c.yaml"
    path.write_text("defaults:\n  timeout: soon\n")

    with pytest.raises(ConfigError):
        load_config(path)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yaml")
