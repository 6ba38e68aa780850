"""Tests for private key resolution."""

import asyncssh
import pytest

from commandcast.credentials import load_private_key, resolve_keys, split_key_paths
from commandcast.errors import CredentialError


def test_split_key_paths():
    assert split_key_paths("~/.ssh/id_rsa, ,/tmp/key ") == ["~/.ssh/id_rsa", "/tmp/key"]


def test_missing_key_is_skipped(key_file, tmp_path):
    keys = resolve_keys([str(tmp_path / "id_dsa"), str(key_file)])

    assert len(keys) == 1
    assert isinstance(keys[0], asyncssh.SSHKey)


def test_unparsable_key_is_skipped(key_file, tmp_path):
    garbage = tmp_path / "id_rsa"
    garbage.write_text("not a key\n")

    assert load_private_key(str(garbage)) is None
    assert len(resolve_keys([str(garbage), str(key_file)])) == 1


def test_no_usable_keys(tmp_path):
    with pytest.raises(CredentialError):
        resolve_keys([str(tmp_path / "nope"), str(tmp_path / "also-nope")])


def test_empty_key_list():
    with pytest.raises(CredentialError):
        resolve_keys([])
