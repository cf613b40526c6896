"""Tests for owner and group resolution."""

import grp
import os
import pwd

import pytest

from server_sync.core.errors import ConfigError
from server_sync.environment.identity import resolve_gid, resolve_identity, resolve_uid


def test_numeric_specs_used_directly():
    identity = resolve_identity("1234", "5678")
    assert (identity.uid, identity.gid) == (1234, 5678)


def test_user_name_resolved():
    assert resolve_uid("root") == 0


def test_group_name_resolved():
    assert resolve_gid(grp.getgrgid(0).gr_name) == 0


def test_numeric_group():
    assert resolve_gid(str(os.getgid())) == os.getgid()


def test_group_falls_back_to_primary_group():
    assert resolve_identity("0", None).gid == pwd.getpwuid(0).pw_gid


def test_unknown_user():
    with pytest.raises(ConfigError, match="Unknown user"):
        resolve_uid("no-such-user-server-sync")


def test_unknown_group():
    with pytest.raises(ConfigError, match="Unknown group"):
        resolve_gid("no-such-group-server-sync")


def test_empty_owner():
    with pytest.raises(ConfigError):
        resolve_uid("  ")
