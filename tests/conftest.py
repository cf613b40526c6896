"""Shared fixtures for server-sync tests."""

import os

import pytest

from server_sync.core.models import Context, Identity, Settings


def _write(path, content):
    """Create parent directories and write text or bytes to ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content)
    return path


@pytest.fixture
def identity():
    return Identity(uid=os.getuid(), gid=os.getgid())


@pytest.fixture
def repo_storage(tmp_path):
    """A checkout with an empty contexts/ directory."""
    p = tmp_path / "repo"
    (p / "contexts").mkdir(parents=True)
    return p


@pytest.fixture
def dest(tmp_path):
    d = tmp_path / "dest"
    d.mkdir()
    return d


@pytest.fixture
def make_settings(repo_storage, dest, identity):
    """Build settings for the given context names and variables."""

    def _make(contexts=("web",), variables=None):
        for name in contexts:
            (repo_storage / "contexts" / name).mkdir(parents=True, exist_ok=True)
        return Settings(
            destination_root=dest,
            repo_storage=repo_storage,
            contexts=tuple(Context.under(repo_storage, name) for name in contexts),
            variables=dict(variables or {}),
            owner_spec=str(identity.uid),
            group_spec=str(identity.gid),
            identity=identity,
        )

    return _make


@pytest.fixture
def write():
    return _write
