"""Tests for env-file parsing."""

import pytest

from server_sync.core.errors import ConfigError
from server_sync.environment.envfile import load_env_file, read_env


def test_reads_pairs_in_order(tmp_path):
    p = tmp_path / ".server_env"
    p.write_text("# comment\n\nPORT=8080\nHOST=example.org\n")
    assert read_env(p) == [("PORT", "8080"), ("HOST", "example.org")]


def test_value_kept_verbatim(tmp_path):
    p = tmp_path / ".server_env"
    p.write_text('URL=http://x/?a=b\nQUOTED="raw"\n')
    assert dict(read_env(p)) == {"URL": "http://x/?a=b", "QUOTED": '"raw"'}


def test_skips_lines_without_equals(tmp_path):
    p = tmp_path / ".server_env"
    p.write_text("garbage\nA=1\n=nokey\n")
    assert read_env(p) == [("A", "1")]


def test_export_prefix_tolerated(tmp_path):
    p = tmp_path / ".server_env"
    p.write_text("export A=1\n")
    assert read_env(p) == [("A", "1")]


def test_missing_file_is_empty(tmp_path):
    assert load_env_file(tmp_path / "absent") == {}


def test_duplicate_key_rejected(tmp_path):
    p = tmp_path / ".server_env"
    p.write_text("A=1\nA=2\n")
    with pytest.raises(ConfigError, match="Duplicate key 'A'"):
        load_env_file(p)


def test_directory_rejected(tmp_path):
    with pytest.raises(ConfigError):
        load_env_file(tmp_path)
