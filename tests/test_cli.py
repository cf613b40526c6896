"""Tests for the server-sync CLI."""

import os

import pytest
from typer.testing import CliRunner

from server_sync.cli import app
from server_sync.cli.parsers import join_contexts


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def owner_env(monkeypatch):
    monkeypatch.setenv("UID", str(os.getuid()))
    monkeypatch.setenv("GID", str(os.getgid()))
    for name in (
        "SERVER_SYNC_CONTEXTS",
        "SERVER_SYNC_DESTINATION",
        "SERVER_SYNC_ENV",
        "SERVER_SYNC_REPO",
        "SERVER_SYNC_BRANCH",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def env_file(tmp_path):
    p = tmp_path / ".server_env"
    p.write_text("PORT=8080\n")
    return p


def invoke(runner, repo_storage, dest, env_file, *extra):
    return runner.invoke(
        app,
        [
            "--no-fetch",
            "--repo-storage",
            str(repo_storage),
            "-d",
            str(dest),
            "-e",
            str(env_file),
            *extra,
        ],
    )


def test_join_contexts():
    assert join_contexts(["a;b", "c", " "]) == "a;b,c"
    assert join_contexts([]) is None


def test_sync_success(runner, owner_env, repo_storage, dest, env_file, write):
    write(repo_storage / "contexts" / "web" / "etc" / "app.conf", "host={{server_name}}:{{PORT}}")
    result = invoke(runner, repo_storage, dest, env_file, "-c", "web")
    assert result.exit_code == 0, result.output
    assert (dest / "etc" / "app.conf").read_text() == "host=web:8080"


def test_repeated_contexts(runner, owner_env, repo_storage, dest, env_file, write):
    for name in ("a", "b", "c"):
        write(repo_storage / "contexts" / name / "who", "{{server_name}}")
    result = invoke(runner, repo_storage, dest, env_file, "-c", "a;b", "-c", "c", "-vv")
    assert result.exit_code == 0, result.output
    assert (dest / "who").read_text() == "c"


def test_contexts_from_env_file(runner, owner_env, repo_storage, dest, env_file, write):
    write(repo_storage / "contexts" / "web" / "f", "{{PORT}}")
    env_file.write_text("PORT=1\nSERVER_SYNC_CONTEXTS=web\n")
    result = invoke(runner, repo_storage, dest, env_file)
    assert result.exit_code == 0, result.output
    assert (dest / "f").read_text() == "1"


def test_file_failure_exit_code(runner, owner_env, repo_storage, dest, env_file, write):
    write(repo_storage / "contexts" / "web" / "bad", "{{MISSING_VARIABLE_XYZ}}")
    write(repo_storage / "contexts" / "web" / "good", "ok")
    result = invoke(runner, repo_storage, dest, env_file, "-c", "web")
    assert result.exit_code == 1
    assert (dest / "good").read_text() == "ok"


def test_config_error_exit_code(runner, owner_env, repo_storage, dest, env_file):
    result = invoke(runner, repo_storage, dest, env_file)
    assert result.exit_code == 19


def test_missing_context_directory_exit_code(runner, owner_env, repo_storage, dest, env_file):
    result = invoke(runner, repo_storage, dest, env_file, "-c", "ghost")
    assert result.exit_code == 19


def test_fetch_error_exit_code(runner, owner_env, tmp_path, dest, env_file):
    result = runner.invoke(
        app,
        [
            "--repo-storage",
            str(tmp_path / "never-cloned"),
            "-d",
            str(dest),
            "-e",
            str(env_file),
            "-c",
            "web",
        ],
    )
    assert result.exit_code == 20


def test_package_exports_library_entry_points():
    import server_sync
    from server_sync.environment.resolver import resolve_settings
    from server_sync.sync.driver import synchronize

    assert server_sync.synchronize is synchronize
    assert server_sync.resolve_settings is resolve_settings
    assert server_sync.__version__ == "0.1.0"
