"""Unit tests for environment loader behavior.

These tests exercise reading from a ``.env`` file via python-dotenv and
ensure idempotent behavior when files are missing.
"""

import os
from pathlib import Path

import pytest

from chunkscribe.utils import env_loader


def test_load_project_env_dotenv(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    """python-dotenv should be invoked with the project file.

    Args:
        monkeypatch (pytest.MonkeyPatch): Fixture for patching modules.
        tmp_path (pathlib.Path): Temporary directory for the test.
    """
    env_file = tmp_path / ".env"
    env_file.write_text("FOO=bar\n")

    def fake_load_dotenv(*_args: object, **kwargs: object) -> None:
        os.environ["FOO"] = "bar"
        fake_load_dotenv.kwargs = kwargs

    fake_load_dotenv.kwargs = {}
    monkeypatch.setattr(env_loader, "_ENV_FILE", env_file)
    monkeypatch.setattr(env_loader, "LOAD_DOTENV", fake_load_dotenv)
    monkeypatch.delenv("FOO", raising=False)

    assert env_loader.load_project_env(force=True) is True
    assert fake_load_dotenv.kwargs == {"dotenv_path": env_file, "override": False}
    assert os.getenv("FOO") == "bar"


def test_load_project_env_real_dotenv_keeps_existing(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    """Variables already in the environment win over the file."""
    env_file = tmp_path / ".env"
    env_file.write_text("CHUNKSCRIBE_TEST_A=file\nCHUNKSCRIBE_TEST_B=file\n")
    monkeypatch.setattr(env_loader, "_ENV_FILE", env_file)
    monkeypatch.setenv("CHUNKSCRIBE_TEST_A", "shell")
    monkeypatch.delenv("CHUNKSCRIBE_TEST_B", raising=False)

    env_loader.load_project_env(force=True)

    assert os.environ["CHUNKSCRIBE_TEST_A"] == "shell"
    assert os.environ["CHUNKSCRIBE_TEST_B"] == "file"
    monkeypatch.delenv("CHUNKSCRIBE_TEST_B", raising=False)


def test_load_project_env_no_file(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    """Missing env files should not crash the loader."""
    missing = tmp_path / "missing.env"
    monkeypatch.setattr(env_loader, "_ENV_FILE", missing)
    assert env_loader.load_project_env(force=True) is False


def test_load_project_env_is_cached(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("X=1\n")
    calls: list[object] = []
    monkeypatch.setattr(env_loader, "_ENV_FILE", env_file)
    monkeypatch.setattr(env_loader, "LOAD_DOTENV", lambda **kwargs: calls.append(kwargs))

    env_loader.load_project_env(force=True)
    env_loader.load_project_env()
    assert len(calls) == 1
