"""Utility for loading project-level environment variables.

Uses `python-dotenv` to load a `.env` file sitting at repository root *early*
in the application lifecycle so that :mod:`chunkscribe.utils.constant` picks
up overrides such as `CHUNK_LEN_SEC` or `REPLICATE_API_TOKEN`.

Usage (call as soon as possible in your CLI / entry-point):

    from chunkscribe.utils.env_loader import load_project_env
    load_project_env()

Re-invocation is a no-op, so callers can safely call multiple times.
"""

from __future__ import annotations

import functools
import pathlib
from collections.abc import Callable
from typing import Any, Final

from dotenv import load_dotenv

_REPO_ROOT: Final[pathlib.Path] = pathlib.Path(__file__).resolve().parents[2]
_ENV_FILE: Final[pathlib.Path] = _REPO_ROOT / ".env"
LOAD_DOTENV: Final[Callable[..., Any]] = load_dotenv


@functools.lru_cache(maxsize=1)
def _load_once() -> bool:
    if not _ENV_FILE.exists():
        return False

    # `override=False` ensures we do **not** clobber env-vars already set
    # by the user / shell.
    LOAD_DOTENV(dotenv_path=_ENV_FILE, override=False)
    return True


def load_project_env(force: bool = False) -> bool:
    """Load the project-level `.env` file into the process environment.

    The file is read only once per process unless *force* is set.

    Args:
        force: If True, bypasses the cache and forces a reload of the
            environment file. Defaults to False.

    Returns:
        bool: ``True`` when a `.env` file was found and loaded.

    """
    if force:
        _load_once.cache_clear()
    return _load_once()


__all__ = [
    "load_project_env",
]
