"""Utilities for output naming, overwrite protection, and audio path resolution.

The module exposes:
• `get_unique_filename` – numbered suffixes instead of clobbering outputs
• `resolve_input_paths` – expand wildcard patterns / directories into concrete
  paths
• `render_output_name` – fill the ``--output-template`` placeholders
"""

from __future__ import annotations

import pathlib
from collections.abc import Iterable, Sequence
from datetime import datetime
from glob import glob

from chunkscribe.utils.constant import SUPPORTED_AUDIO_EXTENSIONS

PathLike = str | pathlib.Path

__all__ = [
    "get_unique_filename",
    "render_output_name",
    "resolve_input_paths",
]


def get_unique_filename(
    base_path: PathLike,
    overwrite: bool = False,
    separator: str = "-",
) -> pathlib.Path:
    """Generate a unique filename to avoid overwriting existing files.

    If the file does not exist or overwrite is True, returns the original path.
    Otherwise, appends a numbered suffix like "-1", "-2", etc.

    Args:
        base_path: The desired file path.
        overwrite: If True, return the original path even if it exists.
        separator: The separator to use before the number suffix.

    Returns:
        A pathlib.Path that is guaranteed not to exist (unless overwrite=True).

    Raises:
        RuntimeError: If a unique filename cannot be found after 9,999 attempts.

    """
    path = pathlib.Path(base_path)

    if overwrite or not path.exists():
        return path

    counter = 1
    while True:
        new_path = path.parent / f"{path.stem}{separator}{counter}{path.suffix}"
        if not new_path.exists():
            return new_path
        counter += 1

        # Safety check to prevent infinite loops
        if counter > 9999:
            raise RuntimeError(f"Cannot find unique filename for {base_path}")


def render_output_name(template: str, audio_path: pathlib.Path, index: int) -> str:
    """Fill the output filename template for one input file.

    Supported placeholders: ``{parent}``, ``{filename}``, ``{index}``, ``{date}``.

    Raises:
        ValueError: If the template references an unknown placeholder.
    """
    try:
        return template.format(
            parent=audio_path.parent.name,
            filename=audio_path.stem,
            index=index,
            date=datetime.now().strftime("%Y%m%d"),
        )
    except KeyError as exc:
        raise ValueError(f"Unknown placeholder in output template: {exc}") from exc


def _is_audio_file(path: pathlib.Path, exts: Sequence[str] | set[str] | frozenset[str]) -> bool:
    return path.is_file() and path.suffix.lower() in exts


def resolve_input_paths(
    patterns: Iterable[PathLike] | PathLike,
    *,
    audio_exts: Sequence[str] | set[str] | None = None,
    recursive: bool = True,
) -> list[pathlib.Path]:
    """Expand file/directory/wildcard patterns into a deduplicated list of audio file paths.

    Directories are scanned recursively by default; duplicates are removed
    while preserving the original insertion order. Non-existent patterns are
    ignored.

    Parameters:
        patterns (str | pathlib.Path | Iterable[str | pathlib.Path]):
            One or more file, directory, or glob patterns to resolve.
        audio_exts (Sequence[str] | set[str] | None, optional):
            Allowed file extensions (dot-prefixed, case-insensitive). Defaults to
            SUPPORTED_AUDIO_EXTENSIONS.
        recursive (bool, optional):
            If True, search directories recursively; otherwise only top-level files
            are considered.

    Returns:
        list[pathlib.Path]: Existing paths matching the extension filter, in
            insertion order with duplicates removed.
    """
    if isinstance(patterns, (str, pathlib.Path)):
        patterns = [patterns]

    exts = {ext.lower() for ext in (audio_exts or SUPPORTED_AUDIO_EXTENSIONS)}

    resolved: list[pathlib.Path] = []
    seen: set[pathlib.Path] = set()

    def _add(p: pathlib.Path) -> None:
        if p not in seen and _is_audio_file(p, exts):
            seen.add(p)
            resolved.append(p)

    for patt in patterns:
        p = pathlib.Path(patt).expanduser()
        if p.is_dir():
            walker = p.rglob("*") if recursive else p.glob("*")
            for child in sorted(walker):
                _add(child)
        else:
            # Use glob for wildcard expansion; if no wildcard, treat as literal
            for m in sorted(glob(str(p), recursive=True)):
                _add(pathlib.Path(m))
    return resolved
