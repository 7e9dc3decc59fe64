"""Registry of output formatters for transcripts.

Allows easy extension with new formats by adding a formatter function and
registering it in the ``FORMATTERS`` dictionary.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from chunkscribe.models import MergedTranscript

from ._json import to_json
from ._jsonl import to_jsonl
from ._srt import to_srt
from ._txt import format_clock, format_duration, to_txt
from ._vtt import to_vtt

__all__ = [
    "FORMATTERS",
    "FormatterSpec",
    "format_clock",
    "format_duration",
    "get_formatter",
    "get_formatter_spec",
]


@dataclass
class FormatterSpec:
    """Metadata and function for a specific output format.

    Attributes:
        format_func: The formatter function that converts a transcript to string.
        file_extension: The file extension for this format (including the dot).

    """

    format_func: Callable[[MergedTranscript], str]
    file_extension: str


# A registry mapping format names to their respective formatter specifications.
FORMATTERS: dict[str, FormatterSpec] = {
    "txt": FormatterSpec(format_func=to_txt, file_extension=".txt"),
    "json": FormatterSpec(format_func=to_json, file_extension=".json"),
    "jsonl": FormatterSpec(format_func=to_jsonl, file_extension=".jsonl"),
    "srt": FormatterSpec(format_func=to_srt, file_extension=".srt"),
    "vtt": FormatterSpec(format_func=to_vtt, file_extension=".vtt"),
}


def get_formatter_spec(format_name: str) -> FormatterSpec:
    """Retrieve the FormatterSpec metadata for the given output format name.

    Parameters:
        format_name (str): Case-insensitive format identifier (e.g., "txt", "json").

    Returns:
        FormatterSpec: The metadata and formatter function for the requested format.

    Raises:
        ValueError: If the specified format_name is not supported.
    """
    spec = FORMATTERS.get(format_name.lower())
    if not spec:
        supported = list(FORMATTERS.keys())
        raise ValueError(f"Unsupported format: '{format_name}'. Supported formats are: {supported}")
    return spec


def get_formatter(format_name: str) -> Callable[[MergedTranscript], str]:
    """Get the formatter function registered for the given format name.

    Raises:
        ValueError: If `format_name` is not supported.
    """
    return get_formatter_spec(format_name).format_func
