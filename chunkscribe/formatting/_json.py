"""Formatter for JSON (.json) output."""

from chunkscribe.models import MergedTranscript


def to_json(result: MergedTranscript, **kwargs: object) -> str:
    """
    Convert a transcript into a JSON-formatted string.

    Keys use the camelCase aliases (``transcript``, ``startTime``,
    ``detectedLanguage`` ...).

    Returns:
        JSON string representation of the result (pretty-printed with two-space indentation).
    """
    return result.model_dump_json(indent=2, by_alias=True)
