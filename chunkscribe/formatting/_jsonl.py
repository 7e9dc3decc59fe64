"""Formatter for JSON Lines (.jsonl) output.

Each line contains a JSON object representing a single *Segment* of the
transcript.
"""

from __future__ import annotations

from chunkscribe.models import MergedTranscript


def to_jsonl(result: MergedTranscript, **kwargs: object) -> str:  # noqa: D401
    """Convert a transcript into JSON Lines string (one *Segment* per line)."""
    return "\n".join(segment.model_dump_json(by_alias=True) for segment in result.segments)
