"""Formatter for plain text (.txt) output."""

from chunkscribe.models import MergedTranscript


def format_clock(seconds: float) -> str:
    """Render *seconds* as ``MM:SS`` (minutes are not wrapped at 60)."""
    mins, secs = divmod(int(max(seconds, 0.0)), 60)
    return f"{mins:02d}:{secs:02d}"


def format_duration(seconds: float) -> str:
    """Render a duration as ``H:MM:SS`` or ``M:SS`` when under an hour."""
    total = int(max(seconds, 0.0))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def to_txt(result: MergedTranscript, **kwargs: object) -> str:
    """Format a transcript as ``Speaker N (MM:SS): text`` paragraphs.

    Parameters:
        result (MergedTranscript): Transcript to render.
        **kwargs: Additional keyword arguments (ignored for plain text output).

    Returns:
        str: One paragraph per segment separated by blank lines; empty for an
            empty transcript.
    """
    return "\n\n".join(
        f"{segment.speaker} ({format_clock(segment.start_time)}): {segment.text.strip()}"
        for segment in result.segments
    )
