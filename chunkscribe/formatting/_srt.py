"""Formatter for SubRip Subtitle format (.srt)."""

import math

from chunkscribe.models import MergedTranscript


def _format_timestamp(seconds: float) -> str:
    """Format a non-negative number of seconds as an SRT timestamp ``HH:MM:SS,mmm``.

    Raises:
        AssertionError: If `seconds` is negative.
    """
    assert seconds >= 0, "non-negative timestamp required"
    m, s = divmod(seconds, 60)
    h, m = divmod(m, 60)
    return f"{int(h):02d}:{int(m):02d}:{int(s):02d},{int(math.modf(s)[0] * 1000):03d}"


def to_srt(result: MergedTranscript, **kwargs: object) -> str:
    """Convert a transcript to an SRT formatted string.

    Each cue is prefixed with the speaker label. Segments without an end time
    (plain-text responses) last until the next segment starts.

    Returns:
        A string in SRT format.

    """
    srt_lines = []
    segments = result.segments
    for i, segment in enumerate(segments, start=1):
        end = segment.end
        if end <= segment.start_time and i < len(segments):
            end = max(segments[i].start_time, segment.start_time)
        srt_lines.append(str(i))
        srt_lines.append(f"{_format_timestamp(segment.start_time)} --> {_format_timestamp(end)}")
        srt_lines.append(f"{segment.speaker}: {segment.text.strip()}")
        srt_lines.append("")  # Add a blank line between entries
    return "\n".join(srt_lines)
