"""Formatter for WebVTT (.vtt) output."""

from chunkscribe.models import MergedTranscript


def _format_timestamp(seconds: float) -> str:
    """Format seconds as a WebVTT timestamp ``HH:MM:SS.mmm``."""
    millis = int(round(max(seconds, 0.0) * 1000))
    h, rem = divmod(millis, 3_600_000)
    m, rem = divmod(rem, 60_000)
    s, ms = divmod(rem, 1000)
    return f"{h:02d}:{m:02d}:{s:02d}.{ms:03d}"


def to_vtt(result: MergedTranscript, **kwargs: object) -> str:
    """Convert a transcript to WebVTT with ``<v Speaker N>`` voice tags."""
    lines = ["WEBVTT", ""]
    segments = result.segments
    for i, segment in enumerate(segments):
        end = segment.end
        if end <= segment.start_time and i + 1 < len(segments):
            end = max(segments[i + 1].start_time, segment.start_time)
        lines.append(f"{_format_timestamp(segment.start_time)} --> {_format_timestamp(end)}")
        lines.append(f"<v {segment.speaker}>{segment.text.strip()}")
        lines.append("")
    return "\n".join(lines)
