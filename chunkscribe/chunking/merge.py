"""Timeline merging for per-chunk transcription results.

Chunks come from contiguous, non-overlapping windows, so merging is a pure
offset-and-renumber pass: chunk ``k`` is shifted by ``k * chunk_len_sec`` and
every segment receives a fresh global id in emission order. Nothing is
reordered or deduplicated; a sentence cut by a chunk boundary stays cut.
Inputs remain unmodified.
"""

from __future__ import annotations

from collections.abc import Sequence

from chunkscribe.models import ChunkTranscriptionResult, MergedTranscript, Segment

__all__ = ["merge_chunk_results"]


def merge_chunk_results(
    chunk_results: Sequence[ChunkTranscriptionResult],
    chunk_len_sec: float,
) -> MergedTranscript:
    """Concatenate chunk-local segment lists into one absolute transcript.

    Parameters:
        chunk_results (Sequence[ChunkTranscriptionResult]): Results in original
            chunk order; position ``k`` is offset by ``k * chunk_len_sec``
            regardless of its ``chunk_index`` field.
        chunk_len_sec (float): Duration of every chunk except possibly the last.

    Returns:
        MergedTranscript: Segments with ids ``0..n-1`` and absolute times.
    """
    merged: list[Segment] = []
    for position, result in enumerate(chunk_results):
        offset = position * chunk_len_sec
        for segment in result.segments:
            merged.append(segment.shifted(offset, new_id=len(merged)))

    return MergedTranscript(
        segments=merged,
        was_split=len(chunk_results) > 1,
        total_chunks=len(chunk_results),
    )
