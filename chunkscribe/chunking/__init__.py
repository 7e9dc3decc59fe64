"""Chunking and merging utilities for long-form transcription.

This package plans how long audio is split, encodes fixed windows as WAV
chunks, and merges the per-chunk transcripts back onto one timeline.
"""

from .chunker import iter_chunks, segment, split_windows
from .merge import merge_chunk_results
from .planner import analyze, needs_chunking, plan_chunks
from .wav import WavHeader, encode_wav, read_wav_header

__all__ = [
    "analyze",
    "needs_chunking",
    "plan_chunks",
    "split_windows",
    "iter_chunks",
    "segment",
    "encode_wav",
    "read_wav_header",
    "WavHeader",
    "merge_chunk_results",
]
