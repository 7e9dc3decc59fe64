"""Coarse language detection by script ratio.

Counts characters of one target script (CJK Unified Ideographs by default)
against all non-whitespace characters of a transcript. It is a two-way
heuristic used to pick a default source-language label, nothing more.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from chunkscribe.config import LanguageConfig
from chunkscribe.models import DetectedLanguage, MergedTranscript

__all__ = ["CJK_UNIFIED_RANGES", "classify", "script_ratio"]

logger = logging.getLogger(__name__)

# Inclusive code point ranges of the target script.
CJK_UNIFIED_RANGES: tuple[tuple[int, int], ...] = ((0x4E00, 0x9FFF),)


def _in_ranges(char: str, ranges: Sequence[tuple[int, int]]) -> bool:
    code = ord(char)
    return any(lo <= code <= hi for lo, hi in ranges)


def script_ratio(text: str, ranges: Sequence[tuple[int, int]] = CJK_UNIFIED_RANGES) -> float:
    """Share of non-whitespace characters of *text* that fall in *ranges*.

    Returns 0.0 for text without non-whitespace characters.
    """
    visible = [c for c in text if not c.isspace()]
    if not visible:
        return 0.0
    hits = sum(1 for c in visible if _in_ranges(c, ranges))
    return hits / len(visible)


def classify(
    transcript: MergedTranscript,
    config: LanguageConfig | None = None,
    *,
    ranges: Sequence[tuple[int, int]] = CJK_UNIFIED_RANGES,
) -> DetectedLanguage:
    """Pick the dominant language of *transcript*.

    The target language wins only when its script ratio is strictly above
    ``config.threshold``.
    """
    config = config or LanguageConfig()
    text = "".join(segment.text for segment in transcript.segments)
    ratio = script_ratio(text, ranges)
    language = config.target_language if ratio > config.threshold else config.fallback_language
    logger.info(f"Detected language {language} (target-script ratio {ratio:.1%})")
    return DetectedLanguage(language=language, ratio=ratio)
