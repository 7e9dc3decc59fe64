"""Normalisation of recognition service responses.

The service answers in one of three shapes. They are decoded once, at the
service boundary, into a tagged union and then flattened into a
:class:`ChunkTranscriptionResult`; nothing downstream sees the raw value.

* ``SegmentListResponse`` – mapping with a ``segments`` list whose entries
  carry ``id``, ``start``/``seek``, ``end`` and ``text``.
* ``PlainTextResponse`` – a bare string.
* ``TextFieldResponse`` – mapping with a ``text`` (or Whisper's
  ``transcription``) field and no usable segment list.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from chunkscribe.errors import EmptyResultError
from chunkscribe.models import ChunkTranscriptionResult, Segment
from chunkscribe.utils.constant import SPEAKER_ROTATION

__all__ = [
    "RawSegment",
    "SegmentListResponse",
    "PlainTextResponse",
    "TextFieldResponse",
    "RecognitionResponse",
    "decode_response",
    "normalize_response",
    "speaker_label",
]


class RawSegment(BaseModel):
    """One entry of a service segment list, before cleanup."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    start: float | None = None
    seek: float | None = None
    end: float | None = None
    text: str | None = ""


class SegmentListResponse(BaseModel):
    kind: Literal["segments"] = "segments"
    segments: list[RawSegment]


class PlainTextResponse(BaseModel):
    kind: Literal["plain"] = "plain"
    text: str


class TextFieldResponse(BaseModel):
    kind: Literal["text"] = "text"
    text: str


RecognitionResponse = Annotated[
    SegmentListResponse | PlainTextResponse | TextFieldResponse,
    Field(discriminator="kind"),
]

_RESPONSE_ADAPTER: TypeAdapter[Any] = TypeAdapter(RecognitionResponse)


def speaker_label(index: int, rotation: int = SPEAKER_ROTATION) -> str:
    """Return the round-robin speaker label for the *index*-th segment."""
    return f"Speaker {(index % rotation) + 1}"


def _raw_segments(items: list[Any]) -> list[RawSegment]:
    parsed: list[RawSegment] = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        try:
            parsed.append(RawSegment.model_validate(dict(item)))
        except ValidationError:
            continue
    return parsed


def decode_response(raw: Any) -> SegmentListResponse | PlainTextResponse | TextFieldResponse:
    """Classify a raw service answer into one of the response variants.

    Raises:
        EmptyResultError: If *raw* matches none of the known shapes.
    """
    if isinstance(raw, str):
        return _RESPONSE_ADAPTER.validate_python({"kind": "plain", "text": raw})

    if isinstance(raw, Mapping):
        segments = raw.get("segments")
        text = raw.get("text")
        if text is None:
            text = raw.get("transcription")

        if isinstance(segments, list) and (segments or not isinstance(text, str)):
            return _RESPONSE_ADAPTER.validate_python(
                {"kind": "segments", "segments": _raw_segments(segments)}
            )
        if isinstance(text, str):
            return _RESPONSE_ADAPTER.validate_python({"kind": "text", "text": text})

    raise EmptyResultError(f"Unrecognised recognition response of type {type(raw).__name__}")


def normalize_response(raw: Any, chunk_index: int = 0) -> ChunkTranscriptionResult:
    """Turn a raw service answer into chunk-local segments.

    Empty and whitespace-only texts are dropped; speaker labels and ids are
    assigned over the surviving segments.

    Raises:
        EmptyResultError: If no segment with text survives.
    """
    response = decode_response(raw)

    # (start, end, text) triples, chunk-relative
    spans: list[tuple[float, float, str]] = []
    if isinstance(response, SegmentListResponse):
        for seg in response.segments:
            text = (seg.text or "").strip()
            if not text:
                continue
            start = seg.start if seg.start is not None else seg.seek
            start = max(start or 0.0, 0.0)
            end = max(seg.end or 0.0, start)
            spans.append((start, end, text))
    elif response.text.strip():
        spans.append((0.0, 0.0, response.text.strip()))

    if not spans:
        raise EmptyResultError(f"Recognition of chunk {chunk_index + 1} produced no text")

    return ChunkTranscriptionResult(
        chunk_index=chunk_index,
        segments=[
            Segment(
                id=i,
                speaker=speaker_label(i),
                text=text,
                start_time=start,
                seek=start,
                end=end,
            )
            for i, (start, end, text) in enumerate(spans)
        ],
    )
