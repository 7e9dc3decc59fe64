"""End-to-end transcription of a single audio asset.

Analyzer -> (conditionally) chunker -> resilient client per chunk ->
merger -> language classifier. Chunks are submitted strictly one after
another, in index order.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from rich.progress import Progress, TaskID

from chunkscribe.chunking import analyze, iter_chunks, merge_chunk_results, plan_chunks
from chunkscribe.config import PipelineConfig
from chunkscribe.errors import AssetValidationError
from chunkscribe.language import classify
from chunkscribe.models import AudioAsset, AudioChunkPlan, ChunkTranscriptionResult, MergedTranscript
from chunkscribe.transcription.client import RecognitionService, ResilientTranscriptionClient
from chunkscribe.utils.audio_io import decode_asset

__all__ = ["TranscriptionPipeline"]

logger = logging.getLogger(__name__)


class TranscriptionPipeline:
    """Turn one :class:`AudioAsset` into a :class:`MergedTranscript`.

    Instances hold configuration and the client only; every :meth:`run`
    owns its own buffers and results, so one pipeline may serve several
    assets in turn.
    """

    def __init__(
        self,
        service: RecognitionService,
        config: PipelineConfig | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config or PipelineConfig()
        self.client = ResilientTranscriptionClient(service, self.config.retry, sleep=sleep)

    def validate(self, asset: AudioAsset) -> None:
        """Reject assets the service will not accept.

        Raises:
            AssetValidationError: On an empty payload, an unsupported media
                type or a payload above the size limit.
        """
        if asset.size == 0:
            raise AssetValidationError(f"{asset.name!r} is empty")
        if asset.media_type.lower() not in self.config.supported_media_types:
            supported = ", ".join(sorted(self.config.supported_media_types))
            raise AssetValidationError(
                f"Unsupported media type {asset.media_type!r}; supported: {supported}"
            )
        if asset.size > self.config.max_file_size:
            limit_mb = self.config.max_file_size / (1024 * 1024)
            raise AssetValidationError(f"File too large: {asset.name!r} exceeds {limit_mb:g}MB")

    def plan(self, asset: AudioAsset) -> AudioChunkPlan:
        """Analyze *asset* and decide how it will be split."""
        chunking = self.config.chunking
        plan = plan_chunks(analyze(asset), chunking.chunk_len_sec, chunking.threshold_sec)
        if not chunking.enabled and plan.needs_chunking:
            logger.info(f"{asset.name}: chunking disabled, submitting {plan.total_duration:.0f}s in one request")
            return AudioChunkPlan(plan.total_duration, plan.chunk_duration, needs_chunking=False)
        return plan

    def run(
        self,
        asset: AudioAsset,
        language: str = "auto",
        *,
        progress: Progress | None = None,
        task: TaskID | None = None,
    ) -> MergedTranscript:
        """Transcribe *asset* completely or fail with one typed error.

        Parameters:
            asset (AudioAsset): The audio to transcribe.
            language (str): ``"auto"`` or a language code forwarded as hint.
            progress (Progress | None): Rich progress to advance per chunk.
            task (TaskID | None): Task within *progress* to advance.

        Returns:
            MergedTranscript: Absolute, globally indexed transcript with the
                detected language attached.
        """
        self.validate(asset)
        plan = self.plan(asset)
        if progress is not None and task is not None:
            progress.update(task, total=plan.chunk_count, completed=0)

        results: list[ChunkTranscriptionResult] = []
        if plan.needs_chunking:
            buffer = decode_asset(asset, self.config.chunking.target_sample_rate)
            for chunk in iter_chunks(buffer, plan.chunk_duration):
                logger.info(
                    f"{asset.name}: chunk {chunk.index + 1}/{plan.chunk_count} "
                    f"[{chunk.start_sec:.0f}s-{chunk.start_sec + chunk.duration_sec:.0f}s)"
                )
                results.append(
                    self.client.transcribe(
                        chunk.data,
                        language,
                        media_type=chunk.media_type,
                        chunk_index=chunk.index,
                    )
                )
                if progress is not None and task is not None:
                    progress.advance(task)
            del buffer
        else:
            results.append(self.client.transcribe(asset.data, language, media_type=asset.media_type))
            if progress is not None and task is not None:
                progress.advance(task)

        merged = merge_chunk_results(results, plan.chunk_duration)
        detected = classify(merged, self.config.language)
        logger.info(
            f"{asset.name}: {len(merged.segments)} segment(s) from {merged.total_chunks} chunk(s)"
        )
        return merged.model_copy(update={"detected_language": detected.language})
