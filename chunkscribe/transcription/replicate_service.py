"""Replicate-hosted Whisper as a :class:`RecognitionService`.

Talks to the Replicate predictions HTTP API with *requests*: the audio is
sent inline as a base64 data URI, the call asks the server to hold the
response open (``Prefer: wait``) and then polls until the prediction reaches
a terminal state.

Every request carries explicit connect/read timeouts and the whole
prediction is bounded by ``timeout_sec``, so a hanging request surfaces as a
retryable :class:`RecognitionServiceError` instead of blocking forever.
"""

from __future__ import annotations

import base64
import logging
import time
from collections.abc import Callable
from typing import Any

import requests

from chunkscribe.errors import RecognitionServiceError
from chunkscribe.utils.constant import (
    DEFAULT_REQUEST_TIMEOUT_SEC,
    HTTP_CONNECT_TIMEOUT_SEC,
    PREDICTION_POLL_INTERVAL_SEC,
    REPLICATE_API_TOKEN,
    REPLICATE_API_URL,
    WHISPER_MODEL_VERSION,
)

__all__ = ["ReplicateWhisperService"]

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({"succeeded", "failed", "canceled"})
# Replicate accepts Prefer: wait=1..60
_MAX_PREFER_WAIT_SEC = 60


class ReplicateWhisperService:
    """Recognition service backed by a Whisper model version on Replicate.

    Args:
        api_token: Replicate API token; defaults to ``REPLICATE_API_TOKEN``.
        model_version: Model version hash to run.
        base_url: API root, e.g. ``https://api.replicate.com/v1``.
        timeout_sec: Budget for one prediction, polling included.
        poll_interval_sec: Delay between status polls.
        session: Optional pre-configured :class:`requests.Session`.
        clock: Monotonic clock; injectable for tests.
        sleep: Blocking sleep; injectable for tests.

    Raises:
        RecognitionServiceError: If no API token is configured.
    """

    def __init__(
        self,
        api_token: str | None = None,
        *,
        model_version: str = WHISPER_MODEL_VERSION,
        base_url: str = REPLICATE_API_URL,
        timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC,
        poll_interval_sec: float = PREDICTION_POLL_INTERVAL_SEC,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        token = api_token if api_token is not None else REPLICATE_API_TOKEN
        if not token:
            raise RecognitionServiceError(
                "REPLICATE_API_TOKEN is not set; add it to the environment or .env",
                retryable=False,
            )
        self.model_version = model_version
        self.base_url = base_url.rstrip("/")
        self.timeout_sec = timeout_sec
        self.poll_interval_sec = poll_interval_sec
        self._session = session or requests.Session()
        self._session.headers.update({"Authorization": f"Bearer {token}"})
        self._clock = clock
        self._sleep = sleep

    def recognize(self, payload: bytes, *, media_type: str = "audio/wav", language: str | None = None) -> Any:
        """Run one prediction and return its raw ``output``.

        Raises:
            RecognitionServiceError: On transport errors, error statuses,
                failed predictions or when the time budget runs out.
        """
        deadline = self._clock() + self.timeout_sec
        audio = base64.b64encode(payload).decode("ascii")
        model_input: dict[str, Any] = {"audio": f"data:{media_type};base64,{audio}"}
        if language:
            model_input["language"] = language

        wait = max(1, min(_MAX_PREFER_WAIT_SEC, int(self.timeout_sec)))
        prediction = self._request(
            "POST",
            f"{self.base_url}/predictions",
            deadline,
            json={"version": self.model_version, "input": model_input},
            headers={"Prefer": f"wait={wait}"},
        )
        logger.debug(f"Prediction {prediction.get('id')} status={prediction.get('status')}")

        while prediction.get("status") not in TERMINAL_STATUSES:
            if self._clock() >= deadline:
                raise RecognitionServiceError(
                    f"Recognition request timed out after {self.timeout_sec:g}s"
                )
            poll_url = (prediction.get("urls") or {}).get("get")
            if not poll_url:
                raise RecognitionServiceError("Prediction response has no polling URL")
            self._sleep(self.poll_interval_sec)
            prediction = self._request("GET", poll_url, deadline)

        status = prediction["status"]
        if status != "succeeded":
            detail = prediction.get("error") or f"prediction {status}"
            raise RecognitionServiceError(f"Prediction {status}: {detail}")
        return prediction.get("output")

    def _request(self, method: str, url: str, deadline: float, **kwargs: Any) -> dict[str, Any]:
        remaining = deadline - self._clock()
        if remaining <= 0:
            raise RecognitionServiceError(f"Recognition request timed out after {self.timeout_sec:g}s")

        try:
            resp = self._session.request(
                method,
                url,
                timeout=(min(HTTP_CONNECT_TIMEOUT_SEC, remaining), remaining),
                **kwargs,
            )
        except requests.Timeout as exc:
            raise RecognitionServiceError(f"Recognition request timed out: {exc}") from exc
        except requests.RequestException as exc:
            raise RecognitionServiceError(f"Recognition service unreachable: {exc}") from exc

        if resp.status_code == 429:
            raise RecognitionServiceError("Rate limit exceeded", status_code=429)
        if resp.status_code >= 400:
            detail = _error_detail(resp)
            raise RecognitionServiceError(
                f"HTTP {resp.status_code}: {detail}",
                status_code=resp.status_code,
                retryable=resp.status_code >= 500,
            )

        try:
            body = resp.json()
        except ValueError as exc:
            raise RecognitionServiceError(f"Invalid JSON from recognition service: {exc}") from exc
        if not isinstance(body, dict):
            raise RecognitionServiceError(
                f"Unexpected prediction payload from recognition service: {type(body).__name__}"
            )
        return body


def _error_detail(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200] or resp.reason
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("error") or body)
    return str(body)
