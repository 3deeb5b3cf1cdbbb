"""AssemblyAI powered transcription service."""

from __future__ import annotations

from threading import Event
from typing import Any, Dict, Optional

import requests

from ...data.models import AccuracyMode, AudioArtifact, TranscriptionJob, TranscriptionResult
from ...logging import get_logger
from .base import (
    MissingCredential,
    SubmitFailed,
    TranscriptionCancelled,
    TranscriptionService,
    TranscriptionServiceError,
    TranscriptionTimeout,
    UploadFailed,
    normalize_language_code,
)

LOGGER = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.assemblyai.com/v2"
POLL_INTERVAL_SECONDS = 3.0
MAX_POLL_ATTEMPTS = 40


class AssemblyAITranscriptionService(TranscriptionService):
    """Upload audio, submit a diarized transcription job and poll until it finishes.

    The poll interval is constant. ``cancel`` interrupts a pending wait and
    makes the current ``transcribe`` call raise ``TranscriptionCancelled``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        max_attempts: int = MAX_POLL_ATTEMPTS,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.timeout = timeout
        self._cancelled = Event()

    def cancel(self) -> None:
        self._cancelled.set()

    def transcribe(
        self,
        audio: AudioArtifact,
        api_key: str | None,
        language_code: str,
        accuracy_mode: AccuracyMode = AccuracyMode.BALANCED,
    ) -> TranscriptionResult:
        if not api_key or not api_key.strip():
            raise MissingCredential("AssemblyAI API key missing")

        self._cancelled.clear()
        upload_reference = self.upload(audio, api_key)
        job = self.submit(upload_reference, api_key, language_code, accuracy_mode)
        return self.wait_for_completion(job, api_key)

    def upload(self, audio: AudioArtifact, api_key: str) -> str:
        LOGGER.info("Uploading %s bytes of audio to AssemblyAI", audio.size)
        data = self._request(
            "POST",
            "/upload",
            api_key,
            data=audio.data,
            headers={"content-type": "application/octet-stream"},
        )
        upload_url = data.get("upload_url")
        if not upload_url:
            raise UploadFailed("AssemblyAI did not return an upload URL.")
        return upload_url

    def submit(
        self,
        upload_reference: str,
        api_key: str,
        language_code: str,
        accuracy_mode: AccuracyMode = AccuracyMode.BALANCED,
    ) -> TranscriptionJob:
        language = normalize_language_code(language_code)
        disfluencies = AccuracyMode(accuracy_mode) == AccuracyMode.ACCURATE
        body = {
            "audio_url": upload_reference,
            "speaker_labels": True,
            "language_code": language,
            "punctuate": True,
            "format_text": True,
            "dual_channel": False,
            "disfluencies": disfluencies,
        }
        data = self._request("POST", "/transcript", api_key, json=body)
        job_id = data.get("id")
        if not job_id:
            LOGGER.error("AssemblyAI transcript response missing id: %s", data)
            raise SubmitFailed("AssemblyAI did not return a transcript id.")
        LOGGER.info("Submitted AssemblyAI transcript %s (language=%s)", job_id, language)
        return TranscriptionJob(
            upload_reference=upload_reference,
            job_id=job_id,
            language_code=language,
            disfluencies_enabled=disfluencies,
        )

    def wait_for_completion(self, job: TranscriptionJob, api_key: str) -> TranscriptionResult:
        for attempt in range(self.max_attempts):
            data = self._request("GET", f"/transcript/{job.job_id}", api_key)
            status = data.get("status")
            LOGGER.debug("AssemblyAI poll %s/%s: %s", attempt + 1, self.max_attempts, status)

            if status == "completed":
                return TranscriptionResult(
                    text=data.get("text") or "",
                    utterances=data.get("utterances") or [],
                )
            if status == "error":
                LOGGER.error("AssemblyAI returned error for %s: %s", job.job_id, data)
                raise TranscriptionServiceError(data.get("error") or "AssemblyAI returned an error.")

            if attempt < self.max_attempts - 1 and self._cancelled.wait(self.poll_interval):
                raise TranscriptionCancelled(f"Polling of transcript {job.job_id} was cancelled.")

        raise TranscriptionTimeout("Transcription timed out.")

    def _request(self, method: str, path: str, api_key: str, **kwargs: Any) -> Dict[str, Any]:
        headers = {"authorization": api_key, **kwargs.pop("headers", {})}
        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                headers=headers,
                timeout=self.timeout,
                **kwargs,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise TranscriptionServiceError(_describe_http_error(exc)) from exc
        return _json_body(response)


def _json_body(response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _describe_http_error(exc: requests.RequestException) -> str:
    response = getattr(exc, "response", None)
    if response is None:
        return str(exc) or exc.__class__.__name__
    message = _json_body(response).get("error")
    return str(message or response.status_code)


__all__ = [
    "AssemblyAITranscriptionService",
    "DEFAULT_BASE_URL",
    "MAX_POLL_ATTEMPTS",
    "POLL_INTERVAL_SECONDS",
]
