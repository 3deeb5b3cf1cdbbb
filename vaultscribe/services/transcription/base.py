"""Transcription service abstractions."""

from __future__ import annotations

import abc

from ...data.models import AccuracyMode, AudioArtifact, TranscriptionResult


class TranscriptionError(RuntimeError):
    """Base class for failures of the transcription stage."""


class MissingCredential(TranscriptionError):
    """Raised before any network call when no API key is configured."""


class UploadFailed(TranscriptionError):
    pass


class SubmitFailed(TranscriptionError):
    pass


class TranscriptionServiceError(TranscriptionError):
    """The service reported an error, or the HTTP exchange itself failed."""


class TranscriptionTimeout(TranscriptionError):
    pass


class TranscriptionCancelled(TranscriptionError):
    pass


def normalize_language_code(language: str | None) -> str:
    """Return the service form of a language tag, e.g. ``en-US`` -> ``en_us``."""

    language = (language or "").strip()
    if not language:
        return "en_us"
    return language.lower().replace("-", "_")


class TranscriptionService(abc.ABC):
    """Convert recorded audio into a transcription result."""

    @abc.abstractmethod
    def transcribe(
        self,
        audio: AudioArtifact,
        api_key: str | None,
        language_code: str,
        accuracy_mode: AccuracyMode = AccuracyMode.BALANCED,
    ) -> TranscriptionResult:
        raise NotImplementedError


__all__ = [
    "MissingCredential",
    "SubmitFailed",
    "TranscriptionCancelled",
    "TranscriptionError",
    "TranscriptionService",
    "TranscriptionServiceError",
    "TranscriptionTimeout",
    "UploadFailed",
    "normalize_language_code",
]
