"""Transcription services."""

from .base import (
    MissingCredential,
    SubmitFailed,
    TranscriptionError,
    TranscriptionService,
    TranscriptionServiceError,
    TranscriptionTimeout,
    UploadFailed,
)
from .dummy import DummyTranscriptionService

__all__ = [
    "DummyTranscriptionService",
    "MissingCredential",
    "SubmitFailed",
    "TranscriptionError",
    "TranscriptionService",
    "TranscriptionServiceError",
    "TranscriptionTimeout",
    "UploadFailed",
]
