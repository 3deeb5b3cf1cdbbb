"""Factories for runtime service selection."""

from __future__ import annotations

from typing import Optional

from ..config import Settings, get_settings
from ..core.notices import Notifier
from .summary.base import SummaryService
from .summary.dummy import DummySummaryService
from .summary.openai_summary import OpenAISummaryService
from .transcription.assemblyai_client import AssemblyAITranscriptionService
from .transcription.base import TranscriptionService
from .transcription.dummy import DummyTranscriptionService


class ServiceConfigurationError(ValueError):
    """Raised when an unknown backend is requested."""


def _normalise(name: Optional[str]) -> str:
    if not name:
        return "none"
    return name.strip().lower()


def resolve_transcription_backend(
    name: Optional[str], settings: Optional[Settings] = None
) -> Optional[TranscriptionService]:
    backend = _normalise(name)
    if backend in {"", "none", "off"}:
        return None
    if backend == "dummy":
        return DummyTranscriptionService()
    if backend == "assemblyai":
        settings = settings or get_settings()
        return AssemblyAITranscriptionService(
            base_url=settings.assemblyai_base_url,
            timeout=settings.http_timeout,
        )
    raise ServiceConfigurationError(f"Unknown transcription backend: {name}")


def resolve_summary_backend(
    name: Optional[str], notifier: Optional[Notifier] = None
) -> Optional[SummaryService]:
    backend = _normalise(name)
    if backend in {"", "none", "off"}:
        return None
    if backend == "dummy":
        return DummySummaryService()
    if backend == "openai":
        return OpenAISummaryService(notifier=notifier)
    raise ServiceConfigurationError(f"Unknown summary backend: {name}")


__all__ = [
    "ServiceConfigurationError",
    "resolve_summary_backend",
    "resolve_transcription_backend",
]
