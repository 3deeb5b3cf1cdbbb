"""Dummy transcription service for testing or offline usage."""

from __future__ import annotations

from ...data.models import AccuracyMode, AudioArtifact, TranscriptionResult, Utterance
from .base import TranscriptionService


class DummyTranscriptionService(TranscriptionService):
    def transcribe(
        self,
        audio: AudioArtifact,
        api_key: str | None,
        language_code: str,
        accuracy_mode: AccuracyMode = AccuracyMode.BALANCED,
    ) -> TranscriptionResult:
        text = (
            f"Dummy transcript for {audio.size} bytes of {audio.mime_type}. "
            "Replace with a real transcription backend."
        )
        return TranscriptionResult(
            text=text,
            utterances=[Utterance(start=0, speaker="A", text=text)],
        )


__all__ = ["DummyTranscriptionService"]
