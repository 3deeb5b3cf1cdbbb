"""Data models used by vaultscribe."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AccuracyMode(str, Enum):
    BALANCED = "balanced"
    ACCURATE = "accurate"
    FAST = "fast"


class Utterance(BaseModel):
    """One speaker turn as returned by the transcription service."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    start: Optional[float] = None
    speaker: Optional[str] = None
    text: Optional[str] = None

    @field_validator("speaker", mode="before")
    @classmethod
    def _speaker_as_text(cls, value):
        if value is None or isinstance(value, str):
            return value
        return str(value)


class TranscriptionResult(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    text: str = ""
    utterances: List[Utterance] = Field(default_factory=list)

    @property
    def has_utterances(self) -> bool:
        return bool(self.utterances)


class TranscriptionJob(BaseModel):
    upload_reference: str
    job_id: str
    language_code: str
    speaker_labels_enabled: bool = True
    disfluencies_enabled: bool = False


@dataclass
class AudioArtifact:
    """Finished capture held in memory until it is written to the vault."""

    data: bytes
    mime_type: str = "audio/wav"
    extension: str = "wav"

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class RecordingSession:
    """State of one in-progress capture.

    Times are epoch seconds. ``associated_document`` is the vault path of the
    note that triggered the recording, if any.
    """

    started_at: float
    associated_document: Optional[str] = None
    is_paused: bool = False
    pause_started_at: Optional[float] = None
    total_paused_ms: float = 0.0

    @property
    def started_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.started_at)

    def mark_paused(self, now: float) -> None:
        if self.is_paused:
            return
        self.is_paused = True
        self.pause_started_at = now

    def mark_resumed(self, now: float) -> None:
        if not self.is_paused:
            return
        if self.pause_started_at is not None:
            self.total_paused_ms += max(0.0, now - self.pause_started_at) * 1000.0
        self.pause_started_at = None
        self.is_paused = False

    def elapsed_ms(self, now: float) -> float:
        current_pause = 0.0
        if self.is_paused and self.pause_started_at is not None:
            current_pause = (now - self.pause_started_at) * 1000.0
        elapsed = (now - self.started_at) * 1000.0 - self.total_paused_ms - current_pause
        return max(0.0, elapsed)


__all__ = [
    "AccuracyMode",
    "AudioArtifact",
    "RecordingSession",
    "TranscriptionJob",
    "TranscriptionResult",
    "Utterance",
]
