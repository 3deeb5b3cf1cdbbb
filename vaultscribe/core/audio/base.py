"""Audio capture abstractions."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Optional

from ...data.models import AudioArtifact


@dataclass
class CaptureInfo:
    """Metadata about a capture channel."""

    name: str
    sample_rate: int
    channels: int
    device: Optional[str] = None


class AudioCapture(abc.ABC):
    """Microphone capture with a start/pause/resume/stop contract.

    ``stop`` returns every chunk buffered since ``start`` as one artifact and
    releases the input device. ``pause`` and ``resume`` are no-ops when the
    capture is not recording or not paused respectively.
    """

    info: CaptureInfo

    @abc.abstractmethod
    def start(self) -> None:
        """Open the input device and begin buffering chunks."""

    @abc.abstractmethod
    def pause(self) -> None:
        """Suspend buffering without releasing the device."""

    @abc.abstractmethod
    def resume(self) -> None:
        """Continue buffering after a pause."""

    @abc.abstractmethod
    def stop(self) -> AudioArtifact:
        """Finish the capture and return the recorded audio."""

    @property
    @abc.abstractmethod
    def is_recording(self) -> bool:
        raise NotImplementedError

    @property
    @abc.abstractmethod
    def is_paused(self) -> bool:
        raise NotImplementedError


class CaptureError(RuntimeError):
    """Raised when audio capture cannot be initialised."""


class PermissionDenied(CaptureError):
    """Raised when microphone access is refused or no input device exists."""


__all__ = ["AudioCapture", "CaptureError", "CaptureInfo", "PermissionDenied"]
