"""Factory helpers for constructing audio capture instances."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from ...config import Settings, get_settings
from .base import AudioCapture, CaptureInfo


@dataclass
class CaptureRequest:
    """Description of the microphone capture requested by the user."""

    device: Optional[str] = None
    sample_rate: int = 16_000
    channels: int = 1
    channel: str = "microphone"


def _parse_device(device: Optional[str]) -> Optional[int | str]:
    if device is None or not device.strip():
        return None
    device = device.strip()
    if device.isdigit():
        return int(device)
    return device


def create_capture(request: CaptureRequest) -> AudioCapture:
    """Return a sounddevice capture for ``request``.

    Raises ``CaptureError`` when the sounddevice/PortAudio runtime is missing.
    """

    from .sounddevice_backend import SoundDeviceCapture

    device = _parse_device(request.device)
    info = CaptureInfo(
        name=request.channel,
        sample_rate=request.sample_rate,
        channels=request.channels,
        device="default" if device is None else str(device),
    )
    return SoundDeviceCapture(info=info, device=device)


def capture_factory_from_settings(
    settings: Optional[Settings] = None, device: Optional[str] = None
) -> Callable[[], AudioCapture]:
    """Return a zero-argument factory building a fresh capture per recording."""

    def _factory() -> AudioCapture:
        current = settings or get_settings()
        return create_capture(
            CaptureRequest(
                device=device if device is not None else current.default_mic_device,
                sample_rate=current.sample_rate,
                channels=current.channels,
            )
        )

    return _factory


__all__ = ["CaptureRequest", "capture_factory_from_settings", "create_capture"]
