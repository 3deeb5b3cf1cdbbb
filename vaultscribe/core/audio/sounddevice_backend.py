"""Audio capture implementation powered by sounddevice/PortAudio."""

from __future__ import annotations

import contextlib
import queue
from typing import List, Optional

import numpy as np

from ...data.models import AudioArtifact
from ...logging import get_logger
from .base import AudioCapture, CaptureError, CaptureInfo, PermissionDenied
from .writers import wav_artifact

LOGGER = get_logger(__name__)


class SoundDeviceCapture(AudioCapture):
    """Capture stream using the sounddevice library."""

    def __init__(
        self,
        info: CaptureInfo,
        device: Optional[int | str] = None,
        block_size: int = 1024,
        dtype: str = "float32",
    ) -> None:
        try:
            import sounddevice as sd
        except (ImportError, OSError) as exc:  # pragma: no cover - depends on PortAudio install
            raise CaptureError("sounddevice dependency is required for capture") from exc

        self._sd = sd
        self.info = info
        self._device = device
        self._block_size = block_size
        self._dtype = dtype
        self._queue: queue.Queue[np.ndarray] = queue.Queue()
        self._stream: Optional[sd.InputStream] = None
        self._device_info: Optional[dict] = None
        self._paused = False

    def _callback(self, indata, frames, time_info, status) -> None:  # pragma: no cover - executed in runtime
        if status:
            LOGGER.warning("sounddevice status: %s", status)
        self._queue.put(indata.copy())

    @property
    def is_recording(self) -> bool:
        return self._stream is not None and not self._paused

    @property
    def is_paused(self) -> bool:
        return self._stream is not None and self._paused

    def start(self) -> None:
        if self._stream is not None:
            return
        if self._query_device_info() is None:
            raise PermissionDenied(f"No audio input device available ({self._device or 'default'})")

        LOGGER.info("Starting sounddevice capture for %s using device %s", self.info.name, self._device)
        last_error: Optional[Exception] = None
        requested_sample_rate = int(self.info.sample_rate)

        for channels in self._resolve_channel_candidates():
            for sample_rate in self._resolve_sample_rate_candidates():
                stream = None
                try:
                    stream = self._sd.InputStream(
                        samplerate=sample_rate,
                        channels=channels,
                        dtype=self._dtype,
                        blocksize=self._block_size,
                        device=self._device,
                        callback=self._callback,
                    )
                    stream.start()
                except self._sd.PortAudioError as exc:  # pragma: no cover - depends on runtime device
                    if stream is not None:
                        with contextlib.suppress(self._sd.PortAudioError):
                            stream.close()
                    last_error = exc
                    message = str(exc)
                    if "Invalid number of channels" in message:
                        LOGGER.warning("sounddevice rejected %s channel(s) on %s: %s", channels, self._device, message)
                        break
                    if "sample rate" in message.lower():
                        LOGGER.warning("sounddevice rejected %s Hz on %s: %s", sample_rate, self._device, message)
                        continue
                    raise PermissionDenied(f"Unable to access microphone: {message}") from exc

                self._stream = stream
                self._paused = False
                self.info.channels = channels
                if sample_rate != requested_sample_rate:
                    LOGGER.warning(
                        "Adjusted sample rate on %s from %s Hz to %s Hz",
                        self._device,
                        requested_sample_rate,
                        sample_rate,
                    )
                self.info.sample_rate = sample_rate
                return

        message = f"Failed to open audio stream on {self._device}: no compatible channel/sample rate combination"
        if last_error is not None:
            message = f"{message} ({last_error})"
        raise PermissionDenied(message) from last_error

    def pause(self) -> None:
        if self._stream is None or self._paused:
            return
        self._stream.stop()
        self._paused = True
        LOGGER.info("Paused capture for %s", self.info.name)

    def resume(self) -> None:
        if self._stream is None or not self._paused:
            return
        self._stream.start()
        self._paused = False
        LOGGER.info("Resumed capture for %s", self.info.name)

    def stop(self) -> AudioArtifact:
        if self._stream is not None:
            LOGGER.info("Stopping capture for %s", self.info.name)
            with contextlib.suppress(self._sd.PortAudioError):
                self._stream.stop()
            with contextlib.suppress(self._sd.PortAudioError):
                self._stream.close()
            self._stream = None
        self._paused = False
        chunks = self._drain()
        return wav_artifact(chunks, self.info.sample_rate, self.info.channels)

    def _drain(self) -> List[np.ndarray]:
        chunks: List[np.ndarray] = []
        while True:
            try:
                chunks.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return chunks

    def _resolve_channel_candidates(self) -> list[int]:
        """Return an ordered list of channel counts to try for the device."""

        requested = int(self.info.channels) if self.info.channels else 0
        candidates: list[int] = [requested] if requested > 0 else []

        device_info = self._query_device_info()
        if device_info:
            max_channels = int(device_info.get("max_input_channels") or 0)
            if max_channels <= 0:
                raise PermissionDenied(f"Device {self._device} does not support input channels")
            if max_channels not in candidates:
                candidates.append(max_channels)
        if 1 not in candidates:
            candidates.append(1)
        return candidates

    def _resolve_sample_rate_candidates(self) -> list[int]:
        """Return an ordered list of sample rates to try for the device."""

        requested = int(self.info.sample_rate) if self.info.sample_rate else 0
        candidates: list[int] = [requested] if requested > 0 else []

        device_info = self._query_device_info()
        if device_info and device_info.get("default_samplerate"):
            default_rate = int(float(device_info["default_samplerate"]))
            if default_rate not in candidates:
                candidates.append(default_rate)

        for rate in (48_000, 44_100, 32_000, 22_050, 16_000, 8_000):
            if rate not in candidates:
                candidates.append(rate)
        return candidates

    def _query_device_info(self) -> Optional[dict]:
        if self._device_info is not None:
            return self._device_info
        try:  # pragma: no cover - depends on runtime availability
            self._device_info = self._sd.query_devices(self._device, kind="input")
        except (ValueError, self._sd.PortAudioError) as exc:  # pragma: no cover - depends on runtime availability
            LOGGER.debug("Failed to query input device %s: %s", self._device, exc)
            return None
        return self._device_info


def list_input_devices() -> List[dict]:
    """Return sounddevice descriptions of every device with input channels."""

    try:
        import sounddevice as sd
    except (ImportError, OSError) as exc:  # pragma: no cover - depends on PortAudio install
        raise CaptureError("sounddevice dependency is required for capture") from exc

    devices = []
    for index, device in enumerate(sd.query_devices()):
        if int(device.get("max_input_channels") or 0) > 0:
            devices.append({"index": index, **dict(device)})
    return devices


__all__ = ["SoundDeviceCapture", "list_input_devices"]
