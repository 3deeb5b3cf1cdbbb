"""Tests for the sounddevice capture backend and the capture factory."""

from __future__ import annotations

import sys

import numpy as np
import pytest

from vaultscribe.config import Settings
from vaultscribe.core.audio.base import CaptureInfo, PermissionDenied
from vaultscribe.core.audio.factory import _parse_device, capture_factory_from_settings
from vaultscribe.core.audio.sounddevice_backend import SoundDeviceCapture, list_input_devices


class _FakePortAudioError(Exception):
    pass


class _FakeInputStream:
    def __init__(self, module: "_FakeSoundDeviceModule", **kwargs) -> None:
        self.module = module
        self.kwargs = kwargs
        self.calls: list[str] = []
        self.closed = False

    def start(self) -> None:
        self.calls.append("start")
        rejected = self.module.rejected_sample_rates
        if self.kwargs["samplerate"] in rejected:
            raise _FakePortAudioError("Invalid sample rate")

    def stop(self) -> None:
        self.calls.append("stop")

    def close(self) -> None:
        self.calls.append("close")
        self.closed = True
        if self.module.fail_close:
            raise _FakePortAudioError("Stream already closed")


class _FakeSoundDeviceModule:
    PortAudioError = _FakePortAudioError

    def __init__(self) -> None:
        self.device_info: dict | Exception = {
            "name": "Built-in Microphone",
            "max_input_channels": 1,
            "default_samplerate": 48_000.0,
        }
        self.devices = [
            {"name": "Built-in Microphone", "max_input_channels": 1},
            {"name": "HDMI Output", "max_input_channels": 0},
            {"name": "USB Mic", "max_input_channels": 2},
        ]
        self.rejected_sample_rates: set[int] = set()
        self.fail_close = False
        self.streams: list[_FakeInputStream] = []

    def InputStream(self, **kwargs) -> _FakeInputStream:  # noqa: N802 - mirrors sounddevice
        stream = _FakeInputStream(self, **kwargs)
        self.streams.append(stream)
        return stream

    def query_devices(self, device=None, kind=None):
        if kind is None:
            return list(self.devices)
        if isinstance(self.device_info, Exception):
            raise self.device_info
        return dict(self.device_info)


@pytest.fixture()
def fake_sd(monkeypatch: pytest.MonkeyPatch) -> _FakeSoundDeviceModule:
    module = _FakeSoundDeviceModule()
    monkeypatch.setitem(sys.modules, "sounddevice", module)
    return module


def _capture(device=None) -> SoundDeviceCapture:
    return SoundDeviceCapture(CaptureInfo(name="microphone", sample_rate=16_000, channels=1), device=device)


def test_start_without_input_device_is_permission_denied(fake_sd) -> None:
    fake_sd.device_info = ValueError("No input device matching 7")

    with pytest.raises(PermissionDenied):
        _capture(device=7).start()

    assert fake_sd.streams == []


def test_start_on_device_without_input_channels_is_permission_denied(fake_sd) -> None:
    fake_sd.device_info = {"name": "HDMI Output", "max_input_channels": 0}

    with pytest.raises(PermissionDenied):
        _capture().start()


def test_start_falls_back_to_device_sample_rate(fake_sd) -> None:
    fake_sd.rejected_sample_rates = {16_000}
    capture = _capture()

    capture.start()

    assert capture.is_recording
    assert capture.info.sample_rate == 48_000
    assert fake_sd.streams[0].closed
    assert fake_sd.streams[1].kwargs["samplerate"] == 48_000


def test_pause_and_resume_map_onto_stream(fake_sd) -> None:
    capture = _capture()
    capture.pause()
    capture.resume()
    assert not capture.is_paused

    capture.start()
    stream = fake_sd.streams[-1]
    capture.resume()
    capture.pause()
    capture.pause()

    assert capture.is_paused
    assert not capture.is_recording
    assert stream.calls == ["start", "stop"]

    capture.resume()

    assert capture.is_recording
    assert stream.calls == ["start", "stop", "start"]


def test_stop_without_chunks_returns_header_only_wav(fake_sd) -> None:
    capture = _capture()
    capture.start()

    artifact = capture.stop()

    assert artifact.size == 44
    assert artifact.mime_type == "audio/wav"
    assert fake_sd.streams[-1].closed
    assert not capture.is_recording
    assert not capture.is_paused


def test_stop_keeps_buffered_audio_when_close_fails(fake_sd) -> None:
    fake_sd.fail_close = True
    capture = _capture()
    capture.start()
    capture._callback(np.full((160, 1), 0.25, dtype=np.float32), 160, None, None)

    artifact = capture.stop()

    assert artifact.size == 44 + 160 * 2
    assert not capture.is_recording


def test_list_input_devices_skips_output_only_devices(fake_sd) -> None:
    devices = list_input_devices()

    assert [(device["index"], device["name"]) for device in devices] == [
        (0, "Built-in Microphone"),
        (2, "USB Mic"),
    ]


@pytest.mark.parametrize(
    "value, expected",
    [(None, None), ("  ", None), ("3", 3), (" USB Mic ", "USB Mic")],
)
def test_parse_device(value, expected) -> None:
    assert _parse_device(value) == expected


def test_capture_factory_uses_settings(fake_sd) -> None:
    settings = Settings(default_mic_device="2", sample_rate=44_100, channels=2)

    capture = capture_factory_from_settings(settings)()

    assert isinstance(capture, SoundDeviceCapture)
    assert capture._device == 2
    assert capture.info.sample_rate == 44_100
    assert capture.info.channels == 2
    assert capture.info.device == "2"


def test_capture_factory_device_argument_overrides_settings(fake_sd) -> None:
    settings = Settings(default_mic_device="2")

    factory = capture_factory_from_settings(settings, device="USB Mic")
    first, second = factory(), factory()

    assert first is not second
    assert first._device == "USB Mic"
