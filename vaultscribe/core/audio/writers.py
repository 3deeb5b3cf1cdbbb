"""Utilities for encoding captured audio as PCM wave data."""

from __future__ import annotations

import io
import wave
from typing import Iterable

import numpy as np

from ...data.models import AudioArtifact

WAV_MIME_TYPE = "audio/wav"


def _as_int16(data: np.ndarray, channels: int) -> np.ndarray:
    if data.ndim == 1:
        data = data[:, np.newaxis]
    if data.shape[1] != channels:
        if data.shape[1] == 1 and channels == 2:
            data = np.repeat(data, 2, axis=1)
        else:
            raise ValueError("Channel mismatch when writing audio")
    clipped = np.clip(data, -1.0, 1.0)
    return (clipped * 32767.0).astype(np.int16)


def encode_wav(chunks: Iterable[np.ndarray], sample_rate: int, channels: int) -> bytes:
    """Concatenate floating point chunks in order into 16-bit PCM wave bytes.

    An empty ``chunks`` iterable yields a valid header-only file.
    """

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(2)  # 16-bit PCM
        wav.setframerate(sample_rate)
        for chunk in chunks:
            wav.writeframes(_as_int16(np.asarray(chunk, dtype=np.float32), channels).tobytes())
    return buffer.getvalue()


def wav_artifact(chunks: Iterable[np.ndarray], sample_rate: int, channels: int) -> AudioArtifact:
    return AudioArtifact(
        data=encode_wav(chunks, sample_rate, channels),
        mime_type=WAV_MIME_TYPE,
        extension="wav",
    )


__all__ = ["WAV_MIME_TYPE", "encode_wav", "wav_artifact"]
