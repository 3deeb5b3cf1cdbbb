"""Tests for CLI commands."""

from __future__ import annotations

import os

import numpy as np
import pytest
from typer.testing import CliRunner

from vaultscribe import cli, config
from vaultscribe.config import Settings
from vaultscribe.core.audio.base import AudioCapture, CaptureInfo
from vaultscribe.core.audio.writers import wav_artifact
from vaultscribe.data.models import AudioArtifact

runner = CliRunner()


class _FakeCapture(AudioCapture):
    def __init__(self) -> None:
        self.info = CaptureInfo(name="microphone", sample_rate=16000, channels=1)
        self._recording = False

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def is_paused(self) -> bool:
        return False

    def start(self) -> None:
        self._recording = True

    def pause(self) -> None:
        pass

    def resume(self) -> None:
        pass

    def stop(self) -> AudioArtifact:
        self._recording = False
        return wav_artifact([np.zeros((160, 1), dtype=np.float32)], 16000, 1)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "_ENV_PATH", tmp_path / ".env")
    monkeypatch.setattr(config, "_settings", None)
    for key in list(os.environ):
        if key.startswith("VAULTSCRIBE_"):
            monkeypatch.delenv(key, raising=False)
    yield

    for key in list(os.environ):
        if key.startswith("VAULTSCRIBE_"):
            del os.environ[key]


def test_record_with_dummy_backends_writes_note(monkeypatch, tmp_path) -> None:
    settings = Settings(vault_dir=tmp_path / "vault")
    (tmp_path / "vault").mkdir()
    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    monkeypatch.setattr(cli, "capture_factory_from_settings", lambda _settings, _device: _FakeCapture)

    result = runner.invoke(
        cli.app,
        ["record", "--duration", "0", "--transcription-backend", "dummy", "--summary-backend", "dummy"],
    )

    assert result.exit_code == 0, result.output
    assert "Transcript saved at Transcriptions/" in result.output
    notes = list((tmp_path / "vault" / "Transcriptions").glob("*.md"))
    assert len(notes) == 1
    content = notes[0].read_text()
    assert "Dummy transcript" in content
    assert "## AI Meeting Summary" in content


def test_record_rejects_unknown_backend(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(cli, "get_settings", lambda: Settings(vault_dir=tmp_path))

    result = runner.invoke(cli.app, ["record", "--transcription-backend", "bogus"])

    assert result.exit_code != 0
    assert not list(tmp_path.iterdir())


def test_env_set_list_and_clear() -> None:
    result = runner.invoke(cli.app, ["env", "set", "SUMMARY_MODEL", "gpt-test"])
    assert result.exit_code == 0, result.output
    assert os.environ["VAULTSCRIBE_SUMMARY_MODEL"] == "gpt-test"

    runner.invoke(cli.app, ["env", "set", "summary_api_key", "sk-secret"])
    listing = runner.invoke(cli.app, ["env", "list"])
    assert "VAULTSCRIBE_SUMMARY_MODEL=gpt-test" in listing.output
    assert "VAULTSCRIBE_SUMMARY_API_KEY=********" in listing.output
    assert "sk-secret" not in listing.output

    cleared = runner.invoke(cli.app, ["env", "clear", "summary_model"])
    assert cleared.exit_code == 0
    assert "VAULTSCRIBE_SUMMARY_MODEL" not in os.environ


def test_env_set_unknown_field_fails() -> None:
    result = runner.invoke(cli.app, ["env", "set", "bogus", "1"])

    assert result.exit_code != 0
