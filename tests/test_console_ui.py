from __future__ import annotations

import builtins

import vaultscribe.core.audio.factory as factory_module
from vaultscribe.core.pipeline.orchestrator import RecordingManager, RecordingState
from vaultscribe.data.vault import FileSystemVault
from vaultscribe.services.transcription.dummy import DummyTranscriptionService
from vaultscribe.ui.console import RecordingConsoleUI

from test_orchestrator import FakeCapture, FakeClock, RecordingNotifier, _settings


def _console(tmp_path) -> RecordingConsoleUI:
    manager = RecordingManager(
        store=FileSystemVault(tmp_path),
        notifier=RecordingNotifier(),
        capture_factory=FakeCapture,
        transcription=DummyTranscriptionService(),
        settings=_settings(),
        clock=FakeClock(),
    )
    console = RecordingConsoleUI(settings=_settings(), manager=manager, transcription_backend_name="dummy")
    manager.notifier = console
    return console


def test_console_start_pause_stop_cycle(tmp_path, monkeypatch, capsys) -> None:
    console = _console(tmp_path)
    monkeypatch.setattr(builtins, "input", lambda _prompt="": "")

    console.handle_choice("1")
    assert console._manager.state is RecordingState.RECORDING

    console.handle_choice("p")
    assert console._manager.state is RecordingState.PAUSED
    console.handle_choice("status")
    assert "Paused 00:00:00" in capsys.readouterr().out

    console.handle_choice("r")
    console.handle_choice("4")
    for thread in console._pipelines:
        thread.join()

    console._flush_messages()
    output = capsys.readouterr().out
    assert "[info] Recording started." in output
    assert "[info] Recording complete. Transcription note created." in output
    assert list((tmp_path / "Transcriptions").glob("*.md"))


def test_console_reports_invalid_actions(tmp_path, capsys) -> None:
    console = _console(tmp_path)

    console.handle_choice("p")
    console.handle_choice("x")
    console.handle_choice("zzz")
    console._flush_messages()

    output = capsys.readouterr().out
    assert "No running recording to pause." in output
    assert "No recording is currently running." in output
    assert "Unknown option" in output


def test_console_quit_stops_active_recording(tmp_path, monkeypatch) -> None:
    console = _console(tmp_path)
    monkeypatch.setattr(builtins, "input", lambda _prompt="": "")
    console.handle_choice("start")

    console.handle_choice("q")
    console._shutdown()

    assert console._manager.state is RecordingState.IDLE
    assert list((tmp_path / "Audio").glob("*.wav"))


def test_console_settings_update_rebuilds_capture_factory(tmp_path, monkeypatch) -> None:
    requests = []
    monkeypatch.setattr(factory_module, "create_capture", lambda request: requests.append(request) or FakeCapture())
    console = _console(tmp_path)

    console._apply_settings(_settings(sample_rate=44_100, channels=2, default_mic_device="USB Mic"))
    console._manager.start()
    console._manager.stop()

    assert console._manager.settings.sample_rate == 44_100
    assert [(r.device, r.sample_rate, r.channels) for r in requests] == [("USB Mic", 44_100, 2)]
