"""Interactive console UI for managing vaultscribe recordings."""

from __future__ import annotations

from collections import deque
from threading import Lock, Thread
from typing import Any, Deque, List, Optional

from ..config import (
    EnvironmentSettingError,
    Settings,
    clear_environment_setting,
    get_settings,
    list_environment_settings,
    update_environment_setting,
)
from ..core.audio.base import CaptureError
from ..core.audio.factory import capture_factory_from_settings
from ..core.audio.sounddevice_backend import list_input_devices
from ..core.notices import Notifier
from ..core.pipeline.orchestrator import RecordingManager, RecordingState
from ..data.vault import FileSystemVault
from ..logging import get_logger
from ..services.factory import (
    ServiceConfigurationError,
    resolve_summary_backend,
    resolve_transcription_backend,
)
from ..utils.transcript import format_timestamp

LOGGER = get_logger(__name__)


class RecordingConsoleUI(Notifier):
    """Simple interactive console used to manage recordings from the terminal.

    Pipelines run on worker threads so a new recording can start while the
    previous transcript is still being produced. Notices raised from those
    threads are queued and printed before the next menu.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        manager: Optional[RecordingManager] = None,
        device: Optional[str] = None,
        transcription_backend_name: Optional[str] = "assemblyai",
        summary_backend_name: Optional[str] = "openai",
    ) -> None:
        self._settings = settings or get_settings()
        self._messages: Deque[str] = deque()
        self._messages_lock = Lock()
        self._pipelines: List[Thread] = []
        self._running = True
        self._device = device
        self._transcription_backend_name = transcription_backend_name
        self._manager = manager or self._build_manager(
            device, transcription_backend_name, summary_backend_name
        )

    def _build_manager(
        self,
        device: Optional[str],
        transcription_backend_name: Optional[str],
        summary_backend_name: Optional[str],
    ) -> RecordingManager:
        return RecordingManager(
            store=FileSystemVault(self._settings.vault_dir),
            notifier=self,
            capture_factory=capture_factory_from_settings(self._settings, device),
            transcription=resolve_transcription_backend(transcription_backend_name, self._settings),
            summary=resolve_summary_backend(summary_backend_name, notifier=self),
            settings=self._settings,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def run(self) -> None:
        """Enter the interactive UI loop."""

        self._info("Launching vaultscribe interactive UI. Press Ctrl+C to exit.")
        try:
            while self._running:
                self._flush_messages()
                self._print_menu()
                try:
                    choice = input("Select option: ").strip().lower()
                except (KeyboardInterrupt, EOFError):
                    print()
                    choice = "q"
                self.handle_choice(choice)
        finally:
            self._shutdown()
            self._flush_messages()
            print("Goodbye!")

    def notify(self, message: str) -> None:
        self._info(message)

    # ------------------------------------------------------------------
    # Menu handlers
    # ------------------------------------------------------------------
    def handle_choice(self, choice: str) -> None:
        if choice in {"1", "start", "s"}:
            self._start_recording()
        elif choice in {"2", "pause", "p"}:
            if not self._manager.pause():
                self._info("No running recording to pause.")
        elif choice in {"3", "resume", "r"}:
            if not self._manager.resume():
                self._info("Recording is not currently paused.")
        elif choice in {"4", "stop", "x"}:
            self._stop_recording()
        elif choice in {"5", "status", "t"}:
            self._show_status()
        elif choice in {"6", "devices", "d"}:
            self._show_devices()
        elif choice in {"7", "env", "config", "e"}:
            self._configure_environment()
        elif choice in {"q", "quit", "exit"}:
            self._running = False
        else:
            self._info("Unknown option. Please choose one of the menu entries.")

    def _start_recording(self) -> None:
        if self._manager.is_recording:
            self._info("Recording already in progress.")
            return
        note = input("Link to note (vault path, blank for none): ").strip()
        self._manager.start(note or None)

    def _stop_recording(self) -> None:
        thread = self._manager.stop_in_background()
        if thread is not None:
            self._pipelines.append(thread)
            self._info("Recording stopped. Transcribing in the background...")

    def _show_status(self) -> None:
        state = self._manager.state
        if state in {RecordingState.RECORDING, RecordingState.PAUSED}:
            label = "Paused" if state is RecordingState.PAUSED else "Recording"
            print(f"{label} {format_timestamp(self._manager.elapsed_ms())}")
        elif state is RecordingState.STOPPING:
            print("Processing the last recording...")
        else:
            print("No active recording.")

    def _show_devices(self) -> None:
        try:
            devices = list_input_devices()
        except CaptureError as exc:
            self._error(str(exc))
            return
        if not devices:
            self._info("No audio input devices found.")
            return
        print()
        for device in devices:
            print(f"{device['index']:>3}  {device.get('name', '?')} ({device.get('max_input_channels')} ch)")

    def _configure_environment(self) -> None:
        print()
        for entry in list_environment_settings(self._settings):
            print(f"{entry.env_name} = {self._format_env_value(entry.field, entry.value)}")
        field = input("Setting to change (blank to cancel): ").strip().lower()
        if not field:
            return
        value = input("New value (blank to clear): ").strip()
        try:
            if value:
                updated = update_environment_setting(field, value)
            else:
                updated = clear_environment_setting(field)
        except EnvironmentSettingError as exc:
            self._error(f"Failed to update {field}: {exc}")
            return
        self._apply_settings(updated)
        self._info(f"Updated {field}.")

    def _apply_settings(self, settings: Settings) -> None:
        self._settings = settings
        self._manager.settings = settings
        self._manager.capture_factory = capture_factory_from_settings(settings, self._device)
        try:
            self._manager.transcription = resolve_transcription_backend(
                self._transcription_backend_name, settings
            )
        except ServiceConfigurationError as exc:  # pragma: no cover - name validated at startup
            self._error(str(exc))

    def _format_env_value(self, field: str, value: Any) -> str:
        if value is None:
            return "<unset>"
        if field.endswith("api_key"):
            return "********"
        return str(value)

    def _shutdown(self) -> None:
        if self._manager.is_recording:
            self._manager.stop()
        for thread in self._pipelines:
            thread.join()
        self._pipelines.clear()

    def _print_menu(self) -> None:
        print()
        state = self._manager.state
        status = "No active recording."
        if state is RecordingState.RECORDING:
            status = f"Recording ({format_timestamp(self._manager.elapsed_ms())})"
        elif state is RecordingState.PAUSED:
            status = f"Paused ({format_timestamp(self._manager.elapsed_ms())})"
        elif state is RecordingState.STOPPING:
            status = "Processing the last recording..."
        print(status)
        print("1) Start recording")
        print("2) Pause recording")
        print("3) Resume recording")
        print("4) Stop recording")
        print("5) Show status")
        print("6) Show audio devices")
        print("7) Configure environment variables")
        print("q) Quit")

    def _info(self, message: str) -> None:
        with self._messages_lock:
            self._messages.append(f"[info] {message}")

    def _error(self, message: str) -> None:
        with self._messages_lock:
            self._messages.append(f"[error] {message}")

    def _flush_messages(self) -> None:
        with self._messages_lock:
            while self._messages:
                print(self._messages.popleft())


__all__ = ["RecordingConsoleUI"]
