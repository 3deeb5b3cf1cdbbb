"""Typer CLI entry point for vaultscribe."""

from __future__ import annotations

import time
from typing import Optional

import typer

from .config import (
    EnvironmentSettingError,
    clear_environment_setting,
    get_settings,
    list_environment_settings,
    update_environment_setting,
)
from .core.audio.base import CaptureError
from .core.audio.factory import capture_factory_from_settings
from .core.audio.sounddevice_backend import list_input_devices
from .core.notices import Notifier
from .core.pipeline.orchestrator import RecordingManager
from .data.vault import FileSystemVault
from .logging import configure_logging, get_logger
from .services.factory import (
    ServiceConfigurationError,
    resolve_summary_backend,
    resolve_transcription_backend,
)
from .utils.transcript import format_timestamp

app = typer.Typer(help="vaultscribe meeting recorder")
env_app = typer.Typer(help="Manage VAULTSCRIBE_* environment overrides")
app.add_typer(env_app, name="env")
LOGGER = get_logger(__name__)

STATUS_REFRESH_SECONDS = 0.5


class EchoNotifier(Notifier):
    def notify(self, message: str) -> None:
        typer.echo(f"\n{message}")


def _build_manager(
    device: Optional[str],
    transcription_backend: str,
    summary_backend: str,
) -> RecordingManager:
    settings = get_settings()
    notifier = EchoNotifier()
    try:
        transcription = resolve_transcription_backend(transcription_backend, settings)
        summary = resolve_summary_backend(summary_backend, notifier=notifier)
    except ServiceConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return RecordingManager(
        store=FileSystemVault(settings.vault_dir),
        notifier=notifier,
        capture_factory=capture_factory_from_settings(settings, device),
        transcription=transcription,
        summary=summary,
        settings=settings,
    )


@app.command()
def devices() -> None:
    """List available audio input devices."""

    configure_logging()
    try:
        entries = list_input_devices()
    except CaptureError as exc:
        raise typer.BadParameter(str(exc)) from exc
    for entry in entries:
        typer.echo(f"{entry['index']:>3}  {entry.get('name', '?')} ({entry.get('max_input_channels')} ch)")


@app.command()
def record(
    note: Optional[str] = typer.Option(None, help="Vault path of the note to link the transcript from"),
    device: Optional[str] = typer.Option(None, help="Input device id/name; defaults to the configured microphone"),
    duration: Optional[float] = typer.Option(None, help="Duration in seconds; default waits for Ctrl+C"),
    transcription_backend: str = typer.Option("assemblyai", help="Transcription backend: none/dummy/assemblyai"),
    summary_backend: str = typer.Option("openai", help="Summary backend: none/dummy/openai"),
) -> None:
    """Record a meeting, then transcribe it into a note."""

    configure_logging()
    manager = _build_manager(device, transcription_backend, summary_backend)
    if not manager.start(note):
        raise typer.Exit(code=1)

    try:
        while duration is None or manager.elapsed_ms() < duration * 1000:
            typer.echo(f"\rRecording {format_timestamp(manager.elapsed_ms())}", nl=False)
            time.sleep(STATUS_REFRESH_SECONDS)
    except KeyboardInterrupt:
        LOGGER.info("Recording interrupted by user; finishing up")
    typer.echo("")

    outcome = manager.stop()
    if outcome is None:
        raise typer.Exit(code=1)
    if outcome.audio_path:
        typer.echo(f"Audio saved at {outcome.audio_path}")
    if outcome.transcript_path:
        typer.echo(f"Transcript saved at {outcome.transcript_path}")


@app.command()
def ui(
    device: Optional[str] = typer.Option(None, help="Input device id/name; defaults to the configured microphone"),
    transcription_backend: str = typer.Option("assemblyai", help="Transcription backend: none/dummy/assemblyai"),
    summary_backend: str = typer.Option("openai", help="Summary backend: none/dummy/openai"),
) -> None:
    """Launch the interactive console."""

    from .ui.console import RecordingConsoleUI

    configure_logging()
    try:
        console = RecordingConsoleUI(
            settings=get_settings(),
            device=device,
            transcription_backend_name=transcription_backend,
            summary_backend_name=summary_backend,
        )
    except ServiceConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    console.run()


@env_app.command("list")
def env_list() -> None:
    """Show every setting and its current value."""

    for entry in list_environment_settings():
        value = entry.value
        if value is not None and entry.field.endswith("api_key"):
            value = "********"
        typer.echo(f"{entry.env_name}={'' if value is None else value}")


@env_app.command("set")
def env_set(field: str, value: str) -> None:
    """Persist an override in the .env file."""

    try:
        update_environment_setting(field.lower(), value)
    except EnvironmentSettingError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"Updated {field.lower()}")


@env_app.command("clear")
def env_clear(field: str) -> None:
    """Remove an override from the .env file."""

    try:
        clear_environment_setting(field.lower())
    except EnvironmentSettingError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"Cleared {field.lower()}")


if __name__ == "__main__":  # pragma: no cover
    app()
