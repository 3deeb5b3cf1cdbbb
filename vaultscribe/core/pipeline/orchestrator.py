"""Recording orchestrator coordinating capture, transcription and note creation."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from threading import Lock, Thread
from typing import Callable, Optional, Tuple

from ...config import Settings, get_settings
from ...data.models import AudioArtifact, RecordingSession, TranscriptionResult
from ...data.vault import DocumentStore, StorageError, normalize_path
from ...logging import get_logger
from ...services.summary.base import SummaryService
from ...services.transcription.base import MissingCredential, TranscriptionError, TranscriptionService
from ...utils.transcript import format_transcript
from ..audio.base import AudioCapture, CaptureError
from ..notices import Notifier
from .notes import (
    SUMMARY_HEADING,
    append_backlink,
    append_summary_section,
    audio_file_name,
    build_transcript_note,
    ensure_folder,
    transcript_file_name,
    unique_path,
)

LOGGER = get_logger(__name__)

CaptureFactory = Callable[[], AudioCapture]


class RecordingState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    PAUSED = "paused"
    STOPPING = "stopping"


@dataclass
class RecordingOutcome:
    session: RecordingSession
    audio_path: Optional[str] = None
    transcript: Optional[str] = None
    transcript_path: Optional[str] = None
    linked_document: Optional[str] = None
    summary: Optional[str] = None


class SessionSlot:
    """Holds the one active recording for a manager.

    Each ``RecordingManager`` owns a slot unless one is passed in, so several
    managers can coexist in one process.
    """

    def __init__(self) -> None:
        self.lock = Lock()
        self.session: Optional[RecordingSession] = None
        self.capture: Optional[AudioCapture] = None

    @property
    def occupied(self) -> bool:
        return self.session is not None

    def take(self) -> Optional[Tuple[RecordingSession, AudioCapture]]:
        """Empty the slot and return what it held. Caller must hold ``lock``."""

        if self.session is None or self.capture is None:
            return None
        taken = (self.session, self.capture)
        self.session = None
        self.capture = None
        return taken


class RecordingManager:
    """State machine for start/pause/resume/stop and the post-recording pipeline."""

    def __init__(
        self,
        store: DocumentStore,
        notifier: Notifier,
        capture_factory: CaptureFactory,
        transcription: Optional[TranscriptionService] = None,
        summary: Optional[SummaryService] = None,
        settings: Optional[Settings] = None,
        slot: Optional[SessionSlot] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.capture_factory = capture_factory
        self.transcription = transcription
        self.summary = summary
        self._settings = settings
        self.slot = slot or SessionSlot()
        self.clock = clock
        self._draining = 0
        self._draining_lock = Lock()

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    @settings.setter
    def settings(self, settings: Optional[Settings]) -> None:
        self._settings = settings

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    @property
    def state(self) -> RecordingState:
        session = self.slot.session
        if session is not None:
            return RecordingState.PAUSED if session.is_paused else RecordingState.RECORDING
        if self._draining:
            return RecordingState.STOPPING
        return RecordingState.IDLE

    @property
    def is_recording(self) -> bool:
        return self.slot.occupied

    @property
    def is_paused(self) -> bool:
        session = self.slot.session
        return bool(session and session.is_paused)

    def elapsed_ms(self) -> float:
        session = self.slot.session
        if session is None:
            return 0.0
        return session.elapsed_ms(self.clock())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self, associated_document: Optional[str] = None) -> bool:
        with self.slot.lock:
            if self.slot.occupied:
                self.notifier.notify("Recording already in progress.")
                return False

            capture: Optional[AudioCapture] = None
            try:
                capture = self.capture_factory()
                capture.start()
            except CaptureError as exc:
                LOGGER.exception("Failed to start recording: %s", exc)
                self.notifier.notify("Unable to access microphone. Please check permissions.")
                if capture is not None and capture.is_recording:
                    capture.stop()
                return False

            document = normalize_path(associated_document) if associated_document else None
            self.slot.session = RecordingSession(started_at=self.clock(), associated_document=document)
            self.slot.capture = capture

        LOGGER.info("Recording started (associated document: %s)", document)
        self.notifier.notify("Recording started. Run the stop command to finish.")
        return True

    def pause(self) -> bool:
        with self.slot.lock:
            session, capture = self.slot.session, self.slot.capture
            if session is None or capture is None or session.is_paused:
                return False
            try:
                capture.pause()
            except Exception:  # pragma: no cover - depends on the audio backend
                LOGGER.exception("Failed to pause recording")
                return False
            session.mark_paused(self.clock())
        LOGGER.info("Recording paused")
        return True

    def resume(self) -> bool:
        with self.slot.lock:
            session, capture = self.slot.session, self.slot.capture
            if session is None or capture is None or not session.is_paused:
                return False
            try:
                capture.resume()
            except Exception:  # pragma: no cover - depends on the audio backend
                LOGGER.exception("Failed to resume recording")
                return False
            session.mark_resumed(self.clock())
        LOGGER.info("Recording resumed")
        return True

    def stop(self) -> Optional[RecordingOutcome]:
        """Stop the active recording and run the pipeline on the calling thread."""

        taken = self._release()
        if taken is None:
            return None
        return self._run_pipeline(*taken)

    def stop_in_background(self) -> Optional[Thread]:
        """Stop the active recording and run the pipeline on a worker thread."""

        taken = self._release()
        if taken is None:
            return None
        thread = Thread(target=self._run_pipeline, args=taken, name="vaultscribe-pipeline", daemon=True)
        thread.start()
        return thread

    def _release(self) -> Optional[Tuple[RecordingSession, AudioCapture]]:
        with self.slot.lock:
            taken = self.slot.take()
            if taken is not None:
                with self._draining_lock:
                    self._draining += 1
        if taken is None:
            self.notifier.notify("No recording is currently running.")
        return taken

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------
    def _run_pipeline(self, session: RecordingSession, capture: AudioCapture) -> RecordingOutcome:
        outcome = RecordingOutcome(session=session)
        try:
            self._process(session, capture, outcome)
        except Exception as exc:  # pragma: no cover - last resort so the host never sees a crash
            LOGGER.exception("Recording pipeline failed unexpectedly: %s", exc)
            self.notifier.notify(f"Recording pipeline failed: {exc}")
        finally:
            with self._draining_lock:
                self._draining -= 1
        return outcome

    def _process(self, session: RecordingSession, capture: AudioCapture, outcome: RecordingOutcome) -> None:
        settings = self.settings

        artifact = self._finalize_capture(capture)
        outcome.audio_path = self._save_audio(artifact, session, settings)

        result = self._transcribe(artifact, settings)
        if result is None:
            self.notifier.notify("Transcription failed or skipped. Audio saved if possible.")
            return

        outcome.transcript = format_transcript(result)
        outcome.transcript_path = self._create_transcript_note(
            outcome.transcript, session, outcome.audio_path, settings
        )
        if outcome.transcript_path is None:
            return

        if session.associated_document and self._link_from_parent(
            session.associated_document, outcome.transcript_path
        ):
            outcome.linked_document = session.associated_document

        outcome.summary = self._append_summary(
            outcome.transcript_path, outcome.transcript, result, settings
        )
        self.notifier.notify("Recording complete. Transcription note created.")

    def _finalize_capture(self, capture: AudioCapture) -> AudioArtifact:
        try:
            artifact = capture.stop()
        except Exception as exc:  # pragma: no cover - depends on the audio backend
            LOGGER.exception("Failed to finalize audio capture: %s", exc)
            return AudioArtifact(data=b"")
        LOGGER.info("Captured %s bytes of %s", artifact.size, artifact.mime_type)
        return artifact

    def _save_audio(
        self, artifact: AudioArtifact, session: RecordingSession, settings: Settings
    ) -> Optional[str]:
        try:
            folder = ensure_folder(self.store, settings.audio_folder_path or "Audio")
            name = audio_file_name(session.started_datetime, artifact.extension)
            path = unique_path(self.store, f"{folder}/{name}")
            saved = self.store.create_binary(path, artifact.data)
        except (StorageError, OSError) as exc:
            LOGGER.exception("Failed to save audio: %s", exc)
            self.notifier.notify("Could not save audio file; continuing with transcription.")
            return None
        LOGGER.info("Saved audio to %s", saved)
        return saved

    def _transcribe(self, artifact: AudioArtifact, settings: Settings) -> Optional[TranscriptionResult]:
        if self.transcription is None:
            LOGGER.info("No transcription backend configured; skipping transcription")
            return None
        try:
            return self.transcription.transcribe(
                artifact,
                settings.assemblyai_api_key,
                settings.transcription_language,
                settings.transcription_accuracy,
            )
        except MissingCredential:
            LOGGER.warning("AssemblyAI API key missing; skipping transcription")
            self.notifier.notify("AssemblyAI API key missing; skipping transcription.")
        except TranscriptionError as exc:
            LOGGER.exception("Transcription failed: %s", exc)
            self.notifier.notify(f"Transcription failed: {exc}")
        return None

    def _create_transcript_note(
        self,
        transcript: str,
        session: RecordingSession,
        audio_path: Optional[str],
        settings: Settings,
    ) -> Optional[str]:
        try:
            folder = ensure_folder(self.store, settings.transcript_folder_path or "Transcriptions")
            name = transcript_file_name(session.associated_document, session.started_datetime)
            path = unique_path(self.store, f"{folder}/{name}")
            content = build_transcript_note(transcript, session.associated_document, audio_path, session.started_at)
            created = self.store.create(path, content)
        except (StorageError, OSError) as exc:
            LOGGER.exception("Failed to create transcript note: %s", exc)
            self.notifier.notify(f"Could not create transcript note: {exc}")
            return None
        LOGGER.info("Created transcript note %s", created)
        return created

    def _link_from_parent(self, parent: str, note_path: str) -> bool:
        try:
            content = self.store.read(parent)
            updated = append_backlink(content, note_path)
            if updated != content:
                self.store.modify(parent, updated)
        except (StorageError, OSError) as exc:
            LOGGER.exception("Failed to link transcript from %s: %s", parent, exc)
            self.notifier.notify(f"Could not add a transcript link to {parent}.")
            return False
        return True

    def _append_summary(
        self,
        note_path: str,
        transcript: str,
        result: TranscriptionResult,
        settings: Settings,
    ) -> Optional[str]:
        if self.summary is None:
            return None
        try:
            if SUMMARY_HEADING in self.store.read(note_path):
                return None
            summary = self.summary.summarize(transcript, result.has_utterances, settings)
            if not summary:
                return None
            content = self.store.read(note_path)
            updated = append_summary_section(content, summary)
            if updated == content:
                return None
            self.store.modify(note_path, updated)
        except (StorageError, OSError) as exc:
            LOGGER.exception("Failed to append meeting summary to %s: %s", note_path, exc)
            self.notifier.notify("Could not add the AI meeting summary to the transcript note.")
            return None
        return summary


__all__ = [
    "CaptureFactory",
    "RecordingManager",
    "RecordingOutcome",
    "RecordingState",
    "SessionSlot",
]
