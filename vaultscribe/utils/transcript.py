"""Rendering of transcription results as Markdown."""

from __future__ import annotations

from typing import Dict, List

from ..data.models import TranscriptionResult


def format_timestamp(ms: float) -> str:
    """Render a millisecond offset as ``HH:MM:SS``, truncated to whole seconds."""

    total_seconds = int(max(0.0, ms) // 1000)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_transcript(result: TranscriptionResult) -> str:
    """Return the speaker-labelled transcript, or the plain text when there are no utterances.

    Speakers are numbered from 1 in order of first appearance. Utterances
    without text are skipped entirely.
    """

    if not result.utterances:
        return result.text or ""

    speakers: Dict[str, int] = {}
    lines: List[str] = []
    for utterance in result.utterances:
        text = (utterance.text or "").strip()
        if not text:
            continue

        parts: List[str] = []
        if utterance.start is not None:
            parts.append(f"[{format_timestamp(utterance.start)}]")
        if utterance.speaker:
            if utterance.speaker not in speakers:
                speakers[utterance.speaker] = len(speakers) + 1
            parts.append(f"**Speaker {speakers[utterance.speaker]}:**")
        parts.append(text)
        lines.append(" ".join(parts))

    return "\n".join(lines)


__all__ = ["format_timestamp", "format_transcript"]
