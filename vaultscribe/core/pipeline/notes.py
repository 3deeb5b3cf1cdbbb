"""Helpers for naming, building and updating transcript notes in the vault."""

from __future__ import annotations

import posixpath
import re
from datetime import datetime, timezone
from typing import Optional

from ...data.vault import DocumentStore, normalize_path

SUMMARY_HEADING = "## AI Meeting Summary"
RECORDING_HEADING = "### Recording"
_RECORDING_SECTION = re.compile(r"###\s+Recording")
_UNSAFE_CHARACTERS = re.compile(r'[\\/:"*?<>|]+')


def format_date_for_filename(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d_%H-%M-%S")


def format_readable_date(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d %H.%M")


def format_iso_timestamp(started_at: float) -> str:
    moment = datetime.fromtimestamp(started_at, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sanitize_file_name(name: str) -> str:
    return _UNSAFE_CHARACTERS.sub("", name).strip()


def basename(path: str) -> str:
    return normalize_path(path).split("/")[-1]


def note_title(path: str) -> str:
    """Return the link target for a note: its file name without ``.md``."""

    name = basename(path)
    return name[:-3] if name.lower().endswith(".md") else name


def audio_file_name(started: datetime, extension: str) -> str:
    return f"{format_date_for_filename(started)}_meeting-audio.{extension}"


def transcript_file_name(parent_document: Optional[str], started: datetime) -> str:
    parent_name = note_title(parent_document) if parent_document else "Meeting"
    return sanitize_file_name(f"{parent_name} - Meeting Transcript {format_readable_date(started)}.md")


def unique_path(store: DocumentStore, initial_path: str) -> str:
    """Return ``initial_path`` or the first free ``name-N.ext`` variant of it."""

    initial_path = normalize_path(initial_path)
    root, ext = posixpath.splitext(initial_path)
    candidate = initial_path
    counter = 1
    while store.exists(candidate):
        candidate = f"{root}-{counter}{ext}"
        counter += 1
    return candidate


def ensure_folder(store: DocumentStore, folder: str) -> str:
    normalized = normalize_path(folder)
    if not store.exists(normalized):
        store.create_folder(normalized)
    return normalized


def build_frontmatter(
    parent_document: Optional[str],
    audio_path: Optional[str],
    started_at: float,
) -> str:
    lines = ["---", "type: meeting-transcript"]
    if parent_document:
        lines.append(f"source_note: [[{note_title(parent_document)}]]")
    if audio_path:
        lines.append(f"audio_file: [[{basename(audio_path)}]]")
    lines.append(f"created: {format_iso_timestamp(started_at)}")
    lines.append("---")
    return "\n".join(lines)


def build_transcript_note(
    transcript: str,
    parent_document: Optional[str],
    audio_path: Optional[str],
    started_at: float,
) -> str:
    frontmatter = build_frontmatter(parent_document, audio_path, started_at)
    audio_link = f"**Audio:** [[{basename(audio_path)}]]\n\n" if audio_path else ""
    return f"{frontmatter}\n{audio_link}## Transcript\n\n{transcript}"


def append_backlink(content: str, note_path: str) -> str:
    """Add a link to ``note_path`` under the Recording section unless already present."""

    link = f"[[{note_title(note_path)}]]"
    if link in content:
        return content
    if _RECORDING_SECTION.search(content):
        updated = content + "\n"
    else:
        updated = content + f"\n\n{RECORDING_HEADING}\n\n"
    return updated + f"- {link}\n"


def append_summary_section(content: str, summary: str) -> str:
    if SUMMARY_HEADING in content:
        return content
    return f"{content}\n\n{SUMMARY_HEADING}\n\n{summary}\n"


__all__ = [
    "SUMMARY_HEADING",
    "append_backlink",
    "append_summary_section",
    "audio_file_name",
    "basename",
    "build_frontmatter",
    "build_transcript_note",
    "ensure_folder",
    "format_date_for_filename",
    "format_iso_timestamp",
    "format_readable_date",
    "note_title",
    "sanitize_file_name",
    "transcript_file_name",
    "unique_path",
]
