"""Dummy summary generator for offline usage."""

from __future__ import annotations

from typing import Optional

from ...config import Settings
from .base import SummaryService


class DummySummaryService(SummaryService):
    def summarize(self, transcript: str, has_timestamps: bool, settings: Settings) -> Optional[str]:
        if not settings.auto_summarize or not transcript.strip():
            return None
        excerpt = transcript[:280] + ("..." if len(transcript) > 280 else "")
        return f"### Summary\n\n{excerpt}"


__all__ = ["DummySummaryService"]
