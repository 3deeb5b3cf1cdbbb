"""Meeting summaries from an OpenAI-compatible chat completions endpoint."""

from __future__ import annotations

from typing import Any, Callable, Optional

from ...config import Settings
from ...core.notices import Notifier
from ...logging import get_logger
from .base import SummaryService, SummaryServiceFailed

LOGGER = get_logger(__name__)

SUMMARY_TEMPERATURE = 0.3

SYSTEM_PROMPT = """You are an assistant that writes meeting notes from a transcript.
Respond in Markdown with these sections:
1. A brief summary of the meeting in two or three sentences.
2. Key outcomes and decisions.
3. Detailed notes organized by topic.
4. When the transcript includes timestamps, a list of topics with the timestamp where each one starts.
5. Action items. Include the owner and the due date whenever the transcript mentions them.
Do not invent facts that are not in the transcript."""

TIMESTAMP_NOTE = "Timestamps in the transcript use the [HH:MM:SS] format."


class OpenAISummaryService(SummaryService):
    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        client_factory: Optional[Callable[..., Any]] = None,
    ) -> None:
        try:
            from openai import OpenAI, OpenAIError  # type: ignore
        except ImportError as exc:  # pragma: no cover - runtime dependency guard
            raise RuntimeError("openai package is required for OpenAISummaryService") from exc
        self.notifier = notifier
        self._client_factory = client_factory or OpenAI
        self._openai_error_cls = OpenAIError

    def summarize(self, transcript: str, has_timestamps: bool, settings: Settings) -> Optional[str]:
        if not settings.auto_summarize:
            LOGGER.debug("Auto-summarize disabled; skipping meeting summary")
            return None
        if not settings.summary_api_key:
            LOGGER.info("Summary API key not configured; skipping meeting summary")
            return None

        try:
            return self._request_summary(transcript, has_timestamps, settings)
        except (self._openai_error_cls, SummaryServiceFailed) as exc:
            LOGGER.exception("Meeting summary generation failed: %s", exc)
            if self.notifier is not None:
                self.notifier.notify("Could not generate the AI meeting summary; the transcript was saved without it.")
            return None

    def _request_summary(self, transcript: str, has_timestamps: bool, settings: Settings) -> str:
        user_content = f"{TIMESTAMP_NOTE}\n\n{transcript}" if has_timestamps else transcript
        client = self._client_factory(api_key=settings.summary_api_key, base_url=settings.summary_base_url)

        LOGGER.info("Requesting meeting summary from %s using %s", settings.summary_base_url, settings.summary_model)
        response = client.chat.completions.create(
            model=settings.summary_model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_content},
            ],
            temperature=SUMMARY_TEMPERATURE,
        )

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as exc:
            raise SummaryServiceFailed("Summary response did not contain a completion") from exc
        summary = (content or "").strip()
        if not summary:
            raise SummaryServiceFailed("Summary response was empty")
        return summary


__all__ = ["OpenAISummaryService", "SYSTEM_PROMPT", "TIMESTAMP_NOTE"]
