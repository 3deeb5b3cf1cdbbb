from __future__ import annotations

from types import SimpleNamespace

import openai
import pytest

from vaultscribe.config import Settings
from vaultscribe.core.notices import Notifier
from vaultscribe.services.summary.openai_summary import (
    SYSTEM_PROMPT,
    TIMESTAMP_NOTE,
    OpenAISummaryService,
)


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.messages: list[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)


def _settings(**overrides) -> Settings:
    values = {"summary_api_key": "sk-test", "auto_summarize": True}
    values.update(overrides)
    return Settings(**values)


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeClientFactory:
    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.client_kwargs: list[dict] = []
        self.requests: list[dict] = []

    def __call__(self, **kwargs):
        self.client_kwargs.append(kwargs)

        def create(**request):
            self.requests.append(request)
            if self.error is not None:
                raise self.error
            return self.response

        return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def test_summary_skipped_when_disabled() -> None:
    factory = FakeClientFactory(_completion("unused"))
    service = OpenAISummaryService(client_factory=factory)

    assert service.summarize("text", False, _settings(auto_summarize=False)) is None
    assert factory.client_kwargs == []


def test_summary_skipped_without_api_key() -> None:
    factory = FakeClientFactory(_completion("unused"))
    notifier = RecordingNotifier()
    service = OpenAISummaryService(notifier=notifier, client_factory=factory)

    assert service.summarize("text", False, _settings(summary_api_key=None)) is None
    assert factory.client_kwargs == []
    assert notifier.messages == []


def test_summary_request_shape_with_timestamps() -> None:
    factory = FakeClientFactory(_completion("  ## Summary\nAll good.  \n"))
    service = OpenAISummaryService(client_factory=factory)
    settings = _settings(summary_model="my-model", summary_base_url="https://llm.example.test/v1")

    summary = service.summarize("[00:00:01] **Speaker 1:** Hi", True, settings)

    assert summary == "## Summary\nAll good."
    assert factory.client_kwargs == [{"api_key": "sk-test", "base_url": "https://llm.example.test/v1"}]
    request = factory.requests[0]
    assert request["model"] == "my-model"
    assert isinstance(request["temperature"], float)
    assert request["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert request["messages"][1]["role"] == "user"
    assert request["messages"][1]["content"].startswith(TIMESTAMP_NOTE)
    assert request["messages"][1]["content"].endswith("[00:00:01] **Speaker 1:** Hi")


def test_summary_without_timestamps_sends_plain_transcript() -> None:
    factory = FakeClientFactory(_completion("ok"))
    service = OpenAISummaryService(client_factory=factory)

    service.summarize("plain words", False, _settings())

    assert factory.requests[0]["messages"][1]["content"] == "plain words"


@pytest.mark.parametrize("content", ["", "   ", None])
def test_empty_completion_is_treated_as_failure(content) -> None:
    notifier = RecordingNotifier()
    service = OpenAISummaryService(notifier=notifier, client_factory=FakeClientFactory(_completion(content)))

    assert service.summarize("text", False, _settings()) is None
    assert len(notifier.messages) == 1


def test_missing_choices_is_treated_as_failure() -> None:
    service = OpenAISummaryService(client_factory=FakeClientFactory(SimpleNamespace(choices=[])))

    assert service.summarize("text", False, _settings()) is None


def test_service_error_returns_none_and_notifies() -> None:
    notifier = RecordingNotifier()
    factory = FakeClientFactory(error=openai.OpenAIError("rate limited"))
    service = OpenAISummaryService(notifier=notifier, client_factory=factory)

    assert service.summarize("text", True, _settings()) is None
    assert notifier.messages and "summary" in notifier.messages[0].lower()
