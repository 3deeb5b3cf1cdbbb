"""Meeting summary service abstractions."""

from __future__ import annotations

import abc
from typing import Optional

from ...config import Settings


class SummaryServiceFailed(RuntimeError):
    """Raised internally when the completion endpoint fails or returns nothing usable."""


class SummaryService(abc.ABC):
    @abc.abstractmethod
    def summarize(self, transcript: str, has_timestamps: bool, settings: Settings) -> Optional[str]:
        """Return the generated summary, or ``None`` when skipped or failed."""


__all__ = ["SummaryService", "SummaryServiceFailed"]
