"""Transient user-visible notices."""

from __future__ import annotations

import abc

from ..logging import get_logger

LOGGER = get_logger(__name__)


class Notifier(abc.ABC):
    """Show a short message to the user without blocking the caller."""

    @abc.abstractmethod
    def notify(self, message: str) -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    def notify(self, message: str) -> None:
        LOGGER.info("Notice: %s", message)


__all__ = ["LoggingNotifier", "Notifier"]
