"""Document store backed by a vault directory on disk."""

from __future__ import annotations

import abc
import re
from pathlib import Path
from typing import Union

from ..logging import get_logger

LOGGER = get_logger(__name__)


class StorageError(RuntimeError):
    """Base class for vault access failures."""


class StorageWriteFailed(StorageError):
    """Raised when a file or folder cannot be written to the vault."""


class StorageReadFailed(StorageError):
    """Raised when a note is missing or cannot be decoded."""


_SLASHES = re.compile(r"/+")


def normalize_path(path: str) -> str:
    """Return ``path`` with forward slashes and no leading/trailing separators."""

    normalized = path.replace("\\", "/").replace("\u00a0", " ")
    normalized = _SLASHES.sub("/", normalized).strip("/")
    return normalized or "/"


class DocumentStore(abc.ABC):
    """Capabilities the recording pipeline needs from the host note store.

    Paths are vault-relative strings using ``/`` separators.
    """

    @abc.abstractmethod
    def exists(self, path: str) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def read(self, path: str) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    def create(self, path: str, content: str) -> str:
        """Create a new text file and return its normalized path."""

    @abc.abstractmethod
    def modify(self, path: str, content: str) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def create_binary(self, path: str, data: bytes) -> str:
        """Create a new binary file and return its normalized path."""

    @abc.abstractmethod
    def create_folder(self, path: str) -> None:
        raise NotImplementedError


class FileSystemVault(DocumentStore):
    """Treat a directory as a vault of Markdown notes and attachments."""

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        return self.root / normalize_path(path)

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def read(self, path: str) -> str:
        normalized = normalize_path(path)
        try:
            return self._resolve(normalized).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageReadFailed(f"Failed to read {normalized}: {exc}") from exc

    def create(self, path: str, content: str) -> str:
        normalized = normalize_path(path)
        target = self._resolve(normalized)
        if target.exists():
            raise StorageWriteFailed(f"File already exists: {normalized}")
        try:
            target.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise StorageWriteFailed(f"Failed to create {normalized}: {exc}") from exc
        LOGGER.debug("Created note %s", normalized)
        return normalized

    def modify(self, path: str, content: str) -> None:
        normalized = normalize_path(path)
        target = self._resolve(normalized)
        if not target.is_file():
            raise StorageWriteFailed(f"File does not exist: {normalized}")
        try:
            target.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise StorageWriteFailed(f"Failed to modify {normalized}: {exc}") from exc

    def create_binary(self, path: str, data: bytes) -> str:
        normalized = normalize_path(path)
        target = self._resolve(normalized)
        if target.exists():
            raise StorageWriteFailed(f"File already exists: {normalized}")
        try:
            target.write_bytes(data)
        except OSError as exc:
            raise StorageWriteFailed(f"Failed to write {normalized}: {exc}") from exc
        LOGGER.debug("Wrote %s bytes to %s", len(data), normalized)
        return normalized

    def create_folder(self, path: str) -> None:
        normalized = normalize_path(path)
        try:
            self._resolve(normalized).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageWriteFailed(f"Failed to create folder {normalized}: {exc}") from exc


__all__ = [
    "DocumentStore",
    "FileSystemVault",
    "StorageError",
    "StorageReadFailed",
    "StorageWriteFailed",
    "normalize_path",
]
