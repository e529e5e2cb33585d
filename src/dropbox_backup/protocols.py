"""Protocols for dependency injection in the uploader."""

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class UploadClientProtocol(Protocol):
    """Protocol for upload endpoint clients."""

    def upload(self, local_file: Path, token: str) -> int:
        """Upload one file, return the HTTP status or raise an UploadError."""
        ...


@runtime_checkable
class TokenSourceProtocol(Protocol):
    """Protocol for access token providers."""

    def load_or_create(self) -> str:
        """Return the cached token, bootstrapping one if none is cached."""
        ...

    def refresh(self) -> str:
        """Fetch a new token from the authorization server."""
        ...

    def persist(self, token: str) -> None:
        """Store a token for later runs."""
        ...


@runtime_checkable
class LedgerProtocol(Protocol):
    """Protocol for the record of already uploaded files."""

    def contains(self, file_path: str | Path) -> bool:
        """Return True if the path was recorded before."""
        ...

    def record(self, file_path: str | Path) -> None:
        """Remember a path as uploaded."""
        ...
