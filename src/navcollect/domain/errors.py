"""Error taxonomy for collection runs."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from .model import EntityKey


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid."""


class ChainResolutionError(RuntimeError):
    """Raised when no override chain can be produced for an entity."""

    def __init__(self, message: str, *, key: EntityKey | None = None) -> None:
        self.key = key
        super().__init__(message)


class InvalidChainError(ChainResolutionError, ValueError):
    """Raised when an override chain violates its structural invariants."""


class OutputWriteError(RuntimeError):
    """Raised when the collected overrides cannot be persisted."""

    def __init__(self, path: Path | None, reason: str) -> None:
        self.path = path
        target = str(path) if path is not None else "<output>"
        super().__init__(f"Cannot write {target}: {reason}")


class ConcurrentRunRejectedError(RuntimeError):
    """Raised when a collection run is requested while another is active."""
