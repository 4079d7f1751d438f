"""Exceptions raised by PAI plugin glue.

Only manifest reads surface errors to callers; event delivery and model
configuration degrade silently to defaults.
"""

from __future__ import annotations

from pathlib import Path


class PaiError(Exception):
    """Base class for all PAI glue errors."""


class ManifestError(PaiError):
    """Raised when a migration manifest cannot be loaded."""


class ManifestNotFoundError(ManifestError):
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"Manifest not found at {self.path}")


class ManifestParseError(ManifestError):
    def __init__(self, path: str | Path, cause: Exception) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to parse manifest: {cause}")
