"""Failures that end a sprite run. All of them are caught in sprite.run_pipeline."""

from pathlib import Path
from typing import Optional


class SpriteError(Exception):
    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path

    def __str__(self):
        message = super().__str__()
        if self.path is None:
            return message
        return f"{self.path}: {message}"


class DirectoryUnavailable(SpriteError):
    pass


class CompileError(SpriteError):
    pass


class TemplateUnreadable(SpriteError):
    pass


class MarkerError(SpriteError):
    pass


class MarkerNotFound(MarkerError):
    pass


class DuplicateMarker(MarkerError):
    pass


class WriteFailure(SpriteError):
    pass


class ConcurrentModification(WriteFailure):
    """The template changed on disk between reading it and writing the result."""
