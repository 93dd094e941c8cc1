from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union


class ShowPackageError(Exception):
    """Base class for every failure that ends a show-package run."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.message = message
        self.path = str(path) if path is not None else None

    def __str__(self) -> str:
        return self.message


class UsageError(ShowPackageError):
    pass


class TemplateError(ShowPackageError):
    def __init__(self, message: str, path=None, missing: Optional[List[str]] = None):
        super().__init__(message, path)
        self.missing = list(missing or [])


class PathError(ShowPackageError):
    pass


class StagingIOError(ShowPackageError, OSError):
    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message, path)
        self.errno = None
        self.strerror = message
        self.filename = self.path


class InteractiveInputError(ShowPackageError):
    pass
