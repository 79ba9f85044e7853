"""Exceptions raised while assembling a theme bundle."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class BundleError(RuntimeError):
    """Base class for every terminal bundling failure."""


class ThemeValidationError(BundleError):
    """Raised when the pre-flight theme structure check fails."""

    def __init__(self, message: str, *, errors: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.errors = list(errors)


class ProducerTaskError(BundleError):
    """Raised when one of the concurrent producer tasks fails."""

    def __init__(self, task: str, cause: BaseException) -> None:
        super().__init__(f"Task '{task}' failed: {cause}")
        self.task = task
        self.cause = cause


class ObjectReferenceError(BundleError):
    """Raised when parsed templates reference missing partials or omit required objects."""

    def __init__(self, message: str, *, problems: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.problems = list(problems)


class CycleDetectedError(BundleError):
    """Raised when template partials include each other in a loop."""

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = list(cycle)
        loop = " -> ".join([*self.cycle, self.cycle[0]]) if self.cycle else ""
        super().__init__(f"Circular partial inclusion detected: {loop}")


class SizeLimitError(BundleError):
    """Raised after the archive is written when it breaks a size limit.

    The archive is left on disk; ``archive_path`` points at it.
    """

    def __init__(
        self,
        message: str,
        *,
        archive_path: Path,
        offending_templates: Sequence[str] = (),
        total_bytes: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.archive_path = archive_path
        self.offending_templates = list(offending_templates)
        self.total_bytes = total_bytes


class BundleIOError(BundleError):
    """Raised when the filesystem fails while enumerating sources or writing the archive."""


__all__ = [
    "BundleError",
    "BundleIOError",
    "CycleDetectedError",
    "ObjectReferenceError",
    "ProducerTaskError",
    "SizeLimitError",
    "ThemeValidationError",
]
