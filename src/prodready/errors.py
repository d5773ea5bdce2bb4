"""Exception hierarchy for the scanner.

Only fatal conditions raise; per-file and per-rule problems are logged and
skipped where they happen.
"""

from __future__ import annotations


class ProdreadyError(Exception):
    """Base class for scanner errors."""


class ScanError(ProdreadyError):
    """A scan could not complete."""


class ProjectRootError(ScanError):
    """The project root is missing or not a directory."""

    def __init__(self, root: object, reason: str = "not a directory"):
        self.root = root
        super().__init__(f"cannot scan project root {root}: {reason}")


class ReportWriteError(ScanError):
    """A report file could not be written."""

    def __init__(self, path: object, cause: Exception):
        self.path = path
        super().__init__(f"failed to write report {path}: {cause}")
