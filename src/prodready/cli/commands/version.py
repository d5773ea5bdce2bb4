"""Version command."""

from __future__ import annotations

from dataclasses import dataclass

from prodready import SCANNER_VERSION, console
from prodready.config import VALIDATION_CONTEXT_SCHEMA_VERSION


@dataclass
class Version:
    """Print the scanner and report schema versions."""

    def run(self) -> int:
        console.key_value("scanner", SCANNER_VERSION)
        console.key_value("schema", VALIDATION_CONTEXT_SCHEMA_VERSION)
        return 0
