"""Baseline command - accept the current findings as known."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from prodready import console
from prodready.baseline import (
    baseline_from_findings,
    baseline_path,
    write_baseline,
)
from prodready.cli.commands.scan import EXIT_FATAL, split_paths
from prodready.errors import ScanError
from prodready.scan import analyze


@dataclass
class Baseline:
    """Write a baseline that suppresses every current finding."""

    project: Path = field(
        default=Path("."),
        metadata={"help": "Project root to scan"},
    )
    output: Path | None = field(
        default=None,
        metadata={
            "help": "Baseline file to write (default: "
            "validation-baseline.json in the project root)"
        },
    )
    exclude: str | None = field(
        default=None,
        metadata={"help": "Comma-separated extra paths to exclude"},
    )

    def run(self) -> int:
        """Execute the baseline command."""
        root = self.project.resolve()
        try:
            _, findings = analyze(root, split_paths(self.exclude))
            path = write_baseline(
                baseline_from_findings(findings),
                baseline_path(root, self.output),
            )
        except ScanError as e:
            console.error(str(e))
            return EXIT_FATAL

        console.success(f"baselined {len(findings)} finding(s)")
        console.info(f"Wrote {path}")
        return 0
