"""Scan command - scan a project and write the validation context."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from prodready import console
from prodready.config import DEFAULT_FAIL_ON, DEFAULT_OUT_DIR, SEVERITY_ORDER
from prodready.errors import ScanError
from prodready.scan import ScanOptions, run_scan

EXIT_FATAL = 2


def split_paths(value: str | None) -> list[str]:
    if not value:
        return []
    return [p.strip() for p in value.split(",") if p.strip()]


@dataclass
class Scan:
    """Scan a Next.js + Supabase project for production-readiness gaps."""

    project: Path = field(
        default=Path("."),
        metadata={"help": "Project root to scan"},
    )
    out: Path = field(
        default=Path(DEFAULT_OUT_DIR),
        metadata={"help": "Output directory, relative to the project root"},
    )
    format: str = field(
        default="json,md",
        metadata={"help": "Comma-separated report formats (json, md)"},
    )
    fail_on: str = field(
        default=DEFAULT_FAIL_ON,
        metadata={
            "help": "Exit 1 on unsuppressed findings at or above this "
            "severity (CRITICAL, HIGH, MEDIUM, LOW)"
        },
    )
    baseline: Path | None = field(
        default=None,
        metadata={"help": "Baseline file (default: validation-baseline.json)"},
    )
    exclude: str | None = field(
        default=None,
        metadata={"help": "Comma-separated extra paths to exclude"},
    )
    quiet: bool = field(
        default=False,
        metadata={"help": "Only print the report paths"},
    )

    def options(self) -> ScanOptions:
        return ScanOptions(
            project=self.project,
            out=self.out,
            formats=tuple(self.format.split(",")),
            fail_on=self.fail_on,
            baseline=self.baseline,
            exclude=split_paths(self.exclude),
        )

    def run(self) -> int:
        """Execute the scan command."""
        if self.fail_on.strip().upper() not in SEVERITY_ORDER:
            console.warning(
                f"invalid --fail-on {self.fail_on!r}, "
                f"using {DEFAULT_FAIL_ON}"
            )

        try:
            result = run_scan(self.options())
        except ScanError as e:
            console.error(str(e))
            return EXIT_FATAL

        for path in result.written:
            console.info(f"Wrote {path}")
        if self.quiet:
            return result.exit_code

        context = result.context
        console.header("Production readiness")
        console.key_value("routes", len(context.routes))
        console.key_value("findings", len(context.gaps))
        console.key_value("suppressed", context.suppressed_count or 0)
        console.ship_status(context.ship_checklist_status or "needs-review")
        console.gaps_table(context.gaps)

        blocking = result.blocking
        if blocking:
            console.error(
                f"Found {len(blocking)} finding(s) at or above "
                f"{result.fail_on}"
            )
        return result.exit_code
