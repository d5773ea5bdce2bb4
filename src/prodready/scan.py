"""Scan pipeline: index -> parse -> extract -> rules -> baseline -> report.

Every run builds a fresh project and graph. Only fatal conditions escape
`run_scan`, and they escape as ScanError after a best-effort partial
report carrying the error has been written.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from prodready.baseline import apply_baseline, baseline_path, load_baseline
from prodready.config import (
    DEFAULT_FAIL_ON,
    DEFAULT_FORMATS,
    DEFAULT_OUT_DIR,
    JSON_REPORT_NAME,
    MD_REPORT_NAME,
    SEVERITY_ORDER,
    env_excludes,
)
from prodready.errors import ProjectRootError, ScanError
from prodready.extractors import ExtractorContext, run_extractors
from prodready.file_index import build_file_index
from prodready.graph import AppGraph
from prodready.models import Finding, ValidationContext
from prodready.project import create_project
from prodready.reporting import (
    build_error_context,
    build_validation_context,
    write_json_report,
    write_markdown_report,
)
from prodready.rules import RuleContext, run_all_rules

logger = structlog.get_logger(__name__)

REPORT_FORMATS = ("json", "md")


def parse_formats(value: str | Sequence[str] | None) -> tuple[str, ...]:
    """Requested report formats; unknown or empty input gives the defaults."""
    if value is None:
        return DEFAULT_FORMATS
    items = value.split(",") if isinstance(value, str) else list(value)
    formats = []
    for item in items:
        fmt = item.strip().lower()
        if not fmt:
            continue
        if fmt not in REPORT_FORMATS:
            logger.warning("ignoring unknown report format", format=fmt)
            continue
        if fmt not in formats:
            formats.append(fmt)
    if not formats:
        logger.warning("no valid report format, using defaults")
        return DEFAULT_FORMATS
    return tuple(formats)


def parse_fail_on(value: str | None) -> str:
    if value is None:
        return DEFAULT_FAIL_ON
    severity = value.strip().upper()
    if severity not in SEVERITY_ORDER:
        logger.warning(
            "invalid fail-on severity, using default",
            value=value,
            default=DEFAULT_FAIL_ON,
        )
        return DEFAULT_FAIL_ON
    return severity


def is_blocking(finding: Finding, fail_on: str) -> bool:
    if finding.suppressed:
        return False
    threshold = SEVERITY_ORDER.index(fail_on)
    return SEVERITY_ORDER.index(finding.severity) >= threshold


@dataclass
class ScanOptions:
    project: Path | str = "."
    out: Path | str = DEFAULT_OUT_DIR
    formats: tuple[str, ...] = DEFAULT_FORMATS
    fail_on: str = DEFAULT_FAIL_ON
    baseline: Path | str | None = None
    exclude: Sequence[str] = ()

    @property
    def project_root(self) -> Path:
        return Path(self.project).resolve()

    @property
    def out_dir(self) -> Path:
        return (self.project_root / self.out).resolve()


@dataclass
class ScanResult:
    context: ValidationContext
    graph: AppGraph
    findings: list[Finding]
    fail_on: str
    written: list[Path] = field(default_factory=list)

    @property
    def blocking(self) -> list[Finding]:
        return [f for f in self.findings if is_blocking(f, self.fail_on)]

    @property
    def exit_code(self) -> int:
        return 1 if self.blocking else 0


def analyze(
    project_root: Path, exclude: Sequence[str] = ()
) -> tuple[AppGraph, list[Finding]]:
    """Build the graph for a project and run every rule over it."""
    files = build_file_index(
        project_root, exclude_paths=[*exclude, *env_excludes()]
    )
    project = create_project(project_root, files)
    graph = AppGraph()
    run_extractors(
        graph,
        ExtractorContext(
            project_root=project_root,
            files=files,
            get_source_file=project.get_source_file,
        ),
    )
    logger.debug("graph built", **graph.stats())
    findings = run_all_rules(graph, RuleContext(project_root=project_root))
    return graph, findings


def write_reports(
    context: ValidationContext, out_dir: Path, formats: Sequence[str]
) -> list[Path]:
    written = []
    if "json" in formats:
        written.append(write_json_report(context, out_dir / JSON_REPORT_NAME))
    if "md" in formats:
        written.append(write_markdown_report(context, out_dir / MD_REPORT_NAME))
    return written


def _write_error_report(out_dir: Path, message: str) -> None:
    try:
        write_json_report(
            build_error_context(message), out_dir / JSON_REPORT_NAME
        )
    except ScanError as e:
        logger.warning("could not write partial report", error=str(e))


def run_scan(options: ScanOptions) -> ScanResult:
    """Run one scan and write the requested reports."""
    project_root = options.project_root
    out_dir = options.out_dir
    formats = parse_formats(options.formats)
    fail_on = parse_fail_on(options.fail_on)
    logger.debug(
        "starting scan",
        project=str(project_root),
        out=str(out_dir),
        formats=formats,
        fail_on=fail_on,
    )

    try:
        graph, findings = analyze(project_root, options.exclude)
        baseline = load_baseline(baseline_path(project_root, options.baseline))
        findings = apply_baseline(findings, baseline)
        context = build_validation_context(graph, findings)
        written = write_reports(context, out_dir, formats)
    except ProjectRootError:
        # nowhere sensible to put a partial report
        raise
    except ScanError as e:
        _write_error_report(out_dir, str(e))
        raise
    except Exception as e:
        logger.warning("scan failed", error=str(e), exc_info=True)
        _write_error_report(out_dir, str(e))
        raise ScanError(str(e)) from e

    return ScanResult(
        context=context,
        graph=graph,
        findings=findings,
        fail_on=fail_on,
        written=written,
    )
