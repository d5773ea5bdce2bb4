"""Baseline: accepted findings that no longer block shipping.

A baseline entry suppresses a finding when its rule id matches and every
other field it sets matches too. Suppressed findings stay in the report;
they only stop counting toward the ship status and the exit code.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

import structlog
from pydantic import ValidationError

from prodready.config import BASELINE_FILENAME
from prodready.errors import ReportWriteError
from prodready.file_index import glob_match
from prodready.models import BaselineEntry, Finding, ValidationBaseline

logger = structlog.get_logger(__name__)

BASELINE_VERSION = "1"

_GLOB_CHARS = frozenset("*?[")


def baseline_path(
    project_root: Path, override: Path | str | None = None
) -> Path:
    """Where the baseline lives; relative overrides resolve against the root."""
    if override is None:
        return project_root / BASELINE_FILENAME
    path = Path(override)
    return path if path.is_absolute() else project_root / path


def load_baseline(path: Path) -> ValidationBaseline | None:
    """Load a baseline file. Missing or invalid files mean no baseline."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.warning("failed to read baseline", path=str(path), error=str(e))
        return None
    try:
        baseline = ValidationBaseline.model_validate(json.loads(raw))
    except (ValueError, ValidationError) as e:
        logger.warning(
            "ignoring invalid baseline", path=str(path), error=str(e)
        )
        return None
    logger.debug(
        "loaded baseline", path=str(path), entries=len(baseline.suppress)
    )
    return baseline


def _path_matches(evidence_path: str, pattern: str) -> bool:
    if pattern in evidence_path:
        return True
    if not _GLOB_CHARS & set(pattern):
        return False
    return glob_match(evidence_path, pattern)


def entry_matches(entry: BaselineEntry, finding: Finding) -> bool:
    if entry.rule_id != finding.code:
        return False
    if entry.gap_id is not None and entry.gap_id != finding.id:
        return False
    primary = finding.primary
    if entry.file_path is not None and not _path_matches(
        primary.file_path, entry.file_path
    ):
        return False
    if entry.line is not None and entry.line != primary.line:
        return False
    return True


def is_finding_suppressed(
    finding: Finding, baseline: ValidationBaseline | None
) -> bool:
    if baseline is None:
        return False
    return any(entry_matches(entry, finding) for entry in baseline.suppress)


def apply_baseline(
    findings: Iterable[Finding], baseline: ValidationBaseline | None
) -> list[Finding]:
    """Findings in order, with baseline matches copied as suppressed."""
    out = []
    for finding in findings:
        if is_finding_suppressed(finding, baseline):
            finding = finding.model_copy(update={"suppressed": True})
        out.append(finding)
    return out


def baseline_from_findings(findings: Iterable[Finding]) -> ValidationBaseline:
    """A baseline accepting exactly the given findings."""
    entries = []
    seen = set()
    for finding in findings:
        if finding.id in seen:
            continue
        seen.add(finding.id)
        entries.append(
            BaselineEntry(
                rule_id=finding.code,
                file_path=finding.primary.file_path,
                line=finding.primary.line,
                gap_id=finding.id,
            )
        )
    return ValidationBaseline(version=BASELINE_VERSION, suppress=entries)


def write_baseline(baseline: ValidationBaseline, path: Path) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(baseline.to_json_dict(), indent=2) + "\n",
            encoding="utf-8",
        )
    except OSError as e:
        raise ReportWriteError(path, e) from e
    logger.debug(
        "wrote baseline", path=str(path), entries=len(baseline.suppress)
    )
    return path
