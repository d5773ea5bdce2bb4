"""Validation context assembly: gaps, routes, ship status and checklist."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timezone

from prodready import SCANNER_VERSION
from prodready.config import SEVERITY_ORDER
from prodready.graph import AppGraph, RouteNode, url_form
from prodready.models import (
    Finding,
    Gap,
    RouteEntry,
    ShipChecklistItem,
    ShipStatus,
    ValidationContext,
)
from prodready.rules import CATEGORIES

DEFAULT_FIX = "See rulebook."


def now_iso() -> str:
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def finding_to_gap(finding: Finding) -> Gap:
    primary = finding.primary
    return Gap(
        id=finding.id,
        severity=finding.severity.lower(),
        category=finding.category,
        message=finding.description,
        fix=" ".join(finding.recommended_fix.notes) or DEFAULT_FIX,
        file_path=primary.file_path,
        line=primary.line,
        rule_id=finding.code,
        evidence=list(finding.evidence),
        confidence=finding.confidence,
        title=finding.title,
        suppressed=True if finding.suppressed else None,
    )


def route_entries(graph: AppGraph) -> list[RouteEntry]:
    entries = []
    for route in graph.of_kind(RouteNode):
        kind = "API" if route.is_api_route else "Page"
        entries.append(
            RouteEntry(
                path=route.path,
                status="ok",
                description=f"{kind}: {url_form(route.path)}",
            )
        )
    return entries


def active_findings(findings: Sequence[Finding]) -> list[Finding]:
    return [f for f in findings if not f.suppressed]


def ship_status(findings: Sequence[Finding]) -> ShipStatus:
    """`no-ship` on any open CRITICAL, `needs-review` on any open HIGH."""
    severities = {f.severity for f in active_findings(findings)}
    if "CRITICAL" in severities:
        return "no-ship"
    if "HIGH" in severities:
        return "needs-review"
    return "ship"


def _severity_detail(findings: Sequence[Finding]) -> str:
    counts = Counter(f.severity for f in findings)
    return ", ".join(
        f"{counts[sev]} {sev.lower()}"
        for sev in reversed(SEVERITY_ORDER)
        if counts[sev]
    )


def ship_checklist(
    graph: AppGraph, findings: Sequence[Finding]
) -> list[ShipChecklistItem]:
    """One item per rule category.

    A category fails when it has open findings and is skipped when the
    graph holds nothing its rules inspect.
    """
    active = active_findings(findings)
    items = []
    for category in CATEGORIES:
        open_findings = [f for f in active if f.category == category.name]
        if open_findings:
            status, detail = "fail", _severity_detail(open_findings)
        elif not any(graph.count(kind) for kind in category.node_kinds):
            status, detail = "skip", "nothing to check"
        else:
            status, detail = "pass", None
        items.append(
            ShipChecklistItem(
                id=f"{category.name}-001",
                label=category.label,
                status=status,  # type: ignore[arg-type]
                detail=detail,
            )
        )
    return items


def build_validation_context(
    graph: AppGraph,
    findings: Sequence[Finding],
    generated_at: str | None = None,
) -> ValidationContext:
    """Assemble the report from the graph and baseline-applied findings."""
    return ValidationContext(
        generated_at=generated_at or now_iso(),
        scanner_version=SCANNER_VERSION,
        routes=route_entries(graph),
        gaps=[finding_to_gap(f) for f in findings],
        ship_checklist=ship_checklist(graph, findings),
        ship_checklist_status=ship_status(findings),
        suppressed_count=sum(1 for f in findings if f.suppressed),
    )


def build_error_context(message: str) -> ValidationContext:
    """Partial context for a scan that failed before producing findings."""
    return ValidationContext(
        generated_at=now_iso(),
        scanner_version=SCANNER_VERSION,
        error=message,
    )
