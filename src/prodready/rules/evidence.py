"""Finding construction from graph nodes."""

from __future__ import annotations

from prodready.graph import GraphNode
from prodready.models import (
    Confidence,
    EvidenceRef,
    Finding,
    RecommendedFix,
    Related,
    Severity,
)


def create_finding(
    node: GraphNode,
    *,
    code: str,
    category: str,
    severity: Severity,
    confidence: Confidence,
    title: str,
    description: str,
    fix: str | list[str],
    fix_type: str = "code",
    key: str | None = None,
    reason: str | None = None,
    related: Related | None = None,
    extra_evidence: list[EvidenceRef] | None = None,
) -> Finding:
    """Build a finding whose primary evidence is `node`'s location.

    The id is `<code>-<key>` with the code lower-cased; `key` defaults to
    the node id, so one node yields at most one finding per rule.
    """
    evidence = [
        EvidenceRef(
            file_path=node.file_path,
            line=node.line,
            snippet=node.snippet,
            reason=reason,
        )
    ]
    if extra_evidence:
        evidence.extend(extra_evidence)
    notes = [fix] if isinstance(fix, str) else list(fix)
    return Finding(
        id=f"{code.lower()}-{key or node.id}",
        code=code,
        category=category,
        severity=severity,
        confidence=confidence,
        title=title,
        description=description,
        related=related,
        evidence=evidence,
        recommended_fix=RecommendedFix(type=fix_type, notes=notes),
    )
