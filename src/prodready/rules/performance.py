"""Performance rules: PERF-1 (no pagination), PERF-2 (select *)."""

from __future__ import annotations

from prodready.graph import AppGraph, SupabaseQueryNode
from prodready.models import Finding, Related
from prodready.rules import RuleContext
from prodready.rules.evidence import create_finding


def check_query_shape(graph: AppGraph, ctx: RuleContext) -> list[Finding]:
    findings = []
    for query in graph.of_kind(SupabaseQueryNode):
        if query.operation != "select":
            continue
        related = Related(table_names=[query.table])
        if (
            query.has_pagination is False
            and query.is_single_row is not True
            and query.is_count_only is not True
        ):
            findings.append(
                create_finding(
                    query,
                    code="PERF-1",
                    category="performance",
                    severity="HIGH",
                    confidence="MEDIUM",
                    title="List query without pagination",
                    description=(
                        f"Select on {query.table} has no .range() or "
                        ".limit()."
                    ),
                    fix="Add .range(from, to) or .limit(n) for list queries.",
                    related=related,
                )
            )
        if query.select_all is True:
            findings.append(
                create_finding(
                    query,
                    code="PERF-2",
                    category="performance",
                    severity="MEDIUM",
                    confidence="HIGH",
                    title="SELECT * on list",
                    description=(
                        f"Select on {query.table} uses select('*') or "
                        "select() which may over-fetch."
                    ),
                    fix="Select only the columns you need.",
                    related=related,
                )
            )
    return findings
