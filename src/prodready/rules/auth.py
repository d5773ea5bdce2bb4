"""Auth rules: AUTH-1, mutating endpoints without a visible auth guard."""

from __future__ import annotations

from prodready.graph import AppGraph, EndpointNode
from prodready.models import Finding, Related
from prodready.rules import RuleContext
from prodready.rules.evidence import create_finding


def _describe(endpoint: EndpointNode) -> str:
    if endpoint.handler_kind == "route-handler":
        return f"{endpoint.method} {endpoint.path_or_name}"
    return f"server action {endpoint.path_or_name}"


def check_endpoint_auth(graph: AppGraph, ctx: RuleContext) -> list[Finding]:
    findings = []
    for endpoint in graph.of_kind(EndpointNode):
        # unknown auth state is not evidence
        if not endpoint.mutates_data or endpoint.has_auth_check is not False:
            continue
        findings.append(
            create_finding(
                endpoint,
                code="AUTH-1",
                category="auth",
                severity="MEDIUM",
                confidence="LOW",
                title="Mutating endpoint without auth check",
                description=(
                    f"{_describe(endpoint)} changes data but no auth guard "
                    "call was found in its body."
                ),
                fix=(
                    "Verify the caller (e.g. supabase.auth.getUser()) before "
                    "mutating, or document why the endpoint is public."
                ),
                related=Related(endpoint_ids=[endpoint.id]),
            )
        )
    return findings
