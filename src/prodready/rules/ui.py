"""UI rules: stub actions (UI-1), dead links (UI-2), orphan APIs (UI-3)."""

from __future__ import annotations

from urllib.parse import urlsplit

from prodready.graph import (
    AppGraph,
    CallsiteNode,
    RouteMatcher,
    RouteNode,
    UiActionNode,
    strip_query,
    url_form,
)
from prodready.models import Finding, Related
from prodready.rules import RuleContext
from prodready.rules.evidence import create_finding


def check_stub_actions(graph: AppGraph, ctx: RuleContext) -> list[Finding]:
    findings = []
    for action in graph.of_kind(UiActionNode):
        if not action.is_stub:
            continue
        reasons = ", ".join(action.stub_reasons)
        findings.append(
            create_finding(
                action,
                code="UI-1",
                category="ui",
                severity="MEDIUM",
                confidence="HIGH",
                title="Suspicious or unwired UI action",
                description=(
                    f"{action.element} may be unwired or a stub: "
                    f"{action.label or action.element} ({reasons})"
                ),
                fix="Wire it to a real handler or remove the placeholder.",
                reason=reasons,
                related=Related(ui_action_ids=[action.id]),
            )
        )
    return findings


def _is_internal(href: str) -> bool:
    return href.startswith("/") and not href.startswith("//")


def check_dead_links(graph: AppGraph, ctx: RuleContext) -> list[Finding]:
    pages = [r for r in graph.of_kind(RouteNode) if r.is_page]
    # without any page routes there is nothing to resolve against
    if not pages:
        return []
    matchers = [RouteMatcher.for_route(r.path) for r in pages]

    findings = []
    for action in graph.of_kind(UiActionNode):
        href = action.href
        if href is None or not _is_internal(href):
            continue
        if any(m.matches(href) for m in matchers):
            continue
        findings.append(
            create_finding(
                action,
                code="UI-2",
                category="ui",
                severity="MEDIUM",
                confidence="HIGH",
                title="Dead link",
                description=(
                    f'Link href "{href}" does not match any discovered route.'
                ),
                fix="Point the href at an existing route.",
                related=Related(ui_action_ids=[action.id]),
            )
        )
    return findings


def _called_path(target: str | None) -> str | None:
    if not target:
        return None
    if target.startswith("http"):
        return urlsplit(target).path or "/"
    if target.startswith("/"):
        return strip_query(target)
    return None


def check_orphan_api_routes(
    graph: AppGraph, ctx: RuleContext
) -> list[Finding]:
    called = {
        path
        for path in (
            _called_path(c.target_path) for c in graph.of_kind(CallsiteNode)
        )
        if path
    }
    findings = []
    for route in graph.of_kind(RouteNode):
        if not route.is_api_route:
            continue
        matcher = RouteMatcher.for_route(route.path)
        if any(matcher.matches(path) for path in called):
            continue
        findings.append(
            create_finding(
                route,
                code="UI-3",
                category="ui",
                severity="LOW",
                confidence="MEDIUM",
                title="Orphan API route",
                description=(
                    f"API route {url_form(route.path)} may never be called "
                    "(no matching callsite)."
                ),
                fix=(
                    "Confirm the route is used (server action, webhook or "
                    "external caller) or remove it."
                ),
                fix_type="review",
                related=Related(route_paths=[route.path]),
            )
        )
    return findings
