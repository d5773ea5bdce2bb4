"""Rule engine: turns app graph facts into findings.

Rules are plain functions `(graph, ctx) -> list[Finding]` registered in a
fixed order. They only read the graph and abstain when a fact they need
is unknown (None). A rule that raises is logged and contributes nothing.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import structlog

from prodready.graph import AppGraph
from prodready.models import Finding

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RuleContext:
    project_root: Path


Rule = Callable[[AppGraph, RuleContext], list[Finding]]


@dataclass(frozen=True)
class Category:
    """A checklist category and the node kinds its rules inspect."""

    name: str
    label: str
    node_kinds: tuple[str, ...]


CATEGORIES = (
    Category("security", "No secrets exposed to the browser", ("EnvVar",)),
    Category("auth", "Mutating endpoints check auth", ("Endpoint",)),
    Category(
        "database", "Tables protected by RLS, safe migrations", ("Migration",)
    ),
    Category("performance", "List queries paginated", ("SupabaseQuery",)),
    Category("ui", "UI actions wired, links resolve", ("UiAction", "Route")),
    Category("config", "Env vars documented", ("EnvVar",)),
)


def _registry() -> list[tuple[str, Rule]]:
    from prodready.rules.auth import check_endpoint_auth
    from prodready.rules.db import (
        check_destructive_migrations,
        check_rls_coverage,
    )
    from prodready.rules.env import check_env_documented
    from prodready.rules.performance import check_query_shape
    from prodready.rules.security import (
        check_client_secrets,
        check_public_env,
    )
    from prodready.rules.ui import (
        check_dead_links,
        check_orphan_api_routes,
        check_stub_actions,
    )

    return [
        ("public_env", check_public_env),
        ("client_secrets", check_client_secrets),
        ("endpoint_auth", check_endpoint_auth),
        ("rls_coverage", check_rls_coverage),
        ("destructive_migrations", check_destructive_migrations),
        ("query_shape", check_query_shape),
        ("stub_actions", check_stub_actions),
        ("dead_links", check_dead_links),
        ("orphan_api_routes", check_orphan_api_routes),
        ("env_documented", check_env_documented),
    ]


def run_all_rules(graph: AppGraph, ctx: RuleContext) -> list[Finding]:
    """Run every rule in registry order and concatenate the findings."""
    findings: list[Finding] = []
    for name, rule in _registry():
        try:
            produced = rule(graph, ctx)
        except Exception as e:
            logger.warning("rule failed", rule=name, error=str(e))
            continue
        logger.debug("rule finished", rule=name, findings=len(produced))
        findings.extend(produced)
    return findings


__all__ = [
    "CATEGORIES",
    "Category",
    "Rule",
    "RuleContext",
    "run_all_rules",
]
