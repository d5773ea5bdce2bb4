"""Config rules: ENV-1 (undocumented env var), ENV-2 (no example file).

Without an example file nothing is documented, so every server-side
variable gets ENV-1 and the project additionally gets one ENV-2.
"""

from __future__ import annotations

from prodready.config import ENV_EXAMPLE_FILES, PLATFORM_ENV_VARS
from prodready.graph import AppGraph, EnvVarNode
from prodready.models import Finding, Related
from prodready.rules import RuleContext
from prodready.rules.evidence import create_finding


def check_env_documented(graph: AppGraph, ctx: RuleContext) -> list[Finding]:
    env_vars = graph.of_kind(EnvVarNode)
    findings = []
    for env in env_vars:
        if env.in_example:
            continue
        if env.is_public or env.name in PLATFORM_ENV_VARS:
            continue
        findings.append(
            create_finding(
                env,
                code="ENV-1",
                category="config",
                severity="MEDIUM",
                confidence="LOW",
                title="Env var missing from example file",
                description=(
                    f"{env.name} is read by the app but not declared in "
                    "an example env file."
                ),
                fix=f"Add {env.name}= to the example env file.",
                fix_type="config",
                related=Related(env_vars=[env.name]),
            )
        )

    undocumented = [e for e in env_vars if e.in_example is None]
    if undocumented:
        names = sorted({e.name for e in undocumented})
        findings.append(
            create_finding(
                undocumented[0],
                code="ENV-2",
                category="config",
                severity="LOW",
                confidence="HIGH",
                title="No example env file",
                description=(
                    f"The app reads {len(names)} env var(s) but the project "
                    f"has no {ENV_EXAMPLE_FILES[0]}."
                ),
                fix=(
                    f"Commit a {ENV_EXAMPLE_FILES[0]} listing every required "
                    "variable with placeholder values."
                ),
                fix_type="config",
                key="project",
                related=Related(env_vars=names),
            )
        )
    return findings
