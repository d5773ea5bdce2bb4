"""Security rules: secrets reachable from the browser.

SEC-1  service-role credential under a public prefix
SEC-2  public env var named like a secret, token or key
SEC-3  server secret read from a 'use client' module
"""

from __future__ import annotations

import re

from prodready.config import PLATFORM_ENV_VARS, PUBLIC_ENV_PREFIXES
from prodready.graph import AppGraph, EnvVarNode
from prodready.models import Finding, Related
from prodready.rules import RuleContext
from prodready.rules.evidence import create_finding

_PREFIX = "|".join(re.escape(p) for p in PUBLIC_ENV_PREFIXES)

PUBLIC_SECRET = re.compile(
    rf"^(?:{_PREFIX}).*?(SECRET|TOKEN|KEY)", re.IGNORECASE
)
SECRET_NAME = re.compile(
    r"SECRET|TOKEN|PASSWORD|PRIVATE|SERVICE_ROLE|API_KEY|_KEY$",
    re.IGNORECASE,
)

# public by design; RLS and provider-side checks protect the data
ALLOWED_PUBLIC_KEYS = frozenset(
    {
        "NEXT_PUBLIC_SUPABASE_ANON_KEY",
        "NEXT_PUBLIC_SUPABASE_URL",
        "NEXT_PUBLIC_SUPABASE_PUBLISHABLE_KEY",
        "EXPO_PUBLIC_SUPABASE_ANON_KEY",
        "VITE_SUPABASE_ANON_KEY",
        "NEXT_PUBLIC_STRIPE_PUBLISHABLE_KEY",
    }
)


def is_service_role_name(name: str) -> bool:
    return "SERVICE" in name.upper()


def check_public_env(graph: AppGraph, ctx: RuleContext) -> list[Finding]:
    findings = []
    for env in graph.of_kind(EnvVarNode):
        if not env.is_public:
            continue
        related = Related(env_vars=[env.name])
        if is_service_role_name(env.name):
            findings.append(
                create_finding(
                    env,
                    code="SEC-1",
                    category="security",
                    severity="CRITICAL",
                    confidence="HIGH",
                    title="Service role or secret in public env",
                    description=(
                        "Public env var may expose the service role: "
                        f"{env.name}"
                    ),
                    fix=(
                        "Never use a public prefix for the service role key; "
                        "read it only in server code."
                    ),
                    fix_type="config",
                    related=related,
                )
            )
        if (
            PUBLIC_SECRET.search(env.name)
            and env.name not in ALLOWED_PUBLIC_KEYS
        ):
            findings.append(
                create_finding(
                    env,
                    code="SEC-2",
                    category="security",
                    severity="HIGH",
                    confidence="HIGH",
                    title="Public env var may expose a secret",
                    description=(
                        f"Env var name suggests a secret or token: {env.name}"
                    ),
                    fix="Rename it or move the value to a server-only env.",
                    fix_type="config",
                    related=related,
                )
            )
    return findings


def check_client_secrets(graph: AppGraph, ctx: RuleContext) -> list[Finding]:
    findings = []
    for env in graph.of_kind(EnvVarNode):
        if env.is_public or not env.is_client_file:
            continue
        if env.name in PLATFORM_ENV_VARS or not SECRET_NAME.search(env.name):
            continue
        findings.append(
            create_finding(
                env,
                code="SEC-3",
                category="security",
                severity="CRITICAL",
                confidence="MEDIUM",
                title="Server secret referenced in client code",
                description=(
                    f"{env.name} is read from a 'use client' module; it is "
                    "either bundled for the browser or undefined at runtime."
                ),
                fix=(
                    "Move the access into a server component, route handler "
                    "or server action."
                ),
                related=Related(env_vars=[env.name]),
            )
        )
    return findings
