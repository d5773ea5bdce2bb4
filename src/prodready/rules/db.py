"""Database rules over the migration history.

DB-1  table created without RLS (or with RLS later disabled)
DB-2  RLS enabled but no policy anywhere
DB-4  destructive DDL in a migration file

RLS state is folded over all migration files in filename order, so a
table created in one migration and protected in a later one is fine.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from prodready.graph import AppGraph, MigrationNode
from prodready.models import Finding, Related
from prodready.rules import RuleContext
from prodready.rules.evidence import create_finding


@dataclass
class TableHistory:
    table: str
    created: MigrationNode | None = None
    rls_enabled: bool | None = None
    # node where the current RLS state was last set
    last_change: MigrationNode | None = None
    policy_count: int = 0
    files: list[str] = field(default_factory=list)


def table_histories(graph: AppGraph) -> dict[str, TableHistory]:
    migrations = sorted(graph.of_kind(MigrationNode), key=lambda m: m.file_path)
    tables: dict[str, TableHistory] = {}
    for node in migrations:
        if node.table is None:
            continue
        history = tables.setdefault(node.table, TableHistory(node.table))
        history.files.append(node.file_path)
        if node.created_in_file and history.created is None:
            history.created = node
        if node.rls_enabled is not None:
            history.rls_enabled = node.rls_enabled
            history.last_change = node
        history.policy_count += node.policy_count
    return tables


def check_rls_coverage(graph: AppGraph, ctx: RuleContext) -> list[Finding]:
    findings = []
    for history in table_histories(graph).values():
        related = Related(table_names=[history.table])
        if history.created is not None and history.rls_enabled is not True:
            node = history.last_change or history.created
            findings.append(
                create_finding(
                    node,
                    code="DB-1",
                    category="database",
                    severity="CRITICAL",
                    confidence="HIGH",
                    title="Table without RLS",
                    description=(
                        f"Table {history.table} does not have row level "
                        "security enabled in any migration."
                    ),
                    fix=(
                        f"ALTER TABLE {history.table} ENABLE ROW LEVEL "
                        "SECURITY; then add policies."
                    ),
                    fix_type="migration",
                    key=history.created.id,
                    related=related,
                )
            )
        elif (
            history.rls_enabled is True
            and history.policy_count == 0
            and history.last_change is not None
        ):
            findings.append(
                create_finding(
                    history.last_change,
                    code="DB-2",
                    category="database",
                    severity="HIGH",
                    confidence="HIGH",
                    title="RLS enabled but no policies",
                    description=(
                        f"Table {history.table} has RLS enabled but no "
                        "CREATE POLICY was found; every query is denied."
                    ),
                    fix="Add at least one CREATE POLICY for the table.",
                    fix_type="migration",
                    related=related,
                )
            )
    return findings


def check_destructive_migrations(
    graph: AppGraph, ctx: RuleContext
) -> list[Finding]:
    findings = []
    for node in graph.of_kind(MigrationNode):
        if node.table is not None or not node.has_destructive_ddl:
            continue
        findings.append(
            create_finding(
                node,
                code="DB-4",
                category="database",
                severity="HIGH",
                confidence="MEDIUM",
                title="Destructive migration",
                description=(
                    "Migration contains DROP TABLE/COLUMN, TRUNCATE, or "
                    "ALTER COLUMN TYPE."
                ),
                fix=(
                    "Make sure a backup and rollback plan exist; avoid "
                    "destructive DDL on shared branches."
                ),
                fix_type="migration",
            )
        )
    return findings
