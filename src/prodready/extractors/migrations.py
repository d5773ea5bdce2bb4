"""Migrations extractor: RLS coverage and risky DDL from SQL migrations.

SQL is scanned as text, not parsed. Comments are blanked first (keeping
line numbers) so commented-out statements do not count.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import structlog

from prodready.extractors import ExtractorContext
from prodready.graph import AppGraph, MigrationNode, node_id

logger = structlog.get_logger(__name__)

_NAME = r'([\w."]+)'

CREATE_TABLE = re.compile(
    r"CREATE\s+(?:UNLOGGED\s+)?TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?" + _NAME,
    re.IGNORECASE,
)
ROW_LEVEL_SECURITY = re.compile(
    r"ALTER\s+TABLE\s+(?:IF\s+EXISTS\s+)?(?:ONLY\s+)?"
    + _NAME
    + r"\s+(ENABLE|DISABLE)\s+ROW\s+LEVEL\s+SECURITY",
    re.IGNORECASE,
)
CREATE_POLICY = re.compile(
    r'CREATE\s+POLICY\s+(?:"[^"]*"|\w+)\s+ON\s+(?:TABLE\s+)?' + _NAME,
    re.IGNORECASE,
)
CREATE_INDEX = re.compile(
    r"CREATE\s+(?:UNIQUE\s+)?INDEX\s+(?:CONCURRENTLY\s+)?"
    r'(?:IF\s+NOT\s+EXISTS\s+)?(?:[\w"]+\s+)?ON\s+(?:ONLY\s+)?' + _NAME,
    re.IGNORECASE,
)
DESTRUCTIVE_DDL = re.compile(
    r"DROP\s+TABLE|DROP\s+COLUMN|TRUNCATE\s+"
    r'|ALTER\s+COLUMN\s+[\w."]+\s+(?:SET\s+DATA\s+)?TYPE',
    re.IGNORECASE,
)

_LINE_COMMENT = re.compile(r"--[^\n]*")
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)


def normalize_table(name: str) -> str:
    """`"public"."Profiles"` -> `profiles`."""
    name = name.replace('"', "").lower()
    if name.startswith("public."):
        name = name[len("public.") :]
    return name


def strip_sql_comments(sql: str) -> str:
    sql = _BLOCK_COMMENT.sub(
        lambda m: re.sub(r"[^\n]", " ", m.group(0)), sql
    )
    return _LINE_COMMENT.sub("", sql)


@dataclass
class _TableFacts:
    line: int
    created: bool = False
    enabled: bool = False
    disabled: bool = False
    policies: int = 0
    indexed: bool = False

    @property
    def rls_enabled(self) -> bool | None:
        if self.disabled:
            return False
        if self.enabled:
            return True
        if self.created:
            return False
        return None


def scan_migration(rel: str, sql: str) -> list[MigrationNode]:
    """Nodes for one migration file: a file-level node plus one per table."""
    text = strip_sql_comments(sql)
    tables: dict[str, _TableFacts] = {}

    def line_at(pos: int) -> int:
        return text.count("\n", 0, pos) + 1

    def facts(raw: str, pos: int) -> _TableFacts:
        table = normalize_table(raw)
        if table not in tables:
            tables[table] = _TableFacts(line=line_at(pos))
        return tables[table]

    for m in CREATE_TABLE.finditer(text):
        facts(m.group(1), m.start()).created = True
    for m in ROW_LEVEL_SECURITY.finditer(text):
        entry = facts(m.group(1), m.start())
        if m.group(2).upper() == "ENABLE":
            entry.enabled = True
        else:
            entry.disabled = True
    for m in CREATE_POLICY.finditer(text):
        facts(m.group(1), m.start()).policies += 1
    indexed = {
        normalize_table(m.group(1)) for m in CREATE_INDEX.finditer(text)
    }

    destructive = DESTRUCTIVE_DDL.search(text)
    lines = sql.splitlines()

    def snippet(line: int) -> str | None:
        if 0 < line <= len(lines):
            return lines[line - 1].strip()[:200]
        return None

    file_line = line_at(destructive.start()) if destructive else None
    nodes = [
        MigrationNode(
            id=node_id("Migration", rel),
            file_path=rel,
            has_destructive_ddl=destructive is not None,
            line=file_line,
            snippet=snippet(file_line) if file_line else None,
        )
    ]
    for table, entry in tables.items():
        nodes.append(
            MigrationNode(
                id=node_id("Migration", rel, table),
                file_path=rel,
                table=table,
                created_in_file=entry.created,
                rls_enabled=entry.rls_enabled,
                policy_count=entry.policies,
                has_index=table in indexed,
                line=entry.line,
                snippet=snippet(entry.line),
            )
        )
    return nodes


def extract_migrations(graph: AppGraph, ctx: ExtractorContext) -> None:
    for entry in ctx.migration_files:
        try:
            sql = entry.file_path.read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            logger.debug(
                "skipping unreadable migration",
                path=entry.relative_path,
                error=str(e),
            )
            continue
        for node in scan_migration(entry.relative_path, sql):
            graph.add(node)
