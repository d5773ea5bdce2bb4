"""Source project: tree-sitter syntax trees for the indexed code files.

Parsing is syntax only. Files that cannot be read or do not parse cleanly
are left out of the project and contribute no facts to the graph.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from functools import cache
from pathlib import Path
from typing import Any, Literal

import structlog
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

from prodready.config import MAX_PARSE_BYTES
from prodready.file_index import FileEntry

logger = structlog.get_logger(__name__)

Dialect = Literal["typescript", "tsx"]

TSCONFIG_NAMES = ("tsconfig.json", "jsconfig.json")

_DIRECTIVES = ("use client", "use server")


@cache
def _language(dialect: Dialect) -> Language:
    if dialect == "tsx":
        return Language(tree_sitter_typescript.language_tsx())
    return Language(tree_sitter_typescript.language_typescript())


@cache
def _parser(dialect: Dialect) -> Parser:
    return Parser(_language(dialect))


# ---------------------------------------------------------------------------
# Compiler configuration
# ---------------------------------------------------------------------------


@dataclass
class CompilerConfig:
    """The subset of the target's tsconfig that affects parsing."""

    path: Path | None = None
    jsx: str | None = None

    @property
    def js_has_jsx(self) -> bool:
        # Next.js compiles JSX in .js files whatever jsconfig says; only a
        # tsconfig without `jsx` marks a project whose .js is plain script
        if self.path is None or self.path.name == "jsconfig.json":
            return True
        return self.jsx is not None


_LINE_COMMENT = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*')
_BLOCK_COMMENT = re.compile(r'("(?:\\.|[^"\\])*")|/\*.*?\*/', re.DOTALL)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


def _keep_strings(m: re.Match[str]) -> str:
    return m.group(1) or ""


def _strip_jsonc(text: str) -> str:
    text = _BLOCK_COMMENT.sub(_keep_strings, text)
    text = _LINE_COMMENT.sub(_keep_strings, text)
    return _TRAILING_COMMA.sub(r"\1", text)


def load_compiler_config(project_root: Path) -> CompilerConfig:
    """Read tsconfig.json (or jsconfig.json) from the project root.

    tsconfig allows comments and trailing commas; both are stripped before
    decoding. An unreadable config falls back to defaults.
    """
    for name in TSCONFIG_NAMES:
        path = project_root / name
        if not path.is_file():
            continue
        try:
            data: dict[str, Any] = json.loads(_strip_jsonc(path.read_text()))
        except (OSError, ValueError) as e:
            logger.warning(
                "failed to parse compiler config", path=str(path), error=str(e)
            )
            return CompilerConfig()
        options = data.get("compilerOptions") or {}
        return CompilerConfig(
            path=path,
            jsx=options.get("jsx"),
        )
    return CompilerConfig()


# ---------------------------------------------------------------------------
# Parsed files
# ---------------------------------------------------------------------------


@dataclass
class ParsedSource:
    """A parsed code file plus helpers for textual node inspection."""

    entry: FileEntry
    source: bytes
    tree: Tree
    dialect: Dialect
    directive: str | None = field(default=None)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def relative_path(self) -> str:
        return self.entry.relative_path

    @property
    def is_client(self) -> bool:
        return self.directive == "use client"

    @property
    def is_server_module(self) -> bool:
        return self.directive == "use server"

    @property
    def text(self) -> str:
        return self.source.decode("utf-8", errors="replace")

    def node_text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode(
            "utf-8", errors="replace"
        )

    def line_of(self, node: Node) -> int:
        return node.start_point[0] + 1

    def line_text(self, line: int, limit: int = 200) -> str:
        start = 0
        for _ in range(line - 1):
            start = self.source.find(b"\n", start)
            if start == -1:
                return ""
            start += 1
        end = self.source.find(b"\n", start)
        if end == -1:
            end = len(self.source)
        text = self.source[start:end].decode("utf-8", errors="replace")
        return text.strip()[:limit]

    def iter_nodes(self, *types: str) -> Iterator[Node]:
        """Yield descendants of the root in document order."""
        yield from iter_descendants(self.root, *types)


def iter_descendants(node: Node, *types: str) -> Iterator[Node]:
    """Pre-order walk; filter to `types` when given."""
    stack = [node]
    wanted = set(types)
    while stack:
        current = stack.pop()
        if not wanted or current.type in wanted:
            yield current
        stack.extend(reversed(current.children))


def string_value(parsed: ParsedSource, node: Node | None) -> str | None:
    """Literal value of a string or template node, quotes stripped.

    Template substitutions are kept verbatim (`/api/x/${id}`).
    """
    if node is None:
        return None
    if node.type == "string":
        return parsed.node_text(node)[1:-1]
    if node.type == "template_string":
        return parsed.node_text(node).strip("`")
    return None


def detect_directive(parsed: ParsedSource) -> str | None:
    """Return the leading 'use client' / 'use server' directive, if any."""
    for child in parsed.root.named_children:
        if child.type == "comment":
            continue
        if child.type != "expression_statement":
            return None
        literal = child.named_children[0] if child.named_children else None
        value = string_value(parsed, literal)
        if value in _DIRECTIVES:
            return value
        if value is None:
            return None
    return None


# ---------------------------------------------------------------------------
# Project
# ---------------------------------------------------------------------------


class SourceProject:
    """In-memory set of parsed code files keyed by absolute path."""

    def __init__(
        self, project_root: Path, config: CompilerConfig | None = None
    ):
        self.project_root = project_root
        self.config = config or load_compiler_config(project_root)
        self._files: dict[Path, ParsedSource] = {}
        self.skipped: list[str] = []

    def __len__(self) -> int:
        return len(self._files)

    def dialect_for(self, ext: str) -> Dialect:
        if ext in (".tsx", ".jsx"):
            return "tsx"
        if ext == ".js":
            return "tsx" if self.config.js_has_jsx else "typescript"
        return "typescript"

    def add_file(self, entry: FileEntry) -> ParsedSource | None:
        """Parse and register one file; returns None when it is skipped."""
        if entry.is_migration:
            return None
        try:
            source = entry.file_path.read_bytes()
        except OSError as e:
            self._skip(entry, "unreadable", error=str(e))
            return None
        if len(source) > MAX_PARSE_BYTES:
            self._skip(entry, "too large", size=len(source))
            return None

        dialect = self.dialect_for(entry.ext)
        tree = _parser(dialect).parse(source)
        if tree.root_node.has_error and entry.ext == ".js":
            # .js may hold JSX or not; try the other grammar before giving up
            retry: Dialect = "typescript" if dialect == "tsx" else "tsx"
            retried = _parser(retry).parse(source)
            if not retried.root_node.has_error:
                dialect, tree = retry, retried
        if tree.root_node.has_error:
            self._skip(entry, "syntax error")
            return None

        parsed = ParsedSource(
            entry=entry, source=source, tree=tree, dialect=dialect
        )
        parsed.directive = detect_directive(parsed)
        self._files[entry.file_path] = parsed
        return parsed

    def get_source_file(self, path: Path) -> ParsedSource | None:
        return self._files.get(path)

    def _skip(self, entry: FileEntry, reason: str, **extra: Any) -> None:
        self.skipped.append(entry.relative_path)
        logger.debug(
            "skipping source file",
            path=entry.relative_path,
            reason=reason,
            **extra,
        )


def create_project(
    project_root: Path,
    files: Sequence[FileEntry],
    config: CompilerConfig | None = None,
) -> SourceProject:
    """Build a SourceProject covering the non-migration code files."""
    project = SourceProject(project_root, config)
    if project.config.path is not None:
        logger.debug("using compiler config", path=str(project.config.path))
    for entry in files:
        if not entry.is_migration:
            project.add_file(entry)
    logger.debug(
        "source project loaded",
        parsed=len(project),
        skipped=len(project.skipped),
    )
    return project
