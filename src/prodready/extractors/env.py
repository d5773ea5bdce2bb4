"""Env extractor: environment variable reads vs the declared example file."""

from __future__ import annotations

import re
from collections.abc import Iterator
from pathlib import Path

import structlog
from tree_sitter import Node

from prodready.config import ENV_EXAMPLE_FILES, PUBLIC_ENV_PREFIXES
from prodready.extractors import ExtractorContext, for_each_source
from prodready.extractors.syntax import callee_text, first_string_argument
from prodready.graph import AppGraph, EnvVarNode, node_id
from prodready.project import ParsedSource, string_value

logger = structlog.get_logger(__name__)

ENV_OBJECTS = frozenset({"process.env", "import.meta.env"})

_EXAMPLE_LINE = re.compile(r"^\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=")
_ENV_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_public_env(name: str) -> bool:
    return name.startswith(PUBLIC_ENV_PREFIXES)


def load_example_env(project_root: Path) -> set[str] | None:
    """Names declared in the first example env file found.

    Returns None when the project has no example file at all.
    """
    for name in ENV_EXAMPLE_FILES:
        path = project_root / name
        try:
            content = path.read_text(encoding="utf-8", errors="ignore")
        except OSError:
            continue
        names = set()
        for line in content.splitlines():
            match = _EXAMPLE_LINE.match(line)
            if match:
                names.add(match.group(1))
        logger.debug("loaded env example", path=str(path), names=len(names))
        return names
    return None


def _env_reads(parsed: ParsedSource) -> Iterator[tuple[str, Node]]:
    """Yield (name, node) for every env read in source order."""
    for node in parsed.iter_nodes(
        "member_expression",
        "subscript_expression",
        "call_expression",
        "variable_declarator",
    ):
        if node.type == "member_expression":
            obj = node.child_by_field_name("object")
            prop = node.child_by_field_name("property")
            if obj is None or prop is None:
                continue
            if parsed.node_text(obj) in ENV_OBJECTS:
                yield parsed.node_text(prop), node

        elif node.type == "subscript_expression":
            obj = node.child_by_field_name("object")
            index = node.child_by_field_name("index")
            if obj is None or parsed.node_text(obj) not in ENV_OBJECTS:
                continue
            name = string_value(parsed, index)
            if name and _ENV_NAME.match(name):
                yield name, node

        elif node.type == "call_expression":
            if callee_text(parsed, node) != "Deno.env.get":
                continue
            name = first_string_argument(parsed, node)
            if name and _ENV_NAME.match(name):
                yield name, node

        else:
            # const { A, B: alias } = process.env
            value = node.child_by_field_name("value")
            pattern = node.child_by_field_name("name")
            if value is None or pattern is None:
                continue
            if pattern.type != "object_pattern":
                continue
            if parsed.node_text(value) not in ENV_OBJECTS:
                continue
            for prop in pattern.named_children:
                if prop.type == "shorthand_property_identifier_pattern":
                    yield parsed.node_text(prop), prop
                elif prop.type == "pair_pattern":
                    key = prop.child_by_field_name("key")
                    if key is not None:
                        yield parsed.node_text(key), prop
                elif prop.type == "object_assignment_pattern":
                    left = prop.child_by_field_name("left")
                    if left is not None:
                        yield parsed.node_text(left), prop


def extract_env(graph: AppGraph, ctx: ExtractorContext) -> None:
    example = load_example_env(ctx.project_root)

    def extract_file(graph: AppGraph, parsed: ParsedSource) -> None:
        rel = parsed.relative_path
        seen: set[str] = set()
        for name, node in _env_reads(parsed):
            if name in seen:
                continue
            seen.add(name)
            line = parsed.line_of(node)
            graph.add(
                EnvVarNode(
                    id=node_id("EnvVar", name, rel),
                    name=name,
                    file_path=rel,
                    is_public=is_public_env(name),
                    in_example=None if example is None else name in example,
                    is_client_file=parsed.is_client,
                    line=line,
                    snippet=parsed.line_text(line),
                )
            )

    for_each_source(graph, ctx, extract_file)
