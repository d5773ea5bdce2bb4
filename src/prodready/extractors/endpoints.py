"""Endpoints extractor: route-handler verbs and server actions."""

from __future__ import annotations

import re
from pathlib import PurePosixPath

from tree_sitter import Node

from prodready.config import HTTP_METHODS
from prodready.extractors import ExtractorContext, for_each_source
from prodready.extractors.routes import ROUTE_STEM, app_root_for
from prodready.extractors.syntax import exported_functions, has_directive
from prodready.graph import (
    AppGraph,
    EndpointNode,
    node_id,
    route_path_from_app_file,
)
from prodready.project import ParsedSource

# auth guards commonly called at the top of handlers; a match anywhere in
# the handler body counts
AUTH_GUARD_PATTERNS = [
    r"\bauth\.getUser\s*\(",
    r"\bauth\.getSession\s*\(",
    r"\bgetServerSession\s*\(",
    r"\bauth\s*\(\s*\)",
    r"\brequire[A-Z]\w*\s*\(",
    r"\bwithAuth\b",
    r"\bisAdmin\b",
    r"\bhasPermission\b",
    r"\bcanAccess\b",
    r"\bcheckAuth\b",
    r"\bcurrentUser\b",
    r"\bgetUser\s*\(",
    r"\bverify\w*(?:Token|Signature|Webhook)\w*\s*\(",
    r"\bconstructEvent\s*\(",
]

_AUTH_GUARD = re.compile("|".join(AUTH_GUARD_PATTERNS))

READ_ONLY_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def has_auth_guard(parsed: ParsedSource, body: Node | None) -> bool | None:
    """Whether the handler body calls an auth guard; None if unknown."""
    if body is None:
        return None
    return _AUTH_GUARD.search(parsed.node_text(body)) is not None


def _extract_route_handlers(graph: AppGraph, parsed: ParsedSource) -> None:
    rel = parsed.relative_path
    if PurePosixPath(rel).stem != ROUTE_STEM:
        return
    app_root = app_root_for(rel)
    if app_root is None:
        return

    route_path = route_path_from_app_file(rel, app_root)
    for export in exported_functions(parsed):
        if export.name not in HTTP_METHODS:
            continue
        graph.add(
            EndpointNode(
                id=node_id("Endpoint", route_path, export.name, rel),
                path_or_name=route_path,
                file_path=rel,
                handler_kind="route-handler",
                method=export.name,
                mutates_data=export.name not in READ_ONLY_METHODS,
                has_auth_check=has_auth_guard(parsed, export.body),
                line=export.line,
                snippet=parsed.line_text(export.line),
            )
        )


def _extract_server_actions(graph: AppGraph, parsed: ParsedSource) -> None:
    rel = parsed.relative_path
    module_level = parsed.is_server_module
    for export in exported_functions(parsed):
        if not export.is_function:
            continue
        inline = has_directive(parsed, export.body, "use server")
        if not (module_level or inline):
            continue
        graph.add(
            EndpointNode(
                id=node_id("Endpoint", export.name, rel),
                path_or_name=export.name,
                file_path=rel,
                handler_kind="server-action",
                mutates_data=True,
                has_auth_check=has_auth_guard(parsed, export.body),
                line=export.line,
                snippet=parsed.line_text(export.line),
            )
        )


def _extract_file(graph: AppGraph, parsed: ParsedSource) -> None:
    _extract_route_handlers(graph, parsed)
    _extract_server_actions(graph, parsed)


def extract_endpoints(graph: AppGraph, ctx: ExtractorContext) -> None:
    for_each_source(graph, ctx, _extract_file)
