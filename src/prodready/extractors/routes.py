"""Routes extractor: app-router pages and route handlers from file layout."""

from __future__ import annotations

from pathlib import PurePosixPath

from prodready.config import APP_ROOTS
from prodready.extractors import ExtractorContext
from prodready.graph import (
    AppGraph,
    RouteNode,
    node_id,
    route_path_from_app_file,
)

PAGE_STEM = "page"
ROUTE_STEM = "route"


def app_root_for(rel: str) -> str | None:
    """The app-router root a relative path lives under, if any."""
    for root in APP_ROOTS:
        if rel.startswith(root + "/"):
            return root
    return None


def extract_routes(graph: AppGraph, ctx: ExtractorContext) -> None:
    for entry in ctx.code_files:
        rel = entry.relative_path
        stem = PurePosixPath(rel).stem
        if stem not in (PAGE_STEM, ROUTE_STEM):
            continue
        app_root = app_root_for(rel)
        if app_root is None:
            continue
        # files that did not parse contribute nothing
        if ctx.get_source_file(entry.file_path) is None:
            continue

        path = route_path_from_app_file(rel, app_root)
        graph.add(
            RouteNode(
                id=node_id("Route", path, rel),
                path=path,
                file_path=rel,
                is_api_route=stem == ROUTE_STEM,
                is_page=stem == PAGE_STEM,
            )
        )
