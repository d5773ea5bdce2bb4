"""Extractors: populate the app graph from the file catalog and project.

Each extractor is `(graph, ctx) -> None`. Extractors only append nodes of
their own kind and never read each other's output, so the registry order
carries no meaning.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog

from prodready.file_index import FileEntry
from prodready.graph import AppGraph
from prodready.project import ParsedSource

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ExtractorContext:
    project_root: Path
    files: Sequence[FileEntry]
    get_source_file: Callable[[Path], ParsedSource | None]

    @property
    def code_files(self) -> list[FileEntry]:
        return [f for f in self.files if not f.is_migration]

    @property
    def migration_files(self) -> list[FileEntry]:
        return [f for f in self.files if f.is_migration]


Extractor = Callable[[AppGraph, ExtractorContext], None]


def for_each_source(
    graph: AppGraph,
    ctx: ExtractorContext,
    extract_file: Callable[[AppGraph, ParsedSource], None],
) -> None:
    """Run `extract_file` over every parsed code file.

    A file that raises is logged and skipped; nodes it already added stay.
    """
    for entry in ctx.code_files:
        parsed = ctx.get_source_file(entry.file_path)
        if parsed is None:
            continue
        try:
            extract_file(graph, parsed)
        except Exception as e:
            logger.warning(
                "extractor failed on file",
                extractor=extract_file.__module__,
                path=entry.relative_path,
                error=str(e),
            )


def _registry() -> list[tuple[str, Extractor]]:
    from prodready.extractors.callsites import extract_callsites
    from prodready.extractors.endpoints import extract_endpoints
    from prodready.extractors.env import extract_env
    from prodready.extractors.migrations import extract_migrations
    from prodready.extractors.routes import extract_routes
    from prodready.extractors.supabase import extract_supabase
    from prodready.extractors.ui_actions import extract_ui_actions

    return [
        ("routes", extract_routes),
        ("endpoints", extract_endpoints),
        ("ui_actions", extract_ui_actions),
        ("callsites", extract_callsites),
        ("supabase", extract_supabase),
        ("migrations", extract_migrations),
        ("env", extract_env),
    ]


def run_extractors(graph: AppGraph, ctx: ExtractorContext) -> AppGraph:
    """Run every registered extractor against one graph."""
    for name, extract in _registry():
        before = graph.count()
        extract(graph, ctx)
        logger.debug(
            "extractor finished", extractor=name, nodes=graph.count() - before
        )
    return graph


__all__ = [
    "Extractor",
    "ExtractorContext",
    "for_each_source",
    "run_extractors",
]
