"""File index: catalog the code and SQL migration files of a project."""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import structlog
from pathspec import PathSpec

from prodready.config import (
    CODE_EXTS,
    DEFAULT_EXCLUDE_DIRS,
    DEFAULT_INCLUDE,
    MIGRATION_GLOB,
)
from prodready.errors import ProjectRootError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FileEntry:
    """One discovered file."""

    file_path: Path  # absolute
    relative_path: str  # POSIX, relative to the project root
    ext: str
    is_migration: bool


@lru_cache(maxsize=128)
def _pathspec(patterns: tuple[str, ...]) -> PathSpec:
    return PathSpec.from_lines("gitwildmatch", patterns)


def glob_match(path: str, pattern: str) -> bool:
    """Match a POSIX relative path against a gitignore-style glob."""
    return _pathspec((pattern,)).match_file(path)


def _is_excluded(
    rel: str,
    name: str,
    exclude_dirs: Sequence[str],
) -> bool:
    return any(
        rel == d or rel.startswith(d + "/") or name == d for d in exclude_dirs
    )


def build_file_index(
    project_root: Path,
    include: Sequence[str] = DEFAULT_INCLUDE,
    exclude_dirs: Sequence[str] = DEFAULT_EXCLUDE_DIRS,
    exclude_paths: Iterable[Path | str] = (),
) -> list[FileEntry]:
    """Walk the project tree and return the file catalog.

    SQL files under the migrations directory are tagged `is_migration`;
    everything else must be a code file matching one of `include`.
    Entries are sorted per directory so the catalog is deterministic.
    """
    root = Path(project_root).resolve()
    if not root.exists():
        raise ProjectRootError(root, "does not exist")
    if not root.is_dir():
        raise ProjectRootError(root)

    excluded = [_resolve_exclude(root, p) for p in exclude_paths]
    include_spec = _pathspec(tuple(include))
    migration_spec = _pathspec((MIGRATION_GLOB,))
    results: list[FileEntry] = []
    seen: set[str] = set()

    def is_excluded_path(full: Path) -> bool:
        return any(full == p or p in full.parents for p in excluded)

    def walk(directory: Path) -> None:
        try:
            entries = sorted(os.scandir(directory), key=lambda e: e.name)
        except OSError as e:
            logger.debug(
                "skipping unreadable directory",
                path=str(directory),
                error=str(e),
            )
            return

        for entry in entries:
            full = Path(entry.path)
            rel = full.relative_to(root).as_posix()

            if entry.is_dir(follow_symlinks=False):
                if _is_excluded(rel, entry.name, exclude_dirs):
                    continue
                if is_excluded_path(full):
                    continue
                walk(full)
                continue

            if not entry.is_file():
                continue

            ext = full.suffix.lower()
            is_migration = ext == ".sql" and migration_spec.match_file(rel)
            if not is_migration and ext not in CODE_EXTS:
                continue
            if is_excluded_path(full):
                continue
            if not is_migration and not include_spec.match_file(rel):
                continue
            if rel in seen:
                continue
            seen.add(rel)

            results.append(
                FileEntry(
                    file_path=full,
                    relative_path=rel,
                    ext=ext,
                    is_migration=is_migration,
                )
            )

    walk(root)
    logger.debug(
        "file index built",
        root=str(root),
        files=len(results),
        migrations=sum(1 for f in results if f.is_migration),
    )
    return results


def _resolve_exclude(root: Path, path: Path | str) -> Path:
    p = Path(path)
    if not p.is_absolute():
        p = root / p
    return p.resolve()
