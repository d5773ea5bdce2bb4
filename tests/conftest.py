"""Shared fixtures: throwaway Next.js project trees."""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from prodready.graph import AppGraph
from prodready.scan import analyze


class ProjectTree:
    """Writes files into a temporary project root."""

    def __init__(self, root: Path):
        self.root = root

    def write(self, rel: str, content: str = "") -> Path:
        path = self.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(content).lstrip())
        return path

    def graph(self) -> AppGraph:
        graph, _ = analyze(self.root)
        return graph


@pytest.fixture
def tree(tmp_path: Path) -> ProjectTree:
    root = tmp_path / "app"
    root.mkdir()
    return ProjectTree(root)
