"""Tests for the prodready command line."""

import json

from prodready import SCANNER_VERSION
from prodready.cli import main

NO_RLS = "create table public.notes (id uuid primary key);\n"


def test_version(capsys):
    assert main(["version"]) == 0
    out = capsys.readouterr().out
    assert f"scanner: {SCANNER_VERSION}" in out
    assert "schema: 1.0" in out


class TestScanCommand:
    def test_clean_project(self, tree, capsys):
        tree.write("src/app/page.tsx", "export default function H() {}")

        code = main(["scan", "--project", str(tree.root), "--quiet"])

        assert code == 0
        out = capsys.readouterr().out
        report = tree.root / "audit" / "validation-context.json"
        assert "Wrote " in out
        assert "validation-context.md" in out
        data = json.loads(report.read_text())
        assert data["shipChecklistStatus"] == "ship"
        assert data["routes"][0]["path"] == "/"

    def test_blocking_findings_exit_1(self, tree, capsys):
        tree.write("supabase/migrations/001.sql", NO_RLS)

        code = main(["scan", "--project", str(tree.root)])

        assert code == 1
        captured = capsys.readouterr()
        assert "no-ship" in captured.out
        assert "at or above CRITICAL" in captured.err

    def test_fail_on_and_format(self, tree):
        tree.write(
            "src/lib/q.ts",
            "export const q = (s: any) => s.from('posts').select('id');",
        )
        args = ["scan", "--project", str(tree.root), "--quiet"]

        assert main([*args, "--fail-on", "high", "--format", "md"]) == 1
        assert (tree.root / "audit" / "validation-context.md").exists()
        assert not (tree.root / "audit" / "validation-context.json").exists()
        assert main([*args, "--fail-on", "CRITICAL"]) == 0

    def test_invalid_fail_on_warns_and_uses_default(self, tree, capsys):
        code = main(
            ["scan", "--project", str(tree.root), "--fail-on", "urgent"]
        )
        assert code == 0
        assert "invalid --fail-on" in capsys.readouterr().err

    def test_custom_out_dir(self, tree, tmp_path):
        out = tmp_path / "reports"
        code = main(
            ["scan", "--project", str(tree.root), "--out", str(out), "--quiet"]
        )
        assert code == 0
        assert (out / "validation-context.json").exists()

    def test_missing_project_is_fatal(self, tmp_path, capsys):
        code = main(["scan", "--project", str(tmp_path / "missing")])
        assert code == 2
        assert "does not exist" in capsys.readouterr().err

    def test_unknown_flag(self, capsys):
        assert main(["scan", "--nope"]) == 2


class TestBaselineCommand:
    def test_baseline_then_scan(self, tree, capsys):
        tree.write("supabase/migrations/001.sql", NO_RLS)
        root = str(tree.root)

        assert main(["baseline", "--project", root]) == 0
        baseline = json.loads(
            (tree.root / "validation-baseline.json").read_text()
        )
        assert [e["ruleId"] for e in baseline["suppress"]] == ["DB-1"]
        assert "baselined 1 finding(s)" in capsys.readouterr().out

        assert main(["scan", "--project", root, "--quiet"]) == 0
        report = json.loads(
            (tree.root / "audit" / "validation-context.json").read_text()
        )
        assert report["suppressedCount"] == 1

    def test_output_path(self, tree, tmp_path):
        target = tmp_path / "b.json"
        code = main(
            ["baseline", "--project", str(tree.root), "--output", str(target)]
        )
        assert code == 0
        assert json.loads(target.read_text())["suppress"] == []

    def test_missing_project(self, tmp_path):
        assert main(["baseline", "--project", str(tmp_path / "x")]) == 2
