"""Tests for baseline loading and suppression matching."""

import json
from pathlib import Path

import pytest

from prodready.baseline import (
    apply_baseline,
    baseline_from_findings,
    baseline_path,
    is_finding_suppressed,
    load_baseline,
    write_baseline,
)
from prodready.models import (
    BaselineEntry,
    EvidenceRef,
    Finding,
    RecommendedFix,
    ValidationBaseline,
)


def finding(code="PERF-1", path="src/lib/posts.ts", line=12, id=None):
    return Finding(
        id=id or f"{code.lower()}-SupabaseQuery:{path}:posts:select:{line}",
        code=code,
        category="performance",
        severity="HIGH",
        confidence="MEDIUM",
        title="List query without pagination",
        description="Select on posts has no .range() or .limit().",
        evidence=[EvidenceRef(file_path=path, line=line)],
        recommended_fix=RecommendedFix(type="code", notes=["paginate"]),
    )


def baseline(*entries: dict) -> ValidationBaseline:
    return ValidationBaseline.model_validate({"suppress": list(entries)})


class TestMatching:
    def test_rule_only_suppresses_every_instance(self):
        b = baseline({"ruleId": "PERF-1"})
        assert is_finding_suppressed(finding(), b)
        assert is_finding_suppressed(finding(path="other.ts"), b)
        assert not is_finding_suppressed(finding(code="PERF-2"), b)

    def test_no_baseline(self):
        assert not is_finding_suppressed(finding(), None)
        assert not is_finding_suppressed(finding(), baseline())

    def test_gap_id(self):
        f = finding()
        assert is_finding_suppressed(
            f, baseline({"ruleId": "PERF-1", "gapId": f.id})
        )
        assert not is_finding_suppressed(
            f, baseline({"ruleId": "PERF-1", "gapId": "perf-1-other"})
        )

    def test_gap_id_requires_rule_id(self):
        f = finding()
        assert not is_finding_suppressed(
            f, baseline({"ruleId": "PERF-2", "gapId": f.id})
        )

    def test_file_path_substring(self):
        b = baseline({"ruleId": "PERF-1", "filePath": "lib/posts"})
        assert is_finding_suppressed(finding(), b)
        assert not is_finding_suppressed(finding(path="src/app/page.tsx"), b)

    def test_file_path_glob(self):
        b = baseline({"ruleId": "PERF-1", "filePath": "src/**/*.ts"})
        assert is_finding_suppressed(finding(), b)
        assert not is_finding_suppressed(finding(path="src/app/page.tsx"), b)

    def test_line_must_match(self):
        b = baseline({"ruleId": "PERF-1", "filePath": "posts.ts", "line": 12})
        assert is_finding_suppressed(finding(line=12), b)
        assert not is_finding_suppressed(finding(line=13), b)

    def test_all_fields_must_match(self):
        f = finding()
        b = baseline(
            {"ruleId": "PERF-1", "gapId": f.id, "filePath": "elsewhere.ts"}
        )
        assert not is_finding_suppressed(f, b)


class TestApplyBaseline:
    def test_marks_copies_and_keeps_order(self):
        a = finding(line=1)
        b = finding(line=2)
        out = apply_baseline([a, b], baseline({"ruleId": "PERF-1", "line": 2}))

        assert [f.id for f in out] == [a.id, b.id]
        assert [f.suppressed for f in out] == [False, True]
        # originals are untouched
        assert not b.suppressed


class TestBaselineFiles:
    def test_baseline_path(self, tmp_path: Path):
        assert baseline_path(tmp_path) == tmp_path / "validation-baseline.json"
        assert baseline_path(tmp_path, "ci/b.json") == tmp_path / "ci/b.json"
        absolute = tmp_path / "x.json"
        assert baseline_path(Path("/elsewhere"), absolute) == absolute

    def test_missing_file(self, tmp_path: Path):
        assert load_baseline(tmp_path / "validation-baseline.json") is None

    @pytest.mark.parametrize(
        "content", ["{ nope", '{"suppress": [{"filePath": "x"}]}', "[]"]
    )
    def test_invalid_file_is_ignored(self, tmp_path: Path, content):
        path = tmp_path / "validation-baseline.json"
        path.write_text(content)
        assert load_baseline(path) is None

    def test_load_valid_file(self, tmp_path: Path):
        path = tmp_path / "validation-baseline.json"
        path.write_text(
            json.dumps(
                {
                    "version": "1",
                    "suppress": [
                        {"ruleId": "DB-4", "filePath": "supabase/migrations"}
                    ],
                }
            )
        )
        loaded = load_baseline(path)
        assert loaded.suppress == [
            BaselineEntry(rule_id="DB-4", file_path="supabase/migrations")
        ]

    def test_round_trip_accepts_current_findings(self, tmp_path: Path):
        findings = [finding(line=1), finding(code="PERF-2", line=1)]
        path = write_baseline(
            baseline_from_findings(findings), tmp_path / "b" / "base.json"
        )

        data = json.loads(path.read_text())
        assert data["suppress"][0]["ruleId"] == "PERF-1"
        assert data["suppress"][0]["gapId"] == findings[0].id

        loaded = load_baseline(path)
        assert all(is_finding_suppressed(f, loaded) for f in findings)
        assert not is_finding_suppressed(finding(line=5), loaded)
