"""validation-context.md writer: a human summary of the JSON report."""

from __future__ import annotations

from pathlib import Path

import structlog

from prodready.config import SEVERITY_ORDER
from prodready.errors import ReportWriteError
from prodready.models import Gap, ValidationContext

logger = structlog.get_logger(__name__)


def _gap_lines(gap: Gap) -> list[str]:
    marker = " _(suppressed)_" if gap.suppressed else ""
    lines = [f"- **{gap.rule_id or gap.id}** {gap.message}{marker}"]
    if gap.file_path:
        location = gap.file_path
        if gap.line is not None:
            location = f"{location}:{gap.line}"
        lines.append(f"  - `{location}`")
    lines.append(f"  - Fix: {gap.fix}")
    lines.append("")
    return lines


def render_markdown(context: ValidationContext) -> str:
    status = context.ship_checklist_status or "needs-review"
    lines = [
        "# Production Readiness Report",
        "",
        f"**Generated:** {context.generated_at} | "
        f"**Scanner:** {context.scanner_version} | "
        f"**Schema:** {context.schema_version}",
        "",
    ]
    if context.error:
        lines += ["## Scan failed", "", f"> {context.error}", ""]

    lines += [
        "## Ship status",
        "",
        f"**Status:** `{status}`",
        "",
        "---",
        "## Routes",
        "",
        "| Path | Description |",
        "|------|-------------|",
    ]
    for route in context.routes:
        lines.append(f"| {route.path} | {route.description or '-'} |")
    lines += ["", "---", "## Gaps (findings)", ""]

    for severity in reversed(SEVERITY_ORDER):
        gaps = [g for g in context.gaps if g.severity == severity.lower()]
        if not gaps:
            continue
        lines += [f"### {severity} ({len(gaps)})", ""]
        for gap in gaps:
            lines += _gap_lines(gap)

    if context.suppressed_count:
        lines += ["---", "", f"**Suppressed:** {context.suppressed_count}", ""]

    lines += ["---", "", "## Ship checklist", ""]
    for item in context.ship_checklist:
        check = "x" if item.status == "pass" else " "
        suffix = f" ({item.status}: {item.detail})" if item.detail else ""
        lines.append(f"- [{check}] {item.label}{suffix}")
    return "\n".join(lines) + "\n"


def write_markdown_report(context: ValidationContext, path: Path) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_markdown(context), encoding="utf-8")
    except OSError as e:
        raise ReportWriteError(path, e) from e
    logger.debug("wrote markdown report", path=str(path))
    return path
