"""Pydantic models for findings, baselines and the validation context.

These are the external contract: consumers read the JSON by camelCase
field names, so every model serializes by alias. Python code uses the
snake_case attribute names; both spellings are accepted on input.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from prodready.config import VALIDATION_CONTEXT_SCHEMA_VERSION

Severity = Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]
Confidence = Literal["LOW", "MEDIUM", "HIGH"]
ShipStatus = Literal["ship", "no-ship", "needs-review"]
ChecklistStatus = Literal["pass", "fail", "skip"]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Findings
# ---------------------------------------------------------------------------


class EvidenceRef(CamelModel):
    """A source location backing a finding."""

    file_path: str
    line: int | None = None
    end_line: int | None = None
    snippet: str | None = None
    reason: str | None = None


class RecommendedFix(CamelModel):
    type: str
    notes: list[str] = Field(default_factory=list)


class Related(CamelModel):
    """Cross references from a finding to other graph facts."""

    ui_action_ids: list[str] | None = None
    endpoint_ids: list[str] | None = None
    route_paths: list[str] | None = None
    table_names: list[str] | None = None
    env_vars: list[str] | None = None


class Finding(CamelModel):
    """One rule violation. Built by `create_finding`, never by hand."""

    model_config = ConfigDict(frozen=True)

    id: str
    code: str
    category: str
    severity: Severity
    confidence: Confidence
    title: str
    description: str
    related: Related | None = None
    evidence: list[EvidenceRef] = Field(min_length=1)
    recommended_fix: RecommendedFix
    suppressed: bool = False

    @property
    def primary(self) -> EvidenceRef:
        return self.evidence[0]


# ---------------------------------------------------------------------------
# Baseline
# ---------------------------------------------------------------------------


class BaselineEntry(CamelModel):
    rule_id: str
    file_path: str | None = None
    line: int | None = None
    gap_id: str | None = None


class ValidationBaseline(CamelModel):
    version: str | None = None
    suppress: list[BaselineEntry] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Validation context
# ---------------------------------------------------------------------------


class Gap(CamelModel):
    """A finding as the dashboard consumes it."""

    id: str
    severity: str  # lower-case
    category: str
    message: str
    fix: str
    file_path: str | None = None
    line: int | None = None
    rule_id: str | None = None
    evidence: list[EvidenceRef] | None = None
    confidence: str | None = None
    title: str | None = None
    suppressed: bool | None = None


class RouteEntry(CamelModel):
    path: str
    method: str | None = None
    status: str | None = None
    description: str | None = None


class ShipChecklistItem(CamelModel):
    id: str
    label: str
    status: ChecklistStatus
    # always present in the JSON, null when there is nothing to say
    detail: str | None = None

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ValidationContext(CamelModel):
    """The scan result written to validation-context.json."""

    schema_version: str = VALIDATION_CONTEXT_SCHEMA_VERSION
    generated_at: str
    scanner_version: str
    routes: list[RouteEntry] = Field(default_factory=list)
    gaps: list[Gap] = Field(default_factory=list)
    ship_checklist: list[ShipChecklistItem] = Field(default_factory=list)
    ship_checklist_status: ShipStatus | None = None
    suppressed_count: int | None = None
    error: str | None = None

    def to_json_dict(self) -> dict[str, Any]:
        data = super().to_json_dict()
        data["shipChecklist"] = [i.to_json_dict() for i in self.ship_checklist]
        return data
