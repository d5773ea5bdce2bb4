"""validation-context.json writer."""

from __future__ import annotations

import json
from pathlib import Path

import structlog

from prodready.errors import ReportWriteError
from prodready.models import ValidationContext

logger = structlog.get_logger(__name__)


def render_json(context: ValidationContext) -> str:
    return json.dumps(context.to_json_dict(), indent=2, ensure_ascii=False)


def write_json_report(context: ValidationContext, path: Path) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_json(context) + "\n", encoding="utf-8")
    except OSError as e:
        raise ReportWriteError(path, e) from e
    logger.debug("wrote json report", path=str(path))
    return path


def read_json_report(path: Path) -> ValidationContext:
    return ValidationContext.model_validate_json(path.read_text("utf-8"))
