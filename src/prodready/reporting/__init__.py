"""Report assembly and the JSON / Markdown writers."""

from prodready.reporting.context import (
    build_error_context,
    build_validation_context,
    ship_status,
)
from prodready.reporting.json_report import write_json_report
from prodready.reporting.markdown import write_markdown_report

__all__ = [
    "build_error_context",
    "build_validation_context",
    "ship_status",
    "write_json_report",
    "write_markdown_report",
]
