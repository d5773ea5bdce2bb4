"""Run the scanner as a child process on behalf of another service.

A dashboard backend calls `invoke_scan` to refresh the report; the child
writes its files and only the exit code and output tails come back.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import Any

import structlog
from pydantic import Field

from prodready.config import (
    DEFAULT_FAIL_ON,
    INVOKE_OUTPUT_TAIL,
    INVOKE_TIMEOUT_SECONDS,
)
from prodready.models import CamelModel

logger = structlog.get_logger(__name__)

MESSAGE_OK = "Scan complete. Refresh the dashboard."
MESSAGE_BLOCKED = "Scan found blocking findings."
MESSAGE_FAILED = "Scan failed."
MESSAGE_NOT_RUN = "Scanner failed to run"

_MESSAGES = {0: MESSAGE_OK, 1: MESSAGE_BLOCKED}


class InvokeResult(CamelModel):
    ok: bool
    exit_code: int | None = Field(default=None)
    stdout: str = ""
    stderr: str = ""
    message: str | None = None
    error: str | None = None
    detail: str | None = None


def _tail(text: str | bytes | None, limit: int = INVOKE_OUTPUT_TAIL) -> str:
    if text is None:
        return ""
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    return text[-limit:]


def scan_command(
    project_root: Path, out: Path | str, fail_on: str = DEFAULT_FAIL_ON
) -> list[str]:
    return [
        sys.executable,
        "-m",
        "prodready",
        "scan",
        "--project",
        str(project_root),
        "--out",
        str(out),
        "--format",
        "json,md",
        "--fail-on",
        fail_on,
    ]


def invoke_scan(
    project_root: Path | str,
    out: Path | str | None = None,
    fail_on: str = DEFAULT_FAIL_ON,
    timeout: float = INVOKE_TIMEOUT_SECONDS,
) -> InvokeResult:
    """Scan `project_root` in a subprocess, reports written to `out`.

    `out` defaults to the project root itself, where dashboards look for
    validation-context.json.
    """
    root = Path(project_root).resolve()
    cmd = scan_command(root, out if out is not None else root, fail_on)
    logger.debug("invoking scanner", cmd=cmd, timeout=timeout)
    try:
        result = subprocess.run(
            cmd,
            cwd=root,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        logger.warning("scanner timed out", timeout=timeout)
        return InvokeResult(
            ok=False,
            stdout=_tail(e.stdout),
            stderr=_tail(e.stderr),
            error=MESSAGE_NOT_RUN,
            detail=f"timed out after {timeout:g}s",
        )
    except OSError as e:
        logger.warning("scanner failed to start", error=str(e))
        return InvokeResult(ok=False, error=MESSAGE_NOT_RUN, detail=str(e))

    return InvokeResult(
        ok=result.returncode == 0,
        exit_code=result.returncode,
        stdout=_tail(result.stdout),
        stderr=_tail(result.stderr),
        message=_MESSAGES.get(result.returncode, MESSAGE_FAILED),
    )


def invoke_scan_json(*args: Any, **kwargs: Any) -> dict[str, Any]:
    """`invoke_scan` serialized with camelCase keys."""
    return invoke_scan(*args, **kwargs).to_json_dict()
