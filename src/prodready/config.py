"""Scanner defaults and environment overrides.

Environment variables:
    PRODREADY_DEBUG: "1"/"true" enables debug logging.
    PRODREADY_EXCLUDE: Comma-separated extra paths to exclude from the
        file index (relative to the project root or absolute).
    PRODREADY_BASELINE: Baseline filename looked up in the project root.
"""

from __future__ import annotations

import os

# Environment variable names
ENV_DEBUG = "PRODREADY_DEBUG"
ENV_EXCLUDE = "PRODREADY_EXCLUDE"
ENV_BASELINE = "PRODREADY_BASELINE"

# ---------------------------------------------------------------------------
# File index
# ---------------------------------------------------------------------------

CODE_EXTS = frozenset({".ts", ".tsx", ".js", ".jsx"})

DEFAULT_INCLUDE = (
    "**/*.ts",
    "**/*.tsx",
    "**/*.js",
    "**/*.jsx",
)

DEFAULT_EXCLUDE_DIRS = (
    "node_modules",
    ".next",
    "out",
    "dist",
    "build",
    ".git",
    "coverage",
    # the scanner itself when vendored into the app repo
    "prod-readiness-scanner",
    "packages/prod-readiness-scanner",
)

MIGRATION_GLOB = "supabase/migrations/**/*.sql"

# skip parsing for large files (likely bundled/minified)
MAX_PARSE_BYTES = 500_000

# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

APP_ROOTS = ("src/app", "app")

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")

ENV_EXAMPLE_FILES = (
    ".env.example",
    "env.example",
    ".env.local.example",
    ".env.sample",
)

PUBLIC_ENV_PREFIXES = ("NEXT_PUBLIC_", "EXPO_PUBLIC_", "VITE_", "PUBLIC_")

# injected by the runtime/platform, never expected in .env.example
PLATFORM_ENV_VARS = frozenset(
    {
        "NODE_ENV",
        "NEXT_RUNTIME",
        "CI",
        "VERCEL",
        "VERCEL_ENV",
        "VERCEL_URL",
        "VERCEL_REGION",
        "PORT",
    }
)

# ---------------------------------------------------------------------------
# Reporting / CLI
# ---------------------------------------------------------------------------

VALIDATION_CONTEXT_SCHEMA_VERSION = "1.0"

SEVERITY_ORDER = ("LOW", "MEDIUM", "HIGH", "CRITICAL")

DEFAULT_OUT_DIR = "./audit"
DEFAULT_FORMATS = ("json", "md")
DEFAULT_FAIL_ON = "CRITICAL"

JSON_REPORT_NAME = "validation-context.json"
MD_REPORT_NAME = "validation-context.md"

BASELINE_FILENAME = os.environ.get(ENV_BASELINE, "validation-baseline.json")

# wrapping callers only keep the tail of the child's output
INVOKE_TIMEOUT_SECONDS = 120
INVOKE_OUTPUT_TAIL = 500


def debug_enabled() -> bool:
    return os.environ.get(ENV_DEBUG, "").lower() in ("1", "true", "yes")


def env_excludes() -> list[str]:
    """Extra exclude paths from PRODREADY_EXCLUDE."""
    raw = os.environ.get(ENV_EXCLUDE, "")
    return [p.strip() for p in raw.split(",") if p.strip()]
