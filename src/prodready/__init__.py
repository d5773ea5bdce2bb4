"""prodready - static production-readiness scanner for Next.js + Supabase apps.

Indexes a project tree, builds an app graph of routes, endpoints, calls,
queries, UI actions, env vars and migrations, then runs readiness rules
against it and reports gaps plus a ship/no-ship verdict.
"""

__version__ = "1.0.0"

SCANNER_VERSION = __version__

__all__ = ["SCANNER_VERSION", "__version__"]
