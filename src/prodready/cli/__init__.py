"""prodready CLI - production-readiness scans for Next.js + Supabase apps.

Uses tyro for type-driven CLI generation from dataclasses.
"""

from __future__ import annotations

from typing import Annotated

import tyro

from prodready.cli.commands.baseline import Baseline
from prodready.cli.commands.scan import Scan
from prodready.cli.commands.version import Version

_Scan = Annotated[Scan, tyro.conf.subcommand("scan")]
_Baseline = Annotated[Baseline, tyro.conf.subcommand("baseline")]
_Version = Annotated[Version, tyro.conf.subcommand("version")]

Command = _Scan | _Baseline | _Version


def main(args: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    # configure structlog (respects PRODREADY_DEBUG env var)
    from prodready.logging_config import configure_logging

    configure_logging()

    try:
        cmd = tyro.cli(
            Command,  # type: ignore[arg-type]
            prog="prodready",
            description="Static production-readiness scanner.",
            args=args,
        )
        return cmd.run()
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        from prodready import console

        console.error(str(e))
        return 1
