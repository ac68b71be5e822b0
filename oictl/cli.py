"""
oictl CLI - load Documents and Model definitions into the document service.

Usage:
    oictl PATH
    python -m oictl PATH

PATH is a single definition file or a directory; a directory is expanded to
its immediate *.yaml / *.yml children.

Environment:
    OI_TOKEN          Bearer token (required for Model definitions)
    OI_BASE_URL       Service base URL (default: http://localhost:8081)
    OI_TIMEOUT        Optional HTTP/git timeout in seconds
    OICTL_WORK_DIR    Parent directory for temporary checkouts
    OICTL_LOG_LEVEL   Logging level (default: WARNING)
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from oictl.core.config import LoaderConfig
from oictl.core.errors import OictlError
from oictl.definitions.discovery import expand_definition_paths
from oictl.loader import DOCUMENTS_COUNTER, DefinitionLoader, LoadReport

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


# ─────────────────────────────────────────────────────────────────────────────
# Output helpers
# ─────────────────────────────────────────────────────────────────────────────

def _configure_logging(level_name: str) -> None:
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format=_LOG_FORMAT, stream=sys.stderr)


def _print_progress(counter: str, value: int) -> None:
    if counter == DOCUMENTS_COUNTER:
        print(f"\rDocuments loaded: {value}", end="", flush=True)


def _print_notice(message: str) -> None:
    print(f"\n{message}")


def _print_summary(report: LoadReport) -> None:
    if report.documents_loaded > 0:
        print("\nAll Documents loaded successfully.")
    if report.models_loaded > 0:
        print("\nAll Models loaded successfully.")


# ─────────────────────────────────────────────────────────────────────────────
# Argument parser
# ─────────────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="oictl",
        description="Load Documents and Model definitions into the document service.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Examples:\n"
               "  oictl definitions/\n"
               "  oictl definitions/handbook.yaml\n"
               "  OI_TOKEN=... oictl models/assistant.yaml\n",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        metavar="PATH",
        help="Definition file, or directory of *.yaml/*.yml definition files.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.path is None:
        return 1

    config = LoaderConfig.from_env()
    _configure_logging(config.log_level)

    try:
        paths = expand_definition_paths(args.path)
    except OSError as exc:
        print(f"Error processing directory: {exc}")
        return 1

    try:
        with DefinitionLoader(
            config, progress=_print_progress, on_notice=_print_notice
        ) as loader:
            report = loader.load(paths)
    except (OictlError, ValueError, OSError) as exc:
        print(f"\nAn error occurred: {exc}")
        return 1

    _print_summary(report)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
