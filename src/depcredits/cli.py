"""Command-line interface for depcredits."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from depcredits.errors import DepCreditsError
from depcredits.graph.cargo import DEFAULT_TIMEOUT
from depcredits.pipeline import run


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="depcredits",
        description="Generate a CREDITS.md listing the dependencies a Cargo package actually uses.",
    )
    parser.add_argument(
        "-m",
        "--manifest-path",
        type=Path,
        default=None,
        help="Path to the Cargo.toml file to use (default: ./Cargo.toml)",
    )
    parser.add_argument(
        "-t",
        "--target",
        default=None,
        help="Limit credits to dependencies used by this target triple",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output file path (default: <credits-dir>/CREDITS.md)",
    )
    parser.add_argument(
        "--print",
        action="store_true",
        dest="print_only",
        help="Print the credits to STDOUT instead of writing a file",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="Seconds to wait for each cargo command (default: %(default)s)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) output",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if args.verbose:
        logging.getLogger("depcredits").setLevel(logging.DEBUG)

    try:
        run(
            args.manifest_path,
            target=args.target,
            output=args.output,
            print_only=args.print_only,
            timeout=args.timeout,
        )
    except DepCreditsError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)
