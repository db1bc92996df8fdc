"""Command-line interface for buildscope."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from buildscope.errors import BuildscopeError
from buildscope.graph import ORDERINGS
from buildscope.pipeline import run

logger = logging.getLogger("buildscope")


def _property(value: str) -> tuple[str, str]:
    name, sep, prop_value = value.partition("=")
    if not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {value!r}")
    return name, prop_value if sep else "true"


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="buildscope",
        description="Analyze an Ant or Maven build descriptor into comparable artifacts.",
    )
    parser.add_argument(
        "project_dir",
        type=Path,
        help="Root directory of the project to analyze",
    )
    parser.add_argument(
        "output_dir",
        type=Path,
        help="Directory receiving targets, includes, excludes and developer-included-tests",
    )
    parser.add_argument(
        "descriptor",
        help="Descriptor file name relative to the project root (e.g. build.xml, pom.xml)",
    )
    parser.add_argument(
        "-D",
        dest="properties",
        metavar="NAME=VALUE",
        action="append",
        type=_property,
        default=[],
        help="Define a property, overriding the descriptor (repeatable)",
    )
    parser.add_argument(
        "--order",
        choices=ORDERINGS,
        default=None,
        help="Target ordering (default: from settings, else topological)",
    )
    parser.add_argument(
        "--no-default-excludes",
        action="store_false",
        dest="default_excludes",
        default=None,
        help="Do not add the built-in default exclude patterns",
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
        logging.getLogger("buildscope").setLevel(logging.DEBUG)

    try:
        run(
            args.project_dir,
            args.output_dir,
            args.descriptor,
            properties=dict(args.properties),
            target_order=args.order,
            default_excludes=args.default_excludes,
        )
    except (BuildscopeError, OSError) as e:
        logger.error("buildscope: %s", e)
        sys.exit(1)
