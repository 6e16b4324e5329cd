"""
Command line entry point.

Builds one layout with the reference box host and writes it as JSON or
Graphviz DOT.
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from .generators.errors import LayoutGenerationError
from .generators.layout.spatial_host import BoxSpatialHost
from .generators.rooms.builtin import TERMINUS_TEMPLATE_ID, builtin_catalog
from .generators.rooms.catalog_storage import load_catalog
from .pipeline.debug.graph_export import export_layout_dot, export_layout_json
from .pipeline.service import LayoutService
from .pipeline.settings import GeneratorSettings, load_settings
from .validation import ValidationError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spiregen",
        description="spiregen - seed-driven dungeon layout builder"
    )
    parser.add_argument(
        "--catalog",
        type=Path,
        default=None,
        help="Room catalog JSON file (default: builtin demo catalog).",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Generator settings JSON file.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Layout seed.",
    )
    parser.add_argument(
        "--format",
        choices=("json", "dot"),
        default="json",
        help="Output format.",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output file (default: stdout).",
    )
    parser.add_argument(
        "--attempts-per-step",
        type=int,
        default=None,
        help="Placement attempts per scheduler slice.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with an error when the finished layout fails validation.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging.",
    )
    return parser


def _resolve_settings(args: argparse.Namespace) -> GeneratorSettings:
    if args.settings is not None:
        settings = load_settings(args.settings)
    elif args.catalog is None:
        # The builtin catalog ships its own terminus room.
        settings = GeneratorSettings(terminus_template_id=TERMINUS_TEMPLATE_ID)
    else:
        settings = GeneratorSettings()
    if args.attempts_per_step is not None:
        settings = replace(settings, attempts_per_step=args.attempts_per_step)
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        catalog = load_catalog(args.catalog) if args.catalog is not None else builtin_catalog()
        service = LayoutService(catalog, BoxSpatialHost(), _resolve_settings(args))
        snapshot = service.generate(args.seed)
    except LayoutGenerationError as e:
        logger.error("Layout generation failed: %s", e)
        return 1

    result = service.last_result
    if args.strict:
        try:
            result.validation.raise_if_failed()
        except ValidationError as e:
            logger.error("Layout failed validation:\n%s", e)
            service.shutdown()
            return 1

    if args.format == "dot":
        text = export_layout_dot(snapshot, result.paths)
    else:
        text = export_layout_json(snapshot, result.paths, result.validation)

    if args.output is not None:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(text + "\n")
        logger.info("Wrote %s layout to %s", args.format, args.output)
    else:
        sys.stdout.write(text + "\n")

    service.shutdown()
    return 0
