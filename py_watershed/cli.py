"""Command line entry point: extract the ridge network of an OFF terrain."""

import argparse
import sys
from typing import List, Optional

import structlog

from .config import settings
from .core.errors import WatershedError
from .core.watershed import WatershedExtractor, WatershedOptions
from .io.export import write_geojson
from .io.off_reader import read_off
from .utils.logging import configure_logging

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="py-watershed",
        description="Extract the drainage-divide network of a triangulated terrain",
    )
    parser.add_argument("mesh", help="Input terrain in OFF format")
    parser.add_argument("--output", "-o", help="Write traced ridge lines as GeoJSON")
    parser.add_argument("--max-trace-steps", type=int, default=settings.max_trace_steps,
                        help="Maximum facet crossings per traced path")
    parser.add_argument("--no-trace", action="store_true",
                        help="Stop after saddle detection")
    parser.add_argument("--log-level", default=None,
                        help="Log level (defaults to WATERSHED_LOG_LEVEL)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    level = args.log_level or ("DEBUG" if settings.debug else settings.log_level)
    configure_logging(level, settings.log_format)

    options = WatershedOptions(
        max_trace_steps=args.max_trace_steps,
        trace_paths=not args.no_trace,
    )

    try:
        mesh = read_off(args.mesh)
        network = WatershedExtractor(mesh, options).run()
        if args.output:
            write_geojson(network, args.output)
    except (WatershedError, OSError) as e:
        logger.error("Watershed extraction failed", error=str(e),
                     error_type=type(e).__name__)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
