"""Main CLI entry point for the segtrip command-line tool.

Reads Unicode text from a file or standard input and rewrites it to standard
output with segment boundaries marked by a delimiter, either re-encoded or as
a listing of scalar values.
"""

import argparse
import logging
import os
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Dict, List, Optional

from segtrip import __version__
from segtrip.api import trip
from segtrip.character import Encoding
from segtrip.segmentation import SegmentationMode
from segtrip.shared import (
    ConfigValidationError,
    EncodingError,
    SourceUnavailableError,
    configure_logging,
    get_logger,
)
from segtrip.shared.config import TripConfig

PROGRAM = "segtrip"
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT

# Encoding spellings shown in --help
ENCODING_CHOICES = ["UTF-8", "UTF-16", "UTF-16LE", "UTF-16BE", "ASCII", "latin1"]


def _encoding_arg(value: str) -> Encoding:
    try:
        return Encoding.from_label(value)
    except EncodingError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _segmenter_version() -> str:
    try:
        return version("uniseg")
    except PackageNotFoundError:
        return "unknown"


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog=PROGRAM,
        description=(
            "Rewrite Unicode text from FILE (or standard input) to standard "
            "output with segment boundaries, as determined by the locale "
            "independent rules of UAX #29 and UAX #14, marked by a delimiter."
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__} (uniseg {_segmenter_version()})",
    )

    parser.add_argument(
        "file",
        nargs="?",
        metavar="FILE",
        help="Input file (default: standard input, also '-')"
    )

    segmentation = parser.add_argument_group("segmentation")
    modes = segmentation.add_mutually_exclusive_group()
    modes.add_argument(
        "-g", "--grapheme-cluster",
        dest="mode", action="store_const", const=SegmentationMode.GRAPHEME_CLUSTER,
        help="Grapheme cluster boundaries"
    )
    modes.add_argument(
        "-w", "--word",
        dest="mode", action="store_const", const=SegmentationMode.WORD,
        help="Word boundaries (default)"
    )
    modes.add_argument(
        "-s", "--sentence",
        dest="mode", action="store_const", const=SegmentationMode.SENTENCE,
        help="Sentence boundaries"
    )
    modes.add_argument(
        "-l", "--line",
        dest="mode", action="store_const", const=SegmentationMode.LINE_BREAK,
        help="Line break opportunity boundaries"
    )

    parser.add_argument(
        "--encoding", "-e",
        type=_encoding_arg,
        metavar="ENC",
        help=(
            f"Input encoding, one of {', '.join(ENCODING_CHOICES)}. Guessed if "
            "unspecified. Output uses the input encoding, except for ASCII and "
            "latin1 where UTF-8 is written."
        )
    )
    parser.add_argument(
        "--delimiter", "-d",
        metavar="SEP",
        help="UTF-8 delimiter written at every boundary (default: '|')"
    )
    parser.add_argument(
        "--ascii", "-a",
        action="store_const", const=True,
        help="Write space separated U+XXXX scalar values in US-ASCII"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON configuration file; command-line options take precedence"
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    verbosity.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only report errors"
    )

    return parser


def build_config(args: argparse.Namespace) -> TripConfig:
    """Merge the optional configuration file with command-line options.

    Raises:
        ConfigValidationError: If the file or the merged values are invalid
    """
    config = TripConfig.from_file(args.config) if args.config else TripConfig()

    overrides: Dict[str, Any] = {}
    if args.file is not None:
        overrides["source"] = args.file
    if args.mode is not None:
        overrides["mode"] = args.mode
    if args.encoding is not None:
        overrides["encoding"] = args.encoding
    if args.delimiter is not None:
        # Raw argument bytes, even when they are not valid UTF-8
        overrides["delimiter"] = os.fsencode(args.delimiter)
    if args.ascii is not None:
        overrides["ascii"] = args.ascii

    return config.override(**overrides)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    configure_logging(PROGRAM, level=level)
    logger = get_logger(__name__, None, "cli")

    try:
        config = build_config(args)
    except ConfigValidationError as e:
        logger.error(str(e))
        return EXIT_FAILURE

    if config.program != PROGRAM:
        configure_logging(config.program, level=level)

    try:
        result = trip(config)
    except SourceUnavailableError as e:
        logger.error(str(e))
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return EXIT_INTERRUPTED

    if logger.is_enabled_for(logging.DEBUG):
        metrics = result.metrics
        logger.debug(
            f"{config.source}: {result.encoding.value} ({result.detection.method.value}), "
            f"{metrics.scalars_in} scalar values, {metrics.boundaries} boundaries, "
            f"{metrics.malformed} malformed, {metrics.processing_time_ms:.1f}ms "
            f"({metrics.scalars_per_second:.0f} scalar values/s)",
            extra=metrics.as_dict(),
        )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
