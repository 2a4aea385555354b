"""
Instafilter — Main Entry Point

Apply one filter to a photo and save the result:

    instafilter photo.jpg out.png --filter gaussian_blur --radius 0.1
"""

import argparse
import logging
import sys
from typing import List, Optional

from .core import ParameterKind
from .oiio import OiioAdapter
from .processing import FILTER_REGISTRY, list_filters
from .services import EditSession, Settings
from .utils import configure_logging

logger = logging.getLogger(__name__)


def _slider(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}") from None
    if not 0.0 <= value <= 1.0:
        raise argparse.ArgumentTypeError(f"must be within [0, 1]: {text}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="instafilter",
        description="Apply a photo filter with normalized intensity/radius/scale sliders.",
    )
    parser.add_argument("input", nargs="?", help="image to filter")
    parser.add_argument("output", nargs="?", help="where to save the result")
    parser.add_argument(
        "--filter",
        dest="filter_id",
        choices=list(FILTER_REGISTRY),
        help="filter to apply (default: from settings, normally sepia_tone)",
    )
    for kind in ParameterKind:
        parser.add_argument(
            f"--{kind.value}",
            type=_slider,
            metavar="0..1",
            help=f"{kind.value} slider position",
        )
    parser.add_argument("--settings", help="path to settings.ini")
    parser.add_argument("--list-filters", action="store_true", help="list filters and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def _print_filters() -> None:
    for filter_obj in list_filters():
        kinds = ", ".join(k.value for k in ParameterKind if filter_obj.accepts(k))
        print(f"{filter_obj.filter_id:<14} {filter_obj.name:<14} [{kinds}]")


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line front end. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    logger.debug("OpenImageIO version: %s", OiioAdapter.get_oiio_version())

    if args.list_filters:
        _print_filters()
        return 0
    if not args.input or not args.output:
        parser.error("input and output are required unless --list-filters is given")

    try:
        session = EditSession(settings=Settings(args.settings))
    except ValueError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 1

    if args.filter_id:
        session.choose_filter(args.filter_id)
    for kind in ParameterKind:
        value = getattr(args, kind.value)
        if value is not None:
            session.set_slider(kind, value)

    if not session.load_image(args.input):
        print(f"Cannot read image: {args.input}", file=sys.stderr)
        return 1

    applied = ", ".join(
        f"{kind.value}={value:g}" for kind, value in session.pipeline.applied_parameters.items()
    )
    logger.info("%s (%s)", session.filter_display_name, applied or "no parameters")

    result = session.save(args.output)
    if not result.success:
        print(result.message, file=sys.stderr)
        return 1
    print(f"Saved {result.path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
