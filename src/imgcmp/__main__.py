"""Command line interface for imgcmp."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Iterable, Optional, TypeVar

from . import __version__
from .compare import ComparisonResult, compare_images
from .errors import ImgcmpError
from .presets import (
    DEFAULT_PRESET,
    DIFF_MODES,
    CompareParams,
    DiffStyle,
    get_preset,
    parse_allowance,
    parse_color,
    parse_threshold,
)
from .report import write_json_report
from .utils.image_io import load_image, save_image

logger = logging.getLogger(__name__)

EXIT_MATCH = 0
EXIT_MISMATCH = 1
EXIT_ERROR = 2

T = TypeVar("T")

DESCRIPTION = """\
A simple pixel-wise image comparator.

For each pixel the channels are compared with their counterparts. If the
error of any channel exceeds the threshold the whole pixel is considered
different. If the number of different pixels exceeds the allowance, the
result is a mismatch.

Exit status is 0 when the images match, 1 when they don't and 2 when the
comparison could not be carried out (unreadable file, size mismatch...).
"""


def _argument_type(parse: Callable[[str], T], name: str) -> Callable[[str], T]:
    def convert(value: str) -> T:
        try:
            return parse(value)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(str(exc)) from exc

    convert.__name__ = name
    return convert


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imgcmp",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("first_image", help="Path to the first image in the comparison")
    parser.add_argument("second_image", help="Path to the second image in the comparison")
    parser.add_argument(
        "-o",
        "--output",
        help="Write the difference image to this path (format follows the extension)",
    )
    parser.add_argument(
        "-t",
        "--threshold",
        type=_argument_type(parse_threshold, "threshold"),
        help="Maximum allowed per-channel error in [0-1]; 0 requires an exact match",
    )
    parser.add_argument(
        "-e",
        "--error",
        dest="allowance",
        type=_argument_type(parse_allowance, "allowance"),
        help="Number (or percentage, e.g. 0.5%%) of pixels allowed to differ",
    )
    parser.add_argument(
        "--preset",
        default=DEFAULT_PRESET,
        help="Preset name (exact|tolerant|loose); explicit options override it",
    )
    parser.add_argument("--mode", choices=DIFF_MODES, help="Difference image style")
    parser.add_argument(
        "--highlight",
        type=_argument_type(parse_color, "color"),
        help="Highlight color for mismatched pixels (#RRGGBB or r,g,b)",
    )
    parser.add_argument(
        "--always-write",
        action="store_true",
        help="Write the difference image even when the images match",
    )
    parser.add_argument("--json", help="Write a JSON report to this path")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose", action="store_true", help="Print the share of different pixels"
    )
    verbosity.add_argument(
        "-s", "--silent", action="store_true", help="Print nothing, rely on the exit status"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args)

    try:
        preset = get_preset(args.preset)
    except KeyError as exc:
        parser.error(str(exc.args[0]))
        return EXIT_ERROR

    params = _override_params(preset.params, args)
    style = preset.style.with_overrides(mode=args.mode, highlight=args.highlight)

    try:
        return _run(args, params, style)
    except (ImgcmpError, OSError) as exc:
        if not args.silent:
            print(f"Error: {exc}", file=sys.stderr)
        logger.debug("Comparison aborted", exc_info=True)
        return EXIT_ERROR


def _configure_logging(args: argparse.Namespace) -> None:
    if args.verbose:
        level = logging.DEBUG
    elif args.silent:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _override_params(preset_params: CompareParams, args: argparse.Namespace) -> CompareParams:
    overrides = {}
    for field_name in ("threshold", "allowance"):
        value = getattr(args, field_name)
        if value is not None:
            overrides[field_name] = value
    return preset_params.copy(**overrides)


def _run(args: argparse.Namespace, params: CompareParams, style: DiffStyle) -> int:
    image_a = load_image(args.first_image)
    image_b = load_image(args.second_image)

    result = compare_images(
        image_a,
        image_b,
        params.threshold,
        want_diff_image=args.output is not None,
        allowed_mismatches=params.allowance,
        style=style,
    )

    diff_path = None
    if args.output is not None and (args.always_write or not result.matches):
        if result.total_pixels == 0:
            logger.warning("Images are empty, not writing %s", args.output)
        else:
            save_image(result.diff_image, args.output)
            diff_path = args.output

    if args.json:
        write_json_report(
            result,
            args.json,
            image_paths=[args.first_image, args.second_image],
            diff_path=diff_path,
        )

    _print_verdict(result, args)
    return EXIT_MATCH if result.matches else EXIT_MISMATCH


def _print_verdict(result: ComparisonResult, args: argparse.Namespace) -> None:
    if args.silent:
        return
    print("MATCH" if result.matches else "MISMATCH DETECTED")
    if args.verbose:
        print(f"Different Pixels: {result.mismatch_ratio * 100:g}%")


if __name__ == "__main__":
    sys.exit(main())
