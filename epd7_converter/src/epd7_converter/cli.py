"""Command line interface for the e-paper converter."""

from __future__ import annotations

import argparse
import glob
import sys
import warnings
from pathlib import Path
from typing import Iterable, List

from tqdm import tqdm

from .converter import ConvertOptions, iter_conversions
from .errors import ConversionError
from .mapping import get_images
from .palette import DITHER_GAMMA, HEIGHT, WIDTH, format_palette_text

_GLOB_CHARS = set("*?[")


def expand_inputs(paths: Iterable[str]) -> List[str]:
    """Expand wildcard arguments the shell left untouched.

    Arguments naming an existing path, or without wildcard characters, are
    passed through so that missing files are reported later.
    """

    results: List[str] = []
    for raw in paths:
        if Path(raw).exists() or not (_GLOB_CHARS & set(raw)):
            results.append(raw)
            continue
        matches = sorted(glob.glob(raw))
        results.extend(matches if matches else [raw])
    return results


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            'Convert images for display on a WaveShare 5.65" 7-color E-Paper display.\n'
            f"Input images should be {WIDTH} x {HEIGHT} pixels.\n"
            "Outputs are named NNNN-<name>.bin; existing files with the same name keep their number.\n"
            f"Palette: {format_palette_text()}"
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "sources",
        metavar="IMAGE",
        nargs="+",
        help="Input image files to be converted",
    )
    parser.add_argument(
        "-o",
        "--output",
        required=True,
        type=Path,
        help="Destination folder for E-Paper images",
    )
    parser.add_argument(
        "-p",
        "--png",
        action="store_true",
        help="Also save PNG previews of the dithered images",
    )
    parser.add_argument(
        "-r",
        "--random",
        action="store_true",
        help="Randomize order of images that don't already exist in the output directory",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=DITHER_GAMMA,
        help=f"Gamma used for color matching and error diffusion (default: {DITHER_GAMMA})",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        help="Number of worker processes (default: number of CPUs)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    options = ConvertOptions(
        write_png=args.png,
        randomize=args.random,
        dither_gamma=args.gamma,
        workers=args.jobs,
    )

    errors: List[str] = []
    try:
        options.build_remapper()
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            try:
                images = get_images(expand_inputs(args.sources), args.output, options.randomize)
                for _, error in tqdm(
                    iter_conversions(images, options), total=len(images), unit="image"
                ):
                    if error is not None:
                        errors.append(str(error))
            finally:
                errors.extend(str(warning.message) for warning in caught)
    except ConversionError as exc:
        for message in errors:
            print(f"Warning: {message}", file=sys.stderr)
        print(exc, file=sys.stderr)
        return 1

    for message in errors:
        print(f"Warning: {message}", file=sys.stderr)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
