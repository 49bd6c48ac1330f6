"""Core conversion logic: decode, dither, pack and write panel images.

Output format
-------------
Each output byte carries two palette indices, high nibble first, in
row-major order. A 600 x 448 image therefore becomes 134400 bytes. Values
0-6 select a palette entry; 7-15 are never written.
"""

from __future__ import annotations

import os
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

from PIL import Image

from .ditherer import DEFAULT_REMAPPER, Remapper
from .errors import ConversionError, DecodeError, DimensionError, OutputError
from .mapping import ImageMapping
from .palette import DITHER_GAMMA, HEIGHT, WIDTH, ColorSpace

PREVIEW_SUFFIX = ".png"


@dataclass
class ConvertOptions:
    """Options shared by every file in a batch."""

    write_png: bool = False
    randomize: bool = False
    dither_gamma: float = DITHER_GAMMA
    workers: int | None = None

    def build_remapper(self) -> Remapper:
        if self.dither_gamma == DITHER_GAMMA:
            return DEFAULT_REMAPPER
        return Remapper(ColorSpace(self.dither_gamma))

    def resolved_workers(self) -> int:
        if self.workers is not None:
            if self.workers < 1:
                raise ConversionError("Worker count must be at least 1")
            return self.workers
        return os.cpu_count() or 1


def load_image(path: str | Path) -> Image.Image:
    """Decode ``path`` into an RGB image of the panel resolution."""

    path = Path(path)
    try:
        with Image.open(path) as img:
            image = img.convert("RGB")
    except FileNotFoundError as exc:
        raise DecodeError(f"Failed to open image {str(path)!r}") from exc
    except (OSError, Image.DecompressionBombError, ValueError, EOFError, SyntaxError) as exc:
        # Decoder plugins do not restrict themselves to OSError.
        raise DecodeError(f"Failed to decode image {str(path)!r}: {exc}") from exc

    width, height = image.size
    if (width, height) != (WIDTH, HEIGHT):
        raise DimensionError(f"Skipping {str(path)!r} with dimensions {width}x{height}")
    return image


def pack_indices(indices: Sequence[int]) -> bytes:
    """Pack two palette indices per byte, the first one in the high nibble."""

    if len(indices) % 2:
        raise ConversionError(f"Cannot pack an odd number of pixels ({len(indices)})")
    if any(not (0 <= idx <= 0x0F) for idx in indices):
        raise ConversionError("Palette indices must fit in 4 bits")
    it = iter(indices)
    return bytes((high << 4) | low for high, low in zip(it, it))


def unpack_indices(data: bytes) -> List[int]:
    result: List[int] = []
    for byte in data:
        result.append(byte >> 4)
        result.append(byte & 0x0F)
    return result


def render_preview(
    indices: Sequence[int],
    width: int = WIDTH,
    height: int = HEIGHT,
    remapper: Remapper = DEFAULT_REMAPPER,
) -> Image.Image:
    """Map palette indices back to colours for inspection on a PC."""

    if len(indices) != width * height:
        raise ConversionError(
            f"Expected {width * height} pixels for a {width}x{height} preview, got {len(indices)}"
        )
    palette = remapper.palette
    try:
        colors = [palette[idx] for idx in indices]
    except IndexError as exc:
        raise ConversionError("Palette index out of range") from exc
    preview = Image.new("RGB", (width, height))
    preview.putdata(colors)
    return preview


def preview_path(output: Path) -> Path:
    return output.with_suffix(PREVIEW_SUFFIX)


def write_binary(path: Path, data: bytes) -> None:
    try:
        with open(path, "wb") as fp:
            fp.write(data)
    except OSError as exc:
        raise OutputError(f"Failed to write output file {str(path)!r}: {exc}") from exc


def write_preview(image: Image.Image, path: Path) -> None:
    try:
        image.save(path)
    except (OSError, ValueError) as exc:
        raise OutputError(f"Failed to write PNG file {str(path)!r}: {exc}") from exc


def convert_image(
    image: Image.Image, remapper: Remapper = DEFAULT_REMAPPER
) -> Tuple[List[int], bytes]:
    """Dither an in-memory image and return ``(indices, packed_bytes)``."""

    image = image.convert("RGB")
    width, height = image.size
    if (width, height) != (WIDTH, HEIGHT):
        raise DimensionError(f"Image has dimensions {width}x{height}, expected {WIDTH}x{HEIGHT}")
    data = image.tobytes()
    pixels = list(zip(data[0::3], data[1::3], data[2::3]))
    indices = remapper.remap(pixels, width)
    return indices, pack_indices(indices)


def dither_image(mapping: ImageMapping, options: ConvertOptions | None = None) -> None:
    """Dither ``mapping.input`` and save it to ``mapping.output``.

    The binary is written first; the optional PNG preview never affects it.
    """

    options = options or ConvertOptions()
    remapper = options.build_remapper()

    image = load_image(mapping.input)
    indices, data = convert_image(image, remapper)
    write_binary(mapping.output, data)

    if options.write_png:
        preview = render_preview(indices, WIDTH, HEIGHT, remapper)
        write_preview(preview, preview_path(mapping.output))


def _dither_task(
    mapping: ImageMapping, options: ConvertOptions
) -> Optional[ConversionError]:
    try:
        dither_image(mapping, options)
    except ConversionError as exc:
        return exc
    return None


def iter_conversions(
    mappings: Sequence[ImageMapping], options: ConvertOptions | None = None
) -> Iterator[Tuple[ImageMapping, Optional[ConversionError]]]:
    """Convert every mapping, yielding ``(mapping, error)`` as each finishes.

    Per-file failures are yielded as values so a bad image never stops the
    batch. Completion order is not defined when more than one worker is used.
    """

    options = options or ConvertOptions()
    workers = min(options.resolved_workers(), max(1, len(mappings)))

    if workers == 1:
        for mapping in mappings:
            yield mapping, _dither_task(mapping, options)
        return

    with ProcessPoolExecutor(max_workers=workers) as executor:
        future_to_mapping = {
            executor.submit(_dither_task, mapping, options): mapping for mapping in mappings
        }
        for future in as_completed(future_to_mapping):
            yield future_to_mapping[future], future.result()


def convert_images(
    mappings: Sequence[ImageMapping], options: ConvertOptions | None = None
) -> List[ConversionError]:
    """Convert every mapping and return the collected per-file errors."""

    return [error for _, error in iter_conversions(mappings, options) if error is not None]
