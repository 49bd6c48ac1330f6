"""Image converter for the Waveshare 5.65" 7-colour e-paper display.

Images are dithered onto the panel's fixed palette, packed two pixels per
byte and saved as ``NNNN-<name>.bin`` files. It can be invoked through the
CLI (``python -m epd7_converter``) or imported to convert images directly.
"""

from .converter import (
    ConvertOptions,
    convert_image,
    convert_images,
    dither_image,
    iter_conversions,
    load_image,
    pack_indices,
    render_preview,
    unpack_indices,
)
from .ditherer import DEFAULT_REMAPPER, FloydSteinberg, Remapper
from .errors import (
    ConversionError,
    DecodeError,
    DestinationError,
    DimensionError,
    OutputError,
    ValidationError,
)
from .mapping import ImageMapping, IndexCounter, get_images
from .palette import HEIGHT, PALETTE, WIDTH, ColorSpace, format_palette_text

__all__ = [
    "ColorSpace",
    "ConversionError",
    "ConvertOptions",
    "DEFAULT_REMAPPER",
    "DecodeError",
    "DestinationError",
    "DimensionError",
    "FloydSteinberg",
    "HEIGHT",
    "ImageMapping",
    "IndexCounter",
    "OutputError",
    "PALETTE",
    "Remapper",
    "ValidationError",
    "WIDTH",
    "convert_image",
    "convert_images",
    "dither_image",
    "format_palette_text",
    "get_images",
    "iter_conversions",
    "load_image",
    "pack_indices",
    "render_preview",
    "unpack_indices",
]
