"""Floyd–Steinberg error diffusion onto the fixed panel palette."""

from __future__ import annotations

from typing import List, Sequence

from .errors import ConversionError
from .palette import DEFAULT_COLOR_SPACE, Color, ColorSpace


class FloydSteinberg:
    """Classic Floyd–Steinberg weights.

    Error is pushed to the right (7/16), below-left (3/16), below (5/16) and
    below-right (1/16). Shares that would land outside the image are
    dropped rather than redistributed.
    """

    RIGHT = 7 / 16
    BELOW_LEFT = 3 / 16
    BELOW = 5 / 16
    BELOW_RIGHT = 1 / 16

    def remap(self, pixels: Sequence[Color], width: int, color_space: ColorSpace) -> List[int]:
        count = len(pixels)
        if width <= 0 or count % width != 0:
            raise ConversionError(
                f"Pixel count {count} is not a multiple of the width {width}"
            )

        to_dither = color_space.to_dither
        nearest = color_space.nearest
        palette = color_space.palette_dither

        # Two rows of accumulated error: the row being processed and the next.
        current = [[0.0, 0.0, 0.0] for _ in range(width)]
        below = [[0.0, 0.0, 0.0] for _ in range(width)]
        last_x = width - 1

        result: List[int] = []
        for start in range(0, count, width):
            for x in range(width):
                r, g, b = to_dither(pixels[start + x])
                err = current[x]
                r = min(1.0, max(0.0, r + err[0]))
                g = min(1.0, max(0.0, g + err[1]))
                b = min(1.0, max(0.0, b + err[2]))

                index = nearest((r, g, b))
                pr, pg, pb = palette[index]
                er, eg, eb = r - pr, g - pg, b - pb

                if x < last_x:
                    right = current[x + 1]
                    right[0] += er * self.RIGHT
                    right[1] += eg * self.RIGHT
                    right[2] += eb * self.RIGHT
                    below_right = below[x + 1]
                    below_right[0] += er * self.BELOW_RIGHT
                    below_right[1] += eg * self.BELOW_RIGHT
                    below_right[2] += eb * self.BELOW_RIGHT
                if x > 0:
                    below_left = below[x - 1]
                    below_left[0] += er * self.BELOW_LEFT
                    below_left[1] += eg * self.BELOW_LEFT
                    below_left[2] += eb * self.BELOW_LEFT
                under = below[x]
                under[0] += er * self.BELOW
                under[1] += eg * self.BELOW
                under[2] += eb * self.BELOW

                result.append(index)

            # The last row's "below" buffer is simply discarded.
            current, below = below, current
            for err in below:
                err[0] = err[1] = err[2] = 0.0

        return result


class Remapper:
    """Bundle of palette colour space and ditherer, built once per process."""

    def __init__(self, color_space: ColorSpace = DEFAULT_COLOR_SPACE, ditherer: FloydSteinberg | None = None):
        self.color_space = color_space
        self.ditherer = ditherer or FloydSteinberg()

    @property
    def palette(self):
        return self.color_space.palette

    def remap(self, pixels: Sequence[Color], width: int) -> List[int]:
        return self.ditherer.remap(pixels, width, self.color_space)


DEFAULT_REMAPPER = Remapper()
