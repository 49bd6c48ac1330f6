"""Palette and colour model for the Waveshare 5.65" 7-colour e-paper panel."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .errors import ConversionError

Color = Tuple[int, int, int]
FloatColor = Tuple[float, float, float]

WIDTH = 600
HEIGHT = 448

# The index of each entry is written to the panel, so the order is fixed.
PALETTE: List[Color] = [
    (0, 0, 0),  # Black
    (255, 255, 255),  # White
    (67, 138, 28),  # Green
    (100, 64, 255),  # Blue
    (191, 0, 0),  # Red
    (255, 243, 56),  # Yellow
    (232, 126, 0),  # Orange
]

PALETTE_NAMES = ["black", "white", "green", "blue", "red", "yellow", "orange"]

# Default is 2.2, but bumping it up slightly to get a bit more contrast.
DITHER_GAMMA = 2.3


class ColorSpace:
    """Gamma model used for both palette matching and error diffusion.

    Colours are moved into a linear-ish "dither space" by normalising each
    channel to [0, 1] and raising it to ``dither_gamma``. Distances and
    quantisation errors are measured there.
    """

    def __init__(self, dither_gamma: float = DITHER_GAMMA, palette: Sequence[Color] = PALETTE):
        if dither_gamma <= 0:
            raise ConversionError("Gamma must be greater than 0")
        self.dither_gamma = dither_gamma
        self.palette = tuple(palette)
        self._lut = [(value / 255.0) ** dither_gamma for value in range(256)]
        self.palette_dither: Tuple[FloatColor, ...] = tuple(
            self.to_dither(color) for color in self.palette
        )

    def __repr__(self) -> str:
        return f"ColorSpace(dither_gamma={self.dither_gamma!r})"

    def to_dither(self, color: Color) -> FloatColor:
        lut = self._lut
        r, g, b = color
        return (lut[r], lut[g], lut[b])

    def from_dither(self, color: FloatColor) -> Color:
        inverse = 1.0 / self.dither_gamma

        def channel(value: float) -> int:
            value = min(1.0, max(0.0, value))
            return int(round(value**inverse * 255))

        r, g, b = color
        return (channel(r), channel(g), channel(b))

    def distance(self, a: Color, b: Color) -> float:
        """Squared distance between two colours in dither space."""

        ar, ag, ab = self.to_dither(a)
        br, bg, bb = self.to_dither(b)
        return (ar - br) ** 2 + (ag - bg) ** 2 + (ab - bb) ** 2

    def nearest(self, color: FloatColor) -> int:
        """Return the palette index closest to a dither-space colour.

        Ties resolve to the lowest index.
        """
        r, g, b = color
        best_idx = 0
        best_dist = float("inf")
        for i, (pr, pg, pb) in enumerate(self.palette_dither):
            dist = (r - pr) ** 2 + (g - pg) ** 2 + (b - pb) ** 2
            if dist < best_dist:
                best_idx = i
                best_dist = dist
        return best_idx


DEFAULT_COLOR_SPACE = ColorSpace()


def format_palette_text(palette: Sequence[Color] = PALETTE) -> str:
    entries = [
        f"{idx}: {name} ({r},{g},{b})"
        for idx, (name, (r, g, b)) in enumerate(zip(PALETTE_NAMES, palette))
    ]
    return ", ".join(entries)
