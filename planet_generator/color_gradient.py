# planet_generator/color_gradient.py

"""
================================================================================
COLOR GRADIENT UTILITIES
================================================================================
This module contains the ColorGradient class and the color helpers used to map
scalar values (normalized height) to RGB vertex colors.

It is designed to be a pure utility with no dependencies on any renderer, so
the same gradients drive mesh generation, previews and the atmosphere tint.

Data Contract:
---------------
- Colors are RGB float triples in [0, 1]. Inputs may also be given as 0xRRGGBB
  integers or "#rrggbb" strings; float components are clamped to [0, 1].
- Lookup is defined for every real input: positions outside the stops clamp to
  the outer stop colors, an empty gradient yields black.
================================================================================
"""
import bisect
import colorsys
from dataclasses import dataclass
from typing import Iterable, Union

import numpy as np

RGB = tuple[float, float, float]
ColorLike = Union[int, str, Iterable[float]]

# The color returned by an empty gradient.
DEFAULT_COLOR: RGB = (0.0, 0.0, 0.0)


def parse_color(color: ColorLike) -> RGB:
    """Converts a hex int, hex string or RGB float triple into a clamped RGB tuple."""
    if isinstance(color, str):
        digits = color.strip().lstrip("#")
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        if len(digits) != 6:
            raise ValueError(f"Invalid hex color: '{color}'")
        color = int(digits, 16)

    if isinstance(color, (int, np.integer)) and not isinstance(color, bool):
        value = int(color)
        if not 0 <= value <= 0xFFFFFF:
            raise ValueError(f"Hex color out of range: {value:#x}")
        return (
            ((value >> 16) & 0xFF) / 255.0,
            ((value >> 8) & 0xFF) / 255.0,
            (value & 0xFF) / 255.0,
        )

    components = tuple(float(c) for c in color)
    if len(components) != 3:
        raise ValueError(f"Expected an RGB triple, got {len(components)} components")
    return tuple(min(1.0, max(0.0, c)) for c in components)


def to_hex(color: RGB) -> str:
    """Formats an RGB float triple as '#rrggbb'."""
    r, g, b = (int(round(min(1.0, max(0.0, c)) * 255)) for c in color)
    return f"#{r:02x}{g:02x}{b:02x}"


def offset_hsl(color: RGB, hue: float, saturation: float, lightness: float) -> RGB:
    """Shifts a color in HSL space. Saturation and lightness are clamped to [0, 1]."""
    h, l, s = colorsys.rgb_to_hls(*color)
    h = (h + hue) % 1.0
    s = min(1.0, max(0.0, s + saturation))
    l = min(1.0, max(0.0, l + lightness))
    return colorsys.hls_to_rgb(h, l, s)


@dataclass(frozen=True)
class ColorStop:
    position: float
    color: RGB


class ColorGradient:
    """
    An ordered list of color stops, linearly interpolated in RGB.

    Stops can be given as ColorStop objects, (position, color) pairs or
    {"position": ..., "color": ...} mappings. Equal positions keep their
    insertion order.
    """
    def __init__(self, stops=(), frozen: bool = False):
        self._stops: list[ColorStop] = []
        self._positions: list[float] = []
        self._frozen = False
        for stop in stops:
            if isinstance(stop, ColorStop):
                self.add(stop.position, stop.color)
            elif isinstance(stop, dict):
                self.add(stop["position"], stop["color"])
            else:
                position, color = stop
                self.add(position, color)
        self._frozen = frozen

    def add(self, position: float, color: ColorLike) -> None:
        """Inserts a stop and keeps the stops sorted by position."""
        if self._frozen:
            raise TypeError("Cannot add stops to a frozen ColorGradient")
        self._stops.append(ColorStop(float(position), parse_color(color)))
        # list.sort is stable, so equal positions keep insertion order.
        self._stops.sort(key=lambda stop: stop.position)
        self._positions = [stop.position for stop in self._stops]

    @property
    def stops(self) -> tuple[ColorStop, ...]:
        return tuple(self._stops)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "ColorGradient":
        """Returns an immutable copy of this gradient."""
        return ColorGradient(self._stops, frozen=True)

    def __len__(self):
        return len(self._stops)

    def __eq__(self, other):
        if not isinstance(other, ColorGradient):
            return NotImplemented
        return self._stops == other._stops

    __hash__ = None

    def __repr__(self):
        stops = ", ".join(f"({s.position}, '{to_hex(s.color)}')" for s in self._stops)
        return f"ColorGradient([{stops}])"

    def to_list(self) -> list[list]:
        """
        Serializes the stops as [[position, color], ...]. Colors that an 8-bit
        hex string reproduces exactly are written as '#rrggbb', any other color
        as an [r, g, b] float list, so a round trip never changes a color.
        """
        serialized = []
        for stop in self._stops:
            hex_color = to_hex(stop.color)
            color = hex_color if parse_color(hex_color) == stop.color else list(stop.color)
            serialized.append([stop.position, color])
        return serialized

    def get(self, position: float) -> RGB:
        """Returns the interpolated color at `position`."""
        stops = self._stops
        if not stops:
            return DEFAULT_COLOR
        if len(stops) == 1:
            return stops[0].color

        # NaN never compares, so it falls back to the lowest stop.
        if position != position or position <= stops[0].position:
            return stops[0].color
        if position >= stops[-1].position:
            return stops[-1].color

        index = bisect.bisect_left(self._positions, position)
        lower, upper = stops[index - 1], stops[index]
        width = upper.position - lower.position
        if width <= 0.0:
            return upper.color

        t = (position - lower.position) / width
        return tuple(lo + (hi - lo) * t for lo, hi in zip(lower.color, upper.color))

    def get_many(self, positions) -> np.ndarray:
        """
        Vectorized `get`: returns a (N, 3) float array with the same values
        `get` would return for each position.
        """
        positions = np.asarray(positions, dtype=np.float64).ravel()
        count = positions.shape[0]
        if not self._stops:
            return np.tile(np.array(DEFAULT_COLOR), (count, 1))

        colors = np.array([stop.color for stop in self._stops], dtype=np.float64)
        if len(self._stops) == 1:
            return np.tile(colors[0], (count, 1))

        stop_positions = np.array(self._positions, dtype=np.float64)
        last = len(self._stops) - 1

        index = np.clip(np.searchsorted(stop_positions, positions, side="left"), 1, last)
        lower = stop_positions[index - 1]
        width = stop_positions[index] - lower
        t = np.divide(positions - lower, width, out=np.ones_like(positions), where=width > 0.0)

        result = colors[index - 1] + (colors[index] - colors[index - 1]) * t[:, np.newaxis]

        degenerate = width <= 0.0
        result[degenerate] = colors[index[degenerate]]
        # Clamp in the reverse order of `get` so the lower bound wins ties.
        result[positions >= stop_positions[-1]] = colors[-1]
        result[(positions <= stop_positions[0]) | np.isnan(positions)] = colors[0]
        return result
