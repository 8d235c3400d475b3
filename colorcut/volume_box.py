"""
Color volume boxes for median-cut quantization.

All boxes of one quantization run share a single ColorArena: one ordered
array of distinct colors and a parallel array of their pixel counts. A box is
only an inclusive index range into the arena. Splitting sorts the box's range
in place, which never disturbs the ranges owned by sibling boxes.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum

import numpy as np

from colorcut.colors import Color, PaletteColor
from colorcut.histogram import ColorHistogram

logger = logging.getLogger(__name__)


class BoxSplitError(RuntimeError):
    """Raised when asked to split a box holding a single color."""


class ColorComponent(IntEnum):
    RED = 0
    GREEN = 1
    BLUE = 2


# Channel significance (most to least) of the sort key for each split dimension
SORT_ORDERS = {
    ColorComponent.RED: (0, 1, 2),
    ColorComponent.GREEN: (1, 0, 2),
    ColorComponent.BLUE: (2, 1, 0),
}


@dataclass
class ColorArena:
    """Shared, reorderable storage for the distinct colors being quantized."""
    colors: np.ndarray  # (n, 3) int64 RGB
    counts: np.ndarray  # (n,) int64 pixel counts

    @classmethod
    def from_histogram(cls, histogram: ColorHistogram) -> "ColorArena":
        items = histogram.packed_items()
        keys = np.array([key for key, _ in items], dtype=np.int64)
        colors = np.column_stack([(keys >> 16) & 0xFF, (keys >> 8) & 0xFF, keys & 0xFF])
        counts = np.array([count for _, count in items], dtype=np.int64)
        return cls(colors=colors.reshape(-1, 3).astype(np.int64), counts=counts)

    def color_at(self, index: int) -> Color:
        r, g, b = self.colors[index]
        return Color(int(r), int(g), int(b))

    def __len__(self) -> int:
        return len(self.counts)


class ColorVolumeBox:
    """An axis-aligned RGB box over arena[lower..upper] (inclusive)."""

    def __init__(self, arena: ColorArena, lower: int, upper: int):
        if not 0 <= lower <= upper < len(arena):
            raise ValueError(f"Invalid box range [{lower}, {upper}] for {len(arena)} colors")
        self.arena = arena
        self.lower = lower
        self.upper = upper
        self._fit_minimum_box()

    @classmethod
    def covering(cls, arena: ColorArena) -> "ColorVolumeBox":
        """A box spanning every color in the arena."""
        return cls(arena, 0, len(arena) - 1)

    def _fit_minimum_box(self) -> None:
        subset = self.arena.colors[self.lower:self.upper + 1]
        self.min_red, self.min_green, self.min_blue = (int(v) for v in subset.min(axis=0))
        self.max_red, self.max_green, self.max_blue = (int(v) for v in subset.max(axis=0))
        self.population = int(self.arena.counts[self.lower:self.upper + 1].sum())

    @property
    def color_count(self) -> int:
        return self.upper - self.lower + 1

    @property
    def volume(self) -> int:
        return ((self.max_red - self.min_red + 1)
                * (self.max_green - self.min_green + 1)
                * (self.max_blue - self.min_blue + 1))

    def can_split(self) -> bool:
        return self.color_count > 1

    def longest_color_dimension(self) -> ColorComponent:
        """Channel with the widest range; ties resolve Red, then Green, then Blue."""
        red_length = self.max_red - self.min_red
        green_length = self.max_green - self.min_green
        blue_length = self.max_blue - self.min_blue

        if red_length >= green_length and red_length >= blue_length:
            return ColorComponent.RED
        if green_length >= red_length and green_length >= blue_length:
            return ColorComponent.GREEN
        return ColorComponent.BLUE

    def split(self) -> tuple["ColorVolumeBox", "ColorVolumeBox"]:
        """
        Split at the population median along the longest dimension.

        Returns:
            (lower_box, upper_box), both non-empty

        Raises:
            BoxSplitError: If the box holds a single color
        """
        if not self.can_split():
            raise BoxSplitError("Can't split a box with only 1 color")

        split_point = self._find_split_point()
        logger.debug("Splitting %r at index %d", self, split_point)
        return (
            ColorVolumeBox(self.arena, self.lower, split_point),
            ColorVolumeBox(self.arena, split_point + 1, self.upper),
        )

    def _find_split_point(self) -> int:
        dimension = self.longest_color_dimension()
        first, second, third = SORT_ORDERS[dimension]
        span = slice(self.lower, self.upper + 1)

        # Sort this box's range of the arena by the composite channel key
        subset = self.arena.colors[span]
        sort_keys = (subset[:, first] << 16) | (subset[:, second] << 8) | subset[:, third]
        order = np.argsort(sort_keys, kind="stable")
        self.arena.colors[span] = subset[order]
        self.arena.counts[span] = self.arena.counts[span][order]

        # First position where the running population reaches half the total
        cumulative = np.cumsum(self.arena.counts[span])
        median = self.population // 2
        offset = int(np.argmax(cumulative >= median))
        return min(self.upper - 1, self.lower + offset)

    def average_color(self) -> PaletteColor:
        """Population-weighted mean color (truncated per channel) and total population."""
        subset = self.arena.colors[self.lower:self.upper + 1]
        counts = self.arena.counts[self.lower:self.upper + 1]
        total = int(counts.sum())
        sums = (subset * counts[:, np.newaxis]).sum(axis=0)
        red, green, blue = (int(v) for v in sums // total)
        return PaletteColor(Color(red, green, blue), total)

    def __repr__(self) -> str:
        return (f"ColorVolumeBox([{self.lower}, {self.upper}], population={self.population}, "
                f"volume={self.volume})")
