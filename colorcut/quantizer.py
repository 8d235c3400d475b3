"""
Pixel ingestion and median-cut color quantization.

Pixels inside the region of interest are reduced to 5 significant bits per
channel and counted in a ColorHistogram. When more distinct colors survive the
filters than the palette may hold, the color space is recursively cut at the
population median of its widest channel until the palette is full.
"""

import heapq
import itertools
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from colorcut.colors import PaletteColor, unpack_rgb
from colorcut.filters import AnyPaletteFilter, PaletteFilter, is_allowed_by_all
from colorcut.histogram import ColorHistogram
from colorcut.volume_box import ColorArena, ColorVolumeBox

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

QUANTIZE_WORD_WIDTH = 5
QUANTIZE_CHANNEL_WIDTH = 8
QUANTIZE_SHIFT = QUANTIZE_CHANNEL_WIDTH - QUANTIZE_WORD_WIDTH
QUANTIZE_WORD_MASK = ((1 << QUANTIZE_WORD_WIDTH) - 1) << QUANTIZE_SHIFT  # 0xF8

DEFAULT_MAX_COLORS = 16


# =============================================================================
# Pixel Ingestion
# =============================================================================

@dataclass(frozen=True)
class Region:
    """Rectangle of interest in pixel coordinates. End bounds are exclusive."""
    row_start: int
    row_end: int
    col_start: int
    col_end: int

    @classmethod
    def full(cls, width: int, height: int) -> "Region":
        return cls(0, height, 0, width)

    @classmethod
    def from_rect(cls, left: int, top: int, right: int, bottom: int) -> "Region":
        return cls(row_start=top, row_end=bottom, col_start=left, col_end=right)

    @property
    def is_empty(self) -> bool:
        """True when the region holds no pixels."""
        return self.row_end <= self.row_start or self.col_end <= self.col_start

    @property
    def is_unset(self) -> bool:
        """True for the all-zero default region, which stands for the whole image."""
        return self == Region(0, 0, 0, 0)

    def validate(self, width: int, height: int) -> None:
        """
        Raises:
            ValueError: If the region is reversed or reaches outside a
                width x height image
        """
        if self.row_end < self.row_start or self.col_end < self.col_start:
            raise ValueError(f"Region {self} has its end before its start")
        if (self.row_start < 0 or self.col_start < 0
                or self.row_end > height or self.col_end > width):
            raise ValueError(f"Region {self} is outside the {width}x{height} image")


def resolve_region(region: Optional[Region], width: int, height: int) -> Region:
    """
    The region to sample: the whole image for None or the all-zero region,
    otherwise the caller's region once it has been validated.

    Raises:
        ValueError: If the region is reversed or outside the image
    """
    if region is None or region.is_unset:
        return Region.full(width, height)
    region.validate(width, height)
    return region


def as_rgba_array(pixels, width: Optional[int] = None, height: Optional[int] = None) -> np.ndarray:
    """
    Normalize a decoded pixel buffer to a (height, width, 4) uint8 array.

    Accepts a (height, width, 4) array, an (n, 4) array or a flat RGBA buffer
    (bytes, bytearray, memoryview or 1-D array). Flat and (n, 4) inputs need
    width and height. The caller's data is never modified.

    Raises:
        ValueError: If the data doesn't match the image size or isn't 8-bit RGBA
    """
    if isinstance(pixels, (bytes, bytearray, memoryview)):
        array = np.frombuffer(pixels, dtype=np.uint8)
    else:
        array = np.asarray(pixels)

    if array.dtype != np.uint8:
        if not np.issubdtype(array.dtype, np.integer):
            raise ValueError(f"Pixel data must be integer RGBA, got {array.dtype}")
        if array.size and (array.min() < 0 or array.max() > 255):
            raise ValueError("Pixel channel values must lie in 0-255")
        array = array.astype(np.uint8)

    if array.ndim == 3:
        if array.shape[2] != 4:
            raise ValueError(f"Expected 4 channels (RGBA), got {array.shape[2]}")
        if (height is not None and array.shape[0] != height) or \
                (width is not None and array.shape[1] != width):
            raise ValueError(
                f"Pixel array shape {array.shape[:2]} doesn't match {width}x{height}"
            )
        return array

    if width is None or height is None:
        raise ValueError("width and height are required for a flat pixel buffer")
    if array.size != width * height * 4:
        raise ValueError(
            "Image byte data doesn't match the image size, or has invalid encoding. "
            "The encoding must be RGBA with 8 bits per channel."
        )
    return array.reshape(height, width, 4)


def get_image_pixels(rgba: np.ndarray, region: Region) -> np.ndarray:
    """Pixels inside region as an (n, 4) array, in row-major order."""
    window = rgba[region.row_start:region.row_end, region.col_start:region.col_end]
    return window.reshape(-1, 4)


def build_histogram(pixels: np.ndarray) -> ColorHistogram:
    """
    Count quantized colors of the given (n, 4) pixels.

    Each channel keeps its top 5 bits. Fully transparent pixels are skipped.
    Colors enter the histogram in order of their first appearance.
    """
    opaque = pixels[pixels[:, 3] != 0]
    quantized = opaque[:, :3].astype(np.int64) & QUANTIZE_WORD_MASK
    keys = (quantized[:, 0] << 16) | (quantized[:, 1] << 8) | quantized[:, 2]

    unique_keys, first_seen, counts = np.unique(keys, return_index=True, return_counts=True)
    order = np.argsort(first_seen, kind="stable")

    histogram = ColorHistogram()
    for key, count in zip(unique_keys[order], counts[order]):
        histogram.increment(unpack_rgb(int(key)), int(count))
    return histogram


# =============================================================================
# Median Cut
# =============================================================================

class ColorCutQuantizer:
    """Reduces the pixels of a region to at most max_colors PaletteColors."""

    def __init__(self, pixels: np.ndarray, max_colors: int = DEFAULT_MAX_COLORS,
                 filters: Optional[Sequence[PaletteFilter]] = None,
                 region: Optional[Region] = None):
        height, width = pixels.shape[:2]
        self.pixels = pixels
        self.max_colors = max_colors
        self.filters = list(filters) if filters else [AnyPaletteFilter()]
        self.region = resolve_region(region, width, height)
        self.histogram = ColorHistogram()

        self.quantized_colors = self._quantize_colors()

    def _should_ignore_color(self, color) -> bool:
        return not is_allowed_by_all(color, self.filters)

    def _quantize_colors(self) -> list[PaletteColor]:
        pixels = get_image_pixels(self.pixels, self.region)
        self.histogram = build_histogram(pixels)
        removed = self.histogram.remove_where(self._should_ignore_color)
        logger.debug("Histogram: %d distinct colors from %d pixels (%d filtered out)",
                     len(self.histogram), len(pixels), removed)

        if self.max_colors <= 0 or len(self.histogram) <= self.max_colors:
            return [PaletteColor(color, count) for color, count in self.histogram.items()]

        return self._quantize_pixels()

    def _quantize_pixels(self) -> list[PaletteColor]:
        arena = ColorArena.from_histogram(self.histogram)
        boxes = self._split_boxes(ColorVolumeBox.covering(arena))
        return self._generate_average_colors(boxes)

    def _split_boxes(self, initial: ColorVolumeBox) -> list[ColorVolumeBox]:
        """Split the largest box until max_colors boxes exist or none can split."""
        sequence = itertools.count()
        queue = [(-initial.volume, next(sequence), initial)]
        terminal = []

        while queue and len(queue) + len(terminal) < self.max_colors:
            _, _, box = heapq.heappop(queue)
            if not box.can_split():
                terminal.append(box)
                continue
            for child in box.split():
                heapq.heappush(queue, (-child.volume, next(sequence), child))

        boxes = [box for _, _, box in queue] + terminal
        logger.debug("Median cut produced %d boxes (%d single-color)", len(boxes),
                     sum(1 for box in boxes if not box.can_split()))
        return boxes

    def _generate_average_colors(self, boxes: list[ColorVolumeBox]) -> list[PaletteColor]:
        colors = []
        for box in boxes:
            palette_color = box.average_color()
            if not self._should_ignore_color(palette_color.color):
                colors.append(palette_color)
        return colors
