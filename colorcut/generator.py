"""
Palette generation: pick a swatch for every target from the quantized colors.

Colors are ranked by population (the first is the dominant color), every
target scores the colors it accepts, and optionally the six base targets that
found nothing are derived from the swatches of their siblings.
"""

import logging
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Sequence

import numpy as np

from colorcut.colors import (
    Color,
    PaletteColor,
    make_darker,
    make_desaturated,
    make_lighter,
    make_saturated,
    rgb_to_hsl,
)
from colorcut.filters import AnyPaletteFilter, PaletteFilter
from colorcut.quantizer import (
    DEFAULT_MAX_COLORS,
    ColorCutQuantizer,
    Region,
    as_rgba_array,
    resolve_region,
)
from colorcut.target import (
    BASE_TARGETS,
    DARK_MUTED,
    DARK_VIBRANT,
    LIGHT_MUTED,
    LIGHT_VIBRANT,
    MUTED,
    VIBRANT,
    PaletteTarget,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Base Target Back-Fill
# =============================================================================

Transform = Callable[[Color], Color]


def lighter(factor: float) -> Transform:
    return lambda color: make_lighter(color, factor)


def darker(factor: float) -> Transform:
    return lambda color: make_darker(color, factor)


def saturated(factor: float) -> Transform:
    return lambda color: make_saturated(color, factor)


def desaturated(factor: float) -> Transform:
    return lambda color: make_desaturated(color, factor)


# Missing target -> (source target, transforms applied left to right), in
# priority order. Targets are filled in table order, so a swatch derived for
# an earlier entry can feed a later one.
FALLBACK_CHAINS = (
    (VIBRANT, (
        (LIGHT_VIBRANT, (saturated(0.5),)),
        (DARK_VIBRANT, (lighter(0.5), saturated(0.5))),
        (MUTED, (desaturated(0.5),)),
        (LIGHT_MUTED, (darker(0.5), saturated(0.5))),
        (DARK_MUTED, (lighter(0.5), saturated(0.5))),
    )),
    (MUTED, (
        (LIGHT_MUTED, (saturated(0.5),)),
        (DARK_MUTED, (lighter(0.5), saturated(0.5))),
        (VIBRANT, (saturated(0.5),)),
        (LIGHT_VIBRANT, (darker(0.5), saturated(0.5))),
        (DARK_VIBRANT, (lighter(0.5), saturated(0.5))),
    )),
    (LIGHT_MUTED, (
        (MUTED, (lighter(0.3),)),
        (DARK_MUTED, (lighter(0.8),)),
        (LIGHT_VIBRANT, (desaturated(0.5),)),
        (VIBRANT, (lighter(0.3), desaturated(0.5))),
        (DARK_VIBRANT, (lighter(0.8), desaturated(0.5))),
    )),
    (DARK_MUTED, (
        (MUTED, (darker(0.3),)),
        (LIGHT_MUTED, (darker(0.8),)),
        (DARK_VIBRANT, (desaturated(0.5),)),
        (VIBRANT, (darker(0.3), desaturated(0.5))),
        (LIGHT_VIBRANT, (darker(0.8), desaturated(0.5))),
    )),
    (DARK_VIBRANT, (
        (VIBRANT, (darker(0.3),)),
        (LIGHT_VIBRANT, (darker(0.8),)),
        (DARK_MUTED, (saturated(0.5),)),
        (MUTED, (darker(0.3), saturated(0.5))),
        (LIGHT_MUTED, (darker(0.8), saturated(0.5))),
    )),
    (LIGHT_VIBRANT, (
        (VIBRANT, (lighter(0.3),)),
        (DARK_VIBRANT, (lighter(0.8),)),
        (LIGHT_MUTED, (saturated(0.5),)),
        (MUTED, (lighter(0.3), saturated(0.5))),
        (DARK_MUTED, (lighter(0.8), saturated(0.5))),
    )),
)


def merge_targets(targets: Sequence[PaletteTarget]) -> list[PaletteTarget]:
    """Caller targets followed by the base targets, dropping numeric duplicates."""
    merged = []
    for target in list(targets) + list(BASE_TARGETS):
        if target not in merged:
            merged.append(target)
    return merged


# =============================================================================
# Palette Generator
# =============================================================================

class PaletteGenerator:
    """
    Selected swatches and the ranked palette of one image.

    Args:
        colors: Quantized colors; sorted in place by descending population
        targets: Extra targets; the six base targets are always scored too
        fill_missing_base_targets: Derive absent base swatches from siblings
    """

    def __init__(self, colors: list[PaletteColor],
                 targets: Optional[Sequence[PaletteTarget]] = None,
                 fill_missing_base_targets: bool = False):
        self._colors = colors
        self._targets = merge_targets(targets or ())
        self._selected: dict[PaletteTarget, PaletteColor] = {}
        self._dominant: Optional[PaletteColor] = None

        self._sort_swatches()
        self._select_swatches()
        if fill_missing_base_targets:
            self._fill_missing_base_swatches()

    @classmethod
    def from_pixels(cls, pixels, width: Optional[int] = None, height: Optional[int] = None,
                    max_colors: int = DEFAULT_MAX_COLORS,
                    region: Optional[Region] = None,
                    filters: Optional[Sequence[PaletteFilter]] = None,
                    targets: Optional[Sequence[PaletteTarget]] = None,
                    fill_missing_base_targets: bool = False) -> "PaletteGenerator":
        """
        Generate a palette from a decoded RGBA pixel buffer.

        Args:
            pixels: (height, width, 4) uint8 array or flat RGBA buffer
            width, height: Required for flat buffers
            max_colors: Upper bound on quantized colors (<= 0 disables splitting)
            region: Area of interest; None or Region(0, 0, 0, 0) means the whole image
            filters: Color filters; defaults to accepting every color
            targets: Extra targets to score besides the base targets
            fill_missing_base_targets: Derive absent base swatches from siblings

        Raises:
            ValueError: If the buffer doesn't match the image size or the region
                is reversed or outside the image
        """
        rgba = as_rgba_array(pixels, width, height)
        image_height, image_width = rgba.shape[:2]

        region = resolve_region(region, image_width, image_height)

        if not filters:
            filters = [AnyPaletteFilter()]

        quantizer = ColorCutQuantizer(rgba, max_colors, filters, region)
        return cls(quantizer.quantized_colors, targets, fill_missing_base_targets)

    @classmethod
    def from_image(cls, image, **kwargs) -> "PaletteGenerator":
        """Generate a palette from an already decoded PIL image."""
        rgba = np.asarray(image.convert("RGBA"))
        return cls.from_pixels(rgba, **kwargs)

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def _sort_swatches(self) -> None:
        if not self._colors:
            self._dominant = None
            return
        self._colors.sort(key=lambda c: c.population, reverse=True)
        self._dominant = self._colors[0]

    def _select_swatches(self) -> None:
        used_colors = set()
        for target in self._targets:
            target.normalize_weights()
            swatch = self._max_scored_swatch(target, used_colors)
            if swatch is None:
                logger.debug("No swatch for %s", target.name)
                continue
            self._selected[target] = swatch
            if target.is_exclusive:
                used_colors.add(swatch.color)
            logger.debug("Selected %s for %s", swatch.color.hex, target.name)

    def _max_scored_swatch(self, target: PaletteTarget, used_colors: set) -> Optional[PaletteColor]:
        best = None
        best_score = 0.0
        for palette_color in self._colors:
            if not self._should_score(palette_color, target, used_colors):
                continue
            score = self._score(palette_color, target)
            if best is None or score > best_score:
                best = palette_color
                best_score = score
        return best

    @staticmethod
    def _should_score(palette_color: PaletteColor, target: PaletteTarget, used_colors: set) -> bool:
        _, saturation, lightness = rgb_to_hsl(palette_color.color)
        return (target.min_saturation <= saturation <= target.max_saturation
                and target.min_lightness <= lightness <= target.max_lightness
                and palette_color.color not in used_colors)

    def _score(self, palette_color: PaletteColor, target: PaletteTarget) -> float:
        _, saturation, lightness = rgb_to_hsl(palette_color.color)

        saturation_score = 0.0
        lightness_score = 0.0
        population_score = 0.0

        if target.saturation_weight > 0.0:
            saturation_score = target.saturation_weight * (1.0 - abs(saturation - target.target_saturation))
        if target.lightness_weight > 0.0:
            lightness_score = target.lightness_weight * (1.0 - abs(lightness - target.target_lightness))
        if target.population_weight > 0.0 and self._dominant is not None and self._dominant.population > 0:
            population_score = target.population_weight * (palette_color.population / self._dominant.population)

        return saturation_score + lightness_score + population_score

    def _fill_missing_base_swatches(self) -> None:
        for missing, chain in FALLBACK_CHAINS:
            if missing in self._selected:
                continue
            for source, transforms in chain:
                swatch = self._selected.get(source)
                if swatch is None:
                    continue
                color = swatch.color
                for transform in transforms:
                    color = transform(color)
                self._selected[missing] = PaletteColor(color, 0)
                logger.debug("Derived %s %s from %s", missing.name, color.hex, source.name)
                break

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def dominant_color(self) -> Optional[PaletteColor]:
        """Most populous color, or None for an empty palette."""
        return self._dominant

    @property
    def palette(self) -> list[PaletteColor]:
        """All quantized colors, most populous first."""
        return list(self._colors)

    @property
    def colors(self) -> list[Color]:
        return [palette_color.color for palette_color in self._colors]

    @property
    def palette_colors(self) -> list[Color]:
        """Colors of the selected swatches."""
        return [palette_color.color for palette_color in self._selected.values()]

    @property
    def selected_swatches(self) -> Mapping[PaletteTarget, PaletteColor]:
        return MappingProxyType(self._selected)

    @property
    def targets(self) -> list[PaletteTarget]:
        return list(self._targets)

    def get_swatch(self, target: PaletteTarget) -> Optional[PaletteColor]:
        return self._selected.get(target)

    def has_swatch(self, target: PaletteTarget) -> bool:
        return target in self._selected

    @property
    def vibrant_color(self) -> PaletteColor:
        return self._selected[VIBRANT]

    @property
    def light_vibrant_color(self) -> PaletteColor:
        return self._selected[LIGHT_VIBRANT]

    @property
    def dark_vibrant_color(self) -> PaletteColor:
        return self._selected[DARK_VIBRANT]

    @property
    def muted_color(self) -> PaletteColor:
        return self._selected[MUTED]

    @property
    def light_muted_color(self) -> PaletteColor:
        return self._selected[LIGHT_MUTED]

    @property
    def dark_muted_color(self) -> PaletteColor:
        return self._selected[DARK_MUTED]
