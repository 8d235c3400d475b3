"""Median-cut palette extraction with perceptual swatch selection."""

from colorcut.colors import Color, PaletteColor
from colorcut.filters import AnyPaletteFilter, AvoidRedBlackWhitePaletteFilter
from colorcut.generator import PaletteGenerator
from colorcut.quantizer import ColorCutQuantizer, Region
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

__version__ = "0.1.0"

__all__ = [
    "AnyPaletteFilter",
    "AvoidRedBlackWhitePaletteFilter",
    "BASE_TARGETS",
    "Color",
    "ColorCutQuantizer",
    "DARK_MUTED",
    "DARK_VIBRANT",
    "LIGHT_MUTED",
    "LIGHT_VIBRANT",
    "MUTED",
    "PaletteColor",
    "PaletteGenerator",
    "PaletteTarget",
    "Region",
    "VIBRANT",
]
