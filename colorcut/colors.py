"""
Color value types and the color math shared by the quantizer and selector.

Colors are plain 8-bit RGBA tuples. HSL is derived on demand (saturation and
lightness as fractions in [0, 1], hue in degrees) and never cached.
"""

import colorsys
from typing import NamedTuple, Optional


# =============================================================================
# Constants
# =============================================================================

MIN_CONTRAST_TITLE_TEXT = 3.0
MIN_CONTRAST_BODY_TEXT = 4.5

MIN_ALPHA_SEARCH_MAX_ITERATIONS = 10
MIN_ALPHA_SEARCH_PRECISION = 1


# =============================================================================
# Value Types
# =============================================================================

class Color(NamedTuple):
    """An 8-bit RGBA color. Alpha 0 is fully transparent, 255 fully opaque."""
    red: int
    green: int
    blue: int
    alpha: int = 255

    @property
    def hex(self) -> str:
        return f"#{self.red:02x}{self.green:02x}{self.blue:02x}"

    @property
    def rgb(self) -> tuple:
        return (self.red, self.green, self.blue)

    def with_alpha(self, alpha: int) -> "Color":
        return self._replace(alpha=alpha)


class PaletteColor(NamedTuple):
    """A representative color and the number of source pixels it stands for."""
    color: Color
    population: int


WHITE = Color(255, 255, 255)
BLACK = Color(0, 0, 0)


def pack_rgb(red: int, green: int, blue: int) -> int:
    """Pack three 8-bit channels into a single 24-bit integer key."""
    return (red << 16) | (green << 8) | blue


def unpack_rgb(key: int) -> Color:
    """Inverse of pack_rgb; the result is fully opaque."""
    return Color((key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF)


# =============================================================================
# HSL Conversion
# =============================================================================

def rgb_to_hsl(color: Color) -> tuple[float, float, float]:
    """Convert to (hue degrees 0-360, saturation 0-1, lightness 0-1)."""
    h, l, s = colorsys.rgb_to_hls(color.red / 255.0, color.green / 255.0, color.blue / 255.0)
    return h * 360.0, s, l


def hsl_to_rgb(hue: float, saturation: float, lightness: float, alpha: int = 255) -> Color:
    """Convert HSL (hue in degrees, saturation/lightness in [0, 1]) to a Color."""
    r, g, b = colorsys.hls_to_rgb((hue % 360.0) / 360.0, lightness, saturation)
    return Color(_to_channel(r * 255.0), _to_channel(g * 255.0), _to_channel(b * 255.0), alpha)


def _to_channel(value: float) -> int:
    return max(0, min(255, int(round(value))))


# =============================================================================
# Color Transforms
# =============================================================================

def make_lighter(color: Color, factor: float) -> Color:
    """Add 255 * factor to every channel, clamped to 255."""
    step = 255 * factor
    return Color(
        int(min(255, color.red + step)),
        int(min(255, color.green + step)),
        int(min(255, color.blue + step)),
        color.alpha,
    )


def make_darker(color: Color, factor: float) -> Color:
    """Subtract 255 * factor from every channel, clamped to 0."""
    step = 255 * factor
    return Color(
        int(max(0, color.red - step)),
        int(max(0, color.green - step)),
        int(max(0, color.blue - step)),
        color.alpha,
    )


def make_saturated(color: Color, factor: float) -> Color:
    """Raise HSL saturation by factor, clamped to 1."""
    h, s, l = rgb_to_hsl(color)
    return hsl_to_rgb(h, min(1.0, s + factor), l, color.alpha)


def make_desaturated(color: Color, factor: float) -> Color:
    """Lower HSL saturation by factor, clamped to 0."""
    h, s, l = rgb_to_hsl(color)
    return hsl_to_rgb(h, max(0.0, s - factor), l, color.alpha)


# =============================================================================
# Contrast
# =============================================================================

def alpha_blend(color: Color, background: Color) -> Color:
    """Composite a translucent color over a background."""
    alpha = color.alpha
    inv_alpha = 255 - alpha
    return Color(
        (color.red * alpha + background.red * inv_alpha) // 255,
        (color.green * alpha + background.green * inv_alpha) // 255,
        (color.blue * alpha + background.blue * inv_alpha) // 255,
    )


def _linearize(component: float) -> float:
    if component <= 0.03928:
        return component / 12.92
    return ((component + 0.055) / 1.055) ** 2.4


def compute_luminance(color: Color) -> float:
    """WCAG relative luminance (0 black, 1 white)."""
    r = _linearize(color.red / 255.0)
    g = _linearize(color.green / 255.0)
    b = _linearize(color.blue / 255.0)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def calculate_contrast(foreground: Color, background: Color) -> float:
    """
    WCAG contrast ratio between two colors (1.0 to 21.0).

    Raises:
        ValueError: If the background is translucent
    """
    if background.alpha != 255:
        raise ValueError(f"Background can not be translucent: {background}")
    if foreground.alpha < 255:
        foreground = alpha_blend(foreground, background)

    lightness1 = compute_luminance(foreground) + 0.05
    lightness2 = compute_luminance(background) + 0.05
    return max(lightness1, lightness2) / min(lightness1, lightness2)


def calculate_minimum_alpha(foreground: Color, background: Color,
                            min_contrast_ratio: float) -> Optional[int]:
    """
    Find the lowest foreground alpha that still meets min_contrast_ratio.

    Returns None when even the fully opaque foreground falls short.

    Raises:
        ValueError: If the background is translucent
    """
    if background.alpha != 255:
        raise ValueError(f"The background cannot be translucent: {background}")

    foreground = foreground.with_alpha(255)
    if calculate_contrast(foreground, background) < min_contrast_ratio:
        return None

    iterations = 0
    min_alpha = 0
    max_alpha = 255
    while (iterations <= MIN_ALPHA_SEARCH_MAX_ITERATIONS
           and (max_alpha - min_alpha) > MIN_ALPHA_SEARCH_PRECISION):
        test_alpha = (min_alpha + max_alpha) // 2
        if calculate_contrast(foreground.with_alpha(test_alpha), background) < min_contrast_ratio:
            min_alpha = test_alpha
        else:
            max_alpha = test_alpha
        iterations += 1

    return max_alpha


def text_color_for_background(background: Color, min_contrast_ratio: float) -> Color:
    """White or black text, at the lowest alpha that stays readable on background."""
    background = background.with_alpha(255)
    for candidate in (WHITE, BLACK):
        alpha = calculate_minimum_alpha(candidate, background, min_contrast_ratio)
        if alpha is not None:
            return candidate.with_alpha(alpha)
    return BLACK


def title_text_color(swatch: PaletteColor) -> Color:
    return text_color_for_background(swatch.color, MIN_CONTRAST_TITLE_TEXT)


def body_text_color(swatch: PaletteColor) -> Color:
    return text_color_for_background(swatch.color, MIN_CONTRAST_BODY_TEXT)
