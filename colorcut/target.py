"""
Palette targets: the saturation/lightness profile a swatch should match.
"""

from dataclasses import dataclass, field


# =============================================================================
# Constants
# =============================================================================

TARGET_DARK_LIGHTNESS = 0.26
MAX_DARK_LIGHTNESS = 0.45

MIN_LIGHT_LIGHTNESS = 0.55
TARGET_LIGHT_LIGHTNESS = 0.74

MIN_NORMAL_LIGHTNESS = 0.3
MAX_NORMAL_LIGHTNESS = 0.7

TARGET_MUTED_SATURATION = 0.3
MAX_MUTED_SATURATION = 0.4

TARGET_VIBRANT_SATURATION = 1.0
MIN_VIBRANT_SATURATION = 0.35

WEIGHT_SATURATION = 0.24
WEIGHT_LIGHTNESS = 0.52
WEIGHT_POPULATION = 0.24


@dataclass(unsafe_hash=True)
class PaletteTarget:
    """
    Describes the swatch a palette should pick.

    Equality and hashing look only at the nine numeric fields; name and
    exclusivity are labels. normalize_weights() mutates the weights, so a
    target must not change once it has been used as a mapping key.
    """
    min_saturation: float = 0.0
    target_saturation: float = 0.5
    max_saturation: float = 1.0
    min_lightness: float = 0.0
    target_lightness: float = 0.5
    max_lightness: float = 1.0
    saturation_weight: float = WEIGHT_SATURATION
    lightness_weight: float = WEIGHT_LIGHTNESS
    population_weight: float = WEIGHT_POPULATION
    is_exclusive: bool = field(default=True, compare=False)
    name: str = field(default="Custom", compare=False)

    def normalize_weights(self) -> None:
        """Scale the three weights to sum to 1. A zero sum leaves them untouched."""
        total = self.saturation_weight + self.lightness_weight + self.population_weight
        if total != 0.0:
            self.saturation_weight /= total
            self.lightness_weight /= total
            self.population_weight /= total

    def __str__(self) -> str:
        return self.name


LIGHT_VIBRANT = PaletteTarget(
    target_lightness=TARGET_LIGHT_LIGHTNESS,
    min_lightness=MIN_LIGHT_LIGHTNESS,
    min_saturation=MIN_VIBRANT_SATURATION,
    target_saturation=TARGET_VIBRANT_SATURATION,
    name="LightVibrant",
)

VIBRANT = PaletteTarget(
    min_lightness=MIN_NORMAL_LIGHTNESS,
    max_lightness=MAX_NORMAL_LIGHTNESS,
    min_saturation=MIN_VIBRANT_SATURATION,
    target_saturation=TARGET_VIBRANT_SATURATION,
    name="Vibrant",
)

DARK_VIBRANT = PaletteTarget(
    target_lightness=TARGET_DARK_LIGHTNESS,
    max_lightness=MAX_DARK_LIGHTNESS,
    min_saturation=MIN_VIBRANT_SATURATION,
    target_saturation=TARGET_VIBRANT_SATURATION,
    name="DarkVibrant",
)

LIGHT_MUTED = PaletteTarget(
    target_lightness=TARGET_LIGHT_LIGHTNESS,
    min_lightness=MIN_LIGHT_LIGHTNESS,
    target_saturation=TARGET_MUTED_SATURATION,
    max_saturation=MAX_MUTED_SATURATION,
    name="LightMuted",
)

MUTED = PaletteTarget(
    min_lightness=MIN_NORMAL_LIGHTNESS,
    max_lightness=MAX_NORMAL_LIGHTNESS,
    target_saturation=TARGET_MUTED_SATURATION,
    max_saturation=MAX_MUTED_SATURATION,
    name="Muted",
)

DARK_MUTED = PaletteTarget(
    target_lightness=TARGET_DARK_LIGHTNESS,
    max_lightness=MAX_DARK_LIGHTNESS,
    target_saturation=TARGET_MUTED_SATURATION,
    max_saturation=MAX_MUTED_SATURATION,
    name="DarkMuted",
)

BASE_TARGETS = (
    LIGHT_VIBRANT,
    VIBRANT,
    DARK_VIBRANT,
    LIGHT_MUTED,
    MUTED,
    DARK_MUTED,
)
