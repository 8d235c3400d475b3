"""Tests for swatch selection and base target back-fill."""

import numpy as np
import pytest
from PIL import Image

from colorcut.colors import Color, PaletteColor, make_darker, make_lighter, make_saturated
from colorcut.generator import PaletteGenerator, merge_targets
from colorcut.quantizer import Region
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

QUANTIZED_RED = Color(248, 0, 0)
QUANTIZED_BLUE = Color(0, 0, 248)


@pytest.fixture
def red_blue_generator(red_blue_image):
    return PaletteGenerator.from_pixels(red_blue_image)


class TestSelection:

    def test_red_blue_palette(self, red_blue_generator):
        generator = red_blue_generator
        assert generator.dominant_color == PaletteColor(QUANTIZED_RED, 8)
        assert generator.palette == [PaletteColor(QUANTIZED_RED, 8), PaletteColor(QUANTIZED_BLUE, 8)]
        assert generator.vibrant_color == PaletteColor(QUANTIZED_RED, 8)
        assert dict(generator.selected_swatches) == {VIBRANT: PaletteColor(QUANTIZED_RED, 8)}
        assert generator.palette_colors == [QUANTIZED_RED]

    @pytest.mark.parametrize("accessor", [
        "light_vibrant_color",
        "dark_vibrant_color",
        "muted_color",
        "light_muted_color",
        "dark_muted_color",
    ])
    def test_absent_swatch_accessors_raise(self, red_blue_generator, accessor):
        with pytest.raises(KeyError):
            getattr(red_blue_generator, accessor)

    def test_get_and_has_swatch(self, red_blue_generator):
        assert red_blue_generator.has_swatch(VIBRANT)
        assert not red_blue_generator.has_swatch(MUTED)
        assert red_blue_generator.get_swatch(MUTED) is None

    def test_selected_swatches_is_read_only(self, red_blue_generator):
        with pytest.raises(TypeError):
            red_blue_generator.selected_swatches[MUTED] = PaletteColor(QUANTIZED_BLUE, 1)

    def test_palette_sorted_by_population(self):
        colors = [PaletteColor(Color(8, 8, 8), 1), PaletteColor(Color(200, 8, 8), 5),
                  PaletteColor(Color(8, 200, 8), 3)]
        generator = PaletteGenerator(colors)
        assert [c.population for c in generator.palette] == [5, 3, 1]
        assert generator.dominant_color == PaletteColor(Color(200, 8, 8), 5)

    def test_higher_population_wins(self):
        generator = PaletteGenerator([PaletteColor(QUANTIZED_RED, 1), PaletteColor(QUANTIZED_BLUE, 3)])
        assert generator.vibrant_color.color == QUANTIZED_BLUE

    def test_prefers_closer_saturation(self):
        generator = PaletteGenerator([PaletteColor(Color(200, 60, 60), 10),
                                      PaletteColor(QUANTIZED_RED, 10)])
        assert generator.vibrant_color.color == QUANTIZED_RED

    def test_unreachable_target_gets_no_swatch(self, red_blue_image):
        impossible = PaletteTarget(min_saturation=1.1, name="Impossible")
        generator = PaletteGenerator.from_pixels(red_blue_image, targets=[impossible])
        assert not generator.has_swatch(impossible)

    def test_zero_dominant_population(self):
        generator = PaletteGenerator([PaletteColor(QUANTIZED_RED, 0)])
        assert generator.vibrant_color == PaletteColor(QUANTIZED_RED, 0)

    def test_idempotent(self, grid_image):
        first = PaletteGenerator.from_pixels(grid_image, max_colors=12)
        second = PaletteGenerator.from_pixels(grid_image, max_colors=12)
        assert dict(first.selected_swatches) == dict(second.selected_swatches)
        assert first.palette == second.palette


class TestZeroWeights:

    @pytest.fixture
    def colors(self):
        return [PaletteColor(QUANTIZED_RED, 1), PaletteColor(Color(128, 128, 128), 5)]

    def test_population_only_target_picks_most_populous(self, colors):
        popular = PaletteTarget(saturation_weight=0.0, lightness_weight=0.0, population_weight=1.0,
                                is_exclusive=False, name="Popular")
        generator = PaletteGenerator(colors, targets=[popular])

        assert generator.get_swatch(popular).color == Color(128, 128, 128)
        assert generator._score(PaletteColor(QUANTIZED_RED, 1), popular) == pytest.approx(0.2)

    def test_saturation_only_target_ignores_population(self, colors):
        vivid = PaletteTarget(target_saturation=1.0, saturation_weight=1.0, lightness_weight=0.0,
                              population_weight=0.0, is_exclusive=False, name="Vivid")
        generator = PaletteGenerator(colors, targets=[vivid])

        assert generator.get_swatch(vivid).color == QUANTIZED_RED
        assert generator._score(PaletteColor(QUANTIZED_RED, 1), vivid) == pytest.approx(1.0)

    def test_all_zero_weights_score_nothing_and_keep_first(self, colors):
        flat = PaletteTarget(saturation_weight=0.0, lightness_weight=0.0, population_weight=0.0,
                             is_exclusive=False, name="Flat")
        generator = PaletteGenerator(colors, targets=[flat])

        assert generator._score(PaletteColor(QUANTIZED_RED, 1), flat) == 0.0
        assert generator.get_swatch(flat).color == Color(128, 128, 128)


class TestExclusivity:

    @staticmethod
    def hot_target(is_exclusive):
        return PaletteTarget(min_saturation=0.9, target_saturation=1.0,
                             min_lightness=0.3, max_lightness=0.7,
                             is_exclusive=is_exclusive, name="Hot")

    def test_exclusive_target_claims_its_color(self, red_blue_image):
        hot = self.hot_target(is_exclusive=True)
        generator = PaletteGenerator.from_pixels(red_blue_image, targets=[hot])
        assert generator.get_swatch(hot).color == QUANTIZED_RED
        assert generator.vibrant_color.color == QUANTIZED_BLUE

    def test_non_exclusive_target_shares_its_color(self, red_blue_image):
        hot = self.hot_target(is_exclusive=False)
        generator = PaletteGenerator.from_pixels(red_blue_image, targets=[hot])
        assert generator.get_swatch(hot).color == QUANTIZED_RED
        assert generator.vibrant_color.color == QUANTIZED_RED


class TestMergeTargets:

    def test_base_targets_always_present(self):
        assert merge_targets([]) == list(BASE_TARGETS)

    def test_caller_targets_come_first(self):
        custom = PaletteTarget(min_saturation=0.8, name="Custom")
        merged = merge_targets([custom])
        assert merged[0] is custom
        assert len(merged) == 7

    def test_duplicate_of_base_target_is_dropped(self, red_blue_image):
        my_vibrant = PaletteTarget(
            min_lightness=VIBRANT.min_lightness,
            max_lightness=VIBRANT.max_lightness,
            min_saturation=VIBRANT.min_saturation,
            target_saturation=VIBRANT.target_saturation,
            name="MyVibrant",
        )
        generator = PaletteGenerator.from_pixels(red_blue_image, targets=[my_vibrant])
        assert len(generator.targets) == 6
        assert generator.targets[0].name == "MyVibrant"
        assert generator.vibrant_color.color == QUANTIZED_RED


class TestFillMissing:

    def test_derives_every_base_target_from_vibrant(self, red_blue_image):
        generator = PaletteGenerator.from_pixels(red_blue_image, fill_missing_base_targets=True)

        assert generator.vibrant_color == PaletteColor(QUANTIZED_RED, 8)
        assert generator.muted_color == PaletteColor(Color(248, 0, 0), 0)
        assert generator.light_muted_color == PaletteColor(Color(255, 76, 76), 0)
        assert generator.dark_muted_color == PaletteColor(Color(171, 0, 0), 0)
        assert generator.dark_vibrant_color == PaletteColor(Color(171, 0, 0), 0)
        assert generator.light_vibrant_color == PaletteColor(Color(255, 76, 76), 0)

    def test_fill_does_not_touch_palette(self, red_blue_image):
        generator = PaletteGenerator.from_pixels(red_blue_image, fill_missing_base_targets=True)
        assert len(generator.palette) == 2

    def test_found_swatches_are_kept(self):
        gray = PaletteColor(Color(128, 96, 96), 4)
        generator = PaletteGenerator([gray], fill_missing_base_targets=True)
        assert generator.muted_color == gray
        assert all(generator.has_swatch(target) for target in BASE_TARGETS)

    def test_vibrant_from_dark_vibrant_lightens_then_saturates(self):
        dark_red = Color(100, 0, 0)
        generator = PaletteGenerator([PaletteColor(dark_red, 3)], fill_missing_base_targets=True)

        assert generator.dark_vibrant_color == PaletteColor(dark_red, 3)
        expected = make_saturated(make_lighter(dark_red, 0.5), 0.5)
        assert expected == Color(255, 99, 99)
        assert expected != make_lighter(make_saturated(dark_red, 0.5), 0.5)
        assert generator.vibrant_color == PaletteColor(expected, 0)

    def test_vibrant_from_light_muted_when_earlier_sources_are_missing(self):
        pale = Color(200, 200, 220)
        generator = PaletteGenerator([PaletteColor(pale, 2)], fill_missing_base_targets=True)

        assert generator.light_muted_color == PaletteColor(pale, 2)
        assert generator.vibrant_color == PaletteColor(make_saturated(make_darker(pale, 0.5), 0.5), 0)

    def test_derived_swatch_feeds_later_targets(self):
        dusk = Color(60, 40, 40)
        generator = PaletteGenerator([PaletteColor(dusk, 2)], fill_missing_base_targets=True)

        assert generator.dark_muted_color == PaletteColor(dusk, 2)
        derived_muted = make_saturated(make_lighter(dusk, 0.5), 0.5)
        assert generator.muted_color == PaletteColor(derived_muted, 0)
        assert generator.light_muted_color == PaletteColor(make_lighter(derived_muted, 0.3), 0)

    def test_targets_without_a_source_stay_absent(self):
        gray = PaletteColor(Color(128, 96, 96), 4)
        anything = PaletteTarget(name="Anything")
        generator = PaletteGenerator([gray], targets=[anything], fill_missing_base_targets=True)

        assert dict(generator.selected_swatches) == {anything: gray}
        assert not any(generator.has_swatch(target) for target in BASE_TARGETS)


class TestEmptyPalette:

    @pytest.mark.parametrize("fill", [False, True])
    def test_no_colors(self, fill):
        generator = PaletteGenerator([], fill_missing_base_targets=fill)
        assert generator.dominant_color is None
        assert generator.palette == []
        assert dict(generator.selected_swatches) == {}

    def test_transparent_image(self, solid_image):
        generator = PaletteGenerator.from_pixels(solid_image(3, 3, (50, 50, 50, 0)))
        assert generator.dominant_color is None
        for target in (LIGHT_VIBRANT, DARK_VIBRANT, LIGHT_MUTED, DARK_MUTED):
            assert generator.get_swatch(target) is None


class TestFromPixels:

    def test_flat_buffer(self):
        buffer = bytes([0, 0, 255, 255] * 6)
        generator = PaletteGenerator.from_pixels(buffer, width=3, height=2)
        assert generator.dominant_color == PaletteColor(QUANTIZED_BLUE, 6)

    def test_buffer_size_mismatch(self):
        with pytest.raises(ValueError):
            PaletteGenerator.from_pixels(bytes(4 * 5), width=3, height=2)

    def test_region_outside_image(self, red_blue_image):
        with pytest.raises(ValueError):
            PaletteGenerator.from_pixels(red_blue_image, region=Region(0, 5, 0, 4))

    def test_region_restricts_pixels(self, red_blue_image):
        generator = PaletteGenerator.from_pixels(red_blue_image, region=Region.from_rect(0, 2, 4, 4))
        assert generator.palette == [PaletteColor(QUANTIZED_BLUE, 8)]

    def test_unset_region_means_whole_image(self, red_blue_image):
        generator = PaletteGenerator.from_pixels(red_blue_image, region=Region(0, 0, 0, 0))
        assert len(generator.palette) == 2

    def test_zero_area_region_inside_image_gives_empty_palette(self, red_blue_image):
        generator = PaletteGenerator.from_pixels(red_blue_image, region=Region(0, 4, 2, 2))
        assert generator.palette == []
        assert generator.dominant_color is None

    @pytest.mark.parametrize("region", [
        Region(10, 10, 0, 4),
        Region(3, 1, 0, 4),
        Region(0, 4, 3, 1),
    ])
    def test_degenerate_region_is_rejected_not_widened(self, red_blue_image, region):
        with pytest.raises(ValueError):
            PaletteGenerator.from_pixels(red_blue_image, region=region)

    def test_max_colors_bounds_palette(self, grid_image):
        generator = PaletteGenerator.from_pixels(grid_image, max_colors=5)
        assert len(generator.palette) == 5


def test_from_image():
    image = Image.new("RGB", (4, 4), (0, 128, 0))
    generator = PaletteGenerator.from_image(image)
    assert generator.dominant_color == PaletteColor(Color(0, 128, 0), 16)


def test_from_image_with_transparency():
    image = Image.fromarray(np.zeros((2, 2, 4), dtype=np.uint8))
    assert PaletteGenerator.from_image(image).dominant_color is None
