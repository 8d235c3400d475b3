#!/usr/bin/env python3
"""
Print the palette of an image.

Decodes the image with Pillow, runs quantization and swatch selection, and
renders a plain-text report. Optionally saves a swatch image.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw

from colorcut.colors import body_text_color, title_text_color
from colorcut.filters import AnyPaletteFilter, AvoidRedBlackWhitePaletteFilter
from colorcut.generator import PaletteGenerator
from colorcut.quantizer import DEFAULT_MAX_COLORS, Region


# =============================================================================
# Constants
# =============================================================================

# Image size limits (security: prevent decompression bombs)
MAX_IMAGE_PIXELS = 50_000_000  # 50 megapixels
MAX_IMAGE_DIMENSION = 10_000  # 10k pixels per side

SWATCH_SIZE = 80
SWATCH_PADDING = 10
SWATCH_TEXT_HEIGHT = 25
SWATCH_COLUMNS = 6


# =============================================================================
# Loading
# =============================================================================

def load_image(image_path: str) -> Image.Image:
    """
    Open an image file as RGBA.

    Raises:
        FileNotFoundError: If image file doesn't exist
        ValueError: If file is not a valid image or exceeds size limits
    """
    try:
        img = Image.open(image_path)
    except FileNotFoundError:
        raise FileNotFoundError(f"Image not found: {image_path}")
    except Exception as e:
        raise ValueError(f"Could not open image: {e}")

    width, height = img.size
    if width > MAX_IMAGE_DIMENSION or height > MAX_IMAGE_DIMENSION:
        raise ValueError(
            f"Image dimensions {width}x{height} exceed maximum "
            f"{MAX_IMAGE_DIMENSION}x{MAX_IMAGE_DIMENSION}"
        )
    if width * height > MAX_IMAGE_PIXELS:
        raise ValueError(
            f"Image has {width * height:,} pixels, exceeding maximum {MAX_IMAGE_PIXELS:,}"
        )

    return img.convert('RGBA')


def generate_palette(image_path: str, max_colors: int = DEFAULT_MAX_COLORS,
                     region: Optional[Region] = None, avoid_red_black_white: bool = False,
                     fill_missing: bool = False) -> PaletteGenerator:
    """Load an image and run the palette pipeline on it."""
    img = load_image(image_path)
    palette_filter = AvoidRedBlackWhitePaletteFilter() if avoid_red_black_white else AnyPaletteFilter()
    return PaletteGenerator.from_image(
        img,
        max_colors=max_colors,
        region=region,
        filters=[palette_filter],
        fill_missing_base_targets=fill_missing,
    )


# =============================================================================
# Render
# =============================================================================

def render(generator: PaletteGenerator) -> str:
    """Render the palette as prose."""
    lines = []
    palette = generator.palette
    total_population = sum(c.population for c in palette)

    dominant = generator.dominant_color
    if dominant is None:
        lines.append("DOMINANT: none (no opaque pixels)")
        return "\n".join(lines)

    lines.append(f"DOMINANT: {dominant.color.hex} | RGB: {dominant.color.rgb} | "
                 f"Population: {dominant.population:,}")
    lines.append("")

    lines.append("SWATCHES:")
    lines.append("")
    for target in generator.targets:
        swatch = generator.get_swatch(target)
        if swatch is None:
            lines.append(f"[{target.name}] none")
            continue
        origin = "derived" if swatch.population == 0 else f"Population: {swatch.population:,}"
        lines.append(f"[{target.name}] {swatch.color.hex} | RGB: {swatch.color.rgb} | {origin}")
        title = title_text_color(swatch)
        body = body_text_color(swatch)
        lines.append(f"  Title text: {title.hex} alpha {title.alpha} | Body text: {body.hex} alpha {body.alpha}")
    lines.append("")

    lines.append(f"PALETTE ({len(palette)} colors):")
    for palette_color in palette:
        coverage_pct = palette_color.population / total_population * 100
        lines.append(f"  {palette_color.color.hex}  {coverage_pct:5.1f}%")

    return "\n".join(lines)


def visualize_palette(generator: PaletteGenerator, output_path: str) -> None:
    """Save a swatch image: the palette with coverage, then each selected swatch."""
    palette = generator.palette
    total_population = sum(c.population for c in palette) or 1
    entries = [(c.color, f"{c.population / total_population * 100:.1f}%") for c in palette]
    entries += [(swatch.color, target.name) for target, swatch in generator.selected_swatches.items()]
    if not entries:
        raise ValueError("Nothing to draw: the palette is empty")

    cols = min(len(entries), SWATCH_COLUMNS)
    rows = (len(entries) + cols - 1) // cols
    img_width = cols * (SWATCH_SIZE + SWATCH_PADDING) + SWATCH_PADDING
    img_height = rows * (SWATCH_SIZE + SWATCH_TEXT_HEIGHT + SWATCH_PADDING) + SWATCH_PADDING

    img = Image.new('RGB', (img_width, img_height), (240, 240, 240))
    draw = ImageDraw.Draw(img)

    for i, (color, label) in enumerate(entries):
        row = i // cols
        col = i % cols
        x = SWATCH_PADDING + col * (SWATCH_SIZE + SWATCH_PADDING)
        y = SWATCH_PADDING + row * (SWATCH_SIZE + SWATCH_TEXT_HEIGHT + SWATCH_PADDING)

        draw.rectangle([x, y, x + SWATCH_SIZE, y + SWATCH_SIZE], fill=color.rgb)

        # Center label under swatch
        bbox = draw.textbbox((0, 0), label)
        text_width = bbox[2] - bbox[0]
        text_x = x + (SWATCH_SIZE - text_width) // 2
        draw.text((text_x, y + SWATCH_SIZE + 4), label, fill=(0, 0, 0))

    img.save(output_path)


# =============================================================================
# CLI
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Extract the color palette and perceptual swatches of an image.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Path to the image file'
    )
    parser.add_argument(
        '--max-colors', '-n',
        type=int,
        default=DEFAULT_MAX_COLORS,
        help=f'Maximum number of quantized colors (default {DEFAULT_MAX_COLORS})'
    )
    parser.add_argument(
        '--region',
        type=int,
        nargs=4,
        metavar=('LEFT', 'TOP', 'RIGHT', 'BOTTOM'),
        help='Only sample pixels inside this rectangle'
    )
    parser.add_argument(
        '--avoid-red-black-white',
        action='store_true',
        help='Drop pure black, pure white and near-red colors'
    )
    parser.add_argument(
        '--fill-missing',
        action='store_true',
        help='Derive base swatches that found no color from their siblings'
    )
    parser.add_argument(
        '--swatches', '-o',
        nargs='?',
        const=True,
        default=None,
        help='Write a swatch PNG. Optionally specify path, otherwise auto-names from input.'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Log pipeline details to stderr'
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')

    image_path = Path(args.input)
    region = Region.from_rect(*args.region) if args.region else None

    try:
        generator = generate_palette(
            str(image_path),
            max_colors=args.max_colors,
            region=region,
            avoid_red_black_white=args.avoid_red_black_white,
            fill_missing=args.fill_missing,
        )
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error analyzing image: {e}", file=sys.stderr)
        return 1

    print(render(generator))

    if args.swatches:
        if args.swatches is True:
            output_path = image_path.with_name(f"{image_path.stem}-swatches.png")
        else:
            output_path = Path(args.swatches)

        try:
            visualize_palette(generator, str(output_path))
            print(f"\nWrote: {output_path}")
        except (OSError, ValueError) as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
