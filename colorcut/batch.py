#!/usr/bin/env python3
"""
Extract palettes for every image in a directory.

Each image gets one line naming its dominant color and the base swatches it
found; --report prints the full palette report of every image instead.
"""

import argparse
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from colorcut.cli import generate_palette, render
from colorcut.generator import PaletteGenerator
from colorcut.quantizer import DEFAULT_MAX_COLORS
from colorcut.target import BASE_TARGETS


IMAGE_SUFFIXES = {'.jpg', '.jpeg', '.png', '.webp'}


@dataclass
class ImageResult:
    path: Path
    seconds: float
    generator: Optional[PaletteGenerator] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.generator is not None


def find_images(directory: Path) -> list[Path]:
    """Image files directly inside directory, sorted by path."""
    return sorted(p for p in directory.iterdir()
                  if p.is_file() and p.suffix.lower() in IMAGE_SUFFIXES)


def extract(image_path: Path, max_colors: int, fill_missing: bool) -> ImageResult:
    """Run the palette pipeline on one file, capturing unreadable images as errors."""
    start = time.perf_counter()
    try:
        generator = generate_palette(str(image_path), max_colors=max_colors,
                                     fill_missing=fill_missing)
    except (OSError, ValueError) as e:
        return ImageResult(image_path, time.perf_counter() - start, error=str(e))
    return ImageResult(image_path, time.perf_counter() - start, generator=generator)


def summarize(generator: PaletteGenerator) -> str:
    """Palette size, dominant color and the base swatches that were found."""
    dominant = generator.dominant_color
    if dominant is None:
        return "empty palette"
    found = [target.name for target in BASE_TARGETS if generator.has_swatch(target)]
    swatches = ", ".join(found) if found else "none"
    return (f"{len(generator.palette)} colors | dominant {dominant.color.hex} | "
            f"swatches {len(found)}/{len(BASE_TARGETS)}: {swatches}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Extract palettes from a directory of images.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Directory containing images'
    )
    parser.add_argument(
        '--max-colors', '-n',
        type=int,
        default=DEFAULT_MAX_COLORS,
        help=f'Maximum number of quantized colors (default {DEFAULT_MAX_COLORS})'
    )
    parser.add_argument(
        '--fill-missing',
        action='store_true',
        help='Derive base swatches that found no color from their siblings'
    )
    parser.add_argument(
        '--report',
        action='store_true',
        help='Print the full palette report of every image'
    )

    args = parser.parse_args(argv)
    input_dir = Path(args.input)

    if not input_dir.is_dir():
        print(f"Error: Input directory not found: {input_dir}", file=sys.stderr)
        return 2

    images = find_images(input_dir)
    if not images:
        print(f"No images found in {input_dir}", file=sys.stderr)
        return 2

    results = [extract(path, args.max_colors, args.fill_missing) for path in images]

    for result in results:
        if not result.ok:
            print(f"{result.path.name}: unreadable ({result.error})", file=sys.stderr)
        elif args.report:
            print(f"== {result.path.name} ==")
            print(render(result.generator))
            print()
        else:
            print(f"{result.path.name}: {summarize(result.generator)}")

    extracted = sum(1 for r in results if r.ok)
    elapsed = sum(r.seconds for r in results)
    print(f"{extracted} of {len(results)} palettes extracted ({elapsed:.2f}s)")
    return 0 if extracted == len(results) else 1


if __name__ == '__main__':
    sys.exit(main())
