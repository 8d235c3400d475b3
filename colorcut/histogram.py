"""
Ordered sparse color histogram.

Keys are packed 24-bit RGB integers, so alpha never takes part in identity.
Insertion order is kept (dicts preserve it) and determines the order colors
are handed to the quantizer.
"""

from typing import Callable, Iterator, Optional

from colorcut.colors import Color, pack_rgb, unpack_rgb


class ColorHistogram:
    """Maps quantized colors to pixel counts, in order of first appearance."""

    def __init__(self):
        self._counts: dict[int, int] = {}

    def increment(self, color: Color, amount: int = 1) -> int:
        """Add amount to color's count, creating the entry if absent. Returns the new count."""
        key = pack_rgb(color.red, color.green, color.blue)
        count = self._counts.get(key, 0) + amount
        self._counts[key] = count
        return count

    def get(self, color: Color) -> Optional[int]:
        """Count for color, or None if it was never seen."""
        return self._counts.get(pack_rgb(color.red, color.green, color.blue))

    def remove_where(self, predicate: Callable[[Color], bool]) -> int:
        """Drop every color matching predicate, keeping survivors in order."""
        doomed = [key for key in self._counts if predicate(unpack_rgb(key))]
        for key in doomed:
            del self._counts[key]
        return len(doomed)

    def keys(self) -> list[Color]:
        return [unpack_rgb(key) for key in self._counts]

    def items(self) -> list[tuple[Color, int]]:
        return [(unpack_rgb(key), count) for key, count in self._counts.items()]

    def packed_items(self) -> list[tuple[int, int]]:
        """(packed RGB key, count) pairs in histogram order."""
        return list(self._counts.items())

    def total(self) -> int:
        return sum(self._counts.values())

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, color: Color) -> bool:
        return pack_rgb(color.red, color.green, color.blue) in self._counts

    def __iter__(self) -> Iterator[Color]:
        return iter(self.keys())

    def __repr__(self) -> str:
        return f"ColorHistogram({len(self._counts)} colors, {self.total()} pixels)"
