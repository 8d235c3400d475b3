"""Color filters deciding which colors may enter a palette."""

from typing import Iterable, Protocol

from colorcut.colors import Color


class PaletteFilter(Protocol):
    def is_allowed(self, color: Color) -> bool:
        ...


class AnyPaletteFilter:
    """Accepts every color."""

    def is_allowed(self, color: Color) -> bool:
        return True


class AvoidRedBlackWhitePaletteFilter:
    """Rejects pure black, pure white and colors close to the red I line."""

    def is_allowed(self, color: Color) -> bool:
        return not (self._is_black(color) or self._is_white(color) or self._is_near_red_i_line(color))

    @staticmethod
    def _is_black(color: Color) -> bool:
        return color.red == 0 and color.green == 0 and color.blue == 0

    @staticmethod
    def _is_white(color: Color) -> bool:
        return color.red == 255 and color.green == 255 and color.blue == 255

    @staticmethod
    def _is_near_red_i_line(color: Color) -> bool:
        return color.red > 128 and color.green < 128 and color.blue < 128


def is_allowed_by_all(color: Color, filters: Iterable[PaletteFilter]) -> bool:
    """True only if every filter accepts the color."""
    return all(f.is_allowed(color) for f in filters)
