"""Colour themes for the launcher."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum


def _channel(value: int) -> int:
    if not 0 <= value <= 255:
        raise ValueError(f"colour channel out of range: {value}")
    return value


@dataclass(frozen=True)
class Color:
    """An RGBA colour with premultiplied alpha, channels 0-255."""

    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self) -> None:
        for value in (self.r, self.g, self.b, self.a):
            _channel(value)

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int) -> Color:
        """Create an opaque colour."""
        return cls(r, g, b, 255)

    def gamma_multiply(self, factor: float) -> Color:
        """Scale all channels, alpha included, by ``factor``."""
        if not (math.isfinite(factor) and factor >= 0.0):
            raise ValueError(f"factor must be finite and non-negative: {factor}")

        def scale(value: int) -> int:
            return min(255, int(value * factor + 0.5))

        return Color(scale(self.r), scale(self.g), scale(self.b), scale(self.a))

    def to_hex(self) -> str:
        """Return ``#rrggbb`` for opaque colours, ``#rrggbbaa`` otherwise."""
        text = f"#{self.r:02x}{self.g:02x}{self.b:02x}"
        if self.a != 255:
            text += f"{self.a:02x}"
        return text


@dataclass(frozen=True)
class Theme:
    """The full set of colours used by the interface."""

    bg_darkest: Color
    bg_dark: Color
    bg_medium: Color
    bg_light: Color
    text_primary: Color
    text_secondary: Color
    text_muted: Color
    accent: Color
    accent_hover: Color
    accent_muted: Color
    success: Color
    warning: Color
    error: Color
    border: Color
    selection: Color

    @classmethod
    def amber(cls) -> Theme:
        """Post-apocalyptic amber."""
        rgb = Color.from_rgb
        return cls(
            bg_darkest=rgb(16, 16, 18),
            bg_dark=rgb(24, 24, 27),
            bg_medium=rgb(32, 32, 36),
            bg_light=rgb(48, 48, 54),
            text_primary=rgb(250, 250, 250),
            text_secondary=rgb(200, 200, 200),
            text_muted=rgb(140, 140, 140),
            accent=rgb(245, 158, 11),
            accent_hover=rgb(251, 191, 36),
            accent_muted=rgb(180, 116, 8),
            success=rgb(34, 197, 94),
            warning=rgb(234, 179, 8),
            error=rgb(239, 68, 68),
            border=rgb(63, 63, 70),
            selection=rgb(245, 158, 11).gamma_multiply(0.3),
        )

    @classmethod
    def purple(cls) -> Theme:
        """Purple palette."""
        rgb = Color.from_rgb
        return cls(
            bg_darkest=rgb(22, 18, 32),
            bg_dark=rgb(30, 26, 46),
            bg_medium=rgb(42, 36, 62),
            bg_light=rgb(58, 50, 82),
            text_primary=rgb(250, 250, 255),
            text_secondary=rgb(200, 195, 220),
            text_muted=rgb(140, 135, 160),
            accent=rgb(168, 85, 247),
            accent_hover=rgb(192, 132, 252),
            accent_muted=rgb(126, 58, 200),
            success=rgb(74, 222, 128),
            warning=rgb(250, 204, 21),
            error=rgb(248, 113, 113),
            border=rgb(75, 65, 100),
            selection=rgb(168, 85, 247).gamma_multiply(0.3),
        )

    @classmethod
    def cyan(cls) -> Theme:
        """Cyan palette."""
        rgb = Color.from_rgb
        return cls(
            bg_darkest=rgb(12, 20, 30),
            bg_dark=rgb(15, 23, 42),
            bg_medium=rgb(22, 33, 54),
            bg_light=rgb(35, 48, 70),
            text_primary=rgb(248, 250, 252),
            text_secondary=rgb(200, 210, 220),
            text_muted=rgb(130, 145, 160),
            accent=rgb(6, 182, 212),
            accent_hover=rgb(34, 211, 238),
            accent_muted=rgb(8, 140, 165),
            success=rgb(52, 211, 153),
            warning=rgb(251, 191, 36),
            error=rgb(251, 113, 133),
            border=rgb(51, 65, 85),
            selection=rgb(6, 182, 212).gamma_multiply(0.3),
        )

    @classmethod
    def green(cls) -> Theme:
        """Terminal green palette."""
        rgb = Color.from_rgb
        return cls(
            bg_darkest=rgb(12, 17, 14),
            bg_dark=rgb(20, 28, 22),
            bg_medium=rgb(28, 40, 32),
            bg_light=rgb(42, 58, 46),
            text_primary=rgb(240, 253, 244),
            text_secondary=rgb(190, 220, 200),
            text_muted=rgb(120, 150, 130),
            accent=rgb(34, 197, 94),
            accent_hover=rgb(74, 222, 128),
            accent_muted=rgb(22, 150, 70),
            success=rgb(74, 222, 128),
            warning=rgb(253, 224, 71),
            error=rgb(252, 165, 165),
            border=rgb(50, 70, 55),
            selection=rgb(34, 197, 94).gamma_multiply(0.3),
        )

    @classmethod
    def catppuccin(cls) -> Theme:
        """Catppuccin Mocha palette."""
        rgb = Color.from_rgb
        return cls(
            bg_darkest=rgb(17, 17, 27),
            bg_dark=rgb(24, 24, 37),
            bg_medium=rgb(30, 30, 46),
            bg_light=rgb(49, 50, 68),
            text_primary=rgb(205, 214, 244),
            text_secondary=rgb(186, 194, 222),
            text_muted=rgb(147, 153, 178),
            accent=rgb(137, 180, 250),
            accent_hover=rgb(180, 190, 254),
            accent_muted=rgb(116, 148, 204),
            success=rgb(166, 227, 161),
            warning=rgb(249, 226, 175),
            error=rgb(243, 139, 168),
            border=rgb(69, 71, 90),
            selection=rgb(137, 180, 250).gamma_multiply(0.3),
        )


_DISPLAY_NAMES = {
    "amber": "Amber",
    "purple": "Purple",
    "cyan": "Cyan",
    "green": "Green",
    "catppuccin": "Catppuccin Mocha",
}


class ThemePreset(Enum):
    """Selectable theme presets; values are their configuration names."""

    AMBER = "amber"
    PURPLE = "purple"
    CYAN = "cyan"
    GREEN = "green"
    CATPPUCCIN = "catppuccin"

    @classmethod
    def default(cls) -> ThemePreset:
        return cls.AMBER

    @classmethod
    def all(cls) -> tuple[ThemePreset, ...]:
        """All presets in display order."""
        return tuple(cls)

    def display_name(self) -> str:
        """Human-readable name of the preset."""
        return _DISPLAY_NAMES[self.value]

    def theme(self) -> Theme:
        """Colours for this preset."""
        return getattr(Theme, self.value)()