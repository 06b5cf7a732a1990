"""Centralized configuration for diagr."""

from __future__ import annotations

from dataclasses import dataclass

from diagr.types import Direction


@dataclass(frozen=True)
class LayoutDefaults:
    """Defaults applied when a document's layout block omits a field."""

    direction: Direction = Direction.LR
    x_gap: float = 120
    y_gap: float = 90


DEFAULT_LAYOUT = LayoutDefaults()


@dataclass(frozen=True)
class ThemeTokens:
    """The subset of theme tokens the compile pipeline depends on."""

    name: str
    edge_color: str
    group_padding_x: float = 22
    group_padding_top: float = 12
    group_padding_bottom: float = 24


LIGHT_THEME = ThemeTokens(name="light", edge_color="#878d9a")
DARK_THEME = ThemeTokens(name="dark", edge_color="#90a0bb")

THEME_PRESETS: dict[str, ThemeTokens] = {
    "light": LIGHT_THEME,
    "dark": DARK_THEME,
}


def resolve_theme(theme_name: str | None) -> ThemeTokens:
    """Look up a theme preset, falling back to the light theme."""
    if not theme_name:
        return LIGHT_THEME
    return THEME_PRESETS.get(theme_name, LIGHT_THEME)


@dataclass
class CompileConfig:
    """Configuration for the command-line compile pipeline."""

    theme_override: str | None = None
    direction_override: str | None = None
    indent: int | None = 2
    check_only: bool = False
