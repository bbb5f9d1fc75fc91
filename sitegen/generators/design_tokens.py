"""
Design token generation.
========================
Typography, color scales with WCAG contrast metadata, shadows, spacing,
component and theme tokens.
"""
import re
from typing import Dict, Optional, Tuple

from ..domain import ProjectConfig, ArchetypeProfile, DesignTokens, ColorPalette

DEFAULT_PRIMARY = "#3b82f6"
DEFAULT_SECONDARY = "#10b981"
DEFAULT_ACCENT = "#f59e0b"
NEUTRAL_BASE = "#6b7280"

WHITE = "#ffffff"
BLACK = "#000000"

# shade -> (direction, amount)
SCALE_STEPS = (
    (50, "lighten", 0.9),
    (100, "lighten", 0.8),
    (200, "lighten", 0.6),
    (300, "lighten", 0.4),
    (400, "lighten", 0.2),
    (500, None, 0.0),
    (600, "darken", 0.2),
    (700, "darken", 0.4),
    (800, "darken", 0.6),
    (900, "darken", 0.8),
    (950, "darken", 0.9),
)

# Archetype-specific heading fonts; body stays Inter.
HEADING_FONTS = {
    "legal": "Georgia, 'Times New Roman', serif",
    "restaurant": "'Playfair Display', Georgia, serif",
    "portfolio": "'Space Grotesk', system-ui, sans-serif",
}

_HEX = re.compile(r"^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")


def hex_to_rgb(value: str) -> Optional[Tuple[int, int, int]]:
    match = _HEX.match(value or "")
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return tuple(int(digits[i:i + 2], 16) for i in (0, 2, 4))


def rgb_to_hex(rgb) -> str:
    return "#" + "".join(f"{max(0, min(255, round(c))):02x}" for c in rgb)


def mix(color: str, target: str, amount: float) -> str:
    """Linear mix of color toward target by amount in [0, 1]."""
    a, b = hex_to_rgb(color), hex_to_rgb(target)
    if a is None or b is None:
        return color
    return rgb_to_hex(x + (y - x) * amount for x, y in zip(a, b))


def lighten(color: str, amount: float) -> str:
    return mix(color, WHITE, amount)


def darken(color: str, amount: float) -> str:
    return mix(color, BLACK, amount)


def color_scale(base: str) -> Dict[str, str]:
    scale = {}
    for shade, direction, amount in SCALE_STEPS:
        if direction == "lighten":
            scale[str(shade)] = lighten(base, amount)
        elif direction == "darken":
            scale[str(shade)] = darken(base, amount)
        else:
            scale[str(shade)] = rgb_to_hex(hex_to_rgb(base))
    return scale


def relative_luminance(color: str) -> float:
    rgb = hex_to_rgb(color)
    if rgb is None:
        return 0.5

    def channel(value):
        value = value / 255
        return value / 12.92 if value <= 0.03928 else ((value + 0.055) / 1.055) ** 2.4

    r, g, b = (channel(v) for v in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(first: str, second: str) -> float:
    lum1, lum2 = relative_luminance(first), relative_luminance(second)
    lighter, darker = max(lum1, lum2), min(lum1, lum2)
    return round((lighter + 0.05) / (darker + 0.05), 2)


class DesignTokenGenerator:
    """Builds the token set from brand preferences and archetype."""

    def generate(self, project: ProjectConfig, archetype: ArchetypeProfile) -> DesignTokens:
        brand = project.brand
        primary = brand.primary_color or DEFAULT_PRIMARY
        secondary = brand.secondary_color or DEFAULT_SECONDARY
        accent = brand.accent_color or DEFAULT_ACCENT

        colors = self.palette(primary, secondary, accent)
        typography = self.typography(
            heading=brand.heading_font or HEADING_FONTS.get(archetype.archetype),
            body=brand.body_font,
        )
        return DesignTokens(
            typography=typography,
            colors=colors,
            shadows=self.shadows(),
            spacing=self.spacing(),
            components=self.components(colors),
            theme=self.theme(),
        )

    def palette(self, primary: str, secondary: str, accent: str) -> ColorPalette:
        primary_scale = color_scale(primary)
        secondary_scale = color_scale(secondary)
        neutral = color_scale(NEUTRAL_BASE)

        primary_text = contrast_ratio(primary_scale["500"], WHITE)
        secondary_text = contrast_ratio(secondary_scale["500"], WHITE)
        link_text = contrast_ratio(primary_scale["600"], WHITE)
        body_text = contrast_ratio(neutral["900"], WHITE)

        return ColorPalette(
            primary=primary_scale,
            secondary=secondary_scale,
            accent=color_scale(accent),
            neutral=neutral,
            semantic={
                "success": "#10b981",
                "warning": "#f59e0b",
                "error": "#ef4444",
                "info": "#3b82f6",
            },
            contrast={
                "aa": primary_text >= 4.5 and secondary_text >= 4.5,
                "aaa": primary_text >= 7 and secondary_text >= 7,
                "ratios": {
                    "primaryText": primary_text,
                    "secondaryText": secondary_text,
                    "linkText": link_text,
                    "bodyText": body_text,
                },
            },
        )

    def typography(self, heading: Optional[str] = None, body: Optional[str] = None) -> Dict:
        return {
            "fontFamilies": {
                "heading": heading or "Inter, system-ui, sans-serif",
                "body": body or "Inter, system-ui, sans-serif",
                "mono": "Monaco, Consolas, monospace",
            },
            "fontSizes": {
                "xs": "0.75rem", "sm": "0.875rem", "base": "1rem", "lg": "1.125rem",
                "xl": "1.25rem", "2xl": "1.5rem", "3xl": "1.875rem", "4xl": "2.25rem",
                "5xl": "3rem", "6xl": "3.75rem",
            },
            "fontWeights": {"light": 300, "normal": 400, "medium": 500, "semibold": 600, "bold": 700, "extrabold": 800},
            "lineHeights": {"tight": 1.25, "normal": 1.5, "relaxed": 1.75, "loose": 2},
            "letterSpacing": {"tighter": "-0.05em", "tight": "-0.025em", "normal": "0", "wide": "0.025em", "wider": "0.05em"},
        }

    def shadows(self) -> Dict[str, str]:
        return {
            "xs": "0 1px 2px 0 rgba(0, 0, 0, 0.05)",
            "sm": "0 1px 3px 0 rgba(0, 0, 0, 0.1), 0 1px 2px 0 rgba(0, 0, 0, 0.06)",
            "md": "0 4px 6px -1px rgba(0, 0, 0, 0.1), 0 2px 4px -1px rgba(0, 0, 0, 0.06)",
            "lg": "0 10px 15px -3px rgba(0, 0, 0, 0.1), 0 4px 6px -2px rgba(0, 0, 0, 0.05)",
            "xl": "0 20px 25px -5px rgba(0, 0, 0, 0.1), 0 10px 10px -5px rgba(0, 0, 0, 0.04)",
            "2xl": "0 25px 50px -12px rgba(0, 0, 0, 0.25)",
            "inner": "inset 0 2px 4px 0 rgba(0, 0, 0, 0.06)",
            "none": "none",
        }

    def spacing(self) -> Dict[str, str]:
        steps = (0, 1, 2, 3, 4, 5, 6, 8, 10, 12, 16, 20, 24, 32, 40, 48, 56, 64)
        return {str(step): ("0" if step == 0 else f"{step * 0.25:g}rem") for step in steps}

    def components(self, colors: ColorPalette) -> Dict:
        primary = colors.primary["500"]
        button_base = {"borderRadius": "0.5rem", "padding": "0.75rem 1.5rem", "fontSize": "1rem", "fontWeight": 600}
        return {
            "button": {
                "primary": dict(button_base, backgroundColor=primary, textColor=WHITE, shadow="md"),
                "secondary": dict(button_base, backgroundColor=colors.neutral["500"], textColor=WHITE, shadow="sm"),
                "outline": dict(button_base, backgroundColor="transparent", textColor=primary, borderColor=primary),
                "ghost": dict(button_base, backgroundColor="transparent", textColor=primary),
            },
            "card": {
                "default": {"backgroundColor": WHITE, "borderRadius": "0.75rem", "padding": "1.5rem", "shadow": "md"},
                "elevated": {"backgroundColor": WHITE, "borderRadius": "0.75rem", "padding": "1.5rem", "shadow": "lg"},
            },
            "input": {
                "backgroundColor": WHITE,
                "textColor": colors.neutral["900"],
                "borderColor": colors.neutral["300"],
                "borderRadius": "0.5rem",
                "padding": "0.75rem 1rem",
                "fontSize": "1rem",
                "fontWeight": 400,
            },
            "badge": {
                "backgroundColor": primary,
                "textColor": WHITE,
                "borderRadius": "9999px",
                "padding": "0.25rem 0.75rem",
                "fontSize": "0.875rem",
                "fontWeight": 600,
            },
        }

    def theme(self) -> Dict:
        return {
            "mode": "light",
            "borderRadius": {"none": "0", "sm": "0.25rem", "md": "0.5rem", "lg": "0.75rem", "xl": "1rem", "full": "9999px"},
            "transitions": {"fast": "150ms", "normal": "300ms", "slow": "500ms"},
            "zIndex": {"base": 0, "dropdown": 1000, "sticky": 1100, "modal": 1300, "tooltip": 1500},
        }
