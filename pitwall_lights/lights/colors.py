import re
from types import MappingProxyType

from pitwall_lights.core.errors import InvalidColorFormat

HEX_COLOR_PATTERN = re.compile(r"#?[0-9A-Fa-f]{6}")

# Drivers the roster sometimes serves without a team colour
FALLBACK_COLOURS = MappingProxyType(
    {
        "LAW": "#6692FF",
        "COL": "#64C4FF",
        "BEA": "#B6BABD",
    }
)


def _validated_digits(text: str) -> str:
    if not isinstance(text, str) or not HEX_COLOR_PATTERN.fullmatch(text):
        raise InvalidColorFormat(text)
    return text.lstrip("#")


def hex_to_color(text: str) -> int:
    """Convert ``#RRGGBB`` or ``RRGGBB`` into a 24-bit RGB integer.

    Raises:
        InvalidColorFormat: for anything other than exactly six hex digits
    """
    return int(_validated_digits(text), 16)


def normalize_hex(text: str) -> str:
    """Canonical ``#RRGGBB`` spelling, used to compare colours."""
    return f"#{_validated_digits(text).upper()}"


def color_to_hex(value: int) -> str:
    if not isinstance(value, int) or not 0 <= value <= 0xFFFFFF:
        raise InvalidColorFormat(value)
    return f"#{value:06X}"
