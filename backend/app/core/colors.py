"""RGB colour helpers used to match sensor-reported tray colours against the catalog.

Colours are stored as ``#RRGGBB``. AMS sensors report ``RRGGBBAA`` and some
imported datasets carry ``#RRGGBBAAAA``; everything past the sixth hex digit
is dropped.
"""

import math
import re
from collections.abc import Hashable, Iterable

DEFAULT_COLOR = "#FFFFFF"
DEFAULT_MAX_DISTANCE = 30.0

_HEX6 = re.compile(r"^[0-9A-F]{6}")


def normalize_color(raw) -> str:
    """Return ``raw`` as an uppercase ``#RRGGBB`` string.

    Anything that does not start with six hex digits (after an optional ``#``)
    maps to ``DEFAULT_COLOR``.
    """
    if not isinstance(raw, str):
        return DEFAULT_COLOR
    value = raw.strip().upper().lstrip("#")
    match = _HEX6.match(value)
    if not match:
        return DEFAULT_COLOR
    return f"#{match.group(0)}"


def hex_to_rgb(color: str) -> tuple[int, int, int] | None:
    """Parse ``#RRGGBB`` (or longer, alpha ignored) into an RGB tuple."""
    if not isinstance(color, str):
        return None
    match = _HEX6.match(color.strip().upper().lstrip("#"))
    if not match:
        return None
    digits = match.group(0)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def color_distance(a: str, b: str) -> float:
    """Euclidean distance between two colours in RGB space (0..~441).

    Returns ``math.inf`` when either colour cannot be parsed.
    """
    rgb_a = hex_to_rgb(a)
    rgb_b = hex_to_rgb(b)
    if rgb_a is None or rgb_b is None:
        return math.inf
    return math.sqrt(sum((x - y) ** 2 for x, y in zip(rgb_a, rgb_b)))


def find_closest(
    target: str,
    candidates: Iterable[tuple[Hashable, str]],
    max_distance: float = DEFAULT_MAX_DISTANCE,
):
    """Return the key of the candidate colour nearest to ``target``.

    Only a distance strictly below ``max_distance`` counts as a match. On ties
    the first candidate wins.
    """
    best_key = None
    best_distance = max_distance
    for key, color in candidates:
        distance = color_distance(target, color)
        if distance < best_distance:
            best_distance = distance
            best_key = key
    return best_key
