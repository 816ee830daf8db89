from __future__ import annotations

import re
from typing import Dict, List, Mapping, Optional

import pandas as pd

NEUTRAL_COLOR = "rgba(128, 128, 128, 0.6)"
SATURATION = 70
LIGHTNESS = 50

_HSL_RE = re.compile(r"^hsl\(\s*([-+0-9.eE]+)\s*,")


def _hue_text(hue: float) -> str:
    return str(int(hue)) if float(hue).is_integer() else repr(hue)


def hsl(hue: float, saturation: int = SATURATION, lightness: int = LIGHTNESS) -> str:
    return f"hsl({_hue_text(hue)}, {saturation}%, {lightness}%)"


def hue_of(color: str) -> Optional[float]:
    """Hue of an ``hsl(...)`` color string, or None for any other color."""
    match = _HSL_RE.match(color or "")
    return float(match.group(1)) if match else None


def distinct_categories(rows: pd.DataFrame, category_field: Optional[str]) -> List[str]:
    """Non-empty category values in order of first appearance."""
    if not category_field or category_field not in rows.columns:
        return []
    return list(dict.fromkeys(v for v in rows[category_field] if isinstance(v, str) and v))


def assign_category_colors(rows: pd.DataFrame, category_field: Optional[str]) -> Dict[str, str]:
    """Spread the distinct categories evenly around the hue circle.

    The i-th of N categories gets hue ``i * 360 / N``. Empty category cells
    take no slot, and an absent category column yields an empty map.
    """
    categories = distinct_categories(rows, category_field)
    count = len(categories)
    return {cat: hsl(i * 360 / count) for i, cat in enumerate(categories)}


def color_for(category: Optional[str], colors: Mapping[str, str]) -> str:
    if not category:
        return NEUTRAL_COLOR
    return colors.get(category, NEUTRAL_COLOR)
