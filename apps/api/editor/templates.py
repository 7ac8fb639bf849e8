"""Built-in tier colors and templates."""

from __future__ import annotations

from typing import Dict, List, Tuple

from editor.models import BoardTier, new_id

TIER_COLORS: Dict[str, str] = {
    "S": "#ff7f7f",
    "A": "#ffbf7f",
    "B": "#ffdf7f",
    "C": "#ffff7f",
    "D": "#bfff7f",
    "F": "#7fff7f",
    "DEFAULT": "#808080",
}

NEW_TIER_NAME = "New Tier"
NEW_TIER_COLOR = TIER_COLORS["DEFAULT"]

# (id, name, color)
DEFAULT_TIERS: Tuple[Tuple[str, str, str], ...] = tuple(
    (name.lower(), name, TIER_COLORS[name]) for name in ("S", "A", "B", "C", "D", "F")
)

TIER_TEMPLATES: Dict[str, Dict[str, object]] = {
    "Standard (S-F)": {
        "description": "Classic S through F ranking",
        "tiers": [(name, color) for _, name, color in DEFAULT_TIERS],
    },
    "Simple (S-A-B-C)": {
        "description": "A shorter four tier ranking",
        "tiers": [("S", "#ff7f7f"), ("A", "#ffbf7f"), ("B", "#ffdf7f"), ("C", "#bfff7f")],
    },
    "Top/Mid/Bottom": {
        "description": "Three broad buckets",
        "tiers": [("Top", "#4ade80"), ("Mid", "#facc15"), ("Bottom", "#f87171")],
    },
    "Numeric (1-5)": {
        "description": "Rate everything from 1 to 5",
        "tiers": [
            ("1", "#4ade80"),
            ("2", "#86efac"),
            ("3", "#fde047"),
            ("4", "#fb923c"),
            ("5", "#f87171"),
        ],
    },
    "Yes/Maybe/No": {
        "description": "Quick decision sorting",
        "tiers": [("Yes", "#4ade80"), ("Maybe", "#fde047"), ("No", "#f87171")],
    },
    "Love/Like/OK/Dislike": {
        "description": "Sort by how much you like it",
        "tiers": [("Love", "#f472b6"), ("Like", "#4ade80"), ("OK", "#fde047"), ("Dislike", "#f87171")],
    },
}


def default_tiers() -> List[BoardTier]:
    return [BoardTier(id=tier_id, name=name, color=color) for tier_id, name, color in DEFAULT_TIERS]


def template_tiers(template_name: str) -> List[BoardTier]:
    """Fresh empty tier shells for a named template."""
    template = TIER_TEMPLATES.get(template_name)
    if template is None:
        raise KeyError(f"Unknown tier template: {template_name}")
    return [BoardTier(id=new_id("tier"), name=name, color=color) for name, color in template["tiers"]]


def contrast_color(hex_color: str) -> str:
    """Black or white label text, whichever reads better on ``hex_color``."""
    value = (hex_color or "").lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    try:
        r, g, b = (int(value[i:i + 2], 16) / 255 for i in (0, 2, 4))
    except ValueError:
        return "#ffffff"
    luminance = 0.2126 * r + 0.7152 * g + 0.0722 * b
    return "#000000" if luminance > 0.5 else "#ffffff"
