"""Built-in highlight palette tables.

Each palette pairs soft background colours (for highlights) with strong
underline colours. Keys are annotation code values.
"""

from __future__ import annotations

VIBRANT: dict[str, dict[str, str]] = {
    "background": {
        "Y": "#FFF4C3",  # yellow
        "B": "#D5FEFF",  # blue
        "O": "#FFD5C3",  # orange
        "G": "#DCFCE7",  # green
        "R": "#fee2e2",  # red
        "P": "#FEECFF",  # pink
        "L": "#E6F3FF",  # light blue
        "GR": "#E8E6E5",  # gray
        "H": "#ede9fe",  # purple
        "BR": "#f5e8dd",  # brown
    },
    "underline": {
        "Y": "#FFC41A",
        "B": "#5DCFFF",
        "O": "#FF7744",
        "G": "#22C55E",
        "R": "#ef4444",
        "P": "#FC90FF",
        "L": "#8DC5FF",
        "GR": "#ACA8A4",
        "H": "#8b5cf6",
        "BR": "#92400e",
    },
}

# Earth tones. Underlines stay dark enough to read on white.
NATURAL: dict[str, dict[str, str]] = {
    "background": {
        "Y": "#F5F0E8",  # cream
        "B": "#E8F0F4",  # steel blue
        "O": "#F5E8DD",  # tan
        "G": "#E8EDE6",  # sage
        "R": "#F5E8EA",  # dusty rose
        "P": "#F0EAF5",  # lavender
        "L": "#E6EEF3",  # slate
        "GR": "#E8E6E5",  # gray
        "H": "#EAE8F0",  # soft purple
        "BR": "#F0E8E0",  # warm beige
    },
    "underline": {
        "Y": "#9A8B7A",
        "B": "#2C5F6F",
        "O": "#92400E",
        "G": "#6B7056",
        "R": "#7C2D3F",
        "P": "#9B8BA8",
        "L": "#5C7B8B",
        "GR": "#ACA8A4",
        "H": "#7C6B8A",
        "BR": "#8B6B47",
    },
}

BUILTIN_PALETTES: dict[str, dict[str, dict[str, str]]] = {
    "vibrant": VIBRANT,
    "natural": NATURAL,
}

DEFAULT_PALETTE_NAME = "vibrant"

# Used when a palette has no entry for a code.
FALLBACK_BACKGROUND = "#FFF4C3"
FALLBACK_UNDERLINE = "#FF7744"
