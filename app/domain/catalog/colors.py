# app/domain/catalog/colors.py
from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from app.domain.common.types import Category
from app.store.models import HSL, RGB, Color


@dataclass(frozen=True)
class PaletteEntry:
    name: str
    hex: str
    hsl: Tuple[int, int, int]
    rgb: Tuple[int, int, int]
    category: Category


# Curated palette: food-related, appetizing tones.
# (name, hex, (h, s, l), (r, g, b), category)
_CURATED: List[Tuple[str, str, Tuple[int, int, int], Tuple[int, int, int], Category]] = [
    ("Tomato Red", "#FF6347", (9, 100, 64), (255, 99, 71), "warm"),
    ("Coral", "#FF7F50", (16, 100, 66), (255, 127, 80), "warm"),
    ("Salmon", "#FA8072", (6, 93, 71), (250, 128, 114), "warm"),
    ("Crimson", "#DC143C", (348, 83, 47), (220, 20, 60), "warm"),
    ("Fire Brick", "#B22222", (0, 68, 42), (178, 34, 34), "warm"),
    ("Orange", "#FFA500", (39, 100, 50), (255, 165, 0), "warm"),
    ("Dark Orange", "#FF8C00", (33, 100, 50), (255, 140, 0), "warm"),
    ("Papaya", "#FFEFD5", (37, 100, 92), (255, 239, 213), "warm"),
    ("Peach", "#FFCBA4", (28, 100, 82), (255, 203, 164), "warm"),
    ("Carrot", "#ED9121", (34, 85, 54), (237, 145, 33), "warm"),
    ("Gold", "#FFD700", (51, 100, 50), (255, 215, 0), "bright"),
    ("Lemon", "#FFFACD", (54, 100, 90), (255, 250, 205), "bright"),
    ("Banana", "#FFE135", (53, 100, 60), (255, 225, 53), "bright"),
    ("Corn", "#FBEC5D", (55, 95, 68), (251, 236, 93), "bright"),
    ("Mustard", "#FFDB58", (48, 100, 67), (255, 219, 88), "bright"),
    ("Lime", "#32CD32", (120, 61, 50), (50, 205, 50), "cool"),
    ("Forest Green", "#228B22", (120, 61, 34), (34, 139, 34), "cool"),
    ("Olive", "#808000", (60, 100, 25), (128, 128, 0), "earth"),
    ("Avocado", "#9CAF88", (94, 25, 62), (156, 175, 136), "earth"),
    ("Mint", "#98FB98", (120, 93, 79), (152, 251, 152), "cool"),
    ("Sky Blue", "#87CEEB", (197, 71, 73), (135, 206, 235), "cool"),
    ("Ocean Blue", "#0077BE", (203, 100, 37), (0, 119, 190), "cool"),
    ("Turquoise", "#40E0D0", (174, 72, 56), (64, 224, 208), "cool"),
    ("Teal", "#008080", (180, 100, 25), (0, 128, 128), "cool"),
    ("Navy", "#000080", (240, 100, 25), (0, 0, 128), "cool"),
    ("Lavender", "#E6E6FA", (240, 67, 94), (230, 230, 250), "cool"),
    ("Plum", "#DDA0DD", (300, 47, 75), (221, 160, 221), "cool"),
    ("Grape", "#6F2DA8", (271, 57, 42), (111, 45, 168), "cool"),
    ("Eggplant", "#614051", (325, 20, 34), (97, 64, 81), "earth"),
    ("Wine", "#722F37", (353, 42, 32), (114, 47, 55), "earth"),
    ("Chocolate", "#D2691E", (25, 75, 47), (210, 105, 30), "earth"),
    ("Coffee", "#6F4E37", (25, 31, 33), (111, 78, 55), "earth"),
    ("Caramel", "#C68E17", (38, 78, 44), (198, 142, 23), "earth"),
    ("Cinnamon", "#CD853F", (30, 59, 52), (205, 133, 63), "earth"),
    ("Tan", "#D2B48C", (34, 44, 69), (210, 180, 140), "earth"),
    ("Rose", "#FF69B4", (330, 100, 71), (255, 105, 180), "warm"),
    ("Pink", "#FFC0CB", (350, 100, 88), (255, 192, 203), "warm"),
    ("Berry", "#8B0000", (0, 100, 27), (139, 0, 0), "warm"),
    ("Strawberry", "#FC5A8D", (343, 96, 67), (252, 90, 141), "warm"),
    ("Blush", "#DE5D83", (343, 61, 61), (222, 93, 131), "warm"),
    ("Cream", "#F5F5DC", (60, 56, 91), (245, 245, 220), "neutral"),
    ("Beige", "#F5DEB3", (33, 78, 84), (245, 222, 179), "neutral"),
    ("Ivory", "#FFFFF0", (60, 100, 97), (255, 255, 240), "neutral"),
    ("Pearl", "#F8F6F0", (45, 44, 96), (248, 246, 240), "neutral"),
    ("Sand", "#C2B280", (45, 38, 63), (194, 178, 128), "neutral"),
    ("Honey", "#FFC30F", (46, 100, 53), (255, 195, 15), "bright"),
    ("Amber", "#FFBF00", (45, 100, 50), (255, 191, 0), "bright"),
    ("Apricot", "#FBCEB1", (24, 90, 84), (251, 206, 177), "warm"),
    ("Mango", "#FFCC5C", (42, 100, 68), (255, 204, 92), "bright"),
    ("Saffron", "#F4C430", (45, 89, 57), (244, 196, 48), "bright"),
    ("Burgundy", "#800020", (345, 100, 25), (128, 0, 32), "earth"),
]

CURATED_COLORS: Tuple[PaletteEntry, ...] = tuple(
    PaletteEntry(name=n, hex=h, hsl=hsl, rgb=rgb, category=c) for n, h, hsl, rgb, c in _CURATED
)

_BY_HEX = {e.hex.lower(): e for e in CURATED_COLORS}


def create_color(entry: PaletteEntry) -> Color:
    """Fresh draw of a palette entry: new id, zero selections."""
    h, s, l = entry.hsl
    r, g, b = entry.rgb
    return Color(
        id=uuid.uuid4().hex,
        name=entry.name,
        hex=entry.hex,
        hsl=HSL(h=h, s=s, l=l),
        rgb=RGB(r=r, g=g, b=b),
        category=entry.category,
        selection_count=0,
    )


def get_palette_entry(hex_value: str) -> Optional[PaletteEntry]:
    return _BY_HEX.get((hex_value or "").lower())


def get_color_by_name(name: str) -> Optional[Color]:
    needle = name.lower()
    for entry in CURATED_COLORS:
        if entry.name.lower() == needle:
            return create_color(entry)
    return None


def get_colors_by_category(category: Category) -> List[Color]:
    return [create_color(e) for e in CURATED_COLORS if e.category == category]


def hsl_to_rgb(h: float, s: float, l: float) -> Tuple[int, int, int]:
    h /= 360
    s /= 100
    l /= 100

    def hue2rgb(p: float, q: float, t: float) -> float:
        if t < 0:
            t += 1
        if t > 1:
            t -= 1
        if t < 1 / 6:
            return p + (q - p) * 6 * t
        if t < 1 / 2:
            return q
        if t < 2 / 3:
            return p + (q - p) * (2 / 3 - t) * 6
        return p

    q = l * (1 + s) if l < 0.5 else l + s - l * s
    p = 2 * l - q
    r = round(hue2rgb(p, q, h + 1 / 3) * 255)
    g = round(hue2rgb(p, q, h) * 255)
    b = round(hue2rgb(p, q, h - 1 / 3) * 255)
    return r, g, b


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return "#" + "".join(f"{x:02x}" for x in (r, g, b))


def get_contrast_color(color: Color) -> str:
    """Black or white text, whichever reads better on `color`."""
    luminance = (0.299 * color.rgb.r + 0.587 * color.rgb.g + 0.114 * color.rgb.b) / 255
    return "#000000" if luminance > 0.5 else "#ffffff"


def get_most_selected_colors(colors: Iterable[Color], count: int) -> List[Color]:
    # sorted() is stable: ties keep first-selected order
    return sorted(colors, key=lambda c: c.selection_count, reverse=True)[:count]
