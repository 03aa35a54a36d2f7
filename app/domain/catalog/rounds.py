# app/domain/catalog/rounds.py
from __future__ import annotations

import math
import random
from typing import List, Optional

from app.domain.catalog.colors import CURATED_COLORS, PaletteEntry, create_color
from app.domain.common.types import CATEGORIES, DrawPolicy
from app.store.models import Color


def _rng(rng: Optional[random.Random]) -> random.Random:
    return rng if rng is not None else random.Random()


def generate_color_set(count: int, rng: Optional[random.Random] = None) -> List[Color]:
    """
    Uniform draw of `count` distinct palette entries.
    Clamped to the catalog size; never repeats a hex inside one set.
    """
    n = max(0, min(count, len(CURATED_COLORS)))
    picked = _rng(rng).sample(CURATED_COLORS, n)
    return [create_color(e) for e in picked]


def generate_balanced_color_set(count: int, rng: Optional[random.Random] = None) -> List[Color]:
    """
    Draw proportionally from the categories, visited in random order, then
    shuffle.
    Small categories that cannot fill their share are topped up from the
    rest of the catalog so the set still reaches min(count, catalog size).
    """
    r = _rng(rng)
    n = max(0, min(count, len(CURATED_COLORS)))
    if n == 0:
        return []

    per_category = math.ceil(n / len(CATEGORIES))
    order = list(CATEGORIES)
    r.shuffle(order)
    picked: List[PaletteEntry] = []
    for category in order:
        pool = [e for e in CURATED_COLORS if e.category == category]
        picked.extend(r.sample(pool, min(per_category, len(pool))))
        if len(picked) >= n:
            break

    if len(picked) < n:
        taken = {e.hex for e in picked}
        rest = [e for e in CURATED_COLORS if e.hex not in taken]
        picked.extend(r.sample(rest, n - len(picked)))

    r.shuffle(picked)
    return [create_color(e) for e in picked[:n]]


def generate_all_rounds(
    total_rounds: int,
    colors_per_round: int,
    *,
    policy: DrawPolicy = "balanced",
    rng: Optional[random.Random] = None,
) -> List[List[Color]]:
    """
    Draw every round of a session up front so navigating back replays the
    exact set that was offered. Rounds are drawn independently: the same hex
    may show up in several rounds, each time as a fresh Color.
    """
    r = _rng(rng)
    draw = generate_balanced_color_set if policy == "balanced" else generate_color_set
    return [draw(colors_per_round, r) for _ in range(total_rounds)]
