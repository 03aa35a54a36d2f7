# app/domain/analytics.py
from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, List, Tuple

from app.domain.catalog.colors import get_palette_entry
from app.store.models import Color, GameSession

POPULAR_LIMIT = 20
NAME_LIMIT = 15
HUE_BUCKET = 30
PERCENT_BUCKET = 10


def _name_and_category(c: Color) -> Tuple[str, str]:
    """Catalog name/category win; colors outside the catalog keep their own."""
    entry = get_palette_entry(c.hex)
    if entry is not None:
        return entry.name, entry.category
    return c.name or "Custom Color", c.category or "neutral"


def _histogram(values: Iterable[int], width: int, label: str) -> List[Dict[str, int]]:
    counts = Counter((v // width) * width for v in values)
    return [{label: bucket, "frequency": n} for bucket, n in sorted(counts.items())]


def summarize_session(session: GameSession) -> Dict[str, Any]:
    """Short listing row for one stored session."""
    gs = session.game_state
    return {
        "id": session.id,
        "completed_at": session.completed_at.isoformat() if session.completed_at else None,
        "final_top3": [c.model_dump(mode="json") for c in gs.final_top3],
        "round_count": gs.total_rounds,
        "user_agent": session.user_agent,
        "screen_size": session.screen_size.model_dump(),
        "location": session.location.model_dump() if session.location else None,
    }


def compute_color_analytics(sessions: Iterable[GameSession]) -> Dict[str, Any]:
    """
    Aggregate preferences over completed sessions.

    Final colors (finalists with their rank 1..3) feed the popularity table
    and the HSL histograms; every round selection feeds name and category
    preferences. Sessions that are not complete are ignored.
    """
    completed = [s for s in sessions if s.game_state.game_phase == "complete"]

    finals: List[Tuple[Color, int]] = [
        (c, rank) for s in completed for rank, c in enumerate(s.game_state.final_top3, start=1)
    ]
    picks: List[Color] = [rr.selected_color for s in completed for rr in s.game_state.round_history]

    by_hex: Dict[str, Dict[str, Any]] = {}
    for c, rank in finals:
        key = c.hex.lower()
        row = by_hex.get(key)
        if row is None:
            name, category = _name_and_category(c)
            row = by_hex[key] = {
                "hex": key,
                "name": name,
                "category": category,
                "frequency": 0,
                "_rank": 0,
                "_h": 0,
                "_s": 0,
                "_l": 0,
            }
        row["frequency"] += 1
        row["_rank"] += rank
        row["_h"] += c.hsl.h
        row["_s"] += c.hsl.s
        row["_l"] += c.hsl.l

    popular: List[Dict[str, Any]] = []
    for row in by_hex.values():
        n = row["frequency"]
        popular.append({
            "hex": row["hex"],
            "name": row["name"],
            "category": row["category"],
            "frequency": n,
            "avg_rank": round(row["_rank"] / n, 2),
            "avg_hue": round(row["_h"] / n, 1),
            "avg_saturation": round(row["_s"] / n, 1),
            "avg_lightness": round(row["_l"] / n, 1),
        })
    popular.sort(key=lambda r: (-r["frequency"], r["avg_rank"]))

    names: Counter = Counter()
    categories: Counter = Counter()
    for c in picks:
        name, category = _name_and_category(c)
        names[name] += 1
        categories[category] += 1

    countries: Counter = Counter()
    cities: Counter = Counter()
    for s in completed:
        loc = s.location
        if loc is None:
            continue
        if loc.country:
            countries[loc.country] += 1
        if loc.city:
            cities[f"{loc.city}, {loc.country}" if loc.country else loc.city] += 1

    return {
        "popular_final_colors": popular[:POPULAR_LIMIT],
        "hue_preferences": _histogram((c.hsl.h % 360 for c, _ in finals), HUE_BUCKET, "hue_range"),
        "saturation_preferences": _histogram((c.hsl.s for c, _ in finals), PERCENT_BUCKET, "saturation_range"),
        "lightness_preferences": _histogram((c.hsl.l for c, _ in finals), PERCENT_BUCKET, "lightness_range"),
        "color_name_preferences": [{"name": k, "count": v} for k, v in names.most_common(NAME_LIMIT)],
        "category_preferences": [{"category": k, "count": v} for k, v in categories.most_common()],
        "location_stats": {
            "countries": [{"country": k, "count": v} for k, v in countries.most_common()],
            "cities": [{"city": k, "count": v} for k, v in cities.most_common()],
        },
        "total_sessions": len(completed),
        "total_colors": len(finals),
        "total_rounds": len(picks),
    }
