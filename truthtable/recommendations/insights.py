from __future__ import annotations

from typing import Sequence

import pandas as pd

from .models import ScoredEntity, SearchInsights

PRICE_BUCKETS = ["$", "$$", "$$$", "$$$$"]
PRICE_CATEGORIES = ["budget", "moderate", "expensive", "luxury"]


def _to_frame(restaurants: Sequence[ScoredEntity]) -> pd.DataFrame:
    return pd.DataFrame([
        {
            "rating": r.entity.rating,
            "price_bucket": r.entity.price_bucket or "$",
            "price_category": r.entity.price_category,
            "cuisine_style": r.entity.cuisine_style,
            "features": r.entity.special_features,
            "verified": r.entity.cross_source_verified,
        }
        for r in restaurants
    ])


def _counts(series: pd.Series, baseline: list[str] | None = None) -> dict[str, int]:
    counts = {k: 0 for k in baseline or []}
    for key, value in series.value_counts(sort=False).items():
        counts[str(key)] = int(value)
    return counts


def generate_search_insights(restaurants: Sequence[ScoredEntity]) -> SearchInsights:
    """Aggregate distributions over a ranked result set."""
    if not restaurants:
        return SearchInsights(
            price_distribution={k: 0 for k in PRICE_BUCKETS},
            quality_distribution={k: 0 for k in PRICE_CATEGORIES},
        )

    df = _to_frame(restaurants)

    ratings = df["rating"].dropna()
    average_rating = round(float(ratings.mean()), 1) if not ratings.empty else 0.0

    features = df["features"].explode().dropna()

    return SearchInsights(
        total_restaurants=len(df),
        average_rating=average_rating,
        price_distribution=_counts(df["price_bucket"], PRICE_BUCKETS),
        quality_distribution=_counts(df["price_category"], PRICE_CATEGORIES),
        cuisine_types=_counts(df["cuisine_style"]),
        top_features=_counts(features),
        verification_rate=int(round(df["verified"].mean() * 100)),
    )
