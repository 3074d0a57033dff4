"""
Deterministic stand-in reviews for a source whose review fetch failed.

Only used when synthetic fallback is switched on; every generated review
carries ``synthetic=True`` so downstream output can flag it.
"""
from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

from ..matching.models import Source
from ..reviews.models import ReviewRecord

_TEMPLATES: dict[int, list[str]] = {
    5: [
        "Absolutely loved {name}. The food came out hot and full of flavor, and the staff checked on us without hovering.",
        "One of our regular spots now. {name} keeps the menu simple and every dish we tried was well seasoned.",
        "Came for dinner with family and left planning the next visit. Portions were generous and prices fair.",
    ],
    4: [
        "Solid meal at {name}. A short wait for a table but the service was friendly and the dishes were fresh.",
        "Good food and a relaxed atmosphere. A couple of plates were a little salty but we would come back.",
        "Nice place for a casual lunch. The menu has plenty of options and the value is reasonable.",
    ],
    3: [
        "Decent but nothing memorable. {name} was busy and our order took a while to arrive.",
        "Some dishes were good, others were average. Service was fine once we got the attention of a server.",
    ],
    2: [
        "Disappointing visit to {name}. The food was lukewarm and the staff seemed stretched thin.",
        "Prices felt high for what we got. The dining room was noisy and the meal was bland.",
    ],
    1: [
        "Would not return. We waited almost an hour and the order was wrong when it finally came.",
    ],
}

_AUTHORS = ["Alex M.", "Jordan P.", "Sam R.", "Taylor K.", "Casey L.", "Morgan D.", "Riley S.", "Jamie T."]


def _star_for(rng: random.Random, rating: float) -> int:
    star = round(rating + rng.uniform(-1.0, 1.0))
    return max(1, min(5, star))


def synthetic_reviews(
    name: str,
    source: Source,
    rating: float | None = None,
    count: int = 5,
    reference_time: datetime | None = None,
) -> list[ReviewRecord]:
    """
    Generate ``count`` plausible reviews around ``rating``.

    Output is seeded on the source and restaurant name, so repeated calls
    for the same restaurant produce the same reviews.
    """
    rng = random.Random(f"{source.value}:{name.strip().lower()}")
    base = rating if rating is not None else 4.0
    now = reference_time or datetime.now(timezone.utc)

    reviews: list[ReviewRecord] = []
    for index in range(count):
        star = _star_for(rng, base)
        template = rng.choice(_TEMPLATES[star])
        reviews.append(ReviewRecord(
            source=source,
            rating=float(star),
            text=template.format(name=name or "this place"),
            author=rng.choice(_AUTHORS),
            timestamp=now - timedelta(days=30 * index + rng.randint(0, 20)),
            authenticity_score=round(rng.uniform(0.8, 1.0), 2),
            synthetic=True,
        ))
    return reviews
