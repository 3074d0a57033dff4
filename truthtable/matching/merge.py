from __future__ import annotations

import logging
from typing import Sequence

from .classify import (
    categorize_price,
    classify_cuisine_style,
    estimate_wait_time,
    identify_features,
    prefer_cuisine,
)
from .config import DEFAULT_MATCH_CONFIG, MatchConfig
from .models import ListingRecord, MergedEntity
from .similarity import match_score

logger = logging.getLogger(__name__)


def platform_consistency(
    rating_a: float | None,
    count_a: int,
    rating_b: float | None,
    count_b: int,
    config: MatchConfig = DEFAULT_MATCH_CONFIG,
) -> float:
    """
    Score in [0, 1] describing how well two sources agree on a restaurant.

    Rating agreement is discounted when one side rests on a thin review base
    while the pair as a whole is well reviewed, then blended with how
    balanced the two review counts are.
    """
    if rating_a is None or rating_b is None:
        return config.default_consistency

    agreement = 1 - abs(rating_a - rating_b) / 4
    low, high = min(count_a, count_b), max(count_a, count_b)
    if low < 10 and count_a + count_b > 20:
        agreement *= 0.8

    ratio = low / high if high > 0 else 0.0
    return max(0.0, min(1.0, 0.7 * agreement + 0.3 * ratio))


def find_matches(
    listings_a: Sequence[ListingRecord],
    listings_b: Sequence[ListingRecord],
    config: MatchConfig = DEFAULT_MATCH_CONFIG,
) -> dict[int, int]:
    """
    Pair B listings with A listings, returning ``{b_index: a_index}``.

    Every pair above the threshold is a candidate. Candidates are realised
    best score first, so each B listing ends up on its best A listing that
    no stronger B listing claimed. Ties go to the earlier B, then earlier A.
    """
    candidates: list[tuple[float, int, int]] = []
    for b_idx, b in enumerate(listings_b):
        for a_idx, a in enumerate(listings_a):
            score = match_score(a, b, config)
            if score > config.match_threshold:
                candidates.append((score, b_idx, a_idx))

    candidates.sort(key=lambda c: (-c[0], c[1], c[2]))

    matches: dict[int, int] = {}
    taken_a: set[int] = set()
    for score, b_idx, a_idx in candidates:
        if b_idx in matches or a_idx in taken_a:
            continue
        matches[b_idx] = a_idx
        taken_a.add(a_idx)
        logger.debug(
            "Matched %r <-> %r (score %.3f)",
            listings_a[a_idx].name, listings_b[b_idx].name, score,
        )
    return matches


def build_entity(
    listing_a: ListingRecord | None,
    listing_b: ListingRecord | None,
    config: MatchConfig = DEFAULT_MATCH_CONFIG,
) -> MergedEntity:
    winner = listing_a or listing_b
    if winner is None:
        raise ValueError("build_entity needs at least one listing")

    verified = listing_a is not None and listing_b is not None
    consistency = None
    if verified:
        consistency = platform_consistency(
            listing_a.rating, listing_a.review_count,
            listing_b.rating, listing_b.review_count,
            config,
        )

    cuisine = prefer_cuisine(
        listing_a.cuisine if listing_a else None,
        listing_b.cuisine if listing_b else None,
    )
    price_tier = winner.price_tier
    if price_tier is None and listing_b is not None:
        price_tier = listing_b.price_tier
    review_count = sum(l.review_count for l in (listing_a, listing_b) if l is not None)
    rating = winner.rating if winner.rating is not None else (listing_b.rating if listing_b else None)

    return MergedEntity(
        id=winner.id,
        name=winner.name,
        address=winner.address,
        coordinate=winner.coordinate or (listing_b.coordinate if listing_b else None),
        source_a=listing_a,
        source_b=listing_b,
        cross_source_verified=verified,
        platform_consistency=consistency,
        cuisine=cuisine,
        cuisine_style=classify_cuisine_style(winner.name, cuisine),
        price_tier=price_tier,
        price_category=categorize_price(price_tier),
        special_features=identify_features(winner.name, cuisine, rating, review_count),
        estimated_wait_time=estimate_wait_time(rating, review_count),
    )


def merge_listings(
    listings_a: Sequence[ListingRecord],
    listings_b: Sequence[ListingRecord],
    config: MatchConfig = DEFAULT_MATCH_CONFIG,
) -> list[MergedEntity]:
    """
    Reconcile two listing sets into one deduplicated list of entities.

    A listings seed the result in input order (each absorbing at most one
    matched B listing); unmatched B listings follow as standalone entities.
    """
    matches = find_matches(listings_a, listings_b, config)
    b_for_a = {a_idx: b_idx for b_idx, a_idx in matches.items()}

    merged = [
        build_entity(a, listings_b[b_for_a[a_idx]] if a_idx in b_for_a else None, config)
        for a_idx, a in enumerate(listings_a)
    ]
    merged.extend(
        build_entity(None, b, config)
        for b_idx, b in enumerate(listings_b)
        if b_idx not in matches
    )

    logger.info(
        "Merged %d + %d listings into %d entities (%d cross-verified)",
        len(listings_a), len(listings_b), len(merged), len(matches),
    )
    return merged
