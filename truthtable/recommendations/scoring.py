from __future__ import annotations

import logging
import math
from typing import Callable, Iterable

from ..matching.models import Coordinate, MergedEntity
from ..matching.similarity import haversine_km
from .config import DEFAULT_SCORING_CONFIG, SCORE_FACTORS, ScoringConfig
from .models import ScoreVector, ScoredEntity, ScoringContext, SearchFilters, SortMode

logger = logging.getLogger(__name__)

DISTINCTIVE_FEATURES = ("hidden-gem", "chef-driven", "wine-focused", "craft-cocktails")

# (max distance km, score), checked in order
_DISTANCE_STEPS = ((1.0, 1.0), (3.0, 0.8), (5.0, 0.6), (10.0, 0.3))
_FAR_DISTANCE_SCORE = 0.1
_NO_LOCATION_SCORE = 0.3


class ScoreInvariantError(ValueError):
    """A factor score fell outside [0, 1]."""


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def rating_score(entity: MergedEntity) -> float:
    if entity.rating is None:
        return 0.5
    score = _clamp((entity.rating - 1) / 4)
    if entity.cross_source_verified:
        score = min(1.0, score * 1.1)
    if entity.is_chain:
        score *= 0.9
    return score


def volume_score(entity: MergedEntity) -> float:
    total = entity.total_reviews
    if total == 0:
        return 0.1
    return _clamp(math.log10(total + 1) / 3, low=0.1)


def recency_score(entity: MergedEntity) -> float:
    # No per-listing review dates, so operational status is the only signal
    score = 0.6
    if entity.operational:
        score += 0.2
    return score


def consistency_score(entity: MergedEntity, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> float:
    if entity.platform_consistency is None:
        return config.single_source_consistency
    return entity.platform_consistency


def price_value_score(entity: MergedEntity) -> float:
    rating = entity.rating if entity.rating is not None else 3.5
    tier = entity.price_tier or 2
    score = _clamp((rating / tier - 0.25) / 4.75)
    if entity.total_reviews < 10:
        score *= 0.8
    return score


def distance_score(entity: MergedEntity, user_location: Coordinate | None) -> float:
    if user_location is None or entity.coordinate is None:
        return _NO_LOCATION_SCORE
    distance = haversine_km(user_location, entity.coordinate)
    for max_km, score in _DISTANCE_STEPS:
        if distance <= max_km:
            return score
    return _FAR_DISTANCE_SCORE


def query_terms(query: str) -> list[str]:
    terms: list[str] = []
    for token in (query or "").lower().split():
        if len(token) < 3:
            continue
        terms.append(token)
        # "tacos" should still find "Taco Loco"
        if token.endswith("s") and len(token) > 3:
            terms.append(token[:-1])
    return terms


def uniqueness_score(entity: MergedEntity, query: str = "") -> float:
    score = 0.3
    score += 0.15 * sum(1 for f in entity.special_features if f in DISTINCTIVE_FEATURES)

    terms = query_terms(query)
    if terms:
        name_lower = entity.name.lower()
        cuisine_lower = entity.cuisine.lower()
        if any(t in name_lower for t in terms):
            score += 0.2
        if any(t in cuisine_lower for t in terms):
            score += 0.15

    if "authentic" in entity.cuisine_style or "regional" in entity.cuisine_style:
        score += 0.1
    if entity.is_chain:
        score -= 0.2

    return _clamp(score)


def _checked(factor: str, value: float, config: ScoringConfig) -> float:
    if 0.0 <= value <= 1.0:
        return value
    if config.strict:
        raise ScoreInvariantError(f"{factor} score {value!r} is outside [0, 1]")
    logger.error("Clamping out-of-range %s score %r", factor, value)
    return _clamp(value)


def compute_score_vector(
    entity: MergedEntity,
    context: ScoringContext,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> ScoreVector:
    raw = {
        "rating": rating_score(entity),
        "volume": volume_score(entity),
        "recency": recency_score(entity),
        "consistency": consistency_score(entity, config),
        "price_value": price_value_score(entity),
        "distance": distance_score(entity, context.user_location),
        "uniqueness": uniqueness_score(entity, context.query),
    }
    return ScoreVector(**{f: _checked(f, raw[f], config) for f in SCORE_FACTORS})


def composite_score(scores: ScoreVector, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> float:
    return round(scores.weighted(config.weights), 3)


# Checked in priority order; the first ``max_reasons`` distinct labels win.
REASON_RULES: list[tuple[Callable[[MergedEntity, ScoreVector], bool], str]] = [
    (lambda e, s: s.rating > 0.85, "Exceptional ratings"),
    (lambda e, s: 0.75 < s.rating <= 0.85, "Excellent ratings"),
    (lambda e, s: s.volume > 0.8, "Highly reviewed"),
    (lambda e, s: 0.6 < s.volume <= 0.8, "Well-reviewed"),
    (lambda e, s: e.cross_source_verified, "Verified across platforms"),
    (lambda e, s: s.price_value > 0.8, "Outstanding value"),
    (lambda e, s: 0.6 < s.price_value <= 0.8, "Good value"),
    (lambda e, s: s.distance > 0.9, "Very close to you"),
    (lambda e, s: 0.7 < s.distance <= 0.9, "Nearby"),
    (lambda e, s: "highly-rated" in e.special_features, "Top-rated"),
    (lambda e, s: "hidden-gem" in e.special_features, "Hidden gem"),
    (lambda e, s: "craft-cocktails" in e.special_features, "Craft cocktails"),
    (lambda e, s: "chef-driven" in e.special_features, "Chef-driven"),
    (lambda e, s: "wine-focused" in e.special_features, "Wine selection"),
    (lambda e, s: "authentic" in e.cuisine_style, "Authentic cuisine"),
    (lambda e, s: "regional" in e.cuisine_style, "Regional specialty"),
]


def recommendation_reasons(entity: MergedEntity, scores: ScoreVector, limit: int = 3) -> list[str]:
    reasons: list[str] = []
    for rule, label in REASON_RULES:
        if len(reasons) >= limit:
            break
        if label not in reasons and rule(entity, scores):
            reasons.append(label)
    return reasons


def _matches_filters(entity: MergedEntity, filters: SearchFilters) -> bool:
    if not entity.operational:
        return False

    if filters.price_range and entity.price_bucket not in filters.price_range:
        return False

    if filters.min_rating > 0 and (entity.rating is None or entity.rating < filters.min_rating):
        return False

    if filters.cuisine:
        wanted = filters.cuisine.strip().lower()
        haystacks = (entity.cuisine.lower(), entity.name.lower(), entity.cuisine_style.lower())
        if not any(wanted in h for h in haystacks):
            return False

    return True


def apply_filters(entities: Iterable[MergedEntity], filters: SearchFilters) -> list[MergedEntity]:
    """Drop closed restaurants and those failing the caller's filters."""
    return [e for e in entities if _matches_filters(e, filters)]


_SORT_KEYS: dict[SortMode, Callable[[ScoredEntity], tuple]] = {
    SortMode.smart: lambda s: (-s.intelligent_score,),
    SortMode.rating: lambda s: (-s.scores.rating, -s.intelligent_score),
    SortMode.reviews: lambda s: (-s.entity.total_reviews, -s.intelligent_score),
    SortMode.distance: lambda s: (-s.scores.distance, -s.intelligent_score),
}


def score_entities(
    entities: Iterable[MergedEntity],
    context: ScoringContext,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> list[ScoredEntity]:
    """Score, annotate and sort entities; ties keep their input order."""
    scored: list[ScoredEntity] = []
    for entity in entities:
        scores = compute_score_vector(entity, context, config)
        scored.append(ScoredEntity(
            entity=entity,
            scores=scores,
            intelligent_score=composite_score(scores, config),
            recommendation_reasons=recommendation_reasons(entity, scores, config.max_reasons),
        ))
    return sorted(scored, key=_SORT_KEYS[context.sort_by])
