from __future__ import annotations

import logging
from datetime import datetime, timezone
from statistics import mean
from typing import Mapping, Sequence

from ..matching.models import Source
from .authenticity import with_authenticity
from .config import DEFAULT_ANALYSIS_CONFIG, AnalysisConfig
from .keywords import (
    MILD_NEGATIVE,
    MILD_POSITIVE,
    STRONG_NEGATIVE,
    STRONG_POSITIVE,
    THEME_KEYWORDS,
)
from .models import (
    AnalysisResult,
    CompetitiveAnalysis,
    ReviewRecord,
    SentimentDistribution,
    ThemeSummary,
    TopReview,
    Trend,
)

logger = logging.getLogger(__name__)

_KEYWORD_TIERS = ("positive", "negative", "neutral")


# ── Scores ───────────────────────────────────────────────────────────────


def unified_score(reviews: Sequence[ReviewRecord], config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG) -> float:
    """Source-weighted mean star rating."""
    weights = [config.source_weights.get(r.source, 1.0) for r in reviews]
    total_weight = sum(weights)
    if not reviews or total_weight <= 0:
        return 0.0
    return sum(w * r.rating for w, r in zip(weights, reviews)) / total_weight


def _sentiment_adjusted(rating: float, positive: bool, negative: bool) -> float:
    # Negative cues only pull down toward 2.5, positive cues only pull up toward 3.5
    adjusted = rating
    if negative and adjusted > 2.5:
        adjusted -= (adjusted - 2.5) / 2
    if positive and adjusted < 3.5:
        adjusted += (3.5 - adjusted) / 2
    return adjusted


def analyze_themes(reviews: Sequence[ReviewRecord]) -> dict[str, ThemeSummary]:
    total = len(reviews)
    themes: dict[str, ThemeSummary] = {}

    for theme, tiers in THEME_KEYWORDS.items():
        ratings: list[float] = []
        adjusted: list[float] = []
        keywords: list[str] = []

        for review in reviews:
            text = review.text.lower()
            found = {tier: [k for k in tiers[tier] if k in text] for tier in _KEYWORD_TIERS}
            matched = [k for tier in _KEYWORD_TIERS for k in found[tier]]
            if not matched:
                continue

            ratings.append(review.rating)
            adjusted.append(_sentiment_adjusted(review.rating, bool(found["positive"]), bool(found["negative"])))
            keywords.extend(k for k in matched if k not in keywords)

        mentions = len(ratings)
        themes[theme] = ThemeSummary(
            mentions=mentions,
            average_rating=round(mean(ratings), 1) if ratings else None,
            sentiment_adjusted_score=round(mean(adjusted), 1) if adjusted else None,
            keywords=keywords[:5],
            mention_percentage=round(mentions / total * 100, 1) if total else 0.0,
        )

    return themes


def sentiment_distribution(reviews: Sequence[ReviewRecord]) -> SentimentDistribution:
    total = len(reviews)
    if total == 0:
        return SentimentDistribution()

    positive = sum(1 for r in reviews if r.rating >= 4)
    negative = sum(1 for r in reviews if r.rating <= 2)
    neutral = total - positive - negative
    return SentimentDistribution(
        positive=round(positive / total * 100),
        neutral=round(neutral / total * 100),
        negative=round(negative / total * 100),
    )


def classify_review_sentiment(text: str, rating: float) -> str:
    """Label one review, letting strong wording shift the star rating."""
    lowered = (text or "").lower()
    score = rating
    if any(w in lowered for w in STRONG_POSITIVE):
        score += 1
    if any(w in lowered for w in STRONG_NEGATIVE):
        score -= 1
    if any(w in lowered for w in MILD_POSITIVE):
        score += 0.3
    if any(w in lowered for w in MILD_NEGATIVE):
        score -= 0.3

    if score >= 4.2:
        return "positive"
    if score <= 2.8:
        return "negative"
    return "neutral"


def _as_utc(ts: datetime) -> datetime:
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def calculate_trend(reviews: Sequence[ReviewRecord], config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG) -> Trend:
    """
    Compare the oldest third of timestamped reviews with the newest third.

    With fewer than ``trend_min_reviews`` usable reviews there is no
    measurable trend and the result is ``stable``.
    """
    dated = sorted((r for r in reviews if r.timestamp is not None), key=lambda r: _as_utc(r.timestamp))
    if len(dated) < config.trend_min_reviews:
        return Trend.stable

    third = len(dated) // 3
    older = mean(r.rating for r in dated[:third])
    recent = mean(r.rating for r in dated[-third:])
    difference = recent - older

    if difference > config.trend_threshold:
        return Trend.improving
    if difference < -config.trend_threshold:
        return Trend.declining
    return Trend.stable


# ── Balanced top reviews ─────────────────────────────────────────────────


def rank_value(review: ReviewRecord) -> float:
    return 2 * review.rating + (review.authenticity_score or 0.0) + len(review.text) / 500


def _duplicate_key(review: ReviewRecord) -> tuple[str, str]:
    leading = " ".join(review.text.lower().split())[:40]
    return review.author.strip().lower(), leading


def balanced_top_reviews(reviews: Sequence[ReviewRecord], limit: int = 5) -> list[TopReview]:
    """
    Pick up to ``limit`` reviews, guaranteeing each contributing source a slot.

    The best review of every source is taken first; remaining slots go to the
    highest-ranked reviews from any source, skipping near-duplicates.
    """
    ranked = sorted(reviews, key=rank_value, reverse=True)
    selected: list[ReviewRecord] = []
    seen: set[tuple[str, str]] = set()

    def take(review: ReviewRecord) -> None:
        key = _duplicate_key(review)
        if key not in seen and len(selected) < limit:
            seen.add(key)
            selected.append(review)

    for source in Source:
        best = next(
            (r for r in ranked if r.source is source and _duplicate_key(r) not in seen), None
        )
        if best is not None:
            take(best)

    for review in ranked:
        if len(selected) >= limit:
            break
        take(review)

    selected.sort(key=rank_value, reverse=True)
    return [
        TopReview(
            source=r.source,
            rating=r.rating,
            text=r.text,
            author=r.author,
            sentiment=classify_review_sentiment(r.text, r.rating),
            authenticity_score=r.authenticity_score or 0.0,
            synthetic=r.synthetic,
        )
        for r in selected
    ]


# ── Confidence & quality ─────────────────────────────────────────────────


def confidence_points(
    total_reviews: int,
    source_count: int,
    average_authenticity: float,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG,
) -> float:
    volume = config.volume_points * min(1.0, total_reviews / config.volume_saturation)
    if source_count >= 2:
        diversity = config.multi_source_points
    elif source_count == 1:
        diversity = config.single_source_points
    else:
        diversity = 0.0
    return volume + diversity + config.authenticity_points * average_authenticity


def quality_label(points: float, config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG) -> str:
    for minimum, label in config.quality_thresholds:
        if points >= minimum:
            return label
    return "very low"


def competitive_insights(
    restaurant_name: str | None,
    themes: Mapping[str, ThemeSummary],
    score: float,
) -> CompetitiveAnalysis:
    name_lower = (restaurant_name or "").lower()
    analysis = CompetitiveAnalysis()

    if "mexican" in name_lower or "taco" in name_lower:
        analysis.category = "Mexican Restaurant"
    elif "pizza" in name_lower:
        analysis.category = "Pizza Restaurant"
    elif "coffee" in name_lower or "cafe" in name_lower:
        analysis.category = "Coffee Shop"

    if score >= 4.5:
        analysis.market_position = "Market Leader"
    elif score >= 4.0:
        analysis.market_position = "Strong Competitor"
    elif score >= 3.5:
        analysis.market_position = "Competitive"
    else:
        analysis.market_position = "Needs Improvement"

    for theme, summary in themes.items():
        if summary.average_rating is None:
            continue
        if summary.average_rating >= 4.5:
            analysis.strengths.append(f"Excellent {theme}")
        elif summary.average_rating >= 4.0:
            analysis.strengths.append(f"Strong {theme}")
        elif summary.average_rating < 3.5:
            analysis.opportunities.append(f"Improve {theme} quality")

    if len(analysis.strengths) < 2:
        analysis.opportunities.append("Enhance customer experience")

    return analysis


# ── Entry point ──────────────────────────────────────────────────────────


def fallback_analysis(
    display_name: str | None,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG,
) -> AnalysisResult:
    themes = analyze_themes([])
    return AnalysisResult(
        display_name=display_name,
        unified_score=0.0,
        total_reviews=0,
        confidence=config.fallback_confidence,
        sentiment=SentimentDistribution(),
        themes=themes,
        trend=Trend.stable,
        top_reviews=[],
        platforms_used=0,
        data_quality="very low",
        review_balance={s.value: 0 for s in Source},
        competitive_analysis=competitive_insights(display_name, themes, 0.0),
        message="No review data available from either source. Scores are placeholders, not measurements.",
    )


def analyze_reviews(
    reviews_by_source: Mapping[Source, Sequence[ReviewRecord]],
    display_name: str | None = None,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG,
) -> AnalysisResult:
    """
    Build one analysis from per-source review lists.

    A source mapped to an empty list is treated as requested but
    unavailable; the result is degraded rather than failed.
    """
    per_source = {
        source: [with_authenticity(r) for r in reviews_by_source.get(source, [])]
        for source in Source
    }
    all_reviews = [r for source in Source for r in per_source[source]]

    if not all_reviews:
        logger.info("No reviews for %r, returning fallback analysis", display_name)
        return fallback_analysis(display_name, config)

    contributing = [s for s in Source if per_source[s]]
    score = unified_score(all_reviews, config)
    themes = analyze_themes(all_reviews)
    average_authenticity = mean(r.authenticity_score or 0.0 for r in all_reviews)
    points = confidence_points(len(all_reviews), len(contributing), average_authenticity, config)
    synthetic_sources = [s for s in contributing if any(r.synthetic for r in per_source[s])]

    notes: list[str] = []
    missing = [s.value for s in Source if s in reviews_by_source and not per_source[s]]
    if missing:
        notes.append(f"No reviews available from source {', '.join(missing)}; confidence is reduced.")
    if synthetic_sources:
        notes.append(
            f"Source {', '.join(s.value for s in synthetic_sources)} reviews are synthetic estimates."
        )

    return AnalysisResult(
        display_name=display_name,
        unified_score=round(score, 1),
        total_reviews=len(all_reviews),
        confidence=min(100, round(points)),
        sentiment=sentiment_distribution(all_reviews),
        themes=themes,
        trend=calculate_trend(all_reviews, config),
        top_reviews=balanced_top_reviews(all_reviews, config.top_review_limit),
        platforms_used=len(contributing),
        data_quality=quality_label(points, config),
        review_balance={s.value: len(per_source[s]) for s in Source},
        competitive_analysis=competitive_insights(display_name, themes, score),
        synthetic_sources=synthetic_sources,
        message=" ".join(notes) or None,
    )
