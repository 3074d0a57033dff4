from __future__ import annotations

from dataclasses import dataclass, field

from ..matching.models import Source


def _default_source_weights() -> dict[Source, float]:
    # Source B reviews count slightly more toward the unified score
    return {Source.A: 0.7, Source.B: 0.8}


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Tunables for the review analysis pipeline.
    """

    source_weights: dict[Source, float] = field(default_factory=_default_source_weights)
    top_review_limit: int = 5
    trend_min_reviews: int = 10
    trend_threshold: float = 0.25
    # Confidence components (points)
    volume_points: float = 35.0
    volume_saturation: int = 20
    single_source_points: float = 25.0
    multi_source_points: float = 35.0
    authenticity_points: float = 30.0
    # (minimum points, label), checked in order
    quality_thresholds: tuple[tuple[float, str], ...] = (
        (80.0, "high"),
        (60.0, "medium"),
        (40.0, "low"),
    )
    fallback_confidence: int = 10


DEFAULT_ANALYSIS_CONFIG = AnalysisConfig()
