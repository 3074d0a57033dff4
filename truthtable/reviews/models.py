from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..matching.models import Source


class Trend(str, Enum):
    improving = "improving"
    declining = "declining"
    stable = "stable"


class ReviewRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: Source
    rating: float = Field(..., ge=1.0, le=5.0)
    text: str = ""
    author: str = "Anonymous"
    timestamp: datetime | None = None
    author_review_count: int | None = Field(default=None, ge=0)
    authenticity_score: float | None = Field(default=None, ge=0.1, le=1.0)
    synthetic: bool = False


class ThemeSummary(BaseModel):
    mentions: int = 0
    average_rating: float | None = None
    sentiment_adjusted_score: float | None = None
    keywords: list[str] = Field(default_factory=list)
    mention_percentage: float = 0.0


class SentimentDistribution(BaseModel):
    positive: int = 0
    neutral: int = 0
    negative: int = 0


class TopReview(BaseModel):
    source: Source
    rating: float
    text: str
    author: str
    sentiment: str
    authenticity_score: float
    synthetic: bool = False


class CompetitiveAnalysis(BaseModel):
    category: str = "Restaurant"
    market_position: str = "Competitive"
    strengths: list[str] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)


class ReviewSummary(BaseModel):
    """Narrative digest produced by the optional LLM enrichment step."""

    summary: str
    highlights: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    display_name: str | None = None
    unified_score: float
    total_reviews: int
    confidence: int = Field(..., ge=0, le=100)
    sentiment: SentimentDistribution
    themes: dict[str, ThemeSummary]
    trend: Trend = Trend.stable
    top_reviews: list[TopReview] = Field(default_factory=list)
    platforms_used: int
    data_quality: str
    review_balance: dict[str, int]
    competitive_analysis: CompetitiveAnalysis = Field(default_factory=CompetitiveAnalysis)
    synthetic_sources: list[Source] = Field(default_factory=list)
    summary: ReviewSummary | None = None
    message: str | None = None


class AnalysisRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    source_a_id: str | None = None
    source_b_id: str | None = None
    name: str | None = None
    rating_hint: float | None = Field(
        default=None, ge=1.0, le=5.0,
        description="Listing rating, used to shape synthetic reviews when a source fails",
    )
    include_summary: bool = False

    @model_validator(mode="after")
    def _require_identifier(self) -> "AnalysisRequest":
        if not (self.source_a_id or self.source_b_id or self.name):
            raise ValueError("At least one identifier (source_a_id, source_b_id or name) is required")
        return self

    @property
    def source_ids(self) -> dict[Source, str]:
        ids = {Source.A: self.source_a_id, Source.B: self.source_b_id}
        return {source: sid for source, sid in ids.items() if sid}
