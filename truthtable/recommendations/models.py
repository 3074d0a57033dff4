from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..matching.models import Coordinate, MergedEntity


class SortMode(str, Enum):
    smart = "smart"
    rating = "rating"
    reviews = "reviews"
    distance = "distance"


class SearchFilters(BaseModel):
    price_range: list[str] | None = Field(
        default=None,
        description='Price buckets to include, e.g. ["$", "$$"]',
    )
    min_rating: float = Field(default=0.0, ge=0.0, le=5.0)
    cuisine: str | None = None


class SearchRequest(SearchFilters):
    model_config = ConfigDict(str_strip_whitespace=True)

    query: str = Field(..., min_length=2, description="What to search for, e.g. tacos")
    location: str = Field(..., min_length=3, description="City or neighbourhood")
    sort_by: SortMode = SortMode.smart
    user_lat: float | None = Field(default=None, ge=-90.0, le=90.0)
    user_lng: float | None = Field(default=None, ge=-180.0, le=180.0)
    limit: int = Field(default=12, ge=1, le=50)

    @property
    def user_location(self) -> Coordinate | None:
        if self.user_lat is None or self.user_lng is None:
            return None
        return Coordinate(lat=self.user_lat, lng=self.user_lng)

    @property
    def filters(self) -> SearchFilters:
        return SearchFilters(
            price_range=self.price_range,
            min_rating=self.min_rating,
            cuisine=self.cuisine,
        )


class ScoringContext(BaseModel):
    query: str = ""
    user_location: Coordinate | None = None
    sort_by: SortMode = SortMode.smart


class ScoreVector(BaseModel):
    model_config = ConfigDict(frozen=True)

    rating: float = Field(..., ge=0.0, le=1.0)
    volume: float = Field(..., ge=0.0, le=1.0)
    recency: float = Field(..., ge=0.0, le=1.0)
    consistency: float = Field(..., ge=0.0, le=1.0)
    price_value: float = Field(..., ge=0.0, le=1.0)
    distance: float = Field(..., ge=0.0, le=1.0)
    uniqueness: float = Field(..., ge=0.0, le=1.0)

    def weighted(self, weights: dict[str, float]) -> float:
        return sum(getattr(self, factor) * weight for factor, weight in weights.items())


class ScoredEntity(BaseModel):
    model_config = ConfigDict(frozen=True)

    entity: MergedEntity
    scores: ScoreVector
    intelligent_score: float
    recommendation_reasons: list[str] = Field(default_factory=list)


class SearchInsights(BaseModel):
    total_restaurants: int = 0
    average_rating: float = 0.0
    price_distribution: dict[str, int] = Field(default_factory=dict)
    quality_distribution: dict[str, int] = Field(default_factory=dict)
    cuisine_types: dict[str, int] = Field(default_factory=dict)
    top_features: dict[str, int] = Field(default_factory=dict)
    verification_rate: int = 0


class SearchResponse(BaseModel):
    restaurants: list[ScoredEntity]
    total_found: int
    filtered: int
    source_counts: dict[str, int]
    platforms_used: int
    insights: SearchInsights
    message: str | None = None
