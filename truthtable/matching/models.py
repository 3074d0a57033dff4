from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class Source(str, Enum):
    A = "A"
    B = "B"


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)


class ListingRecord(BaseModel):
    """A single source's view of a restaurant, already normalized."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    source: Source
    name: str
    address: str = ""
    coordinate: Coordinate | None = None
    rating: float | None = Field(default=None, ge=1.0, le=5.0)
    review_count: int = Field(default=0, ge=0)
    price_tier: int | None = Field(default=None, ge=1, le=4)
    cuisine: str = "Restaurant"
    operational: bool = True
    image_url: str | None = None


class MergedEntity(BaseModel):
    """One canonical restaurant reconciled from at most one listing per source.

    Descriptive fields (name, address, coordinate) come from the winning
    listing, which is the source A listing whenever one is present.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    address: str
    coordinate: Coordinate | None = None
    source_a: ListingRecord | None = None
    source_b: ListingRecord | None = None
    cross_source_verified: bool = False
    platform_consistency: float | None = Field(default=None, ge=0.0, le=1.0)
    cuisine: str = "Restaurant"
    cuisine_style: str = "standard"
    price_tier: int | None = None
    price_category: str = "moderate"
    special_features: list[str] = Field(default_factory=list)
    estimated_wait_time: str | None = None

    @property
    def sources(self) -> list[Source]:
        return [s for s in (Source.A, Source.B) if self.listing_for(s) is not None]

    def listing_for(self, source: Source) -> ListingRecord | None:
        return self.source_a if source is Source.A else self.source_b

    @computed_field  # type: ignore[prop-decorator]
    @property
    def rating(self) -> float | None:
        """Winning listing's rating, falling back to the other source."""
        for listing in (self.source_a, self.source_b):
            if listing is not None and listing.rating is not None:
                return listing.rating
        return None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_reviews(self) -> int:
        return sum(l.review_count for l in (self.source_a, self.source_b) if l is not None)

    @property
    def operational(self) -> bool:
        return all(l.operational for l in (self.source_a, self.source_b) if l is not None)

    @property
    def is_chain(self) -> bool:
        return "chain-restaurant" in self.special_features

    @property
    def price_bucket(self) -> str | None:
        return "$" * self.price_tier if self.price_tier else None
