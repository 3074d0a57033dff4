from __future__ import annotations

import time
from datetime import datetime, timezone

from truthtable.data_ingestion.config import IngestionConfig
from truthtable.data_ingestion.normalize import (
    listing_from_platform_a,
    listing_from_platform_b,
    reviews_from_platform_a,
    reviews_from_platform_b,
)
from truthtable.data_ingestion.sources import SourceClients, fetch_listings, fetch_reviews
from truthtable.data_ingestion.synthetic import synthetic_reviews
from truthtable.matching.models import ListingRecord, Source
from truthtable.reviews.models import ReviewRecord

PLATFORM_A_PLACE = {
    "place_id": "ChIJ-tacos",
    "name": "Tacos El Gordo",
    "formatted_address": "1628 E Charleston Blvd, Las Vegas, NV 89104",
    "rating": 4.6,
    "user_ratings_total": 2100,
    "price_level": 1,
    "types": ["mexican_restaurant", "restaurant", "food", "point_of_interest"],
    "geometry": {"location": {"lat": 36.159, "lng": -115.1337}},
    "business_status": "OPERATIONAL",
    "photos": [{"photo_reference": "photo-ref-1"}],
}

PLATFORM_B_BUSINESS = {
    "id": "tacos-el-gordo-las-vegas",
    "name": "Tacos El Gordo",
    "location": {"display_address": ["1628 E Charleston Blvd", "Las Vegas, NV 89104"]},
    "rating": 4.5,
    "review_count": 1800,
    "price": "$",
    "categories": [{"alias": "tacos", "title": "Tacos"}],
    "coordinates": {"latitude": 36.159, "longitude": -115.1337},
    "image_url": "https://example.com/tacos.jpg",
    "is_closed": False,
}

LONG_TEXT = (
    "Ordered the adobada and carne asada tacos with a side of beans. The tortillas were "
    "warm and soft and the salsa bar had plenty of choices."
)


# ── Payload normalization ────────────────────────────────────────────────


class TestListingNormalization:
    def test_platform_a(self):
        listing = listing_from_platform_a(PLATFORM_A_PLACE)
        assert listing.source is Source.A
        assert listing.id == "ChIJ-tacos"
        assert listing.price_tier == 1
        assert listing.review_count == 2100
        assert listing.cuisine == "Mexican"
        assert listing.coordinate.lat == 36.159
        assert listing.operational is True
        assert listing.image_url == "photo-ref-1"

    def test_platform_a_closed_and_unrated(self):
        raw = dict(PLATFORM_A_PLACE, business_status="CLOSED_PERMANENTLY", rating=0, price_level=None)
        listing = listing_from_platform_a(raw)
        assert listing.operational is False
        assert listing.rating is None
        assert listing.price_tier is None

    def test_platform_b(self):
        listing = listing_from_platform_b(PLATFORM_B_BUSINESS)
        assert listing.source is Source.B
        assert listing.address == "1628 E Charleston Blvd, Las Vegas, NV 89104"
        assert listing.price_tier == 1
        assert listing.cuisine == "Tacos"
        assert listing.coordinate.lng == -115.1337

    def test_platform_b_missing_fields(self):
        listing = listing_from_platform_b({"id": "x", "name": "Mystery Spot", "price": "$$$", "rating": "4.1/5"})
        assert listing.coordinate is None
        assert listing.cuisine == "Restaurant"
        assert listing.price_tier == 3
        assert listing.rating == 4.1


class TestReviewNormalization:
    def test_platform_a_reviews(self):
        payload = {"result": {"reviews": [
            {"rating": 5, "text": LONG_TEXT, "author_name": "Maria G.", "time": 1700000000},
        ]}}
        reviews = reviews_from_platform_a(payload)
        assert len(reviews) == 1
        assert reviews[0].author == "Maria G."
        assert reviews[0].timestamp == datetime.fromtimestamp(1700000000, tz=timezone.utc)
        assert reviews[0].authenticity_score is not None

    def test_platform_b_reviews(self):
        payload = {"reviews": [
            {"rating": 4, "text": LONG_TEXT, "user": {"name": "Dev P.", "review_count": 120},
             "time_created": "2024-03-02 19:15:00"},
        ]}
        reviews = reviews_from_platform_b(payload)
        assert reviews[0].author == "Dev P."
        assert reviews[0].author_review_count == 120
        assert reviews[0].timestamp.tzinfo is not None

    def test_low_authenticity_dropped(self):
        payload = {"reviews": [
            {"rating": 5, "text": "!!!", "user": {"name": "x", "review_count": 1}},
            {"rating": 4, "text": LONG_TEXT, "user": {"name": "y", "review_count": 40}},
        ]}
        reviews = reviews_from_platform_b(payload)
        assert [r.author for r in reviews] == ["y"]

    def test_threshold_configurable(self):
        payload = {"reviews": [{"rating": 5, "text": "!!!", "user": {"name": "x"}}]}
        assert reviews_from_platform_b(payload, IngestionConfig(min_authenticity=0.1)) != []


class TestIngestionConfig:
    def test_environment_read_at_creation(self, monkeypatch):
        monkeypatch.setenv("TRUTHTABLE_SYNTHETIC_REVIEWS", "yes")
        monkeypatch.setenv("TRUTHTABLE_SOURCE_TIMEOUT", "2.5")
        config = IngestionConfig()
        assert config.synthetic_fallback is True
        assert config.fetch_timeout == 2.5

    def test_explicit_values_win(self, monkeypatch):
        monkeypatch.setenv("TRUTHTABLE_SYNTHETIC_REVIEWS", "yes")
        assert IngestionConfig(synthetic_fallback=False).synthetic_fallback is False


# ── Concurrent fetch ─────────────────────────────────────────────────────


def _listing(id: str, source: Source) -> ListingRecord:
    return ListingRecord(id=id, source=source, name=f"Spot {id}")


def _failing(*args):
    raise ConnectionError("source unavailable")


class TestFetchListings:
    def test_both_sources(self):
        clients = SourceClients(listing_fetchers={
            Source.A: lambda q, loc: [_listing("a1", Source.A)],
            Source.B: lambda q, loc: [_listing("b1", Source.B), _listing("b2", Source.B)],
        })
        listings = fetch_listings(clients, "tacos", "Las Vegas")
        assert [l.id for l in listings[Source.A]] == ["a1"]
        assert [l.id for l in listings[Source.B]] == ["b1", "b2"]

    def test_failure_absorbed(self):
        clients = SourceClients(listing_fetchers={
            Source.A: _failing,
            Source.B: lambda q, loc: [_listing("b1", Source.B)],
        })
        listings = fetch_listings(clients, "tacos", "Las Vegas")
        assert listings[Source.A] == []
        assert len(listings[Source.B]) == 1

    def test_unconfigured_source_is_empty(self):
        listings = fetch_listings(SourceClients(), "tacos", "Las Vegas")
        assert listings == {Source.A: [], Source.B: []}

    def test_timeout_absorbed(self):
        def slow(q, loc):
            time.sleep(0.5)
            return [_listing("a1", Source.A)]

        clients = SourceClients(listing_fetchers={Source.A: slow})
        listings = fetch_listings(clients, "tacos", "Las Vegas", IngestionConfig(fetch_timeout=0.05))
        assert listings[Source.A] == []

    def test_sources_share_one_deadline(self):
        def slow(q, loc):
            time.sleep(0.6)
            return [_listing("x", Source.A)]

        clients = SourceClients(listing_fetchers={Source.A: slow, Source.B: slow})
        started = time.monotonic()
        listings = fetch_listings(clients, "tacos", "Las Vegas", IngestionConfig(fetch_timeout=0.2))
        elapsed = time.monotonic() - started
        assert listings == {Source.A: [], Source.B: []}
        assert elapsed < 0.35

    def test_query_passed_through(self):
        seen = []
        clients = SourceClients(listing_fetchers={Source.A: lambda q, loc: seen.append((q, loc)) or []})
        fetch_listings(clients, "pho", "Houston")
        assert seen == [("pho", "Houston")]


class TestFetchReviews:
    def test_only_requested_sources_returned(self):
        clients = SourceClients(review_fetchers={
            Source.A: lambda sid: [ReviewRecord(source=Source.A, rating=4, text=LONG_TEXT)],
            Source.B: lambda sid: [ReviewRecord(source=Source.B, rating=5, text=LONG_TEXT)],
        })
        reviews = fetch_reviews(clients, {Source.B: "biz-1"})
        assert list(reviews) == [Source.B]

    def test_failure_without_fallback_is_empty(self):
        clients = SourceClients(review_fetchers={Source.A: _failing})
        reviews = fetch_reviews(clients, {Source.A: "place-1"}, IngestionConfig(synthetic_fallback=False), "Taco Loco")
        assert reviews == {Source.A: []}

    def test_failure_with_fallback_is_synthetic(self):
        clients = SourceClients(review_fetchers={Source.A: _failing})
        config = IngestionConfig(synthetic_fallback=True, synthetic_review_count=4)
        reviews = fetch_reviews(clients, {Source.A: "place-1"}, config, "Taco Loco", 4.2)
        assert len(reviews[Source.A]) == 4
        assert all(r.synthetic for r in reviews[Source.A])

    def test_missing_fetcher_is_empty(self):
        reviews = fetch_reviews(SourceClients(), {Source.B: "biz-1"}, IngestionConfig(synthetic_fallback=False))
        assert reviews == {Source.B: []}


class TestSyntheticReviews:
    def test_deterministic(self):
        when = datetime(2024, 6, 1, tzinfo=timezone.utc)
        first = synthetic_reviews("Taco Loco", Source.B, 4.0, count=5, reference_time=when)
        second = synthetic_reviews("Taco Loco", Source.B, 4.0, count=5, reference_time=when)
        assert first == second

    def test_flagged_and_in_range(self):
        reviews = synthetic_reviews("Taco Loco", Source.A, 4.5, count=8)
        assert len(reviews) == 8
        for review in reviews:
            assert review.synthetic is True
            assert review.source is Source.A
            assert 1 <= review.rating <= 5
            assert 0.8 <= review.authenticity_score <= 1.0
            assert "{name}" not in review.text
