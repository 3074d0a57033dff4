"""
Map raw platform payloads into the canonical listing and review records.

Platform A returns places-search style results (``place_id``,
``formatted_address``, ``geometry.location``, numeric ``price_level``);
platform B returns business-search style results (``id``,
``location.display_address``, ``coordinates``, ``$``-string ``price``).
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, List

from pydantic import ValidationError

from ..matching.models import Coordinate, ListingRecord, Source
from ..reviews.authenticity import calculate_authenticity
from ..reviews.models import ReviewRecord
from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

logger = logging.getLogger(__name__)

GENERIC_PLACE_TYPES = {
    "restaurant", "food", "point_of_interest", "establishment",
    "meal_takeaway", "meal_delivery", "store", "bar", "cafe",
}


def _first_present(raw: dict[str, Any], keys: List[str]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def _normalize_rating(rating: float | int | str | None) -> float | None:
    if rating is None:
        return None
    raw = str(rating).strip()
    # Handle "X/5" format (e.g. "4.1/5")
    if "/" in raw:
        raw = raw.split("/")[0].strip()
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None

    # Unrated listings report 0
    if value < 1.0:
        return None
    return min(5.0, value)


def _tier_from_level(level: int | str | None) -> int | None:
    """Numeric price level (0-4) to tier 1-4; level 0 means free/cheapest."""
    try:
        value = int(level)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return max(1, min(4, value))


def _tier_from_bucket(bucket: str | None) -> int | None:
    if not bucket:
        return None
    dollars = bucket.strip().count("$")
    return max(1, min(4, dollars)) if dollars else None


def _coordinate(lat: Any, lng: Any) -> Coordinate | None:
    try:
        return Coordinate(lat=float(lat), lng=float(lng))
    except (TypeError, ValueError, ValidationError):
        return None


def _cuisine_from_types(types: Iterable[str]) -> str:
    for place_type in types or []:
        if place_type in GENERIC_PLACE_TYPES:
            continue
        if place_type.endswith("_restaurant"):
            return place_type[: -len("_restaurant")].replace("_", " ").title()
    return "Restaurant"


def listing_from_platform_a(raw: dict[str, Any]) -> ListingRecord:
    location = (raw.get("geometry") or {}).get("location") or {}
    closed = raw.get("permanently_closed") or raw.get("business_status") in (
        "CLOSED_PERMANENTLY", "CLOSED_TEMPORARILY",
    )
    photos = raw.get("photos") or []
    return ListingRecord(
        id=str(_first_present(raw, ["place_id", "id"])),
        source=Source.A,
        name=raw.get("name", ""),
        address=_first_present(raw, ["formatted_address", "vicinity", "address"]) or "",
        coordinate=_coordinate(location.get("lat"), location.get("lng")),
        rating=_normalize_rating(raw.get("rating")),
        review_count=int(raw.get("user_ratings_total") or 0),
        price_tier=_tier_from_level(raw.get("price_level")),
        cuisine=_cuisine_from_types(raw.get("types") or []),
        operational=not closed,
        image_url=photos[0].get("photo_reference") if photos else None,
    )


def listing_from_platform_b(raw: dict[str, Any]) -> ListingRecord:
    location = raw.get("location") or {}
    display_address = location.get("display_address") or []
    coordinates = raw.get("coordinates") or {}
    categories = raw.get("categories") or []
    return ListingRecord(
        id=str(raw["id"]),
        source=Source.B,
        name=raw.get("name", ""),
        address=", ".join(display_address) or location.get("address1") or "",
        coordinate=_coordinate(coordinates.get("latitude"), coordinates.get("longitude")),
        rating=_normalize_rating(raw.get("rating")),
        review_count=int(raw.get("review_count") or 0),
        price_tier=_tier_from_bucket(raw.get("price")),
        cuisine=categories[0].get("title", "Restaurant") if categories else "Restaurant",
        operational=not raw.get("is_closed", False),
        image_url=raw.get("image_url"),
    )


def _parse_time(value: Any) -> datetime | None:
    if value in (None, ""):
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _build_reviews(
    source: Source,
    items: Iterable[dict[str, Any]],
    config: IngestionConfig,
) -> list[ReviewRecord]:
    reviews: list[ReviewRecord] = []
    dropped = 0
    for item in items:
        rating = _normalize_rating(item.get("rating"))
        if rating is None:
            continue
        user = item.get("user") or {}
        text = item.get("text") or ""
        author_count = user.get("review_count", item.get("author_review_count"))
        authenticity = calculate_authenticity(text, author_count)
        if authenticity <= config.min_authenticity:
            dropped += 1
            continue
        reviews.append(ReviewRecord(
            source=source,
            rating=rating,
            text=text,
            author=user.get("name") or item.get("author_name") or "Anonymous",
            timestamp=_parse_time(_first_present(item, ["time", "time_created"])),
            author_review_count=author_count,
            authenticity_score=authenticity,
        ))
    if dropped:
        logger.info("Dropped %d low-authenticity reviews from source %s", dropped, source.value)
    return reviews


def reviews_from_platform_a(
    payload: dict[str, Any],
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> list[ReviewRecord]:
    """Reviews from a place-details payload (``{"result": {"reviews": [...]}}``)."""
    result = payload.get("result", payload)
    return _build_reviews(Source.A, result.get("reviews") or [], config)


def reviews_from_platform_b(
    payload: dict[str, Any],
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> list[ReviewRecord]:
    """Reviews from a business reviews payload (``{"reviews": [...]}``)."""
    return _build_reviews(Source.B, payload.get("reviews") or [], config)
