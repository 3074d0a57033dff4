"""Pure similarity primitives used to decide whether two listings match."""

from __future__ import annotations

import math
import re

from rapidfuzz.distance import Levenshtein

from .config import DEFAULT_MATCH_CONFIG, MatchConfig
from .models import Coordinate, ListingRecord

EARTH_RADIUS_KM = 6371.0

NAME_STOP_WORDS = frozenset({
    "restaurant", "taqueria", "cantina", "cocina", "bar", "grill", "cafe",
    "kitchen", "house", "place", "bistro", "eatery", "diner", "the",
})

STREET_ABBREV = {
    "street": "st", "str": "st",
    "avenue": "ave", "av": "ave",
    "boulevard": "blvd", "boul": "blvd",
    "road": "rd",
    "drive": "dr",
    "lane": "ln",
    "court": "ct",
    "place": "pl",
    "square": "sq",
    "highway": "hwy",
    "parkway": "pkwy",
    "north": "n", "south": "s", "east": "e", "west": "w",
}

_PUNCT_RE = re.compile(r"[^\w\s]")
_ADDRESS_PUNCT_RE = re.compile(r"[^\w\s,]")
_SPACES_RE = re.compile(r"\s+")

# (max distance km, similarity), checked in order
_GEO_STEPS = ((0.05, 1.0), (0.2, 0.8), (0.5, 0.5))


def edit_similarity(a: str, b: str) -> float:
    """1 minus the Levenshtein distance over the longer string's length."""
    return Levenshtein.normalized_similarity(a, b)


def _tokens(text: str) -> set[str]:
    return {t for t in text.split() if len(t) > 1}


def token_similarity(a: str, b: str) -> float:
    """Dice coefficient over whitespace tokens longer than one character."""
    tokens_a = _tokens(a)
    tokens_b = _tokens(b)
    if not tokens_a or not tokens_b:
        return edit_similarity(a, b)
    return 2 * len(tokens_a & tokens_b) / (len(tokens_a) + len(tokens_b))


def normalize_name(name: str) -> str:
    """Lower-case, drop punctuation and stop words.

    A name made only of stop words ("The Grill") keeps them all.
    """
    cleaned = _PUNCT_RE.sub("", (name or "").lower())
    words = [w for w in cleaned.split() if w not in NAME_STOP_WORDS]
    return " ".join(words) or " ".join(cleaned.split())


def name_similarity(a: str, b: str) -> float:
    norm_a = normalize_name(a)
    norm_b = normalize_name(b)
    return 0.6 * edit_similarity(norm_a, norm_b) + 0.4 * token_similarity(norm_a, norm_b)


def normalize_address(address: str) -> str:
    """Lower-case, drop punctuation (commas kept) and abbreviate street words."""
    cleaned = _ADDRESS_PUNCT_RE.sub("", (address or "").lower())
    segments = []
    for segment in cleaned.split(","):
        words = [STREET_ABBREV.get(w, w) for w in segment.split()]
        segments.append(" ".join(words))
    return ", ".join(segments).strip(", ")


def street_segment(address: str) -> str:
    return normalize_address(address).split(",")[0].strip()


def address_similarity(a: str, b: str) -> float:
    street_a = street_segment(a)
    street_b = street_segment(b)
    if not street_a or not street_b:
        return 0.0
    return name_similarity(street_a, street_b)


def haversine_km(c1: Coordinate, c2: Coordinate) -> float:
    lat1, lat2 = math.radians(c1.lat), math.radians(c2.lat)
    dlat = lat2 - lat1
    dlng = math.radians(c2.lng - c1.lng)
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def geo_similarity(c1: Coordinate | None, c2: Coordinate | None) -> float:
    if c1 is None or c2 is None:
        return 0.0
    distance = haversine_km(c1, c2)
    for max_km, similarity in _GEO_STEPS:
        if distance <= max_km:
            return similarity
    return 0.0


def combine_match_components(
    name: float,
    address: float,
    geo: float,
    config: MatchConfig = DEFAULT_MATCH_CONFIG,
) -> float:
    return config.name_weight * name + config.address_weight * address + config.geo_weight * geo


def match_score(
    a: ListingRecord,
    b: ListingRecord,
    config: MatchConfig = DEFAULT_MATCH_CONFIG,
) -> float:
    """Composite match score between two listings from different sources."""
    return combine_match_components(
        name_similarity(a.name, b.name),
        address_similarity(a.address, b.address),
        geo_similarity(a.coordinate, b.coordinate),
        config,
    )
