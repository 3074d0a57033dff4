"""Derived classification fields attached to merged restaurants."""

from __future__ import annotations

CHAIN_INDICATORS = (
    "mcdonald", "burger king", "subway", "starbucks", "chipotle",
    "pizza hut", "domino", "kfc", "taco bell", "wendy",
)

GENERIC_CUISINES = frozenset({
    "", "restaurant", "restaurants", "food", "establishment",
    "meal_takeaway", "meal_delivery", "point_of_interest",
})

REGIONAL_KEYWORDS: dict[str, list[str]] = {
    "mexican": ["mexican", "mexicana", "guadalajara", "oaxaca", "puebla", "yucatan"],
    "tex-mex": ["tex-mex", "southwestern", "border", "austin", "san antonio"],
    "peruvian": ["peruvian", "lima", "ceviche", "inca", "pisco"],
    "spanish": ["spanish", "tapas", "paella", "andaluz", "barcelona"],
}

STYLE_KEYWORDS: dict[str, list[str]] = {
    "authentic": ["traditional", "family", "authentic", "abuela", "casa", "familia", "home-made", "generational"],
    "upscale": ["cocina", "cantina", "contemporary", "modern", "craft", "artisanal", "chef-driven"],
    "casual": ["taqueria", "grill", "truck", "spot", "joint", "hole-in-wall", "neighborhood"],
    "fusion": ["fusion", "nuevo", "innovative", "creative"],
}

PRICE_CATEGORIES = {1: "budget", 2: "moderate", 3: "expensive", 4: "luxury"}

# (feature tag, name keywords, cuisine keywords)
FEATURE_RULES: list[tuple[str, tuple[str, ...], tuple[str, ...]]] = [
    ("craft-cocktails", ("tequila", "mezcal", "cocktail"), ()),
    ("outdoor-seating", ("rooftop", "patio", "garden"), ()),
    ("late-night", ("24", "late", "midnight"), ()),
    ("plant-based", ("plant",), ("vegan", "vegetarian")),
    ("family-friendly", ("family", "kids", "children"), ()),
    ("wine-focused", ("wine", "cellar", "sommelier"), ()),
    ("chef-driven", ("chef", "artisan", "craft"), ()),
]


def is_chain(name: str) -> bool:
    name_lower = (name or "").lower()
    return any(chain in name_lower for chain in CHAIN_INDICATORS)


def is_generic_cuisine(cuisine: str | None) -> bool:
    return (cuisine or "").strip().lower() in GENERIC_CUISINES


def prefer_cuisine(cuisine_a: str | None, cuisine_b: str | None) -> str:
    """Pick the more specific of two cuisine labels, favouring source A."""
    if cuisine_a and not is_generic_cuisine(cuisine_a):
        return cuisine_a
    if cuisine_b and not is_generic_cuisine(cuisine_b):
        return cuisine_b
    return cuisine_a or cuisine_b or "Restaurant"


def classify_cuisine_style(name: str, cuisine: str | None) -> str:
    name_lower = (name or "").lower()
    cuisine_lower = (cuisine or "").lower()

    for region, keywords in REGIONAL_KEYWORDS.items():
        if any(k in name_lower or k in cuisine_lower for k in keywords):
            return f"{region}-regional"

    for style, keywords in STYLE_KEYWORDS.items():
        if any(k in name_lower for k in keywords):
            return style

    return "standard"


def categorize_price(price_tier: int | None) -> str:
    return PRICE_CATEGORIES.get(price_tier or 2, "moderate")


def identify_features(
    name: str,
    cuisine: str | None,
    rating: float | None,
    review_count: int,
) -> list[str]:
    name_lower = (name or "").lower()
    cuisine_lower = (cuisine or "").lower()

    features = [
        tag
        for tag, name_words, cuisine_words in FEATURE_RULES
        if any(w in name_lower for w in name_words) or any(w in cuisine_lower for w in cuisine_words)
    ]

    if rating is not None and rating >= 4.7:
        features.append("highly-rated")
    if rating is not None and rating >= 4.5 and review_count < 50:
        features.append("hidden-gem")
    if is_chain(name):
        features.append("chain-restaurant")

    return features


def estimate_wait_time(rating: float | None, review_count: int) -> str:
    rating = rating if rating is not None else 3.5
    if rating >= 4.7 and review_count > 1000:
        return "45-60 min"
    if rating >= 4.5 and review_count > 500:
        return "30-45 min"
    if rating >= 4.0 and review_count > 200:
        return "15-30 min"
    if rating >= 3.5:
        return "10-20 min"
    return "5-15 min"
