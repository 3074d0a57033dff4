"""Keyword and pattern tables driving the review heuristics.

Kept as data so the lists can be tuned without touching the analysis code.
"""

from __future__ import annotations

import re

THEME_KEYWORDS: dict[str, dict[str, list[str]]] = {
    "food": {
        "positive": ["delicious", "flavorful", "fresh", "authentic", "perfect", "amazing", "excellent", "tasty", "incredible"],
        "negative": ["bland", "stale", "overcooked", "undercooked", "tasteless", "terrible", "awful", "disgusting"],
        "neutral": ["food", "dish", "meal", "cuisine", "menu", "plate", "order", "ingredients"],
    },
    "service": {
        "positive": ["friendly", "attentive", "helpful", "professional", "quick", "excellent", "outstanding"],
        "negative": ["rude", "slow", "inattentive", "unprofessional", "terrible", "awful", "horrible"],
        "neutral": ["service", "staff", "waiter", "server", "waitress", "host", "manager"],
    },
    "ambiance": {
        "positive": ["cozy", "romantic", "beautiful", "charming", "intimate", "lovely", "perfect"],
        "negative": ["loud", "crowded", "dirty", "uncomfortable", "noisy", "cramped"],
        "neutral": ["atmosphere", "ambiance", "decor", "music", "lighting", "setting", "environment"],
    },
    "value": {
        "positive": ["affordable", "reasonable", "worth", "great deal", "bargain", "cheap", "budget-friendly"],
        "negative": ["expensive", "overpriced", "costly", "not worth", "too much", "rip-off"],
        "neutral": ["price", "cost", "value", "money", "bill", "check", "payment"],
    },
}

THEMES = tuple(THEME_KEYWORDS)

# Generic superlatives and stock phrases typical of templated reviews
GENERIC_PHRASE_PATTERNS = [
    re.compile(r"\b(?:amazing|excellent|perfect|fantastic|awesome|best ever)\b"),
    re.compile(r"\b(?:worst|terrible|awful|horrible)\b"),
    re.compile(r"\b(?:highly recommend|must try|definitely worth|five stars|5 stars)\b"),
    re.compile(r"\b(?:good food|nice place|great service|great place)\b"),
    re.compile(r"\b(?:bad experience|poor service|not recommended)\b"),
]

SPAM_PATTERNS = [
    re.compile(r"https?://|www\."),
    re.compile(r"\b(?:promo|discount|coupon) code\b|\buse code\b"),
    re.compile(r"\b(?:click here|visit our|follow us|dm me|check out my)\b"),
    re.compile(r"\b\d{3}[-.\s]\d{3}[-.\s]\d{4}\b"),
]

# Text cues that shift a single review's sentiment label
STRONG_POSITIVE = ["excellent", "amazing", "fantastic", "perfect", "incredible", "outstanding", "exceptional"]
STRONG_NEGATIVE = ["terrible", "awful", "horrible", "disgusting", "worst", "disappointing"]
MILD_POSITIVE = ["good", "nice", "decent", "solid", "pleasant", "enjoyable"]
MILD_NEGATIVE = ["average", "mediocre", "bland", "slow", "crowded"]
