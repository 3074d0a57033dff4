from __future__ import annotations

from .keywords import GENERIC_PHRASE_PATTERNS, SPAM_PATTERNS
from .models import ReviewRecord

MIN_AUTHENTICITY = 0.1
MAX_AUTHENTICITY = 1.0


def calculate_authenticity(text: str, author_review_count: int | None = None) -> float:
    """
    Heuristic confidence in [0.1, 1.0] that a review is genuine.

    Starts at 1.0 and subtracts penalties for templated phrasing, spam
    markers, shouting and very short text; long detailed text and an
    established author earn a small bonus. The floor keeps every review
    recoverable: filtering is left to the caller.
    """
    raw = text or ""
    lowered = raw.lower()
    stripped = raw.strip()
    score = 1.0

    generic_hits = sum(len(p.findall(lowered)) for p in GENERIC_PHRASE_PATTERNS)
    if generic_hits > 1:
        score -= min(0.5, 0.1 * (generic_hits - 1))

    score -= 0.2 * sum(1 for p in SPAM_PATTERNS if p.search(lowered))

    letters = [c for c in stripped if c.isalpha()]
    if letters and sum(1 for c in letters if c.isupper()) / len(letters) > 0.5:
        score -= 0.2
    if not letters:
        score -= 0.3

    exclamations = stripped.count("!")
    if exclamations > 3 or (stripped and exclamations / len(stripped) > 0.5):
        score -= 0.2

    if len(stripped) < 25:
        score -= 0.3
    elif len(stripped) < 50:
        score -= 0.1
    if len(stripped) > 500:
        score += 0.1

    if author_review_count is not None:
        if author_review_count < 5:
            score -= 0.2
        elif author_review_count > 50:
            score += 0.1

    return round(max(MIN_AUTHENTICITY, min(MAX_AUTHENTICITY, score)), 2)


def authenticity_of(review: ReviewRecord) -> float:
    if review.authenticity_score is not None:
        return review.authenticity_score
    return calculate_authenticity(review.text, review.author_review_count)


def with_authenticity(review: ReviewRecord) -> ReviewRecord:
    """Return the review with its authenticity score filled in."""
    if review.authenticity_score is not None:
        return review
    return review.model_copy(update={"authenticity_score": authenticity_of(review)})
