from __future__ import annotations

import math
import os
from dataclasses import dataclass, field

SCORE_FACTORS = (
    "rating",
    "volume",
    "recency",
    "consistency",
    "price_value",
    "distance",
    "uniqueness",
)


def _default_weights() -> dict[str, float]:
    return {
        "rating": 0.25,
        "volume": 0.20,
        "recency": 0.15,
        "consistency": 0.15,
        "price_value": 0.10,
        "distance": 0.10,
        "uniqueness": 0.05,
    }


def _strict_from_env() -> bool:
    return os.getenv("TRUTHTABLE_STRICT", "").strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class ScoringConfig:
    weights: dict[str, float] = field(default_factory=_default_weights)
    single_source_consistency: float = 0.8
    max_reasons: int = 3
    # Raise on out-of-range factors instead of logging and clamping
    strict: bool = field(default_factory=_strict_from_env)

    def __post_init__(self) -> None:
        if set(self.weights) != set(SCORE_FACTORS):
            raise ValueError(
                f"Weight table must cover exactly {SCORE_FACTORS}, got {sorted(self.weights)}"
            )
        total = sum(self.weights.values())
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Scoring weights must sum to 1.0, got {total:.6f}")


DEFAULT_SCORING_CONFIG = ScoringConfig()
