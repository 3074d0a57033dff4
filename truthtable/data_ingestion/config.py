import os
from dataclasses import dataclass, field


def _env_flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


def _env_timeout() -> float:
    return float(os.getenv("TRUTHTABLE_SOURCE_TIMEOUT", "10"))


@dataclass(frozen=True)
class IngestionConfig:
    """
    Configuration for the source boundary: fetching and normalizing raw
    listings and reviews from the two platforms.

    Environment overrides are read each time a config is created.
    """

    fetch_timeout: float = field(default_factory=_env_timeout)
    # Reviews at or below this authenticity are dropped when normalized
    min_authenticity: float = 0.3
    # Substitute flagged synthetic reviews when a review source fails
    synthetic_fallback: bool = field(default_factory=lambda: _env_flag("TRUTHTABLE_SYNTHETIC_REVIEWS"))
    synthetic_review_count: int = 5


DEFAULT_INGESTION_CONFIG = IngestionConfig()
