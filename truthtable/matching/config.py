from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MatchConfig:
    """
    Weights and thresholds for cross-source entity resolution.
    """

    name_weight: float = 0.55
    address_weight: float = 0.35
    geo_weight: float = 0.10
    match_threshold: float = 0.65
    # Used for entities with a single source or an unrated side
    default_consistency: float = 0.8


DEFAULT_MATCH_CONFIG = MatchConfig()
