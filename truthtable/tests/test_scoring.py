from __future__ import annotations

from unittest.mock import patch

import pytest

from truthtable.matching.merge import build_entity
from truthtable.matching.models import Coordinate, ListingRecord, Source
from truthtable.recommendations.config import ScoringConfig
from truthtable.recommendations.insights import generate_search_insights
from truthtable.recommendations.models import ScoringContext, SearchFilters, SortMode
from truthtable.recommendations.scoring import (
    ScoreInvariantError,
    apply_filters,
    composite_score,
    compute_score_vector,
    distance_score,
    query_terms,
    rating_score,
    recommendation_reasons,
    score_entities,
    uniqueness_score,
    volume_score,
)

HOME = Coordinate(lat=30.2672, lng=-97.7431)


def _entity(id: str, with_b: bool = False, **overrides):
    fields = {"id": id, "source": Source.A, "name": f"Spot {id}", "rating": 4.0, "review_count": 100, "price_tier": 2}
    fields.update(overrides)
    listing_a = ListingRecord(**fields)
    listing_b = None
    if with_b:
        listing_b = ListingRecord(**{**fields, "id": f"{id}-b", "source": Source.B})
    return build_entity(listing_a, listing_b)


SAMPLE_ENTITIES = [
    _entity("plain"),
    _entity("verified", with_b=True, rating=4.8, review_count=2000),
    _entity("unrated", rating=None, review_count=0, price_tier=None),
    _entity("chain", name="Taco Bell", rating=3.0, price_tier=1),
    _entity("far", coordinate=Coordinate(lat=31.0, lng=-97.0), rating=5.0, review_count=3),
    _entity("gem", name="Mezcal Chef Cellar", rating=4.9, review_count=12, price_tier=4),
]


class TestScoringConfig:
    def test_default_weights_sum_to_one(self):
        assert sum(ScoringConfig().weights.values()) == pytest.approx(1.0)

    def test_rejects_weights_not_summing_to_one(self):
        weights = dict(ScoringConfig().weights, rating=0.5)
        with pytest.raises(ValueError, match="sum to 1.0"):
            ScoringConfig(weights=weights)

    def test_rejects_missing_factor(self):
        weights = dict(ScoringConfig().weights)
        weights.pop("uniqueness")
        weights["rating"] += 0.05
        with pytest.raises(ValueError):
            ScoringConfig(weights=weights)

    def test_strict_read_from_environment_at_creation(self, monkeypatch):
        monkeypatch.setenv("TRUTHTABLE_STRICT", "true")
        assert ScoringConfig().strict is True
        monkeypatch.setenv("TRUTHTABLE_STRICT", "0")
        assert ScoringConfig().strict is False


class TestFactorScores:
    @pytest.mark.parametrize("entity", SAMPLE_ENTITIES, ids=lambda e: e.id)
    @pytest.mark.parametrize("user_location", [None, HOME])
    def test_factors_and_composite_in_unit_range(self, entity, user_location):
        context = ScoringContext(query="tacos", user_location=user_location)
        scores = compute_score_vector(entity, context)
        for value in scores.model_dump().values():
            assert 0.0 <= value <= 1.0
        assert 0.0 <= composite_score(scores) <= 1.0

    def test_rating_score(self):
        assert rating_score(_entity("x", with_b=True, rating=5.0)) == 1.0
        assert rating_score(_entity("x", rating=None)) == 0.5
        assert rating_score(_entity("x", name="Taco Bell", rating=3.0)) == pytest.approx(0.45)

    def test_volume_score(self):
        assert volume_score(_entity("x", review_count=0)) == 0.1
        assert volume_score(_entity("x", review_count=999)) == pytest.approx(1.0)

    def test_distance_score(self):
        assert distance_score(_entity("x"), HOME) == 0.3
        assert distance_score(_entity("x", coordinate=HOME), None) == 0.3
        assert distance_score(_entity("x", coordinate=HOME), HOME) == 1.0
        # ~11 km north
        far = Coordinate(lat=HOME.lat + 0.1, lng=HOME.lng)
        assert distance_score(_entity("x", coordinate=far), HOME) == 0.1

    def test_query_terms_adds_singular(self):
        assert query_terms("tacos al pastor") == ["tacos", "taco", "pastor"]

    def test_uniqueness_rewards_query_match(self):
        plain = uniqueness_score(_entity("x", name="Loco Loco"), "tacos")
        matched = uniqueness_score(_entity("x", name="Taco Loco"), "tacos")
        assert matched == pytest.approx(plain + 0.2)

    def test_uniqueness_penalises_chains(self):
        assert uniqueness_score(_entity("x", name="Taco Bell")) == pytest.approx(0.1)


class TestInvariantChecks:
    @patch("truthtable.recommendations.scoring.rating_score", return_value=1.5)
    def test_strict_mode_raises(self, mock_rating):
        with pytest.raises(ScoreInvariantError):
            compute_score_vector(_entity("x"), ScoringContext(), ScoringConfig(strict=True))

    @patch("truthtable.recommendations.scoring.rating_score", return_value=1.5)
    def test_lenient_mode_clamps(self, mock_rating):
        scores = compute_score_vector(_entity("x"), ScoringContext(), ScoringConfig(strict=False))
        assert scores.rating == 1.0


class TestReasons:
    def test_priority_and_limit(self):
        entity = _entity("x", with_b=True, rating=4.8, review_count=2000)
        scores = compute_score_vector(entity, ScoringContext())
        reasons = recommendation_reasons(entity, scores, limit=3)
        assert reasons == ["Exceptional ratings", "Highly reviewed", "Verified across platforms"]

    def test_limit_respected(self):
        entity = _entity("x", with_b=True, rating=4.8, review_count=2000)
        scores = compute_score_vector(entity, ScoringContext())
        assert len(recommendation_reasons(entity, scores, limit=1)) == 1


class TestFilters:
    def test_drops_closed_restaurants(self):
        closed = _entity("closed", operational=False)
        assert apply_filters([closed, _entity("open")], SearchFilters()) == [_entity("open")]

    def test_price_range(self):
        entities = [_entity("cheap", price_tier=1), _entity("mid", price_tier=2), _entity("unknown", price_tier=None)]
        kept = apply_filters(entities, SearchFilters(price_range=["$"]))
        assert [e.id for e in kept] == ["cheap"]

    def test_min_rating(self):
        entities = [_entity("low", rating=3.5), _entity("high", rating=4.6), _entity("none", rating=None)]
        kept = apply_filters(entities, SearchFilters(min_rating=4.5))
        assert [e.id for e in kept] == ["high"]

    def test_cuisine_matches_name_or_label(self):
        entities = [
            _entity("label", cuisine="Thai"),
            _entity("name", name="Thai Basil"),
            _entity("other", cuisine="Pizza"),
        ]
        kept = apply_filters(entities, SearchFilters(cuisine="thai"))
        assert [e.id for e in kept] == ["label", "name"]


class TestRanking:
    def test_smart_sort_descending(self):
        ranked = score_entities(SAMPLE_ENTITIES, ScoringContext(query="tacos"))
        scores = [r.intelligent_score for r in ranked]
        assert scores == sorted(scores, reverse=True)

    def test_rating_sort(self):
        entities = [_entity("a", rating=3.0), _entity("b", rating=4.5), _entity("c", rating=4.0)]
        ranked = score_entities(entities, ScoringContext(sort_by=SortMode.rating))
        assert [r.entity.id for r in ranked] == ["b", "c", "a"]

    def test_reviews_sort(self):
        entities = [_entity("a", review_count=10), _entity("b", review_count=500), _entity("c", review_count=50)]
        ranked = score_entities(entities, ScoringContext(sort_by=SortMode.reviews))
        assert [r.entity.id for r in ranked] == ["b", "c", "a"]

    def test_distance_sort(self):
        near = Coordinate(lat=HOME.lat + 0.001, lng=HOME.lng)
        far = Coordinate(lat=HOME.lat + 0.1, lng=HOME.lng)
        entities = [_entity("far", coordinate=far), _entity("near", coordinate=near)]
        ranked = score_entities(entities, ScoringContext(user_location=HOME, sort_by=SortMode.distance))
        assert [r.entity.id for r in ranked] == ["near", "far"]

    def test_ties_keep_input_order(self):
        entities = [_entity("first"), _entity("second"), _entity("third")]
        ranked = score_entities(entities, ScoringContext())
        assert [r.entity.id for r in ranked] == ["first", "second", "third"]


class TestInsights:
    def test_empty(self):
        insights = generate_search_insights([])
        assert insights.total_restaurants == 0
        assert insights.price_distribution == {"$": 0, "$$": 0, "$$$": 0, "$$$$": 0}

    def test_distributions(self):
        ranked = score_entities(SAMPLE_ENTITIES, ScoringContext())
        insights = generate_search_insights(ranked)
        assert insights.total_restaurants == len(SAMPLE_ENTITIES)
        assert insights.price_distribution["$$"] >= 3
        assert insights.price_distribution["$$$$"] == 1
        assert insights.top_features["chain-restaurant"] == 1
        # one of six entities is verified
        assert insights.verification_rate == 17
