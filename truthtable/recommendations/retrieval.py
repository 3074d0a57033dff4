from __future__ import annotations

import logging
import time

from ..analytics.store import record_event
from ..data_ingestion.config import DEFAULT_INGESTION_CONFIG, IngestionConfig
from ..data_ingestion.sources import SourceClients, fetch_listings
from ..matching.config import DEFAULT_MATCH_CONFIG, MatchConfig
from ..matching.models import Source
from ..matching.merge import merge_listings
from .cache import ResultCache
from .config import DEFAULT_SCORING_CONFIG, ScoringConfig
from .insights import generate_search_insights
from .models import ScoringContext, SearchRequest, SearchResponse
from .scoring import apply_filters, score_entities

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "No restaurants found from either source for this search."


def _record_search(request: SearchRequest, response: SearchResponse, start_time: float, cache_hit: bool) -> None:
    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    record_event("search", {
        "query": request.query,
        "location": request.location,
        "cuisine": request.cuisine,
        "price_range": request.price_range,
        "min_rating": request.min_rating,
        "sort_by": request.sort_by.value,
        "total_found": response.total_found,
        "results_returned": len(response.restaurants),
        "platforms_used": response.platforms_used,
        "response_time_ms": elapsed_ms,
        "cache_hit": cache_hit,
    })


def search_restaurants(
    request: SearchRequest,
    clients: SourceClients,
    cache: ResultCache,
    match_config: MatchConfig = DEFAULT_MATCH_CONFIG,
    scoring_config: ScoringConfig = DEFAULT_SCORING_CONFIG,
    ingestion_config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> SearchResponse:
    """
    Fetch both sources, reconcile, filter, score and rank.

    Identical requests within the cache TTL are served from ``cache``.
    """
    start_time = time.time()

    # --- Cache check ---
    request_dict = request.model_dump(mode="json")
    cached = cache.get(request_dict)
    if cached is not None:
        logger.info("Cache hit for search %r in %r", request.query, request.location)
        _record_search(request, cached, start_time, cache_hit=True)
        return cached

    # --- Fetch & merge ---
    listings = fetch_listings(clients, request.query, request.location, ingestion_config)
    source_counts = {source.value: len(items) for source, items in listings.items()}
    platforms_used = sum(1 for items in listings.values() if items)

    merged = merge_listings(listings[Source.A], listings[Source.B], match_config)

    # --- Filter & score ---
    candidates = apply_filters(merged, request.filters)
    context = ScoringContext(
        query=request.query,
        user_location=request.user_location,
        sort_by=request.sort_by,
    )
    ranked = score_entities(candidates, context, scoring_config)
    top = ranked[: request.limit]

    message = None
    if not merged:
        message = NO_RESULTS_MESSAGE
    elif platforms_used < 2:
        message = "Only one source returned results; cross-source verification is unavailable."

    response = SearchResponse(
        restaurants=top,
        total_found=len(merged),
        filtered=len(candidates),
        source_counts=source_counts,
        platforms_used=platforms_used,
        insights=generate_search_insights(top),
        message=message,
    )

    cache.set(request_dict, response)
    _record_search(request, response, start_time, cache_hit=False)
    return response
