from __future__ import annotations

import logging
import time

from ..analytics.store import record_event
from ..data_ingestion.config import DEFAULT_INGESTION_CONFIG, IngestionConfig
from ..data_ingestion.sources import SourceClients, fetch_reviews
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import summarize_reviews
from ..recommendations.cache import ResultCache
from .analysis import analyze_reviews, fallback_analysis
from .config import DEFAULT_ANALYSIS_CONFIG, AnalysisConfig
from .models import AnalysisRequest, AnalysisResult

logger = logging.getLogger(__name__)


def _record_analysis(request: AnalysisRequest, result: AnalysisResult, start_time: float, cache_hit: bool) -> None:
    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    record_event("analysis", {
        "name": request.name,
        "sources_requested": [s.value for s in request.source_ids],
        "total_reviews": result.total_reviews,
        "confidence": result.confidence,
        "data_quality": result.data_quality,
        "platforms_used": result.platforms_used,
        "synthetic_sources": [s.value for s in result.synthetic_sources],
        "response_time_ms": elapsed_ms,
        "cache_hit": cache_hit,
    })


def get_restaurant_analysis(
    request: AnalysisRequest,
    clients: SourceClients,
    cache: ResultCache,
    analysis_config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG,
    ingestion_config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> AnalysisResult:
    """
    Fetch reviews for the requested source identifiers and analyse them.

    A request carrying only a name has no reviews to fetch and yields the
    fallback analysis. The optional LLM summary never affects the scores.
    """
    start_time = time.time()

    request_dict = request.model_dump(mode="json")
    cached = cache.get(request_dict)
    if cached is not None:
        logger.info("Cache hit for analysis of %r", request.name)
        _record_analysis(request, cached, start_time, cache_hit=True)
        return cached

    texts: list[str] = []
    source_ids = request.source_ids
    if source_ids:
        reviews = fetch_reviews(
            clients,
            source_ids,
            ingestion_config,
            display_name=request.name,
            rating_hint=request.rating_hint,
        )
        result = analyze_reviews(reviews, request.name, analysis_config)
        texts = [r.text for items in reviews.values() for r in items]
    else:
        result = fallback_analysis(request.name, analysis_config)

    if request.include_summary and texts:
        summary = summarize_reviews(texts, request.name, llm_config)
        if summary is not None:
            result = result.model_copy(update={"summary": summary})

    cache.set(request_dict, result)
    _record_analysis(request, result, start_time, cache_hit=False)
    return result
