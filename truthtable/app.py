from __future__ import annotations

from fastapi import Depends, FastAPI

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events
from .data_ingestion.sources import SourceClients
from .recommendations.cache import ResultCache
from .recommendations.models import SearchRequest, SearchResponse
from .recommendations.retrieval import search_restaurants
from .reviews.models import AnalysisRequest, AnalysisResult
from .reviews.service import get_restaurant_analysis

app = FastAPI(title="TruthTable Restaurant API", version="1.0.0")

_cache = ResultCache()
_clients = SourceClients()


def configure(clients: SourceClients) -> None:
    """Install the per-platform fetchers used by the endpoints."""
    global _clients
    _clients = clients


def get_source_clients() -> SourceClients:
    return _clients


def get_cache() -> ResultCache:
    return _cache


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/search", response_model=SearchResponse)
def search(
    body: SearchRequest,
    clients: SourceClients = Depends(get_source_clients),
    cache: ResultCache = Depends(get_cache),
) -> SearchResponse:
    return search_restaurants(body, clients, cache)


@app.post("/analysis", response_model=AnalysisResult)
def analysis(
    body: AnalysisRequest,
    clients: SourceClients = Depends(get_source_clients),
    cache: ResultCache = Depends(get_cache),
) -> AnalysisResult:
    return get_restaurant_analysis(body, clients, cache)


# ── Operational endpoints ────────────────────────────────────────────────


@app.get("/analytics")
def analytics() -> dict:
    return compute_analytics(get_events())


@app.get("/cache/stats")
def cache_stats(cache: ResultCache = Depends(get_cache)) -> dict:
    return cache.stats()
