"""
Source boundary: call the per-platform fetchers and absorb their failures.

Fetchers are plain callables supplied by the caller, one listing fetcher
and one review fetcher per platform. A fetcher that raises or overruns the
timeout contributes an empty list; the engines downstream see a degraded
but valid input rather than an error.
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass, field
from typing import Callable, Mapping, Sequence, TypeVar

from ..matching.models import ListingRecord, Source
from ..reviews.models import ReviewRecord
from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig
from .synthetic import synthetic_reviews

logger = logging.getLogger(__name__)

ListingFetcher = Callable[[str, str], Sequence[ListingRecord]]
ReviewFetcher = Callable[[str], Sequence[ReviewRecord]]

T = TypeVar("T")


@dataclass
class SourceClients:
    listing_fetchers: dict[Source, ListingFetcher] = field(default_factory=dict)
    review_fetchers: dict[Source, ReviewFetcher] = field(default_factory=dict)


def _gather(
    calls: Mapping[Source, Callable[[], Sequence[T]]],
    timeout: float,
    kind: str,
) -> dict[Source, list[T] | None]:
    """
    Run one call per source concurrently; ``None`` marks a failed source.

    All sources share one deadline, so the whole fan-out is bounded by ``timeout``.
    """
    results: dict[Source, list[T] | None] = {}
    if not calls:
        return results

    executor = ThreadPoolExecutor(max_workers=len(calls))
    try:
        deadline = time.monotonic() + timeout
        futures = {source: executor.submit(call) for source, call in calls.items()}
        for source, future in futures.items():
            try:
                remaining = max(0.0, deadline - time.monotonic())
                results[source] = list(future.result(timeout=remaining))
            except FutureTimeout:
                logger.warning("Source %s %s fetch timed out after %ss", source.value, kind, timeout)
                results[source] = None
            except Exception:
                logger.warning("Source %s %s fetch failed", source.value, kind, exc_info=True)
                results[source] = None
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
    return results


def fetch_listings(
    clients: SourceClients,
    query: str,
    location: str,
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> dict[Source, list[ListingRecord]]:
    """Listings per source; unconfigured or failed sources map to ``[]``."""
    calls = {
        source: (lambda fetch=fetch: fetch(query, location))
        for source, fetch in clients.listing_fetchers.items()
    }
    gathered = _gather(calls, config.fetch_timeout, "listing")
    listings = {source: gathered.get(source) or [] for source in Source}
    logger.info(
        "Fetched listings for %r in %r: %s",
        query, location, {s.value: len(v) for s, v in listings.items()},
    )
    return listings


def fetch_reviews(
    clients: SourceClients,
    source_ids: Mapping[Source, str],
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
    display_name: str | None = None,
    rating_hint: float | None = None,
) -> dict[Source, list[ReviewRecord]]:
    """
    Reviews for each requested source identifier.

    Only sources present in ``source_ids`` appear in the result. A source
    whose fetch fails maps to ``[]``, or to a synthetic review set when
    ``config.synthetic_fallback`` is on and a display name is known.
    """
    calls = {}
    for source, source_id in source_ids.items():
        fetch = clients.review_fetchers.get(source)
        if fetch is None:
            logger.warning("No review fetcher configured for source %s", source.value)
            continue
        calls[source] = lambda fetch=fetch, source_id=source_id: fetch(source_id)

    gathered = _gather(calls, config.fetch_timeout, "review")

    reviews: dict[Source, list[ReviewRecord]] = {}
    for source in source_ids:
        fetched = gathered.get(source)
        if fetched is None and config.synthetic_fallback and display_name:
            logger.info("Substituting synthetic reviews for source %s", source.value)
            fetched = synthetic_reviews(
                display_name, source, rating_hint, count=config.synthetic_review_count,
            )
        reviews[source] = fetched or []
    return reviews
