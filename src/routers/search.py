# src/routers/search.py
# Responsibility: Handles search API endpoints. Parses lenient query params, applies HTTP caching, formats output.

import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel

from src.config.settings import settings
from src.search.dispatcher import clamp_limit
from src.search.text_normalizer import normalize_text
from src.search.url_detector import detect_url
from src.services.redis_cache import NullCacheManager, RedisCacheManager
from src.services.search_service import SearchService, get_search_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/search",
    tags=["Search"]
)

# --- Pydantic Models ---
class SuggestionItem(BaseModel):
    id: str
    title: str
    item_type: Optional[str] = None
    price_value: Optional[float] = None
    price_currency: Optional[str] = None
    image_url: Optional[str] = None
    dealer_name: str
    dealer_domain: Optional[str] = None
    url: str
    cert_type: Optional[str] = None
    smith: Optional[str] = None
    tosogu_maker: Optional[str] = None

class SuggestionsResponse(BaseModel):
    suggestions: List[SuggestionItem]
    total: int
    query: str

class ListingSearchResponse(BaseModel):
    listings: List[Dict[str, Any]]
    total: int
    page: int
    total_pages: int
    query: str
    strategy: str

class PredicateItem(BaseModel):
    field: str
    mode: str
    value: Union[str, List[List[str]]]

class ExplainResponse(BaseModel):
    strategy: str
    normalized_query: str
    apply_availability_filter: bool
    predicates: List[PredicateItem]

# --- Dependency Injection ---
@lru_cache()
def get_cache_manager() -> Union[RedisCacheManager, NullCacheManager]:
    """Provider for the response cache."""
    if settings.REDIS.ENABLED:
        return RedisCacheManager()
    return NullCacheManager()

def _apply_cache_headers(response: Response) -> None:
    response.headers["Cache-Control"] = (
        f"public, s-maxage={settings.SEARCH.CACHE_MAX_AGE_SECONDS}, "
        f"stale-while-revalidate={settings.SEARCH.STALE_WHILE_REVALIDATE_SECONDS}"
    )

# --- Endpoints ---
@router.get("/suggestions", response_model=SuggestionsResponse)
def suggestions_endpoint(
    response: Response,
    q: Optional[str] = Query(None, description="Raw search text"),
    limit: Optional[str] = Query(None, description="Max suggestions (clamped to 1-10, default 5)"),
    service: SearchService = Depends(get_search_service),
    cache: Union[RedisCacheManager, NullCacheManager] = Depends(get_cache_manager),
):
    """
    Autosuggest endpoint.
    Short, empty or unmatched queries return an empty list with status 200.
    """
    # limit stays a string so values like 'abc' or '3.7' are parsed leniently
    cap = clamp_limit(
        limit,
        default=settings.SEARCH.DEFAULT_SUGGESTION_LIMIT,
        maximum=settings.SEARCH.MAX_SUGGESTION_LIMIT,
    )
    # URL detection runs on the raw query, so its key is part of the cache key.
    cache_params = {"q": normalize_text(q), "url": detect_url(q), "limit": cap}

    cached = cache.get_cached_result("suggestions", cache_params)
    if cached is not None:
        cached["query"] = q or ""
        _apply_cache_headers(response)
        return SuggestionsResponse(**cached)

    try:
        payload = service.suggest(q, cap)
    except Exception as e:
        logger.exception("Suggestion lookup failed for %r: %s", q, e)
        raise HTTPException(status_code=500, detail="Internal server error during search")

    if payload["suggestions"]:
        cache.set_cached_result("suggestions", cache_params, payload)

    _apply_cache_headers(response)
    return SuggestionsResponse(**payload)

@router.get("", response_model=ListingSearchResponse)
def listing_search_endpoint(
    response: Response,
    q: Optional[str] = Query(None, description="Raw search text"),
    tab: str = Query("available", description="'available' or 'sold'"),
    page: Optional[str] = Query(None, description="1-based page number"),
    limit: Optional[str] = Query(None, description="Page size (1-100, default 50)"),
    service: SearchService = Depends(get_search_service),
):
    """
    Paged listing search using the same query classification as autosuggest.
    """
    try:
        payload = service.search_listings(q, tab=tab, page=page, limit=limit)
    except Exception as e:
        logger.exception("Listing search failed for %r: %s", q, e)
        raise HTTPException(status_code=500, detail="Internal server error during search")

    _apply_cache_headers(response)
    return ListingSearchResponse(**payload)

@router.get("/explain", response_model=ExplainResponse)
def explain_endpoint(
    q: Optional[str] = Query(None, description="Raw search text"),
    service: SearchService = Depends(get_search_service),
):
    """
    Shows which strategy a query resolves to and the predicates it produces.
    """
    return ExplainResponse(**service.explain(q))
