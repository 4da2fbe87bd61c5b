# src/services/search_service.py
# Responsibility: Orchestrates query resolution (Dispatch -> Datastore -> Ranking) for every search entry point.

import logging
import math
import time
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from src.config.settings import settings
from src.search.dispatcher import QueryDispatcher, QueryPlan, clamp_limit
from src.search.ranker import SuggestionResult, rank
from src.services.errors import DatastoreError
from src.services.listing_repository import ListingRepository

logger = logging.getLogger(__name__)

TABS = ("available", "sold")


class SearchService:
    """
    Main service class for listing search.
    Suggestions and paged search share one dispatcher so both classify queries identically.
    """

    def __init__(self, dispatcher: Optional[QueryDispatcher] = None,
                 repository: Optional[ListingRepository] = None):
        self.dispatcher = dispatcher or QueryDispatcher(min_query_length=settings.SEARCH.MIN_QUERY_LENGTH)
        self.repository = repository or ListingRepository()

    def suggest(self, raw_query: Optional[str], limit: Any = None) -> Dict[str, Any]:
        """
        Resolves an autosuggest query.

        Args:
            raw_query (str): Unmodified user input.
            limit (Any): Requested number of suggestions (clamped to 1..10).

        Returns:
            Dict[str, Any]: {"suggestions": [...], "total": int, "query": raw_query}
        """
        cap = clamp_limit(
            limit,
            default=settings.SEARCH.DEFAULT_SUGGESTION_LIMIT,
            maximum=settings.SEARCH.MAX_SUGGESTION_LIMIT,
        )
        plan = self.dispatcher.dispatch(raw_query)

        result = SuggestionResult.empty()
        if not plan.is_empty:
            rows, total = self._fetch(plan, cap)
            result = rank(rows, total, cap)

        return {
            "suggestions": result.items,
            "total": result.total,
            "query": raw_query if raw_query is not None else "",
        }

    def search_listings(self, raw_query: Optional[str], tab: str = "available",
                        page: Any = 1, limit: Any = None) -> Dict[str, Any]:
        """
        Paged listing search driven by the same query classification.

        Args:
            raw_query (str): Unmodified user input.
            tab (str): 'available' or 'sold'.
            page (Any): 1-based page number.
            limit (Any): Page size (clamped to 1..MAX_PAGE_SIZE).

        Returns:
            Dict[str, Any]: listings, total, page, total_pages, query, strategy.
        """
        page_size = clamp_limit(
            limit,
            default=settings.SEARCH.DEFAULT_PAGE_SIZE,
            maximum=settings.SEARCH.MAX_PAGE_SIZE,
        )
        safe_page = clamp_limit(page, default=1, maximum=settings.SEARCH.MAX_PAGE)
        safe_tab = tab if tab in TABS else "available"

        plan = self.dispatcher.dispatch(raw_query)

        rows: List[Dict[str, Any]] = []
        total = 0
        if not plan.is_empty:
            rows, total = self._fetch(plan, page_size, offset=(safe_page - 1) * page_size, tab=safe_tab)

        return {
            "listings": rows,
            "total": total,
            "page": safe_page,
            "total_pages": math.ceil(total / page_size) if total else 0,
            "query": raw_query if raw_query is not None else "",
            "strategy": plan.strategy_name,
        }

    def explain(self, raw_query: Optional[str]) -> Dict[str, Any]:
        """Returns the classification and predicates for a query without touching the datastore."""
        return self.dispatcher.dispatch(raw_query).to_dict()

    def _fetch(self, plan: QueryPlan, limit: int, offset: int = 0,
               tab: str = "available") -> Tuple[List[Dict[str, Any]], int]:
        """
        Runs the single datastore round trip for a request.
        A failing datastore degrades to an empty result instead of an error.
        """
        start = time.perf_counter()
        try:
            rows, total = self.repository.find(plan, limit, offset=offset, tab=tab)
        except DatastoreError as e:
            logger.error("Search query failed for %r (%s): %s",
                         plan.normalized_query, plan.strategy_name, e, exc_info=True)
            return [], 0

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.debug("[timing] %s query: %.1fms", plan.strategy_name, elapsed_ms)
        return rows, total


@lru_cache()
def get_search_service() -> SearchService:
    """Dependency injection provider for SearchService."""
    return SearchService()
