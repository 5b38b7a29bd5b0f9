import logging
import threading
from typing import Any, List, Optional

from .client import IndexClient
from .config import DEFAULT_NEARBY_LIMIT, DEFAULT_NEARBY_RADIUS, POPULAR_SEARCHES
from .errors import INDEX_ERRORS, SearchError, SEARCH_FAILED_MESSAGE, LOCATION_SEARCH_FAILED_MESSAGE
from .geo import build_nearby_body
from .mapper import map_nearby_response, map_search_response
from .query_builder import DEFAULT_WEIGHTS, RankingWeights, build_search_body
from .schema import Restaurant, SearchResult, as_filters, as_options
from .suggest import (
    DEFAULT_SUGGESTION_WEIGHTS,
    SuggestionPipeline,
    SuggestionWeights,
    default_pipeline,
    synonym_pipeline,
)
from .synonyms import StaticSynonymTable, SynonymLookup

logger = logging.getLogger(__name__)


class RestaurantSearch:
    """Entry point for restaurant search, suggestions and nearby lookups.

    Holds only configuration; every call builds its own request.
    """

    def __init__(
        self,
        client=None,
        weights: RankingWeights = DEFAULT_WEIGHTS,
        suggestion_weights: SuggestionWeights = DEFAULT_SUGGESTION_WEIGHTS,
        synonyms: Optional[SynonymLookup] = None,
    ):
        self.client = client if client is not None else IndexClient()
        self.weights = weights
        self.suggestions: SuggestionPipeline = default_pipeline(suggestion_weights)
        self.intelligent: SuggestionPipeline = synonym_pipeline(synonyms or StaticSynonymTable(), suggestion_weights)

    def search_restaurants(self, query: str = "", filters: Any = None, options: Any = None) -> SearchResult:
        filters = as_filters(filters)
        options = as_options(options)
        body = build_search_body(query or "", filters, options, self.weights)
        try:
            response = self.client.search(body)
            result = map_search_response(response, size=options.size)
        except INDEX_ERRORS as exc:
            logger.error("search for %r failed: %s", query, exc)
            raise SearchError(SEARCH_FAILED_MESSAGE) from exc
        logger.info("search %r -> %d/%d", query, len(result.restaurants), result.total)
        return result

    def get_search_suggestions(self, query: str) -> List[str]:
        return self.suggestions.run(self.client, query)

    def get_intelligent_suggestions(self, query: str) -> List[str]:
        return self.intelligent.run(self.client, query)

    def search_nearby_restaurants(
        self,
        lat: float,
        lng: float,
        radius: str = DEFAULT_NEARBY_RADIUS,
        limit: int = DEFAULT_NEARBY_LIMIT,
    ) -> List[Restaurant]:
        body = build_nearby_body(lat, lng, radius, limit)
        try:
            response = self.client.search(body)
            restaurants = map_nearby_response(response)
        except INDEX_ERRORS as exc:
            logger.error("nearby search at (%s, %s) failed: %s", lat, lng, exc)
            raise SearchError(LOCATION_SEARCH_FAILED_MESSAGE) from exc
        return restaurants[:limit]

    def get_popular_searches(self) -> List[str]:
        return get_popular_searches()


def get_popular_searches() -> List[str]:
    # static until search analytics exist
    return list(POPULAR_SEARCHES)


_default: Optional[RestaurantSearch] = None
_default_lock = threading.Lock()


def get_engine() -> RestaurantSearch:
    global _default
    # sync endpoints run in a thread pool; build the shared engine once
    with _default_lock:
        if _default is None:
            _default = RestaurantSearch()
        return _default


def search_restaurants(query: str = "", filters: Any = None, options: Any = None) -> SearchResult:
    return get_engine().search_restaurants(query, filters, options)


def get_search_suggestions(query: str) -> List[str]:
    return get_engine().get_search_suggestions(query)


def get_intelligent_suggestions(query: str) -> List[str]:
    return get_engine().get_intelligent_suggestions(query)


def search_nearby_restaurants(
    lat: float,
    lng: float,
    radius: str = DEFAULT_NEARBY_RADIUS,
    limit: int = DEFAULT_NEARBY_LIMIT,
) -> List[Restaurant]:
    return get_engine().search_nearby_restaurants(lat, lng, radius, limit)
