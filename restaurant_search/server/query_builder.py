from typing import Dict, Any, List, Optional
from pydantic import BaseModel, Field

from .config import MAX_QUERY_TOKENS
from .schema import SearchFilters, SearchOptions


class RankingWeights(BaseModel):
    """Boosts and field weights for the text strategies of the main search."""

    phrase: float = 3.0
    fuzzy_multi: float = 2.0
    wildcard: float = 1.5
    token_fuzzy: float = 1.0
    cuisine_fuzzy: float = 1.2
    phrase_fields: List[str] = Field(default_factory=lambda: ["name^5", "description^3", "cuisine^2"])
    fuzzy_fields: List[str] = Field(
        default_factory=lambda: ["name^4", "description^2.5", "cuisine^2", "address.street", "address.city"]
    )
    wildcard_fields: List[str] = Field(default_factory=lambda: ["name^2", "cuisine^1.5"])
    long_token_len: int = 4
    max_query_tokens: int = Field(default=MAX_QUERY_TOKENS, ge=0)


DEFAULT_WEIGHTS = RankingWeights()

CUISINE_AGG_SIZE = 20
PRICE_BUCKETS = [
    {"key": "free", "to": 1},
    {"key": "low", "from": 1, "to": 50},
    {"key": "medium", "from": 50, "to": 100},
    {"key": "high", "from": 100},
]


def query_tokens(query: str, limit: int) -> List[str]:
    tokens: List[str] = []
    for tok in query.split():
        if len(tokens) >= limit:
            break
        if tok not in tokens:
            tokens.append(tok)
    return tokens


def token_fuzziness(token: str, weights: RankingWeights) -> int:
    return 2 if len(token) > weights.long_token_len else 1


def text_strategies(query: str, weights: RankingWeights = DEFAULT_WEIGHTS) -> List[Dict[str, Any]]:
    q = query.strip()
    clauses: List[Dict[str, Any]] = [
        # exact phrase
        {"multi_match": {
            "query": q,
            "fields": list(weights.phrase_fields),
            "type": "phrase",
            "boost": weights.phrase,
        }},
        # typo tolerant, e.g. "brger" -> "burger"
        {"multi_match": {
            "query": q,
            "fields": list(weights.fuzzy_fields),
            "fuzziness": "AUTO",
            "operator": "or",
            "boost": weights.fuzzy_multi,
        }},
        # partial words
        {"query_string": {
            "query": f"*{q.lower()}*",
            "fields": list(weights.wildcard_fields),
            "boost": weights.wildcard,
        }},
    ]
    for tok in query_tokens(q, weights.max_query_tokens):
        clauses.append({"fuzzy": {"name": {
            "value": tok,
            "fuzziness": token_fuzziness(tok, weights),
            "boost": weights.token_fuzzy,
        }}})
    clauses.append({"fuzzy": {"cuisine": {
        "value": q,
        "fuzziness": "AUTO",
        "boost": weights.cuisine_fuzzy,
    }}})
    return clauses


def geo_point(lat: float, lng: float) -> Dict[str, float]:
    return {"lat": lat, "lon": lng}


def build_filters(filters: SearchFilters) -> List[Dict[str, Any]]:
    clauses: List[Dict[str, Any]] = []
    if filters.cuisine:
        clauses.append({"terms": {"cuisine": list(filters.cuisine)}})
    if filters.min_rating is not None:
        clauses.append({"range": {"rating": {"gte": filters.min_rating}}})
    if filters.max_delivery_fee is not None:
        clauses.append({"range": {"deliveryFee": {"lte": filters.max_delivery_fee}}})
    if filters.is_open is not None:
        clauses.append({"term": {"isOpen": filters.is_open}})
    if filters.location is not None:
        loc = filters.location
        clauses.append({"geo_distance": {
            "distance": loc.radius,
            "location": geo_point(loc.lat, loc.lng),
        }})
    # overlaps max_delivery_fee on purpose; both ranges must hold
    if filters.price_range is not None:
        bounds: Dict[str, float] = {}
        if filters.price_range.min is not None:
            bounds["gte"] = filters.price_range.min
        if filters.price_range.max is not None:
            bounds["lte"] = filters.price_range.max
        if bounds:
            clauses.append({"range": {"deliveryFee": bounds}})
    return clauses


def build_sort(filters: SearchFilters, options: SearchOptions) -> List[Dict[str, Any]]:
    order = options.sort_order
    sort: List[Dict[str, Any]] = []
    if options.sort_by == "relevance":
        sort.append({"_score": {"order": order}})
    elif options.sort_by == "rating":
        sort.append({"rating": {"order": order}})
    elif options.sort_by == "distance" and filters.location is not None:
        sort.append({"_geo_distance": {
            "location": geo_point(filters.location.lat, filters.location.lng),
            "order": order,
            "unit": "km",
        }})
    if options.sort_by != "rating":
        sort.append({"rating": {"order": "desc"}})
    sort.append({"_score": {"order": "desc"}})
    return sort


def build_aggregations() -> Dict[str, Any]:
    return {
        "cuisines": {"terms": {"field": "cuisine", "size": CUISINE_AGG_SIZE}},
        "avgRating": {"avg": {"field": "rating"}},
        "priceRanges": {"range": {
            "field": "deliveryFee",
            "ranges": [dict(b) for b in PRICE_BUCKETS],
        }},
    }


def build_search_body(
    query: str,
    filters: Optional[SearchFilters] = None,
    options: Optional[SearchOptions] = None,
    weights: RankingWeights = DEFAULT_WEIGHTS,
) -> Dict[str, Any]:
    filters = filters or SearchFilters()
    options = options or SearchOptions()
    bool_query: Dict[str, Any] = {"must": [], "filter": build_filters(filters), "should": []}
    if query and query.strip():
        bool_query["should"] = text_strategies(query, weights)
        bool_query["minimum_should_match"] = 1
    else:
        bool_query["must"].append({"match_all": {}})
    return {
        "from": options.from_,
        "size": options.size,
        "query": {"bool": bool_query},
        "aggs": build_aggregations(),
        "sort": build_sort(filters, options),
    }
