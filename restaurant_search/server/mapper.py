from typing import Dict, Any, List, Iterable, Optional

from .schema import Bucket, Restaurant, SearchAggregations, SearchResult, restaurant_from_hit


def _hits(response: Dict[str, Any]) -> List[Dict[str, Any]]:
    return ((response or {}).get("hits") or {}).get("hits") or []


def _buckets(aggs: Dict[str, Any], name: str) -> List[Dict[str, Any]]:
    agg = aggs.get(name) or {}
    buckets = agg.get("buckets") or []
    # keyed range aggregations come back as a dict
    if isinstance(buckets, dict):
        return [dict(v, key=k) for k, v in buckets.items()]
    return buckets


def total_hits(response: Dict[str, Any]) -> int:
    total = ((response or {}).get("hits") or {}).get("total")
    if isinstance(total, dict):
        return int(total.get("value") or 0)
    return int(total or 0)


def map_aggregations(response: Dict[str, Any]) -> SearchAggregations:
    aggs = (response or {}).get("aggregations") or {}
    avg = (aggs.get("avgRating") or {}).get("value")
    return SearchAggregations(
        cuisines=[Bucket(key=str(b["key"]), count=b.get("doc_count", 0)) for b in _buckets(aggs, "cuisines")],
        avg_rating=avg or 0.0,
        price_ranges=[Bucket(key=str(b["key"]), count=b.get("doc_count", 0)) for b in _buckets(aggs, "priceRanges")],
    )


def map_search_response(response: Dict[str, Any], size: Optional[int] = None) -> SearchResult:
    hits = _hits(response)
    if size is not None:
        hits = hits[:size]
    restaurants = [restaurant_from_hit(h, _score=h.get("_score")) for h in hits]
    total = max(total_hits(response), len(restaurants))
    return SearchResult(restaurants=restaurants, total=total, aggregations=map_aggregations(response))


def map_nearby_response(response: Dict[str, Any]) -> List[Restaurant]:
    out = []
    for h in _hits(response):
        sort_values = h.get("sort") or []
        distance = sort_values[0] if sort_values else None
        out.append(restaurant_from_hit(h, distance=distance))
    return out


def bucket_keys(response: Dict[str, Any], name: str) -> List[str]:
    aggs = (response or {}).get("aggregations") or {}
    return [str(b["key"]) for b in _buckets(aggs, name)]


def hit_names(response: Dict[str, Any]) -> List[str]:
    names = []
    for h in _hits(response):
        name = (h.get("_source") or {}).get("name")
        if isinstance(name, str) and name:
            names.append(name)
    return names


def unique(values: Iterable[str], limit: Optional[int] = None) -> List[str]:
    seen = []
    for v in values:
        if v not in seen:
            seen.append(v)
    return seen if limit is None else seen[:limit]
