from typing import Dict, Any

from .config import DEFAULT_NEARBY_LIMIT, DEFAULT_NEARBY_RADIUS
from .query_builder import geo_point


def build_nearby_body(
    lat: float,
    lng: float,
    radius: str = DEFAULT_NEARBY_RADIUS,
    limit: int = DEFAULT_NEARBY_LIMIT,
) -> Dict[str, Any]:
    point = geo_point(lat, lng)
    return {
        "size": limit,
        "query": {"bool": {"filter": [
            {"geo_distance": {"distance": radius, "location": point}},
            {"term": {"isOpen": True}},
        ]}},
        # sort[0] of every hit is then the distance in km
        "sort": [
            {"_geo_distance": {"location": dict(point), "order": "asc", "unit": "km"}},
            {"rating": {"order": "desc"}},
        ],
    }
