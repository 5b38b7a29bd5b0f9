from typing import List, Optional, Dict, Any, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import DEFAULT_PAGE_SIZE, DEFAULT_SEARCH_RADIUS

SortBy = Literal["relevance", "rating", "distance", "deliveryTime"]
SortOrder = Literal["asc", "desc"]


class _WireModel(BaseModel):
    # snake_case in Python, camelCase on the wire
    model_config = ConfigDict(populate_by_name=True)


class GeoLocation(_WireModel):
    lat: float
    lng: float
    radius: str = DEFAULT_SEARCH_RADIUS


class PriceRange(_WireModel):
    min: Optional[float] = None
    max: Optional[float] = None


class SearchFilters(_WireModel):
    cuisine: List[str] = Field(default_factory=list)
    min_rating: Optional[float] = Field(default=None, alias="minRating")
    max_delivery_fee: Optional[float] = Field(default=None, alias="maxDeliveryFee")
    is_open: Optional[bool] = Field(default=None, alias="isOpen")
    location: Optional[GeoLocation] = None
    price_range: Optional[PriceRange] = Field(default=None, alias="priceRange")


class SearchOptions(_WireModel):
    from_: int = Field(default=0, ge=0, alias="from")
    size: int = Field(default=DEFAULT_PAGE_SIZE, ge=0)
    sort_by: SortBy = Field(default="relevance", alias="sortBy")
    sort_order: SortOrder = Field(default="desc", alias="sortOrder")


class Restaurant(_WireModel):
    """Indexed restaurant document. Fields the index returns beyond these are kept."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    cuisine: List[str] = Field(default_factory=list)
    rating: Optional[float] = None
    delivery_fee: Optional[float] = Field(default=None, alias="deliveryFee")
    is_open: Optional[bool] = Field(default=None, alias="isOpen")
    score: Optional[float] = Field(default=None, alias="_score")
    distance: Optional[float] = None

    @field_validator("cuisine", mode="before")
    @classmethod
    def _cuisine_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value


class Bucket(BaseModel):
    key: str
    count: int


class SearchAggregations(_WireModel):
    cuisines: List[Bucket] = Field(default_factory=list)
    avg_rating: float = Field(default=0.0, alias="avgRating")
    price_ranges: List[Bucket] = Field(default_factory=list, alias="priceRanges")


class SearchResult(BaseModel):
    restaurants: List[Restaurant]
    total: int
    aggregations: Optional[SearchAggregations] = None


class SearchRequest(BaseModel):
    query: str = ""
    filters: SearchFilters = Field(default_factory=SearchFilters)
    options: SearchOptions = Field(default_factory=SearchOptions)


class SuggestionResponse(BaseModel):
    suggestions: List[str]


class NearbyResponse(BaseModel):
    restaurants: List[Restaurant]


class PopularResponse(BaseModel):
    searches: List[str]


def as_filters(raw: Optional[Any]) -> SearchFilters:
    if raw is None:
        return SearchFilters()
    if isinstance(raw, SearchFilters):
        return raw
    return SearchFilters.model_validate(raw)


def as_options(raw: Optional[Any]) -> SearchOptions:
    if raw is None:
        return SearchOptions()
    if isinstance(raw, SearchOptions):
        return raw
    return SearchOptions.model_validate(raw)


def restaurant_from_hit(hit: Dict[str, Any], **extra: Any) -> Restaurant:
    source = dict(hit.get("_source") or {})
    source["id"] = str(hit.get("_id", source.get("id", "")))
    source.update(extra)
    return Restaurant.model_validate(source)
