import pytest
from pydantic import ValidationError

from restaurant_search.server.query_builder import (
    RankingWeights,
    build_search_body,
    query_tokens,
)
from restaurant_search.server.schema import SearchFilters, SearchOptions


def _should(body):
    return body["query"]["bool"]["should"]


def _token_clauses(body):
    return [c for c in _should(body) if "fuzzy" in c and "name" in c["fuzzy"]]


def test_empty_query_matches_everything():
    for q in ("", "   "):
        body = build_search_body(q)
        assert body["query"]["bool"]["must"] == [{"match_all": {}}]
        assert body["query"]["bool"]["should"] == []
        assert "minimum_should_match" not in body["query"]["bool"]


def test_defaults_paginate_first_page_of_twenty():
    body = build_search_body("pizza")
    assert body["from"] == 0
    assert body["size"] == 20


def test_text_query_builds_five_strategies():
    body = build_search_body("  brger  ")
    should = _should(body)
    assert body["query"]["bool"]["minimum_should_match"] == 1
    assert body["query"]["bool"]["must"] == []

    phrase, fuzzy_multi, wildcard = should[0]["multi_match"], should[1]["multi_match"], should[2]["query_string"]
    assert phrase["type"] == "phrase" and phrase["boost"] == 3.0
    assert phrase["fields"] == ["name^5", "description^3", "cuisine^2"]
    assert phrase["query"] == "brger"
    assert fuzzy_multi["fuzziness"] == "AUTO" and fuzzy_multi["boost"] == 2.0
    assert fuzzy_multi["operator"] == "or"
    assert fuzzy_multi["fields"][:3] == ["name^4", "description^2.5", "cuisine^2"]
    assert "address.street" in fuzzy_multi["fields"] and "address.city" in fuzzy_multi["fields"]
    assert wildcard["query"] == "*brger*" and wildcard["boost"] == 1.5

    assert should[3] == {"fuzzy": {"name": {"value": "brger", "fuzziness": 2, "boost": 1.0}}}
    assert should[-1] == {"fuzzy": {"cuisine": {"value": "brger", "fuzziness": "AUTO", "boost": 1.2}}}


def test_wildcard_is_lowercased():
    body = build_search_body("Jollibee")
    assert _should(body)[2]["query_string"]["query"] == "*jollibee*"


def test_token_fuzziness_scales_with_length():
    body = build_search_body("big chikn burgr")
    tokens = {c["fuzzy"]["name"]["value"]: c["fuzzy"]["name"]["fuzziness"] for c in _token_clauses(body)}
    assert tokens == {"big": 1, "chikn": 2, "burgr": 2}


def test_token_clauses_are_capped_and_deduplicated():
    query = " ".join(f"w{i}" for i in range(30)) + " w1 w1"
    body = build_search_body(query, weights=RankingWeights(max_query_tokens=5))
    assert [c["fuzzy"]["name"]["value"] for c in _token_clauses(body)] == ["w0", "w1", "w2", "w3", "w4"]
    assert query_tokens("a a  b", 8) == ["a", "b"]


def test_weights_are_configurable():
    w = RankingWeights(phrase=9.0, cuisine_fuzzy=0.1, wildcard_fields=["name"])
    should = _should(build_search_body("sushi", weights=w))
    assert should[0]["multi_match"]["boost"] == 9.0
    assert should[2]["query_string"]["fields"] == ["name"]
    assert should[-1]["fuzzy"]["cuisine"]["boost"] == 0.1


def test_filters_are_non_scoring_constraints():
    filters = SearchFilters(
        cuisine=["Filipino", "Chinese"],
        min_rating=4.5,
        max_delivery_fee=60,
        is_open=True,
        location={"lat": 14.5995, "lng": 120.9842, "radius": "3km"},
    )
    f = build_search_body("", filters)["query"]["bool"]["filter"]
    assert {"terms": {"cuisine": ["Filipino", "Chinese"]}} in f
    assert {"range": {"rating": {"gte": 4.5}}} in f
    assert {"range": {"deliveryFee": {"lte": 60}}} in f
    assert {"term": {"isOpen": True}} in f
    assert {"geo_distance": {"distance": "3km", "location": {"lat": 14.5995, "lon": 120.9842}}} in f


def test_no_filters_when_none_active():
    assert build_search_body("", SearchFilters(cuisine=[]))["query"]["bool"]["filter"] == []


def test_is_open_false_is_still_a_filter():
    f = build_search_body("", SearchFilters(is_open=False))["query"]["bool"]["filter"]
    assert f == [{"term": {"isOpen": False}}]


def test_location_radius_defaults_to_ten_km():
    f = build_search_body("", SearchFilters(location={"lat": 1, "lng": 2}))["query"]["bool"]["filter"]
    assert f[0]["geo_distance"]["distance"] == "10km"


def test_price_range_and_max_fee_both_apply():
    # known double filter on deliveryFee: both ranges are sent, the index intersects them
    filters = SearchFilters.model_validate({"maxDeliveryFee": 80, "priceRange": {"min": 20, "max": 120}})
    f = build_search_body("", filters)["query"]["bool"]["filter"]
    assert f == [
        {"range": {"deliveryFee": {"lte": 80}}},
        {"range": {"deliveryFee": {"gte": 20, "lte": 120}}},
    ]


def test_empty_price_range_adds_nothing():
    f = build_search_body("", SearchFilters(price_range={}))["query"]["bool"]["filter"]
    assert f == []


def test_sort_by_relevance_cascades_to_rating_and_score():
    body = build_search_body("pizza", options=SearchOptions(sort_order="asc"))
    assert body["sort"] == [
        {"_score": {"order": "asc"}},
        {"rating": {"order": "desc"}},
        {"_score": {"order": "desc"}},
    ]


def test_sort_by_rating_skips_secondary_rating():
    body = build_search_body("", options=SearchOptions.model_validate({"sortBy": "rating", "sortOrder": "asc"}))
    assert body["sort"] == [{"rating": {"order": "asc"}}, {"_score": {"order": "desc"}}]


def test_sort_by_distance_needs_location():
    opts = SearchOptions(sort_by="distance", sort_order="asc")
    with_loc = build_search_body("", SearchFilters(location={"lat": 14.6, "lng": 121.0}), opts)
    assert with_loc["sort"][0] == {
        "_geo_distance": {"location": {"lat": 14.6, "lon": 121.0}, "order": "asc", "unit": "km"}
    }
    without = build_search_body("", SearchFilters(), opts)
    assert without["sort"] == [{"rating": {"order": "desc"}}, {"_score": {"order": "desc"}}]


def test_sort_by_delivery_time_falls_back_to_quality_order():
    body = build_search_body("", options=SearchOptions(sort_by="deliveryTime"))
    assert body["sort"] == [{"rating": {"order": "desc"}}, {"_score": {"order": "desc"}}]


def test_aggregations_always_requested():
    for q in ("", "pizza"):
        aggs = build_search_body(q)["aggs"]
        assert aggs["cuisines"] == {"terms": {"field": "cuisine", "size": 20}}
        assert aggs["avgRating"] == {"avg": {"field": "rating"}}
        ranges = aggs["priceRanges"]["range"]
        assert ranges["field"] == "deliveryFee"
        assert [r["key"] for r in ranges["ranges"]] == ["free", "low", "medium", "high"]
        assert ranges["ranges"][0] == {"key": "free", "to": 1}
        assert ranges["ranges"][-1] == {"key": "high", "from": 100}


def test_same_input_same_body():
    filters = SearchFilters(min_rating=4.0)
    opts = SearchOptions(size=5)
    assert build_search_body("chicken", filters, opts) == build_search_body("chicken", filters, opts)


def test_zero_token_cap_drops_per_token_clauses():
    assert query_tokens("a b c", 0) == []
    body = build_search_body("big chikn burgr", weights=RankingWeights(max_query_tokens=0))
    assert _token_clauses(body) == []
    assert len(_should(body)) == 4


def test_negative_token_cap_is_rejected():
    with pytest.raises(ValidationError):
        RankingWeights(max_query_tokens=-1)


def test_zero_valued_filters_still_apply():
    f = build_search_body("", SearchFilters(max_delivery_fee=0))["query"]["bool"]["filter"]
    assert f == [{"range": {"deliveryFee": {"lte": 0}}}]
    f = build_search_body("", SearchFilters(min_rating=0))["query"]["bool"]["filter"]
    assert f == [{"range": {"rating": {"gte": 0}}}]
