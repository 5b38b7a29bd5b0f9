import pytest

from restaurant_search.server.errors import IndexClientError


class FakeIndex:
    """Stands in for IndexClient: records bodies, replays canned responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.bodies = []

    def search(self, body):
        self.bodies.append(body)
        if not self.responses:
            return hits_response([])
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp


def hits_response(hits, total=None, aggregations=None):
    body = {"hits": {"total": {"value": len(hits) if total is None else total, "relation": "eq"}, "hits": hits}}
    if aggregations is not None:
        body["aggregations"] = aggregations
    return body


def agg_response(names=(), cuisines=()):
    return {
        "hits": {"total": {"value": 0}, "hits": []},
        "aggregations": {
            "suggestions": {"buckets": [{"key": n, "doc_count": 1} for n in names]},
            "cuisine_suggestions": {"buckets": [{"key": c, "doc_count": 1} for c in cuisines]},
        },
    }


def hit(_id, score=None, sort=None, **source):
    h = {"_id": _id, "_source": source}
    if score is not None:
        h["_score"] = score
    if sort is not None:
        h["sort"] = sort
    return h


@pytest.fixture
def boom():
    return IndexClientError("HTTP 503 from search index: unavailable")
