"""Autocomplete suggestions.

Suggestions run as a pipeline of tiers. Each tier issues one request and
reports whether it found anything; the pipeline moves to the next tier only
when the previous one came back empty. Index errors and malformed responses
never reach the caller: they are logged and turned into an empty list.
"""
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Any, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from .config import MAX_SUGGESTIONS, MIN_SUGGESTION_QUERY_LEN
from .errors import INDEX_ERRORS
from .mapper import bucket_keys, hit_names, unique
from .synonyms import StaticSynonymTable, SynonymLookup, expand_terms

logger = logging.getLogger(__name__)


class Verdict(str, Enum):
    EMPTY = "empty"
    HAS_RESULTS = "has_results"


class TierOutcome(BaseModel):
    tier: str
    suggestions: List[str]

    @property
    def verdict(self) -> Verdict:
        return Verdict.HAS_RESULTS if self.suggestions else Verdict.EMPTY


class SuggestionWeights(BaseModel):
    name_fuzzy: float = 1.0
    name_wildcard: float = 0.8
    cuisine_fuzzy: float = 0.6
    name_match: float = 1.2
    prefix_length: int = 1
    max_expansions: int = 50
    name_agg_size: int = 10
    cuisine_agg_size: int = 5
    # loose tier
    loose_fuzziness: int = 2
    loose_max_expansions: int = 100
    loose_hits: int = 10
    # synonym-aware variant: (original term, synonym)
    synonym_name_fuzzy: Tuple[float, float] = (2.0, 1.0)
    synonym_wildcard: Tuple[float, float] = (1.5, 0.8)
    synonym_cuisine_match: Tuple[float, float] = (1.2, 0.8)
    synonym_name_agg_size: int = 8
    synonym_cuisine_agg_size: int = 4


DEFAULT_SUGGESTION_WEIGHTS = SuggestionWeights()


def _suggestion_aggs(name_size: int, cuisine_size: int) -> Dict[str, Any]:
    return {
        "suggestions": {"terms": {
            "field": "name.keyword",
            "size": name_size,
            "order": {"_count": "desc"},
        }},
        "cuisine_suggestions": {"terms": {
            "field": "cuisine",
            "size": cuisine_size,
            "order": {"_count": "desc"},
        }},
    }


def _aggregated_suggestions(response: Dict[str, Any]) -> List[str]:
    names = bucket_keys(response, "suggestions")
    cuisines = bucket_keys(response, "cuisine_suggestions")
    return unique(names + cuisines, MAX_SUGGESTIONS)


class SuggestionTier(ABC):
    name = "tier"

    def __init__(self, weights: SuggestionWeights = DEFAULT_SUGGESTION_WEIGHTS):
        self.weights = weights

    @abstractmethod
    def build(self, query: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    def extract(self, response: Dict[str, Any]) -> List[str]:
        ...

    def run(self, client, query: str) -> TierOutcome:
        response = client.search(self.build(query))
        return TierOutcome(tier=self.name, suggestions=self.extract(response))


class AggregatedTier(SuggestionTier):
    """Fuzzy, wildcard and cuisine matching, collapsed into term buckets."""

    name = "aggregated"

    def build(self, query: str) -> Dict[str, Any]:
        w = self.weights
        return {
            "size": 0,
            "query": {"bool": {
                "should": [
                    {"fuzzy": {"name": {
                        "value": query,
                        "fuzziness": "AUTO",
                        "prefix_length": w.prefix_length,
                        "max_expansions": w.max_expansions,
                        "boost": w.name_fuzzy,
                    }}},
                    {"wildcard": {"name.keyword": {
                        "value": f"*{query.lower()}*",
                        "boost": w.name_wildcard,
                    }}},
                    {"fuzzy": {"cuisine": {
                        "value": query,
                        "fuzziness": "AUTO",
                        "boost": w.cuisine_fuzzy,
                    }}},
                    {"match": {"name": {
                        "query": query,
                        "fuzziness": "AUTO",
                        "operator": "or",
                        "boost": w.name_match,
                    }}},
                ],
                "minimum_should_match": 1,
            }},
            "aggs": _suggestion_aggs(w.name_agg_size, w.cuisine_agg_size),
        }

    def extract(self, response: Dict[str, Any]) -> List[str]:
        return _aggregated_suggestions(response)


class LooseHitsTier(SuggestionTier):
    """Fixed edit distance, no prefix, raw hits. Only names are returned."""

    name = "loose"

    def build(self, query: str) -> Dict[str, Any]:
        w = self.weights
        return {
            "size": w.loose_hits,
            "query": {"bool": {"should": [
                {"fuzzy": {"name": {
                    "value": query,
                    "fuzziness": w.loose_fuzziness,
                    "prefix_length": 0,
                    "max_expansions": w.loose_max_expansions,
                }}},
                {"match": {"name": {
                    "query": query,
                    "fuzziness": w.loose_fuzziness,
                    "operator": "or",
                }}},
            ]}},
            "_source": ["name", "cuisine"],
        }

    def extract(self, response: Dict[str, Any]) -> List[str]:
        return unique(hit_names(response), MAX_SUGGESTIONS)


class SynonymTier(SuggestionTier):
    """Runs the aggregated strategies for the query and each of its synonyms.

    The original term keeps the higher boost so exact intent still wins.
    """

    name = "synonyms"

    def __init__(
        self,
        lookup: Optional[SynonymLookup] = None,
        weights: SuggestionWeights = DEFAULT_SUGGESTION_WEIGHTS,
    ):
        super().__init__(weights)
        self.lookup = lookup or StaticSynonymTable()

    def _term_clauses(self, term: str, original: bool) -> List[Dict[str, Any]]:
        w = self.weights
        pick = 0 if original else 1
        return [
            {"fuzzy": {"name": {
                "value": term,
                "fuzziness": "AUTO",
                "prefix_length": w.prefix_length,
                "max_expansions": w.max_expansions,
                "boost": w.synonym_name_fuzzy[pick],
            }}},
            {"wildcard": {"name.keyword": {
                "value": f"*{term.lower()}*",
                "boost": w.synonym_wildcard[pick],
            }}},
            {"match": {"cuisine": {
                "query": term,
                "fuzziness": "AUTO",
                "boost": w.synonym_cuisine_match[pick],
            }}},
        ]

    def build(self, query: str) -> Dict[str, Any]:
        should: List[Dict[str, Any]] = []
        for idx, term in enumerate(expand_terms(query, self.lookup)):
            should.extend(self._term_clauses(term, original=idx == 0))
        w = self.weights
        return {
            "size": 0,
            "query": {"bool": {"should": should, "minimum_should_match": 1}},
            "aggs": _suggestion_aggs(w.synonym_name_agg_size, w.synonym_cuisine_agg_size),
        }

    def extract(self, response: Dict[str, Any]) -> List[str]:
        return _aggregated_suggestions(response)


class SuggestionPipeline:
    def __init__(self, tiers: Sequence[SuggestionTier]):
        self.tiers = list(tiers)

    def run(self, client, query: str) -> List[str]:
        q = (query or "").strip()
        if len(q) < MIN_SUGGESTION_QUERY_LEN:
            return []
        try:
            for tier in self.tiers:
                outcome = tier.run(client, q)
                if outcome.verdict is Verdict.HAS_RESULTS:
                    return outcome.suggestions[:MAX_SUGGESTIONS]
                logger.info("suggestion tier %s empty for %r", tier.name, q)
        except INDEX_ERRORS as exc:
            logger.warning("suggestions for %r failed: %s", q, exc)
        return []


def default_pipeline(weights: SuggestionWeights = DEFAULT_SUGGESTION_WEIGHTS) -> SuggestionPipeline:
    return SuggestionPipeline([AggregatedTier(weights), LooseHitsTier(weights)])


def synonym_pipeline(
    lookup: Optional[SynonymLookup] = None,
    weights: SuggestionWeights = DEFAULT_SUGGESTION_WEIGHTS,
) -> SuggestionPipeline:
    return SuggestionPipeline([SynonymTier(lookup, weights)])
