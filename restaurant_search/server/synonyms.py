from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Optional


DEFAULT_SYNONYMS: Dict[str, List[str]] = {
    # food synonyms
    "burger": ["hamburger", "cheeseburger", "sandwich"],
    "pizza": ["pie", "flatbread"],
    "chinese": ["asian", "oriental"],
    "italian": ["pasta", "spaghetti"],
    "mexican": ["tex-mex", "latino"],
    "indian": ["curry", "spicy"],
    "japanese": ["sushi", "ramen", "asian"],
    "thai": ["asian", "spicy"],
    "coffee": ["cafe", "espresso", "latte"],
    "dessert": ["sweet", "cake", "ice cream"],
    "healthy": ["salad", "organic", "fresh"],
    "fast": ["quick", "express"],
    # common misspellings
    "brger": ["burger", "hamburger"],
    "piza": ["pizza"],
    "chiken": ["chicken"],
    "resturant": ["restaurant"],
    "restraunt": ["restaurant"],
    "restaraunt": ["restaurant"],
    "chinse": ["chinese"],
    "itallian": ["italian"],
    "mexcan": ["mexican"],
    "japenese": ["japanese"],
    "cofee": ["coffee"],
    "desrt": ["dessert"],
    "helthy": ["healthy"],
}


class SynonymLookup(ABC):
    """Term expansion used by the synonym-aware suggestions.

    Subclasses return the alternatives for a query (never the query itself).
    """

    @abstractmethod
    def expand(self, term: str) -> List[str]:
        ...


class StaticSynonymTable(SynonymLookup):
    def __init__(self, mapping: Optional[Mapping[str, List[str]]] = None):
        source = DEFAULT_SYNONYMS if mapping is None else mapping
        self._mapping = {k.strip().lower(): list(v) for k, v in source.items()}

    def expand(self, term: str) -> List[str]:
        key = (term or "").strip().lower()
        return [s for s in self._mapping.get(key, []) if s.lower() != key]


def expand_terms(query: str, lookup: SynonymLookup) -> List[str]:
    # original query first, then its alternatives without repeats
    terms = [query]
    for syn in lookup.expand(query):
        if syn not in terms:
            terms.append(syn)
    return terms
