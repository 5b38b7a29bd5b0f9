class IndexClientError(RuntimeError):
    """Search index request failure (transport, HTTP status or payload)."""


class SearchError(RuntimeError):
    """Caller-facing search failure. Carries only a retry message."""


SEARCH_FAILED_MESSAGE = "Search failed. Please try again."
LOCATION_SEARCH_FAILED_MESSAGE = "Location search failed. Please try again."

# index failures plus malformed documents (pydantic ValidationError is a ValueError)
INDEX_ERRORS = (IndexClientError, ValueError, KeyError, TypeError, AttributeError)
