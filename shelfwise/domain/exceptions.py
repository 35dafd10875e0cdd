"""Domain exceptions for ShelfWise.

External-call failures are recovered inside the recommendation pipeline by
falling back one tier; none of these reach the HTTP layer from
``RecommendationService``.
"""


class ShelfWiseError(Exception):
    """Base exception for all ShelfWise errors."""

    pass


class UpstreamUnavailableError(ShelfWiseError):
    """Raised when an external service call fails (network, timeout, auth, quota)."""

    pass


class LLMInvocationError(UpstreamUnavailableError):
    """Raised when a generative model call fails or returns no usable text."""

    def __init__(self, model: str, message: str):
        self.model = model
        super().__init__(f"{model}: {message}")


class CatalogError(UpstreamUnavailableError):
    """Raised inside the catalog adapter; callers only ever see empty results."""

    def __init__(self, category: str, message: str):
        self.category = category
        super().__init__(f"{category}: {message}")


class RecommendationParseError(ShelfWiseError, ValueError):
    """Raised when a model response holds no extractable list of recommendations."""

    pass


class LibraryEntryNotFoundError(ShelfWiseError, LookupError):
    """Raised when a library entry does not exist for the requesting user."""

    pass
