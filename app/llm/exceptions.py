class LlmExtractionError(Exception):
    """Raised when LLM-based extraction cannot produce candidates."""


class LlmNetworkError(LlmExtractionError):
    """Raised when the provider call fails due to network/infrastructure issues."""


class LlmResponseError(LlmExtractionError):
    """Raised when the provider response is absent, truncated or not usable JSON."""
