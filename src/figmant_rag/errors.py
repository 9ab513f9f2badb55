"""Exception hierarchy for the RAG context service."""


class FigmantError(Exception):
    """Base class for errors that abort a context build."""


class ConfigurationError(FigmantError):
    """A required setting (store URL, API key) is missing or invalid."""


class EmbeddingProviderError(FigmantError):
    """The embedding API returned a non-2xx response or a malformed payload."""


class StoreUnavailableError(FigmantError):
    """The knowledge store cannot be reached at all."""
