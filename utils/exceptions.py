"""
Custom Exceptions
"""


class ThesisSourcerError(Exception):
    """Base exception for the sourcing service"""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(ThesisSourcerError):
    """Missing or invalid configuration"""
    pass


class EmbeddingError(ThesisSourcerError):
    """Embedding call failed"""

    def __init__(self, message: str, model: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.model = model


class EmbeddingDimensionError(EmbeddingError):
    """Two embeddings of different dimension were compared"""
    pass


class LLMError(ThesisSourcerError):
    """LLM call failed"""

    def __init__(self, message: str, provider: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.provider = provider


class UpstreamError(ThesisSourcerError):
    """A request-level dependency (thesis embedding, keywords) failed"""

    def __init__(self, message: str, stage: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.stage = stage
