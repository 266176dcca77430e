from __future__ import annotations


class UpstreamServiceError(RuntimeError):
    """An external collaborator (search service, language model) failed."""


class RetrievalError(UpstreamServiceError):
    pass


class GenerationError(UpstreamServiceError):
    pass
