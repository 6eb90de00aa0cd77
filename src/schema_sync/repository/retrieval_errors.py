"""Typed errors for documentation retrieval failures."""


class RetrievalError(RuntimeError):
    """Base class for retrieval failures."""


class RetrievalConnectionError(RetrievalError):
    """Raised when the retrieval backend can't be reached at initialization."""


class RetrievalQueryError(RetrievalError):
    """Raised when a single retrieval query fails. Safe to retry."""
