"""Error types raised by SentimentHub."""


class SentimentHubError(Exception):
    """Base class for all SentimentHub errors."""


class RetrievalError(SentimentHubError):
    """A retrieval source failed to produce snippets."""


class ClassificationError(SentimentHubError):
    """The external classifier failed, timed out or returned a malformed response."""


class PersistenceError(SentimentHubError):
    """A store could not read or write a record."""


class InputValidationError(SentimentHubError):
    """Caller input was rejected before any pipeline work started."""


class NotFoundError(SentimentHubError):
    """A record does not exist or belongs to another owner."""
