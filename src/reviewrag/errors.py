"""Exception types raised by reviewrag."""


class ReviewRagError(Exception):
    """Base class for reviewrag errors."""


class HostAPIError(ReviewRagError):
    """A call to the source-control host failed.

    Attributes:
        status_code: HTTP status code, if a response was received
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EmbeddingError(ReviewRagError):
    """The embedding collaborator failed, timed out, or returned a bad vector."""
