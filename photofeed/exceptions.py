"""Custom exceptions for the photo feed application."""


class PhotoFeedError(Exception):
    """Base exception for the photo feed application."""

    kind = "error"


class ConfigurationError(PhotoFeedError):
    """Exception raised for configuration errors."""

    kind = "configuration"


class FetchError(PhotoFeedError):
    """Base class for failures of a single feed fetch."""

    kind = "fetch_error"


class InvalidRequestError(FetchError):
    """Raised when the search request cannot be built; no network call is made."""

    kind = "invalid_request"


class TransportFailureError(FetchError):
    """Exception raised for network/connection errors and non-2xx responses."""

    kind = "transport_failure"

    def __init__(self, message: str, cause: BaseException | None = None, status_code: int | None = None):
        self.cause = cause
        self.status_code = status_code
        super().__init__(message)


class EmptyResponseError(FetchError):
    """Raised when the API answered without a body."""

    kind = "empty_response"


class MalformedResponseError(FetchError):
    """Raised when the response body is not a valid search envelope."""

    kind = "malformed_response"


class ThumbnailError(PhotoFeedError):
    """Raised when a thumbnail cannot be loaded."""

    kind = "thumbnail_error"


class ThumbnailSupersededError(ThumbnailError):
    """Raised to the awaiter of a thumbnail load that a newer load for the same slot replaced."""

    kind = "thumbnail_superseded"

    def __init__(self, slot: str):
        self.slot = slot
        super().__init__(f"Thumbnail load for slot {slot!r} was superseded")
