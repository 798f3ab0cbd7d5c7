"""
Custom exceptions for the streamscout application.

This module defines the error taxonomy shared by the scraper, the metadata
API client, the cache layer, and the CLI. Extraction misses and failed live
verifications are not errors and never appear here; they are represented as
``None`` values and not-live results.
"""

from __future__ import annotations


class StreamScoutError(Exception):
    """Base exception for all streamscout errors."""

    def __init__(self, message: str) -> None:
        """
        Initialize StreamScoutError.

        Parameters
        ----------
        message : str
            Human-readable error message.
        """
        self.message = message
        super().__init__(message)


class InvalidIdentifierError(StreamScoutError):
    """
    Exception raised when a channel or video identifier is rejected.

    Raised for malformed identifiers and for HTTP 400 responses from the
    metadata API. It is non-retryable and is never masked by the stale-cache
    fallback: callers should skip the identifier rather than retry it.

    Attributes
    ----------
    message : str
        Human-readable error message.
    identifier : str
        The rejected identifier.
    kind : str
        Identifier kind, ``"channel"`` or ``"video"``.
    status_code : int | None
        HTTP status code when the rejection came from upstream.

    Examples
    --------
    >>> try:
    ...     await service.get_channel_metadata("not-a-channel")
    ... except InvalidIdentifierError as e:
    ...     print(f"Skipping {e.kind} {e.identifier}")
    """

    def __init__(
        self,
        identifier: str,
        kind: str = "channel",
        status_code: int | None = None,
        message: str | None = None,
    ) -> None:
        """
        Initialize InvalidIdentifierError.

        Parameters
        ----------
        identifier : str
            The rejected identifier.
        kind : str, optional
            Identifier kind (default: "channel").
        status_code : int | None, optional
            HTTP status code returned upstream (default: None).
        message : str | None, optional
            Override for the default message (default: None).
        """
        self.identifier = identifier
        self.kind = kind
        self.status_code = status_code
        super().__init__(message or f"Invalid {kind} ID: {identifier}")


class UpstreamError(StreamScoutError):
    """
    Exception raised for transient upstream failures.

    Wraps transport errors (connection failures, timeouts) and non-2xx HTTP
    responses other than identifier rejections. The cache layer may convert
    this into a stale-cache success when a previous entry exists.

    Attributes
    ----------
    message : str
        Human-readable error message.
    url : str | None
        The URL that failed.
    status_code : int | None
        HTTP status code, or None for transport-level failures.
    original_error : Exception | None
        The underlying exception, if any.
    """

    def __init__(
        self,
        message: str = "Upstream request failed",
        url: str | None = None,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize UpstreamError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Upstream request failed").
        url : str | None, optional
            The URL that failed (default: None).
        status_code : int | None, optional
            HTTP status code (default: None).
        original_error : Exception | None, optional
            The underlying exception (default: None).
        """
        self.url = url
        self.status_code = status_code
        self.original_error = original_error
        super().__init__(message)


# Exit codes for the viewers CLI command
EXIT_CODE_LIVE = 0
EXIT_CODE_INVALID_ARGS = 1
EXIT_CODE_ERROR = 2
EXIT_CODE_NOT_LIVE = 3
EXIT_CODE_INTERRUPTED = 130  # Standard Unix signal interrupt exit code
