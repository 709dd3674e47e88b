"""
Error handling module for the Yahoo Finance connector.

This module defines the exception hierarchy shared by the crumb cache, the
consent negotiation and the data connector, together with the classifiers
that map low-level aiohttp failures and HTTP statuses onto it.
"""

from typing import Any, Dict, Optional

import aiohttp


class YahooError(Exception):
    """
    Base class for all connector errors.

    All exceptions raised by the package inherit from this class.

    Attributes:
        message: Error message
        details: Additional error details
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize a YahooError.

        Args:
            message: Error message
            details: Additional error details
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message

        detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({detail_str})"


class APIError(YahooError):
    """
    Error related to API requests.

    Network failures, rate limiting and unexpected server responses all
    derive from this class.
    """

    pass


class NetworkError(APIError):
    """Error related to network issues."""

    pass


class ConnectionFailedError(NetworkError):
    """
    Transport-level failure (DNS resolution, TCP connect, TLS handshake).

    Attributes:
        cause: The underlying transport exception
    """

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.cause = cause
        super().__init__(message, details)


class TooManyRequestsError(APIError):
    """
    The server answered with HTTP 429.

    Attributes:
        action: What was being done when the server refused the request
        retry_after: Suggested retry delay in seconds, if the server sent one
        cause: The underlying transport exception, if any
    """

    def __init__(
        self,
        action: str,
        retry_after: Optional[float] = None,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.action = action
        self.retry_after = retry_after
        self.cause = cause
        super().__init__(f"Server reports too many requests while {action}", details)

    def __str__(self) -> str:
        base_str = super().__str__()
        if self.retry_after is not None:
            return f"{base_str} (retry after {self.retry_after} seconds)"
        return base_str


class UnexpectedResponseError(APIError):
    """
    Any other non-success response or malformed payload.

    Attributes:
        action: What was being done when the response was received
        cause: The underlying exception, if any
    """

    def __init__(
        self,
        action: str,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.action = action
        self.cause = cause
        super().__init__(f"Unexpected response while {action}", details)


class DataError(YahooError):
    """Error related to processing of received documents."""

    pass


class ExtractionError(DataError):
    """
    A required token could not be located in a consent page.

    Attributes:
        field: Name of the form field that was searched for
        excerpt: Leading part of the offending document
    """

    def __init__(self, field: str, excerpt: str):
        self.field = field
        self.excerpt = excerpt
        super().__init__(f"Could not find {field} in the consent page", {"excerpt": excerpt})


class BuildError(YahooError):
    """A request URL could not be constructed."""

    pass


class ConfigError(YahooError):
    """Error related to configuration issues."""

    pass


class MaxRetriesReachedError(YahooError):
    """
    An operation kept failing until all attempts were spent.

    Attributes:
        attempts: Number of attempts made
        last_error: The error raised by the final attempt
    """

    def __init__(self, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Request didn't succeed in {attempts} attempts",
            {"last_error": format_error_details(last_error)},
        )


def format_error_details(error: BaseException) -> str:
    """
    Format error details for logging.

    Args:
        error: Exception object

    Returns:
        Formatted error details string
    """
    if isinstance(error, YahooError):
        if error.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
            return f"{error.__class__.__name__}: {error.message} ({detail_str})"
        return f"{error.__class__.__name__}: {error.message}"

    return f"{error.__class__.__name__}: {str(error)}"


def _parse_retry_after(headers: Any) -> Optional[float]:
    if not headers:
        return None
    value = headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def classify_client_error(error: BaseException, action: str) -> YahooError:
    """
    Map a transport failure onto the connector's error hierarchy.

    Rules are applied in order: connection-level failures become
    ConnectionFailedError, HTTP 429 becomes TooManyRequestsError, anything
    else becomes UnexpectedResponseError.

    Args:
        error: Exception raised by aiohttp (or while reading a response)
        action: Human readable description of what was being done

    Returns:
        Appropriate YahooError subclass instance
    """
    if isinstance(error, (aiohttp.ClientConnectorError, aiohttp.ConnectionTimeoutError)):
        return ConnectionFailedError(
            f"Connection to Yahoo Finance failed while {action}: {error}",
            cause=error,
        )

    if isinstance(error, aiohttp.ClientResponseError) and error.status == 429:
        return TooManyRequestsError(
            action,
            retry_after=_parse_retry_after(error.headers),
            cause=error,
            details={"status_code": error.status},
        )

    details: Dict[str, Any] = {"error": f"{error.__class__.__name__}: {error}"}
    if isinstance(error, aiohttp.ClientResponseError):
        details["status_code"] = error.status
    return UnexpectedResponseError(action, cause=error, details=details)


def classify_status(
    status: int, action: str, body: str = "", headers: Any = None
) -> APIError:
    """
    Classify a non-success HTTP status that was not raised by the transport.

    Args:
        status: HTTP status code
        action: Human readable description of what was being done
        body: Response text, truncated in the error details
        headers: Response headers, consulted for Retry-After

    Returns:
        TooManyRequestsError for 429, UnexpectedResponseError otherwise
    """
    if status == 429:
        return TooManyRequestsError(
            action,
            retry_after=_parse_retry_after(headers),
            details={"status_code": status},
        )

    details = {
        "status_code": status,
        "response_text": body[:100] + ("..." if len(body) > 100 else ""),
    }
    return UnexpectedResponseError(action, details=details)
