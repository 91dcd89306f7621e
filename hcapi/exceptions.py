"""
Custom exceptions for hcapi.

This module defines all custom exceptions used throughout the hcapi package.
All exceptions inherit from HcapiError for easy catching of package-specific errors.
"""

from typing import Optional


class HcapiError(Exception):
    """
    Base exception for all hcapi errors.

    All custom exceptions in this package inherit from this class,
    allowing users to catch all hcapi-specific errors with a single except clause.

    Examples
    --------
    >>> try:
    ...     # some hcapi operation
    ...     pass
    ... except HcapiError as e:
    ...     print(f"hcapi error: {e}")
    """

    pass


class InvalidArgumentError(HcapiError, ValueError):
    """
    Error validating query arguments.

    Raised before any network call when an indicator code, country code,
    output format or output kind is not found in the corresponding
    static table.

    Examples
    --------
    >>> raise InvalidArgumentError("Unknown indicator code(s): 'foo'")
    """

    pass


class UpstreamError(HcapiError):
    """
    Error returned by the HarvestChoice API.

    Raised on a non-success HTTP status or on a response body that cannot
    be decoded.

    Attributes
    ----------
    status_code : int, optional
        HTTP status code if applicable.
    message : str, optional
        Server-provided message, if any.
    url : str, optional
        URL of the request that failed.

    Examples
    --------
    >>> raise UpstreamError("API request failed [500]", status_code=500)
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        server_message: Optional[str] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = server_message
        self.url = url


class TransportError(HcapiError):
    """
    Network-level failure talking to the API.

    Raised on connection failures, timeouts and DNS errors. The original
    ``requests`` exception is available as ``__cause__``.

    Attributes
    ----------
    url : str, optional
        URL of the request that failed.
    """

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url
