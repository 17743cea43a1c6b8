"""Error taxonomy for the networking layer.

Every failure produced by ``HttpClient.execute`` is one of these types and is
delivered inside an ``Err`` result rather than raised.
"""

from __future__ import annotations


class HttpClientError(Exception):
    """Base class for all courier networking errors."""


class TransportError(HttpClientError):
    """Network or I/O failure: DNS, connect, TLS handshake, stream errors."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(str(cause) or type(cause).__name__)
        self.cause = cause


class RequestTimeoutError(TransportError):
    """The configured connect or read timeout elapsed."""


class RedirectError(HttpClientError):
    """A 3xx response that could not be followed."""

    def __init__(
        self, request_url: str, status_code: int, response_body: str
    ) -> None:
        super().__init__(
            f"Request to {request_url} was redirected "
            f"(status code {status_code}). "
            "See response_body for details."
        )
        self.request_url = request_url
        self.status_code = status_code
        self.response_body = response_body


class TooManyRedirectsError(HttpClientError):
    """The redirect chain exceeded ``HttpClientConfig.max_redirects``."""

    def __init__(self, request_url: str, max_redirects: int) -> None:
        super().__init__(
            f"Request to {request_url} exceeded {max_redirects} redirects"
        )
        self.request_url = request_url
        self.max_redirects = max_redirects


class UnsuccessfulStatusError(HttpClientError):
    """Any 1xx, 4xx or 5xx response."""

    def __init__(
        self, request_url: str, status_code: int, error_body: str
    ) -> None:
        super().__init__(
            f"Request to {request_url} failed with status code "
            f"{status_code}. See error_body for details."
        )
        self.request_url = request_url
        self.status_code = status_code
        self.error_body = error_body


class TrustFailure(HttpClientError):
    """No trust delegate accepted a certificate chain."""


class CertificateLoadError(HttpClientError, ValueError):
    """A trust anchor could not be parsed as an X.509 certificate."""
