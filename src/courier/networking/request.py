"""Typed request variants, one class per HTTP verb."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RequestMethod(str, Enum):
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


BODY_METHODS = frozenset(
    {RequestMethod.POST, RequestMethod.PUT, RequestMethod.PATCH}
)


@dataclass(frozen=True)
class Header:
    """A single request header. Names may repeat on one request."""

    name: str
    value: str


class Request:
    """Base request: a fixed method, a mutable URL and ordered headers.

    Interceptors receive the live instance and may rewrite ``url`` or edit
    ``headers`` in place before the request is dispatched.
    """

    def __init__(self, method: RequestMethod, url: str) -> None:
        self._method = RequestMethod(method)
        self.url = url
        self.headers: list[Header] = []

    @property
    def method(self) -> RequestMethod:
        return self._method

    def add_header(self, name: str, value: str) -> None:
        """Append a header; existing headers with the same name are kept."""
        self.headers.append(Header(name, value))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(url={self.url!r}, "
            f"headers={self.headers!r})"
        )


class RequestWithBody(Request):
    """Request carrying a pre-encoded text body (typically JSON)."""

    def __init__(self, method: RequestMethod, url: str, body: str) -> None:
        if RequestMethod(method) not in BODY_METHODS:
            raise ValueError(f"{method} requests cannot carry a body")
        super().__init__(method, url)
        self.body = body

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(url={self.url!r}, "
            f"headers={self.headers!r}, body={self.body!r})"
        )


class HeadRequest(Request):
    def __init__(self, url: str) -> None:
        super().__init__(RequestMethod.HEAD, url)


class OptionsRequest(Request):
    def __init__(self, url: str) -> None:
        super().__init__(RequestMethod.OPTIONS, url)


class GetRequest(Request):
    def __init__(self, url: str) -> None:
        super().__init__(RequestMethod.GET, url)


class DeleteRequest(Request):
    def __init__(self, url: str) -> None:
        super().__init__(RequestMethod.DELETE, url)


class PostRequest(RequestWithBody):
    def __init__(self, url: str, body: str) -> None:
        super().__init__(RequestMethod.POST, url, body)


class PutRequest(RequestWithBody):
    def __init__(self, url: str, body: str) -> None:
        super().__init__(RequestMethod.PUT, url, body)


class PatchRequest(RequestWithBody):
    def __init__(self, url: str, body: str) -> None:
        super().__init__(RequestMethod.PATCH, url, body)
