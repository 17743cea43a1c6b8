"""Synchronous HTTP client for the courier networking layer.

``HttpClient.execute`` turns a typed request into one HTTP exchange:
interceptors run first, the request is sent with the configured timeouts and
trust, and the status code decides between a ``Response``, a followed
redirect, or a classified error. Network and status failures are returned as
``Err`` results, never raised.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urljoin

import requests
from requests.structures import CaseInsensitiveDict

from .config import HttpClientConfig
from .errors import (
    HttpClientError,
    RedirectError,
    RequestTimeoutError,
    TooManyRedirectsError,
    TransportError,
    UnsuccessfulStatusError,
)
from .interceptor import InterceptorChain, RequestInterceptor
from .request import (
    DeleteRequest,
    GetRequest,
    HeadRequest,
    OptionsRequest,
    PatchRequest,
    PostRequest,
    PutRequest,
    Request,
    RequestWithBody,
)
from .response import Response
from .security import (
    TrustAggregator,
    TrustAggregatorAdapter,
    TrustStore,
    load_trust_store,
)
from .streams import read_text_and_close
from .types import Err, Ok, Result

logger = logging.getLogger(__name__)

DEFAULT_ACCEPT = "application/json"
JSON_CONTENT_TYPE = "application/json; utf-8"
NO_LOCATION_DETAIL = "No Location header"

ExecuteResult = Result[Response, HttpClientError]


def is_successful(status_code: int) -> bool:
    return 200 <= status_code <= 299


def is_redirect(status_code: int) -> bool:
    return 300 <= status_code <= 399


class HttpClient:
    """Core HTTP client (sync).

    One client holds one immutable configuration. Its session, TLS adapter
    and trust aggregator are built here, once, and reused by every
    execution; a single instance may serve many threads.
    """

    def __init__(self, config: HttpClientConfig | None = None) -> None:
        """Create a new HttpClient.

        Args:
            config: Timeouts, trust anchor and redirect policy. Defaults to
                ``HttpClientConfig()``.

        Raises:
            CertificateLoadError: ``config.custom_trust_anchor`` is not a
                parseable X.509 certificate.
        """
        self._config = config or HttpClientConfig()
        stores: list[TrustStore] = []
        if self._config.custom_trust_anchor is not None:
            stores.append(load_trust_store(self._config.custom_trust_anchor))
        self._trust = TrustAggregator(stores)
        self._session = requests.Session()
        self._session.mount(
            "https://", TrustAggregatorAdapter(self._trust.ssl_context())
        )
        self._interceptors = InterceptorChain()

    @property
    def config(self) -> HttpClientConfig:
        return self._config

    @property
    def trust(self) -> TrustAggregator:
        return self._trust

    def close(self) -> None:
        """Release pooled connections held by the underlying session."""
        self._session.close()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def add_request_interceptor(self, interceptor: RequestInterceptor) -> None:
        self._interceptors.add(interceptor)

    def remove_request_interceptor(
        self, interceptor: RequestInterceptor
    ) -> None:
        self._interceptors.remove(interceptor)

    def remove_all_request_interceptors(self) -> None:
        self._interceptors.clear()

    def execute_get_request(self, request: GetRequest) -> ExecuteResult:
        return self.execute(request)

    def execute_post_request(self, request: PostRequest) -> ExecuteResult:
        return self.execute(request)

    def execute_put_request(self, request: PutRequest) -> ExecuteResult:
        return self.execute(request)

    def execute_delete_request(self, request: DeleteRequest) -> ExecuteResult:
        return self.execute(request)

    def execute_head_request(self, request: HeadRequest) -> ExecuteResult:
        return self.execute(request)

    def execute_options_request(
        self, request: OptionsRequest
    ) -> ExecuteResult:
        return self.execute(request)

    def execute_patch_request(self, request: PatchRequest) -> ExecuteResult:
        return self.execute(request)

    def execute(self, request: Request) -> ExecuteResult:
        """Send ``request`` and classify the outcome.

        Returns:
            ``Ok(Response)`` for 2xx. ``Err`` with a RedirectError,
            TooManyRedirectsError, UnsuccessfulStatusError or TransportError
            otherwise. Exceptions raised by interceptors propagate.
        """
        return self._execute(request, redirects=0)

    def _execute(self, request: Request, redirects: int) -> ExecuteResult:
        self._interceptors.apply(request)
        response: requests.Response | None = None
        try:
            response = self._dispatch(request)
            status = response.status_code
            meta = self._build_meta(request, redirects, status_code=status)

            if is_successful(status):
                headers = CaseInsensitiveDict(response.headers)
                body = read_text_and_close(response)
                return Ok(Response(status, body, headers), meta=meta)

            if is_redirect(status) and self._config.follow_redirects:
                location = response.headers.get("Location")
                if not location:
                    return Err(
                        RedirectError(request.url, status, NO_LOCATION_DETAIL),
                        meta=meta,
                    )
                target = urljoin(request.url, location)
            elif is_redirect(status):
                return Err(
                    RedirectError(
                        request.url, status, read_text_and_close(response)
                    ),
                    meta=meta,
                )
            else:
                return Err(
                    UnsuccessfulStatusError(
                        request.url, status, read_text_and_close(response)
                    ),
                    meta=meta,
                )
        except (requests.exceptions.RequestException, OSError) as exc:
            return self._transport_failure(request, redirects, exc)
        finally:
            if response is not None:
                response.close()

        return self._follow_redirect(request, target, status, redirects)

    def _dispatch(self, request: Request) -> requests.Response:
        data = None
        headers = self._build_headers(request)
        if isinstance(request, RequestWithBody):
            headers["Content-Type"] = JSON_CONTENT_TYPE
            data = request.body.encode("utf-8")

        logger.debug("Dispatching %s %s", request.method.value, request.url)
        return self._session.request(
            request.method.value,
            request.url,
            headers=headers,
            data=data,
            timeout=self._config.timeout,
            allow_redirects=False,
            stream=True,
        )

    @staticmethod
    def _build_headers(request: Request) -> CaseInsensitiveDict[str]:
        """Merge the default Accept with request headers, in order.

        A name that appears more than once is sent as one comma-separated
        field, its values in insertion order.
        """
        headers: CaseInsensitiveDict[str] = CaseInsensitiveDict(
            {"Accept": DEFAULT_ACCEPT}
        )
        for header in request.headers:
            existing = headers.get(header.name)
            if existing is None:
                headers[header.name] = header.value
            else:
                headers[header.name] = f"{existing}, {header.value}"
        return headers

    def _follow_redirect(
        self, request: Request, target: str, status: int, redirects: int
    ) -> ExecuteResult:
        if redirects >= self._config.max_redirects:
            logger.debug(
                "Giving up on %s after %d redirects", request.url, redirects
            )
            return Err(
                TooManyRedirectsError(request.url, self._config.max_redirects),
                meta=self._build_meta(request, redirects, status_code=status),
            )

        logger.debug(
            "Following %d redirect from %s to %s", status, request.url, target
        )
        redirect_request = GetRequest(target)
        redirect_request.headers.extend(request.headers)
        return self._execute(redirect_request, redirects + 1)

    def _transport_failure(
        self, request: Request, redirects: int, exc: BaseException
    ) -> ExecuteResult:
        """Map transport exceptions to courier errors."""
        logger.debug(
            "%s %s failed: %s", request.method.value, request.url, exc
        )
        meta = self._build_meta(
            request, redirects, final_error=type(exc).__name__
        )
        if isinstance(exc, requests.exceptions.Timeout):
            return Err(RequestTimeoutError(exc), meta=meta)
        return Err(TransportError(exc), meta=meta)

    @staticmethod
    def _build_meta(
        request: Request,
        redirects: int,
        status_code: int | None = None,
        final_error: str | None = None,
    ) -> dict[str, Any]:
        """Construct the metadata dictionary attached to every result."""
        meta: dict[str, Any] = {
            "method": request.method.value,
            "url": request.url,
            "redirects": redirects,
        }
        if status_code is not None:
            meta["status_code"] = status_code
        if final_error is not None:
            meta["final_error"] = final_error
        return meta
