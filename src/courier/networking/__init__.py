"""Networking layer: requests, responses, trust and the execution engine."""

from .client import HttpClient
from .config import HttpClientConfig
from .errors import (
    CertificateLoadError,
    HttpClientError,
    RedirectError,
    RequestTimeoutError,
    TooManyRedirectsError,
    TransportError,
    TrustFailure,
    UnsuccessfulStatusError,
)
from .interceptor import InterceptorChain, RequestInterceptor
from .request import (
    DeleteRequest,
    GetRequest,
    HeadRequest,
    Header,
    OptionsRequest,
    PatchRequest,
    PostRequest,
    PutRequest,
    Request,
    RequestMethod,
    RequestWithBody,
)
from .response import Response
from .security import TrustAggregator, TrustDelegate, TrustRole, TrustStore
from .types import Err, Ok, Result

__all__ = [
    "CertificateLoadError",
    "DeleteRequest",
    "Err",
    "GetRequest",
    "HeadRequest",
    "Header",
    "HttpClient",
    "HttpClientConfig",
    "HttpClientError",
    "InterceptorChain",
    "Ok",
    "OptionsRequest",
    "PatchRequest",
    "PostRequest",
    "PutRequest",
    "RedirectError",
    "Request",
    "RequestInterceptor",
    "RequestMethod",
    "RequestTimeoutError",
    "RequestWithBody",
    "Response",
    "Result",
    "TooManyRedirectsError",
    "TransportError",
    "TrustAggregator",
    "TrustDelegate",
    "TrustFailure",
    "TrustRole",
    "TrustStore",
    "UnsuccessfulStatusError",
]
