"""Request interceptors applied before every dispatch."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Iterator

from .request import Request


class RequestInterceptor(ABC):
    """Mutates a request in place before it is sent.

    Typical uses are adding auth headers, rewriting URLs or logging.
    Exceptions raised here are not caught by the client and abort the
    execution.
    """

    @abstractmethod
    def intercept(self, request: Request) -> None: ...


class InterceptorChain:
    """Ordered, mutable collection of request interceptors.

    Mutation is serialized by a lock and ``apply`` walks a snapshot, so
    registering or removing an interceptor while another thread is executing
    a request is safe; the change applies from the next dispatch.
    """

    def __init__(self) -> None:
        self._interceptors: list[RequestInterceptor] = []
        self._lock = threading.Lock()

    def add(self, interceptor: RequestInterceptor) -> None:
        with self._lock:
            self._interceptors.append(interceptor)

    def remove(self, interceptor: RequestInterceptor) -> None:
        """Remove the first registration of ``interceptor``, if any."""
        with self._lock:
            if interceptor in self._interceptors:
                self._interceptors.remove(interceptor)

    def clear(self) -> None:
        with self._lock:
            self._interceptors.clear()

    def apply(self, request: Request) -> None:
        """Run every interceptor once, in registration order."""
        for interceptor in self._snapshot():
            interceptor.intercept(request)

    def _snapshot(self) -> tuple[RequestInterceptor, ...]:
        with self._lock:
            return tuple(self._interceptors)

    def __len__(self) -> int:
        return len(self._snapshot())

    def __iter__(self) -> Iterator[RequestInterceptor]:
        return iter(self._snapshot())
