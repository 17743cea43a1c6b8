"""Configuration model for the HttpClient."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Union

CertificateSource = Union[bytes, BinaryIO]


def _ms_to_seconds(value: int) -> float | None:
    """Convert a millisecond timeout; 0 means wait indefinitely."""
    if value == 0:
        return None
    return value / 1000


@dataclass(frozen=True)
class HttpClientConfig:
    """Configuration for HttpClient behavior.

    Attributes:
        read_timeout_ms: Maximum wait for data once connected; 0 disables it.
        connect_timeout_ms: Maximum wait for the connection; 0 disables it.
        custom_trust_anchor: PEM or DER certificate (bytes or a binary
            stream) trusted in addition to the platform CA bundle. A stream
            is consumed and closed when the client is built.
        follow_redirects: Whether 3xx responses with a ``Location`` are
            followed with a GET.
        max_redirects: Upper bound on followed hops per execution.
    """

    read_timeout_ms: int = 3000
    connect_timeout_ms: int = 3000
    custom_trust_anchor: CertificateSource | None = None
    follow_redirects: bool = True
    max_redirects: int = 10

    def __post_init__(self) -> None:
        if self.read_timeout_ms < 0:
            raise ValueError("read_timeout_ms must be >= 0")
        if self.connect_timeout_ms < 0:
            raise ValueError("connect_timeout_ms must be >= 0")
        if self.max_redirects < 0:
            raise ValueError("max_redirects must be >= 0")

    @property
    def timeout(self) -> tuple[float | None, float | None]:
        """Return the ``(connect, read)`` timeout tuple in seconds."""
        return (
            _ms_to_seconds(self.connect_timeout_ms),
            _ms_to_seconds(self.read_timeout_ms),
        )
