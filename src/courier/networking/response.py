"""Response model returned by successful executions."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from requests.structures import CaseInsensitiveDict


def _empty_headers() -> Mapping[str, str]:
    return MappingProxyType(CaseInsensitiveDict())


@dataclass(frozen=True)
class Response:
    """Buffered result of a 2xx exchange.

    ``headers`` is a read-only, case-insensitive view. Header fields the
    server repeated arrive joined into a single comma-separated value.
    """

    status_code: int
    body: str = ""
    headers: Mapping[str, str] = field(default_factory=_empty_headers)

    def __post_init__(self) -> None:
        # Freeze a copy; later edits to the source mapping stay invisible.
        object.__setattr__(
            self,
            "headers",
            MappingProxyType(CaseInsensitiveDict(self.headers)),
        )

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json.loads(self.body)
