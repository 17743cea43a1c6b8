"""Helpers for materializing response payloads as text."""

from __future__ import annotations

import requests

DEFAULT_ENCODING = "utf-8"


def read_text_and_close(
    response: requests.Response, encoding: str = DEFAULT_ENCODING
) -> str:
    """Read the whole payload of ``response`` and decode it.

    The response is closed afterwards, even when reading or decoding fails.
    Undecodable bytes are replaced rather than rejected.
    """
    try:
        return response.content.decode(encoding, errors="replace")
    finally:
        response.close()
