import dataclasses

import pytest

from courier.networking.request import (
    DeleteRequest,
    GetRequest,
    HeadRequest,
    Header,
    OptionsRequest,
    PatchRequest,
    PostRequest,
    PutRequest,
    RequestMethod,
    RequestWithBody,
)
from courier.networking.response import Response


@pytest.mark.parametrize(
    ("request_obj", "method"),
    [
        (HeadRequest("http://x"), RequestMethod.HEAD),
        (OptionsRequest("http://x"), RequestMethod.OPTIONS),
        (GetRequest("http://x"), RequestMethod.GET),
        (DeleteRequest("http://x"), RequestMethod.DELETE),
        (PostRequest("http://x", "{}"), RequestMethod.POST),
        (PutRequest("http://x", "{}"), RequestMethod.PUT),
        (PatchRequest("http://x", "{}"), RequestMethod.PATCH),
    ],
)
def test_each_request_class_has_its_method(request_obj, method):
    assert request_obj.method is method
    assert isinstance(request_obj, RequestWithBody) == (
        method in {RequestMethod.POST, RequestMethod.PUT, RequestMethod.PATCH}
    )


def test_method_is_fixed_but_url_and_body_are_mutable():
    request = PostRequest("http://example.com", "{}")

    with pytest.raises(AttributeError):
        request.method = RequestMethod.GET  # type: ignore[misc]

    request.url = "http://example.org"
    request.body = '{"a":1}'
    assert request.url == "http://example.org"
    assert request.body == '{"a":1}'


def test_body_is_rejected_for_bodyless_methods():
    with pytest.raises(ValueError):
        RequestWithBody(RequestMethod.GET, "http://example.com", "{}")


def test_headers_keep_order_and_duplicates():
    request = GetRequest("http://example.com")
    request.add_header("X-A", "1")
    request.headers.append(Header("X-B", "2"))
    request.add_header("X-A", "3")

    assert request.headers == [
        Header("X-A", "1"),
        Header("X-B", "2"),
        Header("X-A", "3"),
    ]


def test_header_is_immutable():
    header = Header("X-A", "1")

    with pytest.raises(dataclasses.FrozenInstanceError):
        header.value = "2"  # type: ignore[misc]


def test_response_headers_are_read_only_and_case_insensitive():
    source = {"Content-Type": "application/json"}
    response = Response(200, '{"ok": true}', source)
    source["Content-Type"] = "text/plain"

    assert response.headers["content-type"] == "application/json"
    with pytest.raises(TypeError):
        response.headers["X-New"] = "1"  # type: ignore[index]
    assert response.json() == {"ok": True}


def test_response_defaults():
    response = Response(204)

    assert response.body == ""
    assert dict(response.headers) == {}
