# pyright: reportUnknownParameterType=false, reportMissingParameterType=false
import pytest

from courier.networking.interceptor import InterceptorChain, RequestInterceptor
from courier.networking.request import GetRequest, Header


class _Tag(RequestInterceptor):
    def __init__(self, value):
        self.value = value

    def intercept(self, request):
        request.add_header("X-Tag", self.value)


def _tags(request):
    return [header.value for header in request.headers]


def test_apply_runs_in_registration_order_on_same_instance():
    chain = InterceptorChain()
    chain.add(_Tag("a"))
    chain.add(_Tag("b"))
    chain.add(_Tag("c"))
    request = GetRequest("http://example.com")

    chain.apply(request)

    assert request.headers == [
        Header("X-Tag", "a"),
        Header("X-Tag", "b"),
        Header("X-Tag", "c"),
    ]


def test_same_interceptor_registered_twice_runs_twice():
    chain = InterceptorChain()
    tag = _Tag("a")
    chain.add(tag)
    chain.add(tag)
    request = GetRequest("http://example.com")

    chain.apply(request)
    chain.remove(tag)
    chain.apply(request)

    assert _tags(request) == ["a", "a", "a"]
    assert len(chain) == 1


def test_remove_unknown_interceptor_is_a_no_op():
    chain = InterceptorChain()
    chain.add(_Tag("a"))

    chain.remove(_Tag("b"))

    assert len(chain) == 1


def test_clear_removes_everything():
    chain = InterceptorChain()
    chain.add(_Tag("a"))
    chain.add(_Tag("b"))

    chain.clear()
    request = GetRequest("http://example.com")
    chain.apply(request)

    assert len(chain) == 0
    assert request.headers == []


def test_mutation_during_apply_takes_effect_on_next_dispatch():
    chain = InterceptorChain()
    late = _Tag("late")

    class Registers(RequestInterceptor):
        def intercept(self, request):
            chain.add(late)

    registering = Registers()
    chain.add(registering)
    first = GetRequest("http://example.com")
    chain.apply(first)
    chain.remove(registering)
    second = GetRequest("http://example.com")
    chain.apply(second)

    assert _tags(first) == []
    assert _tags(second) == ["late"]
    assert list(chain) == [late]


def test_interceptor_errors_propagate():
    class Broken(RequestInterceptor):
        def intercept(self, request):
            raise KeyError("token")

    chain = InterceptorChain()
    chain.add(Broken())
    chain.add(_Tag("never"))
    request = GetRequest("http://example.com")

    with pytest.raises(KeyError):
        chain.apply(request)
    assert request.headers == []


def test_interceptor_base_is_abstract():
    with pytest.raises(TypeError):
        RequestInterceptor()  # type: ignore[abstract]
