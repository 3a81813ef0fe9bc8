from __future__ import annotations

import pytest

from application.services.request_builder import RequestBuilder
from domain.location import ContentType, Location, Method


def _location(**kwargs) -> Location:
    defaults = dict(id="loc-1", name="req", url="https://api.example.com/items")
    defaults.update(kwargs)
    return Location(**defaults)


class TestGet:
    def test_params_become_query_in_order_without_blank_keys(self):
        location = _location(params=[("b", "2"), ("", "skip"), ("a", "1"), ("b", "3")])

        request = RequestBuilder().build(location)

        assert request.method == "GET"
        assert request.params == [("b", "2"), ("a", "1"), ("b", "3")]
        assert request.body is None
        assert request.form is None

    def test_headers_attached_without_blank_keys(self):
        location = _location(header=[("", ""), ("Accept", "text/plain")])

        request = RequestBuilder().build(location)

        assert request.headers == [("Accept", "text/plain")]


class TestPostJson:
    def test_content_type_forced_to_json(self):
        location = _location(
            method=Method.POST,
            content_type=ContentType.JSON,
            body='{"name": "x"}',
            header=[("content-type", "text/plain"), ("X-Id", "7"), ("Content-Type", "text/xml")],
            params=[("ignored", "1")],
        )

        request = RequestBuilder().build(location)

        content_types = [v for k, v in request.headers if k.lower() == "content-type"]
        assert content_types == ["application/json"]
        assert ("X-Id", "7") in request.headers
        assert request.body == b'{"name": "x"}'
        assert request.params == []

    def test_empty_body_sent_as_empty_bytes(self):
        request = RequestBuilder().build(_location(method=Method.POST))
        assert request.body == b""


class TestPostForm:
    def test_urlencoded_uses_form_params_and_query(self):
        location = _location(
            method=Method.POST,
            content_type=ContentType.FORM_URL_ENCODED,
            params=[("page", "1"), ("", "x")],
            form_params=[("user", "bob"), ("", "ghost"), ("tag", "a"), ("tag", "b")],
            body="not used",
        )

        request = RequestBuilder().build(location)

        assert request.params == [("page", "1")]
        assert request.form == [("user", "bob"), ("tag", "a"), ("tag", "b")]
        assert request.body is None
        assert request.multipart is None

    def test_form_data_is_multipart(self):
        location = _location(
            method=Method.POST,
            content_type=ContentType.FORM_DATA,
            form_params=[("field", "value"), ("", "ghost")],
            header=[("Content-Type", "text/plain"), ("X-A", "1")],
        )

        request = RequestBuilder().build(location)

        assert request.multipart == [("field", "value")]
        assert request.headers == [("X-A", "1")]
        assert request.form is None


@pytest.mark.parametrize("method", [Method.PUT, Method.PATCH, Method.DELETE, Method.HEAD])
def test_other_methods_are_bare(method):
    location = _location(
        method=method,
        params=[("q", "1")],
        body='{"a": 1}',
        form_params=[("f", "1")],
        header=[("Authorization", "Bearer t")],
    )

    request = RequestBuilder().build(location)

    assert request.method == method.value
    assert request.url == location.url
    assert request.params == []
    assert request.body is None
    assert request.form is None
    assert request.multipart is None
    assert request.headers == [("Authorization", "Bearer t")]
