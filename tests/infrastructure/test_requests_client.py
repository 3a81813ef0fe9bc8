from __future__ import annotations

import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import List, Optional, Tuple

import pytest
import requests

from application.ports.http_client import InvalidRequestError, OutboundRequest, TransportError
from infrastructure.http.requests_client import RequestsHttpClient, isolated_session


class FakeRawHeaders:
    def __init__(self, items):
        self._items = items

    def iteritems(self):
        return iter(self._items)


class FakeRaw:
    def __init__(self, items):
        self.headers = FakeRawHeaders(items)


class FakeResponse:
    def __init__(self, status=200, reason="OK", url="https://x.test/", content=b"{}", raw_headers=None):
        self.status_code = status
        self.reason = reason
        self.url = url
        self.content = content
        self.headers = requests.structures.CaseInsensitiveDict({"Content-Type": "application/json"})
        self.raw = FakeRaw(raw_headers) if raw_headers is not None else None


class RecordingSession:
    def __init__(self, response=None, error=None):
        self.calls = []
        self._response = response or FakeResponse()
        self._error = error

    def request(self, **kwargs):
        self.calls.append(kwargs)
        if self._error is not None:
            raise self._error
        return self._response

    def close(self):
        pass


def test_json_body_and_headers_are_passed_through():
    session = RecordingSession()
    client = RequestsHttpClient(base_headers={"User-Agent": "ua"}, timeout_sec=5, session=session)

    client.send(
        OutboundRequest(
            method="post",
            url="https://x.test/items",
            headers=[("Content-Type", "application/json"), ("User-Agent", "mine")],
            body=b'{"a": 1}',
        )
    )

    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["data"] == b'{"a": 1}'
    assert call["headers"] == {"User-Agent": "mine", "Content-Type": "application/json"}
    assert call["timeout"] == 5
    assert call["params"] is None
    assert call["files"] is None


def test_user_header_replaces_base_header_regardless_of_case():
    session = RecordingSession()
    client = RequestsHttpClient(base_headers={"User-Agent": "ua"}, session=session)

    client.send(OutboundRequest(method="GET", url="https://x.test/", headers=[("user-agent", "mine")]))

    headers = session.calls[0]["headers"]
    assert len(headers) == 1
    assert headers["User-Agent"] == "mine"


def test_form_and_query_params():
    session = RecordingSession()
    client = RequestsHttpClient(session=session)

    client.send(
        OutboundRequest(
            method="POST",
            url="https://x.test",
            params=[("page", "1")],
            form=[("a", "1"), ("a", "2")],
        )
    )

    call = session.calls[0]
    assert call["params"] == [("page", "1")]
    assert call["data"] == [("a", "1"), ("a", "2")]


def test_multipart_fields_have_no_filename():
    session = RecordingSession()
    client = RequestsHttpClient(session=session)

    client.send(OutboundRequest(method="POST", url="https://x.test", multipart=[("field", "value")]))

    assert session.calls[0]["files"] == [("field", (None, "value"))]
    assert session.calls[0]["data"] is None


def test_response_headers_keep_duplicates_from_raw():
    raw = [("Set-Cookie", "a=1"), ("Set-Cookie", "b=2"), ("content-length", "2")]
    session = RecordingSession(FakeResponse(status=404, reason="Not Found", raw_headers=raw))
    client = RequestsHttpClient(session=session)

    response = client.send(OutboundRequest(method="GET", url="https://x.test"))

    assert response.status == 404
    assert response.reason == "Not Found"
    assert response.headers == raw
    assert response.content == b"{}"


def test_headers_fall_back_to_response_mapping():
    session = RecordingSession(FakeResponse(raw_headers=None))
    response = RequestsHttpClient(session=session).send(OutboundRequest(method="GET", url="https://x.test"))
    assert response.headers == [("Content-Type", "application/json")]


@pytest.mark.parametrize(
    "error",
    [
        requests.exceptions.ConnectionError("refused"),
        requests.exceptions.Timeout("slow"),
        requests.exceptions.SSLError("bad cert"),
    ],
)
def test_network_errors_become_transport_errors(error):
    client = RequestsHttpClient(session=RecordingSession(error=error))
    with pytest.raises(TransportError):
        client.send(OutboundRequest(method="GET", url="https://x.test"))


def test_missing_schema_is_invalid_request():
    client = RequestsHttpClient(session=RecordingSession(error=requests.exceptions.MissingSchema("no schema")))
    with pytest.raises(InvalidRequestError):
        client.send(OutboundRequest(method="GET", url=""))


def test_real_session_rejects_empty_url():
    client = RequestsHttpClient()
    with pytest.raises(InvalidRequestError):
        client.send(OutboundRequest(method="GET", url=""))
    client.close()


class CookieSettingHandler(BaseHTTPRequestHandler):
    seen_cookies: List[Tuple[str, Optional[str]]] = []

    def do_GET(self):
        self.seen_cookies.append((self.path, self.headers.get("Cookie")))
        self.send_response(200)
        if self.path == "/login":
            self.send_header("Set-Cookie", "sid=secret; Path=/")
        self.send_header("Content-Length", "0")
        self.end_headers()

    def log_message(self, format, *args):
        pass


@pytest.fixture
def cookie_server():
    CookieSettingHandler.seen_cookies = []
    server = ThreadingHTTPServer(("127.0.0.1", 0), CookieSettingHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


def test_cookies_from_one_dispatch_are_not_sent_with_the_next(cookie_server):
    # Arrange
    client = RequestsHttpClient()

    # Act
    client.send(OutboundRequest(method="GET", url=cookie_server + "/login"))
    client.send(OutboundRequest(method="GET", url=cookie_server + "/other"))
    client.close()

    # Assert
    assert CookieSettingHandler.seen_cookies == [("/login", None), ("/other", None)]


def test_default_session_ignores_environment_credentials():
    assert isolated_session().trust_env is False
