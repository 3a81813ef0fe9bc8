# infrastructure/http/requests_client.py
from __future__ import annotations

import http.cookiejar
from typing import Dict, List, Optional, Tuple

import requests
from requests.structures import CaseInsensitiveDict

from application.ports.http_client import (
    HttpClientPort,
    HttpResponse,
    InvalidRequestError,
    OutboundRequest,
    TransportError,
)

_INVALID_REQUEST_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.URLRequired,
    requests.exceptions.InvalidHeader,
)


def _response_headers(resp: requests.Response) -> List[Tuple[str, str]]:
    # urllib3 keeps duplicate header lines and the server's casing
    raw_headers = getattr(resp.raw, "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "iteritems"):
        return [(str(k), str(v)) for k, v in raw_headers.iteritems()]
    return [(str(k), str(v)) for k, v in resp.headers.items()]


def isolated_session() -> requests.Session:
    """
    A session that never carries state from one dispatch into the next:
    response cookies are not stored and netrc or proxy settings from the
    environment are not applied.
    """
    session = requests.Session()
    session.cookies.set_policy(http.cookiejar.DefaultCookiePolicy(allowed_domains=[]))
    session.trust_env = False
    return session


class RequestsHttpClient(HttpClientPort):
    def __init__(
        self,
        base_headers: Optional[Dict[str, str]] = None,
        timeout_sec: float = 30,
        verify_tls: bool = True,
        session: Optional[requests.Session] = None,
    ):
        self._session = session or isolated_session()
        self._base_headers = base_headers or {}
        self._timeout = timeout_sec
        self._verify = verify_tls

    def send(self, request: OutboundRequest) -> HttpResponse:
        headers = CaseInsensitiveDict(self._base_headers)
        headers.update(request.headers)  # later rows win, names compared case-insensitively

        data = None
        if request.body is not None:
            data = request.body
        elif request.form is not None:
            data = request.form  # list[tuple] keeps order and repeated keys

        files = None
        if request.multipart:
            files = [(k, (None, v)) for k, v in request.multipart]

        try:
            resp = self._session.request(
                method=request.method.upper(),
                url=request.url,
                params=request.params or None,
                headers=headers,
                data=data,
                files=files,
                timeout=self._timeout,
                verify=self._verify,
            )
        except _INVALID_REQUEST_ERRORS as e:
            raise InvalidRequestError(str(e) or type(e).__name__) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(str(e) or type(e).__name__) from e

        return HttpResponse(
            status=resp.status_code,
            reason=resp.reason or "",
            url=str(resp.url),
            headers=_response_headers(resp),
            content=resp.content or b"",
        )

    def close(self) -> None:
        self._session.close()
