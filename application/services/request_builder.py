# application/services/request_builder.py
from __future__ import annotations

from typing import List, Tuple

from application.ports.http_client import OutboundRequest
from domain.location import ContentType, Location, Method, non_empty_pairs


def _without_header(headers: List[Tuple[str, str]], name: str) -> List[Tuple[str, str]]:
    lowered = name.lower()
    return [(k, v) for k, v in headers if k.lower() != lowered]


class RequestBuilder:
    """
    Turn a Location into an OutboundRequest.

    - every non-empty header row is attached, whatever the method
    - GET: non-empty params become the query string, no body
    - POST + Json: Content-Type forced to application/json, body sent verbatim
    - POST + FormUrlEncoded: params as query, non-empty form_params as urlencoded body
    - POST + FormData: params as query, non-empty form_params as multipart text fields
    - PUT / PATCH / DELETE / HEAD: bare call with the configured URL
    """

    def build(self, location: Location) -> OutboundRequest:
        headers = non_empty_pairs(location.header)
        method = location.method

        if method == Method.GET:
            return OutboundRequest(
                method=method.value,
                url=location.url,
                params=non_empty_pairs(location.params),
                headers=headers,
            )

        if method == Method.POST:
            return self._build_post(location, headers)

        return OutboundRequest(method=method.value, url=location.url, headers=headers)

    def _build_post(self, location: Location, headers: List[Tuple[str, str]]) -> OutboundRequest:
        if location.content_type == ContentType.JSON:
            return OutboundRequest(
                method=Method.POST.value,
                url=location.url,
                headers=_without_header(headers, "Content-Type") + [("Content-Type", ContentType.JSON.mime)],
                body=(location.body or "").encode("utf-8"),
            )

        params = non_empty_pairs(location.params)
        fields = non_empty_pairs(location.form_params)

        if location.content_type == ContentType.FORM_URL_ENCODED:
            return OutboundRequest(
                method=Method.POST.value,
                url=location.url,
                params=params,
                headers=headers,
                form=fields,
            )

        # the transport writes Content-Type with the multipart boundary
        return OutboundRequest(
            method=Method.POST.value,
            url=location.url,
            params=params,
            headers=_without_header(headers, "Content-Type"),
            multipart=fields,
        )
