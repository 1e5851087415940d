"""WHATWG ``fetch()`` call."""

from __future__ import annotations

from specreq.formatters.base import RequestFormatter, build_url, js_string
from specreq.models import RequestDescriptor
from specreq.values import to_json


class FetchFormatter(RequestFormatter):
    """A ``fetch(url, {method, headers, body})`` snippet.

    Cookies are folded into a ``Cookie`` header. ``headers`` and ``body``
    are left out when the request has none.
    """

    lexer = "javascript"

    def format(self, request: RequestDescriptor) -> str:
        headers = list(request.headers)
        if request.cookies:
            headers.append(("Cookie", "; ".join(f"{k}={v}" for k, v in request.cookies)))

        fields = [f"    method: {js_string(request.method.label)}"]
        if headers:
            pairs = ", ".join(f"{js_string(k)}: {js_string(v)}" for k, v in headers)
            fields.append(f"    headers: {{{pairs}}}")
        if request.body is not None:
            fields.append(f"    body: {js_string(to_json(request.body))}")

        return f"fetch({js_string(build_url(request))}, {{\n" + ",\n".join(fields) + "\n})"
