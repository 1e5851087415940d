"""curl argument list."""

from __future__ import annotations

from specreq.formatters.base import RequestFormatter, build_url, shell_quote
from specreq.models import RequestDescriptor
from specreq.values import to_json


class CurlFormatter(RequestFormatter):
    """``-X METHOD 'url' -H 'name: value' ... -b 'a=1; b=2' -d 'body'``.

    The result is the argument list only, ready to be appended to ``curl``.
    """

    lexer = "bash"

    def format(self, request: RequestDescriptor) -> str:
        args = [f"-X {request.method.label}", shell_quote(build_url(request))]
        for name, value in request.headers:
            args.append(f"-H {shell_quote(f'{name}: {value}')}")
        if request.cookies:
            cookie = "; ".join(f"{name}={value}" for name, value in request.cookies)
            args.append(f"-b {shell_quote(cookie)}")
        if request.body is not None:
            args.append(f"-d {shell_quote(to_json(request.body))}")
        return " ".join(args)
