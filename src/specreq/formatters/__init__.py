"""Output formatters: request descriptor to curl arguments or a fetch call."""

from specreq.formatters.base import RequestFormatter, build_url
from specreq.formatters.curl import CurlFormatter
from specreq.formatters.fetch import FetchFormatter
from specreq.models import RequestDescriptor, RequestFormat

FORMATTERS: dict[RequestFormat, RequestFormatter] = {
    RequestFormat.CURL: CurlFormatter(),
    RequestFormat.FETCH: FetchFormatter(),
}


def get_formatter(fmt: RequestFormat) -> RequestFormatter:
    return FORMATTERS[RequestFormat(fmt)]


def format_request(request: RequestDescriptor, fmt: RequestFormat = RequestFormat.CURL) -> str:
    """Render *request* in the given format."""
    return get_formatter(fmt).format(request)


__all__ = [
    "FORMATTERS",
    "CurlFormatter",
    "FetchFormatter",
    "RequestFormatter",
    "build_url",
    "format_request",
    "get_formatter",
]
