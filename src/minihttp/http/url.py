"""
=============================================================================
URL RESOLVER
=============================================================================

Splits an http:// URL into the host to connect to and the path to request.

    http://example.com/docs/index.html
    ───┬─── ─────┬───── ───────┬──────
       │         │             │
    scheme      host      request path
    (skipped)

The host ends at the first of the delimiters ; / : @ = & after the scheme.
The request path starts at the first '/' after the scheme. Any port
written in the URL is ignored; the port always comes from -p.

    URL                               host          request path
    ─────────────────────────────────────────────────────────────────
    http://example.com/index.html     example.com   /index.html
    http://example.com/               example.com   /
    http://example.com:8080/a/b.txt   example.com   /a/b.txt
    http://example.com:8080           example.com   /
    http://example.com                (MalformedURL: no delimiter)

=============================================================================
"""

from dataclasses import dataclass

from ..errors import MalformedURL


SCHEME = "http://"
HOST_DELIMITERS = ";/:@=&"
DEFAULT_FILENAME = "index.html"

# Scheme plus at least one host character
MIN_URL_LENGTH = len(SCHEME) + 1


@dataclass(frozen=True)
class ParsedURL:
    """
    A URL split into the pieces the client needs.

    Attributes:
        host: Host name or address, never empty, no scheme.
        request_path: Path sent in the request line, always starts with '/'.
    """

    host: str
    request_path: str

    @property
    def output_filename(self) -> str:
        """
        File name to store the body under in directory mode.

        The last path segment, or index.html when the path is empty
        or ends in '/'.
        """
        name = self.request_path.rsplit("/", 1)[-1]
        return name or DEFAULT_FILENAME


def resolve_url(url: str) -> ParsedURL:
    """
    Split a URL into host and request path.

    Args:
        url: Full URL, e.g. "http://example.com/index.html".

    Returns:
        ParsedURL with host and request_path.

    Raises:
        MalformedURL: If the URL is too short, has the wrong scheme,
                      has no host delimiter, or has an empty host.
    """
    if len(url) < MIN_URL_LENGTH:
        raise MalformedURL(f"URL too short: {url!r}")

    if not url.startswith(SCHEME):
        raise MalformedURL(f"URL must start with {SCHEME}: {url!r}")

    offset = len(SCHEME)
    host_end = _find_first_of(url, HOST_DELIMITERS, offset)
    if host_end == -1:
        raise MalformedURL(f"No path delimiter after host: {url!r}")

    host = url[offset:host_end]
    if not host:
        raise MalformedURL(f"Empty host: {url!r}")

    path_start = url.find("/", offset)
    request_path = url[path_start:] if path_start != -1 else "/"

    return ParsedURL(host=host, request_path=request_path)


def _find_first_of(text: str, chars: str, start: int) -> int:
    """Index of the first character of text[start:] found in chars, or -1."""
    for index in range(start, len(text)):
        if text[index] in chars:
            return index
    return -1
