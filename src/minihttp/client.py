"""
=============================================================================
FILE CLIENT
=============================================================================

One fetch, start to finish:

    URL ──► resolve_url() ──► (host, request path)
                                   │
                                   ▼
                           open_connection(host, port)
                                   │
                                   ▼
                           send(GET request)
                           read_until_close()
                           close()
                                   │
                                   ▼
                           parse_response()  ── ProtocolError      (exit 2)
                                   │         └─ ServerStatusError  (exit 3)
                                   ▼
                           OutputSink.write(body)

=============================================================================
"""

import logging
from typing import Optional

from .config import ClientConfig
from .core import open_connection
from .handlers import OutputSink
from .http import ParsedResponse, build_request, parse_response, resolve_url


logger = logging.getLogger(__name__)


class HTTPClient:
    """
    Fetches a single resource and delivers its body.

    Usage:
        client = HTTPClient(ClientConfig(port=8080, output_dir="/tmp"))
        client.fetch("http://localhost/index.html")    # → /tmp/index.html
    """

    def __init__(self, config: Optional[ClientConfig] = None, sink: Optional[OutputSink] = None):
        self.config = config or ClientConfig()
        self.config.validate()
        self.sink = sink or OutputSink(
            output_file=self.config.output_file,
            output_dir=self.config.output_dir,
        )

    def request(self, url: str) -> ParsedResponse:
        """
        Send GET for url and return the validated 200 response.

        Raises:
            MalformedURL: If url cannot be resolved.
            ConnectError, SendError, ReceiveError: Transport failures.
            MessageTooLarge: If the response exceeds max_response_size.
            ProtocolError: If the status line is not HTTP/1.1 <integer>.
            ServerStatusError: If the status is not 200.
        """
        target = resolve_url(url)
        request = build_request(target.host, target.request_path)

        with open_connection(
            target.host,
            self.config.port,
            buffer_size=self.config.buffer_size,
            max_message_size=self.config.max_response_size,
            timeout=self.config.timeout,
        ) as conn:
            payload = request.to_bytes()
            conn.send(payload)
            logger.debug(f"Sent {len(payload)} bytes: {request.request_line}")

            raw = conn.read_until_close()
            logger.debug(f"Received {len(raw)} bytes")

        response = parse_response(raw)

        expected = response.content_length
        if expected is not None and expected != len(response.body):
            logger.warning(
                f"Content-Length is {expected} but {len(response.body)} body bytes arrived"
            )

        return response

    def fetch(self, url: str) -> Optional[str]:
        """
        Fetch url and write the body to the configured destination.

        Returns:
            Path of the written file, or None when the body went to
            standard output.

        Raises:
            Everything request() raises, plus FileAccessError if the
            destination cannot be written.
        """
        response = self.request(url)
        filename = resolve_url(url).output_filename
        return self.sink.write(response.body, filename)
