"""
=============================================================================
MINIHTTP - A Minimal HTTP/1.1 File-Transfer Pair
=============================================================================

A client that fetches one resource from an http:// URL, and a server that
serves static files from a document root, both over raw TCP sockets.

    ┌──────────────────┐   GET /index.html HTTP/1.1   ┌──────────────────┐
    │  minihttp-client │ ───────────────────────────► │  minihttp-server │
    │                  │                              │                  │
    │  stdout / -o / -d│ ◄─────────────────────────── │  DOC_ROOT        │
    └──────────────────┘   HTTP/1.1 200 OK + body     └──────────────────┘

No keep-alive, no chunked encoding, no pipelining, no TLS, GET only.
The server handles one connection at a time and stops cleanly on SIGINT
or SIGTERM.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # python -m minihttp (server)
    ├── cli.py               # minihttp-client / minihttp-server
    ├── client.py            # HTTPClient: one fetch cycle
    ├── server.py            # HTTPServer: per-connection handling
    ├── config.py            # ServerConfig / ClientConfig dataclasses
    ├── errors.py            # Exception hierarchy with exit codes
    ├── core/
    │   ├── connection.py    # Connection, open_connection()
    │   ├── socket_server.py # bind / listen / accept loop
    │   └── shutdown.py      # ShutdownController (signals)
    ├── http/
    │   ├── url.py           # resolve_url()
    │   ├── request.py       # build_request(), RequestParser
    │   ├── response.py      # HTTPResponse, parse_response()
    │   └── status_codes.py  # HTTPStatus
    └── handlers/
        ├── static.py        # StaticFileHandler (server side)
        └── output.py        # OutputSink (client side)

=============================================================================
QUICK START
=============================================================================

    from minihttp import HTTPServer, ServerConfig

    HTTPServer(ServerConfig(doc_root="./public", port=8080)).run()

    from minihttp import HTTPClient, ClientConfig

    HTTPClient(ClientConfig(port=8080, output_dir="/tmp")).fetch(
        "http://localhost/index.html"
    )

=============================================================================
"""

__version__ = "1.0.0"

from .config import ClientConfig, ServerConfig
from .server import HTTPServer
from .client import HTTPClient

__all__ = ["HTTPServer", "HTTPClient", "ServerConfig", "ClientConfig", "__version__"]
