"""
File transfer handlers.

- StaticFileHandler: server side, request path → file bytes
- OutputSink: client side, body bytes → directory, file or stdout
"""

from .static import StaticFileHandler
from .output import OutputSink

__all__ = ["StaticFileHandler", "OutputSink"]
