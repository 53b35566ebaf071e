"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Maps a request path onto the document root and reads the file.

    Request: GET /docs/ HTTP/1.1          doc_root = /srv/www
                                          index_file = index.html

    1. Drop any query string, percent-decode       /docs/
    2. Trailing '/' → append the index file        /docs/index.html
    3. Join onto doc_root and resolve              /srv/www/docs/index.html
    4. Must still be inside doc_root               else → 404
    5. A directory → its index file                /.../dir/index.html
    6. Must be a readable regular file             else → 404
    7. Read all bytes                              vanished → FileAccessError

=============================================================================
READING THE WHOLE FILE
=============================================================================

The body is read in binary mode into one bytes object, so it is
byte-exact: newlines are untouched and NUL bytes do not end it early.
Content-Length is simply len(body).

=============================================================================
"""

import logging
import os
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlsplit

from ..errors import FileAccessError


logger = logging.getLogger(__name__)


class StaticFileHandler:
    """
    Serves files from a document root.

    Usage:
        static = StaticFileHandler("/srv/www", index_file="index.html")
        path = static.resolve("/docs/")     # None → answer 404
        body = static.read(path)            # FileAccessError → answer 500
    """

    def __init__(self, root_dir: str, index_file: str = "index.html"):
        # Resolved once so the containment check compares real paths
        self.root_dir = Path(root_dir).resolve()
        self.index_file = index_file

        if not self.root_dir.is_dir():
            raise ValueError(f"Document root does not exist: {root_dir}")

    def resolve(self, request_path: str) -> Optional[Path]:
        """
        Map a request path to an accessible file.

        Args:
            request_path: Request target from the request line.

        Returns:
            Path of a readable regular file inside the document root, or
            None if there is no such file.
        """
        path = unquote(urlsplit(request_path).path)
        if path.endswith("/") or not path:
            path += self.index_file

        if "\x00" in path:
            return None

        try:
            return self._lookup(path, request_path)
        except (OSError, RuntimeError) as e:
            # ENAMETOOLONG, EACCES on a parent directory, symlink loops
            logger.debug(f"Lookup failed for {request_path}: {e}")
            return None

    def _lookup(self, path: str, request_path: str) -> Optional[Path]:
        full_path = (self.root_dir / path.lstrip("/")).resolve()

        try:
            full_path.relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Path traversal attempt: {request_path}")
            return None

        if full_path.is_dir():
            full_path = full_path / self.index_file

        if not full_path.is_file() or not os.access(full_path, os.R_OK):
            return None

        return full_path

    def read(self, path: Path) -> bytes:
        """
        Read the whole file.

        Raises:
            FileAccessError: If the file can no longer be read, e.g. it
                             was removed after resolve() found it.
        """
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            raise FileAccessError(f"Failed to read {path}: {e}", str(path)) from e
