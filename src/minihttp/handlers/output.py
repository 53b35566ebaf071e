"""
=============================================================================
OUTPUT SINK
=============================================================================

Delivers a received body to exactly one destination. Precedence:

    1. output directory   -d DIR   → DIR/<file name taken from the URL>
    2. output file        -o FILE  → FILE
    3. standard output    default

Files are created or truncated and receive the body once, byte for byte.
Standard output gets the raw bytes through its binary buffer, so binary
downloads survive a shell redirect.

=============================================================================
"""

import logging
import os
import sys
from typing import BinaryIO, Optional

from ..errors import FileAccessError


logger = logging.getLogger(__name__)


class OutputSink:
    """
    Where a fetched body ends up.

    Attributes:
        output_file: Explicit destination file, or None.
        output_dir: Destination directory, or None.
        stream: Binary stream used when neither is set
                (default: sys.stdout.buffer).
    """

    def __init__(
        self,
        output_file: Optional[str] = None,
        output_dir: Optional[str] = None,
        stream: Optional[BinaryIO] = None,
    ):
        self.output_file = output_file
        self.output_dir = output_dir
        self._stream = stream

    def destination(self, filename: str) -> Optional[str]:
        """
        Path the body will be written to, or None for standard output.

        Args:
            filename: File name derived from the URL, used in directory mode.
        """
        if self.output_dir is not None:
            return os.path.join(self.output_dir, filename)
        if self.output_file is not None:
            return self.output_file
        return None

    def write(self, body: bytes, filename: str) -> Optional[str]:
        """
        Deliver body to the configured destination.

        Returns:
            The path written, or None if the body went to standard output.

        Raises:
            FileAccessError: If the destination cannot be written.
        """
        path = self.destination(filename)

        if path is None:
            stream = self._stream if self._stream is not None else sys.stdout.buffer
            stream.write(body)
            stream.flush()
            return None

        try:
            with open(path, "wb") as f:
                f.write(body)
        except OSError as e:
            raise FileAccessError(f"Failed to write {path}: {e}", path) from e

        logger.info(f"Wrote {len(body)} bytes to {path}")
        return path
