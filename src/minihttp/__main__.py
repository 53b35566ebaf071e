"""
Run the file server as a module:

    python -m minihttp [-p PORT] [-i INDEX] DOC_ROOT

The client is installed as the minihttp-client console script.
"""

import sys

from .cli import server_main


if __name__ == "__main__":
    sys.exit(server_main())
