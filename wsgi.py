"""WSGI entry point for the wealth plan application."""

import os
import sys

from wealthplan import create_app

app = create_app()


def _port_from_args(argv, default: int) -> int:
    """Read ``--port N`` from the command line, falling back to ``default``."""
    if "--port" in argv:
        index = argv.index("--port")
        if index + 1 < len(argv):
            return int(argv[index + 1])
    return default


if __name__ == "__main__":
    # PORT is set by hosting platforms; --port wins for local runs
    port = _port_from_args(sys.argv[1:], int(os.environ.get("PORT", 5000)))
    app.run(debug=app.config["DEBUG"], host="0.0.0.0", port=port)
