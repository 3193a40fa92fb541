"""panewatch entry point.

    panewatch            # interactive REPL
    panewatch --mcp      # MCP server
    panewatch --debug    # either, with marker scans logged
"""

import sys
import logging


def main():
    """Start the REPL, or the MCP server when ``--mcp`` is given."""
    logging.basicConfig(
        level=logging.DEBUG if "--debug" in sys.argv else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    from .app import app

    if "--mcp" in sys.argv:
        app.mcp.run()
    else:
        app.run(title="panewatch - tracked tmux execution")


if __name__ == "__main__":
    main()
