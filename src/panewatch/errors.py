"""Error responses for panewatch commands.

A failing command still answers in the shape its display type expects, so
neither the REPL nor an MCP client ever receives a traceback.

PUBLIC API:
  - markdown_error_response: Error body for markdown commands
  - table_error_response: Error result for table commands
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


def markdown_error_response(message: str, **context: Any) -> dict[str, Any]:
    """Markdown body for a failed command.

    Keyword arguments are added to the frontmatter next to ``status``, e.g.
    the pane or execution id the failure concerns.
    """
    return {
        "elements": [{"type": "text", "content": f"Error: {message}"}],
        "frontmatter": {"status": "error", **context},
    }


def table_error_response(message: str) -> list[dict[str, Any]]:
    """Empty table for a failed listing; the reason only goes to the log."""
    logger.warning(f"Command failed: {message}")
    return []
