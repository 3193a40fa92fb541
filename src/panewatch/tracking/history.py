"""Append-only history of finished executions.

PUBLIC API:
  - CommandHistory: JSON-lines log of terminal execution records
"""

import json
import logging
from pathlib import Path
from typing import Any

from .record import ExecutionRecord

logger = logging.getLogger(__name__)


class CommandHistory:
    """JSON-lines file holding one entry per finished execution.

    The file is written only; the in-memory registry stays authoritative and
    nothing is restored from history on startup.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def append(self, record: ExecutionRecord) -> None:
        """Append a terminal record. Write failures are logged, not raised."""
        entry = record.to_dict()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry) + "\n")
        except OSError as e:
            logger.warning(f"Could not write history to {self.path}: {e}")

    def read(self, limit: int = 100) -> list[dict[str, Any]]:
        """Most recent entries, newest first. Malformed lines are skipped."""
        if not self.path.exists():
            return []

        entries = []
        with open(self.path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError:
                    continue

        entries.reverse()
        return entries[:limit]
