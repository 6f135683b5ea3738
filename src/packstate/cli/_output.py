"""Output for ``packstate`` commands.

Commands print results to stdout and failures to stderr. With ``--json`` a
result is one JSON document carrying a ``status`` field, and a failure is
``{"error": <code>, "message": ..., "context": ...}`` where ``context`` comes
from :class:`~packstate.core.exceptions.PackstateError`.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional

from packstate.core.exceptions import PackstateError


class OutputFormatter:
    """Print command results in text or JSON mode."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        self.json_mode = json_mode
        self.indent = indent

    def _dump(self, data: Any) -> str:
        return json.dumps(data, indent=self.indent, default=str)

    def success(self, data: Dict[str, Any], message: str, *, status: str = "success") -> None:
        """Print ``message``, or ``data`` plus ``status`` in JSON mode."""
        if self.json_mode:
            print(self._dump({"status": status, **data}))
        else:
            print(message)

    def error(self, error: Exception, message: Optional[str] = None, *, error_code: str = "error") -> None:
        msg = message or str(error)
        if self.json_mode:
            output: Dict[str, Any] = {"error": error_code, "message": msg}
            if isinstance(error, PackstateError) and error.context:
                output["context"] = error.context
            print(self._dump(output), file=sys.stderr)
        else:
            print(f"Error: {msg}", file=sys.stderr)

    def json_output(self, data: Any) -> None:
        print(self._dump(data))

    def text(self, message: str) -> None:
        print(message)


__all__ = ["OutputFormatter"]
