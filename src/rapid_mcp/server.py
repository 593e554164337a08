"""Line-delimited JSON-RPC server loop over stdin/stdout.

One JSON value per line in each direction. stderr carries log output only.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, TextIO

from pydantic import ValidationError

from rapid_mcp.commands import CommandRegistry
from rapid_mcp.protocol import JsonRpcRequest, McpDispatcher

log = logging.getLogger("rapid-mcp")


class StdioServer:
    """Serves MCP requests one at a time until the reader reaches EOF."""

    def __init__(
        self,
        registry: CommandRegistry,
        reader: TextIO | None = None,
        writer: TextIO | None = None,
    ) -> None:
        self._dispatcher = McpDispatcher(registry)
        self._reader = reader
        self._writer = writer

    def run(self) -> None:
        """Block until end of input.

        Frames that are not valid JSON-RPC requests (including notifications,
        which carry no ``id``) are dropped without a reply. I/O errors
        propagate to the caller.
        """
        reader = self._reader if self._reader is not None else sys.stdin
        writer = self._writer if self._writer is not None else sys.stdout

        for line in reader:
            request = _parse_request(line)
            if request is None:
                continue
            self._write(writer, self._dispatcher.handle(request))

        log.debug("End of input, shutting down.")

    @staticmethod
    def _write(writer: TextIO, response: dict[str, Any]) -> None:
        frame = json.dumps(response, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        writer.write(frame + "\n")
        writer.flush()


def _parse_request(line: str) -> JsonRpcRequest | None:
    try:
        return JsonRpcRequest.model_validate_json(line)
    except ValidationError as exc:
        log.debug("Dropping unparseable frame: %s", exc.errors(include_url=False))
        return None
