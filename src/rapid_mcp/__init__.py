"""rapid-mcp: serve a directory of declarative YAML commands as MCP tools over stdio."""

from __future__ import annotations

import logging
import sys

from rapid_mcp import config
from rapid_mcp.commands import CommandRegistry, RegistryError
from rapid_mcp.server import StdioServer

log = logging.getLogger("rapid-mcp")


def main() -> None:
    """CLI entry point — loads the command directory and serves over stdio."""
    logging.basicConfig(stream=sys.stderr, level=config.log_level(), format="%(message)s")
    log.info("Starting rapid-mcp-server...")

    registry = CommandRegistry()
    try:
        registry.load_from_directory(config.commands_dir())
    except RegistryError as exc:
        log.error("%s", exc)
        raise SystemExit(1) from exc

    log.info("Loaded %d commands", len(registry))

    for stream in (sys.stdin, sys.stdout):
        if hasattr(stream, "reconfigure"):
            stream.reconfigure(encoding="utf-8")

    StdioServer(registry).run()
