"""Shared pytest fixtures for the rapid-mcp test suite."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from rapid_mcp.commands import CommandRegistry
from rapid_mcp.server import StdioServer

GREET_YAML = """\
name: greet
version: "1"
description: Greet
prompt: Hello!
"""


@pytest.fixture
def commands_dir(tmp_path) -> Path:
    """An empty directory to drop command files into."""
    path = tmp_path / "commands"
    path.mkdir()
    return path


@pytest.fixture
def write_command(commands_dir):
    """Write *content* to ``commands_dir/<filename>`` and return the path."""

    def _write(filename: str, content: str) -> Path:
        dest = commands_dir / filename
        dest.write_text(content, encoding="utf-8")
        return dest

    return _write


@pytest.fixture
def greet_registry(commands_dir, write_command) -> CommandRegistry:
    write_command("greet.yaml", GREET_YAML)
    registry = CommandRegistry()
    registry.load_from_directory(commands_dir)
    return registry


@pytest.fixture
def serve():
    """Feed raw lines through a StdioServer and return the decoded replies."""

    def _serve(registry: CommandRegistry, *frames: str) -> list[dict]:
        reader = io.StringIO("".join(f"{frame}\n" for frame in frames))
        writer = io.StringIO()
        StdioServer(registry, reader=reader, writer=writer).run()
        return [json.loads(line) for line in writer.getvalue().splitlines()]

    return _serve
