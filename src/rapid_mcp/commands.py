"""Command registry — loads declarative YAML command files into memory.

Directory layout:
    commands/
        greet.yaml          ← one Command per file
        review.yaml
        notes.txt           ← ignored (suffix is not exactly ".yaml")

The registry is populated once at startup and is read-only afterwards.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

log = logging.getLogger("rapid-mcp")

_COMMAND_SUFFIX = ".yaml"


class _CommandLoader(yaml.SafeLoader):
    """SafeLoader that keeps int, float, bool and timestamp scalars as their source text.

    Every Command field is a string except ``required``, which pydantic parses
    from "true"/"yes"/"on" and friends. ``null`` still loads as None.
    """


for _tag in ("bool", "int", "float", "timestamp"):
    _CommandLoader.add_constructor(f"tag:yaml.org,2002:{_tag}", yaml.SafeLoader.construct_yaml_str)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class RegistryError(Exception):
    """Base class for failures while populating the registry."""


class CommandDirectoryError(RegistryError):
    """The commands directory itself could not be read."""

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"Failed to read commands directory {str(path)!r}: {cause}")
        self.path = path
        self.cause = cause


class CommandParseError(RegistryError):
    """A command file could not be read or is not a well-formed Command."""

    def __init__(self, path: Path, cause: Exception) -> None:
        super().__init__(f"Failed to parse {str(path)!r}: {cause}")
        self.path = path
        self.cause = cause


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class Parameter(BaseModel):
    """One declared input slot of a command."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    param_type: str = Field(alias="type")  # opaque tag, not interpreted
    description: str
    required: bool = False
    default: str | None = None


class Command(BaseModel):
    """A declarative tool definition exposed as one MCP tool."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(min_length=1)
    version: str
    description: str
    parameters: list[Parameter] = Field(default_factory=list)
    prompt: str


def load_command(path: str | Path) -> Command:
    """Read and validate a single command file.

    Raises:
        CommandParseError: if the file cannot be read as UTF-8, is not valid
            YAML, or does not describe a well-formed Command.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.load(content, Loader=_CommandLoader)  # noqa: S506
        return Command.model_validate(data)
    except (OSError, UnicodeDecodeError, yaml.YAMLError, ValidationError) as exc:
        raise CommandParseError(path, exc) from exc


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class CommandRegistry:
    """Name → Command mapping backing the MCP tool catalog."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}

    def load_from_directory(self, path: str | Path) -> None:
        """Load every ``*.yaml`` file directly inside *path*.

        Files are visited in sorted filename order, so when two files declare
        the same name the one sorting last wins. Subdirectories are skipped.

        Raises:
            CommandDirectoryError: if *path* cannot be listed.
            CommandParseError: on the first file that fails to load.
        """
        directory = Path(path)
        try:
            entries = sorted(directory.iterdir())
        except OSError as exc:
            raise CommandDirectoryError(directory, exc) from exc

        for entry in entries:
            if entry.suffix != _COMMAND_SUFFIX or entry.is_dir():
                continue
            command = load_command(entry)
            log.info("Loaded command: %s", command.name)
            self._commands[command.name] = command

    def get(self, name: str) -> Command | None:
        return self._commands.get(name)

    def list(self) -> list[Command]:
        """Snapshot of all loaded commands."""
        return list(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands
