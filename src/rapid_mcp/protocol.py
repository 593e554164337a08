"""JSON-RPC envelopes and the MCP method dispatch table.

Result payloads are built from ``mcp.types`` models, but only the members named
here are written, so the wire form does not drift with the installed mcp release.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Annotated, Any

from mcp import types
from pydantic import AllowInfNan, BaseModel, ConfigDict, Strict, StrictInt, StrictStr

from rapid_mcp.commands import Command, CommandRegistry

log = logging.getLogger("rapid-mcp")

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "rapid-mcp-server-rust"
SERVER_VERSION = "0.1.0"

# Number, string or null; the JSON type is echoed back unchanged.
# Out-of-range numbers (1e400) cannot be echoed as JSON and are rejected.
_FiniteFloat = Annotated[float, Strict(), AllowInfNan(False)]
RequestId = StrictInt | _FiniteFloat | StrictStr | None

_EMPTY_INPUT_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}, "required": []}


class ProtocolError(Exception):
    """A handler-level failure reported to the client as an error response."""

    def __init__(self, message: str, code: int = types.INTERNAL_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class JsonRpcRequest(BaseModel):
    """Inbound request frame. ``id`` must be present, though it may be null."""

    model_config = ConfigDict(extra="ignore")

    jsonrpc: str = JSONRPC_VERSION
    id: RequestId
    method: str
    params: Any = None


def success_response(request_id: RequestId, result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_response(request_id: RequestId, code: int, message: str) -> dict[str, Any]:
    error = types.ErrorData(code=code, message=message)
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": _dump(error, "code", "message")}


def _dump(model: BaseModel, *fields: str) -> dict[str, Any]:
    """Dump only *fields*, so members added by newer mcp releases stay off the wire."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True, include=set(fields))


def tool_descriptor(command: Command) -> types.Tool:
    """Describe a command as an MCP tool.

    Declared parameters are not surfaced yet; every tool advertises an
    empty object schema.
    """
    return types.Tool(
        name=command.name,
        description=command.description,
        inputSchema=dict(_EMPTY_INPUT_SCHEMA),
    )


class McpDispatcher:
    """Routes a request to its handler and wraps the outcome in an envelope.

    Handlers return a result payload or raise :class:`ProtocolError`; the
    error never escapes :meth:`handle`.
    """

    def __init__(self, registry: CommandRegistry) -> None:
        self._registry = registry
        self._methods: dict[str, Callable[[Any], dict[str, Any]]] = {
            "initialize": self._initialize,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
        }

    def handle(self, request: JsonRpcRequest) -> dict[str, Any]:
        log.debug("Dispatching %s (id=%r)", request.method, request.id)
        try:
            handler = self._methods.get(request.method)
            if handler is None:
                raise ProtocolError(f"Unknown method: {request.method}")
            result = handler(request.params)
        except ProtocolError as exc:
            log.warning("Request %r failed: %s", request.id, exc.message)
            return error_response(request.id, exc.code, exc.message)
        return success_response(request.id, result)

    # -- handlers ---------------------------------------------------------

    def _initialize(self, params: Any) -> dict[str, Any]:
        server_info = types.Implementation(name=SERVER_NAME, version=SERVER_VERSION)
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": _dump(server_info, "name", "version"),
        }

    def _tools_list(self, params: Any) -> dict[str, Any]:
        tools = [tool_descriptor(cmd) for cmd in self._registry.list()]
        return {"tools": [_dump(tool, "name", "description", "inputSchema") for tool in tools]}

    def _tools_call(self, params: Any) -> dict[str, Any]:
        if params is None:
            raise ProtocolError("Missing params")
        name = params.get("name") if isinstance(params, dict) else None
        if not isinstance(name, str):
            raise ProtocolError("Missing tool name")

        command = self._registry.get(name)
        if command is None:
            raise ProtocolError(f"Unknown tool: {name}")

        # TODO: substitute params["arguments"] into the prompt template
        content = types.TextContent(type="text", text=command.prompt)
        return {"content": [_dump(content, "type", "text")]}
