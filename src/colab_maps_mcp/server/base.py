"""Shared MCP plumbing for the Colab and Maps servers.

Each tool is declared once as a ToolSpec: its name, description and a
pydantic model for its arguments. The model validates incoming arguments
and also provides the tool's JSON input schema, so the two cannot drift.

Results and errors both travel as indented JSON text. Errors use the
structured payload from colab_maps_mcp.errors and set isError on the
CallToolResult.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import pydantic
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, TextContent, Tool

from colab_maps_mcp.errors import ToolError, ValidationError, classify_error

# Logs go to stderr; stdout carries the MCP stream
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ToolHandler = Callable[[Any], Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class ToolSpec:
    """Declaration of a single MCP tool.

    Attributes:
        name: Tool name as seen by clients.
        description: Human-readable description.
        arguments: Pydantic model validating the tool's arguments.
    """

    name: str
    description: str
    arguments: type[pydantic.BaseModel]

    def to_tool(self) -> Tool:
        """Build the MCP tool definition."""
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.arguments.model_json_schema(),
        )


def parse_arguments(
    spec: ToolSpec, arguments: dict[str, Any] | None
) -> pydantic.BaseModel:
    """Validate raw tool arguments against a tool's model.

    Args:
        spec: Tool being called.
        arguments: Arguments as received from the client.

    Returns:
        Validated argument model instance.

    Raises:
        ValidationError: If the arguments do not match the model.
    """
    try:
        return spec.arguments.model_validate(arguments or {})
    except pydantic.ValidationError as e:
        details = ", ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'arguments'}: {err['msg']}"
            for err in e.errors()
        )
        raise ValidationError(f"Invalid arguments for {spec.name}: {details}") from e


class ToolServer:
    """Base class wiring ToolSpecs and handlers into an MCP Server.

    Subclasses provide ``tool_specs`` and ``tool_handlers`` and may override
    ``close`` to release their API clients.

    Attributes:
        server: MCP Server instance.
    """

    def __init__(self, name: str) -> None:
        self.server = Server(name)
        self._specs = {spec.name: spec for spec in self.tool_specs()}
        self._setup_handlers()

    def tool_specs(self) -> list[ToolSpec]:
        """Return the static tool list."""
        raise NotImplementedError

    def tool_handlers(self) -> dict[str, ToolHandler]:
        """Map tool names to handlers taking the validated argument model."""
        raise NotImplementedError

    def list_tools(self) -> list[Tool]:
        """Return MCP definitions for every tool."""
        return [spec.to_tool() for spec in self._specs.values()]

    async def call_tool_result(
        self, name: str, arguments: dict[str, Any] | None
    ) -> CallToolResult:
        """Run a tool and wrap its JSON text in a CallToolResult.

        Failures carry the error payload with isError set.
        """
        is_error = True
        try:
            payload = await self._dispatch_tool(name, arguments)
            is_error = False
        except ToolError as e:
            logger.warning(f"Tool {name} failed with {e.kind.value}: {e.message}")
            payload = e.to_dict()
        except Exception as e:
            logger.exception(f"Error calling tool {name}")
            payload = classify_error(e).to_dict()

        text = json.dumps(payload, indent=2, ensure_ascii=False)
        return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
        """Run a tool and render its result or error as JSON text."""
        result = await self.call_tool_result(name, arguments)
        return [content for content in result.content if isinstance(content, TextContent)]

    def _setup_handlers(self) -> None:
        """Register MCP tool handlers.

        SDK-side input validation is off so argument errors reach clients
        as ValidationError payloads like every other failure.
        """

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return self.list_tools()

        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: dict[str, Any]) -> CallToolResult:
            return await self.call_tool_result(name, arguments)

    async def _dispatch_tool(self, name: str, arguments: dict[str, Any] | None) -> dict[str, Any]:
        """Validate arguments and dispatch to the tool handler.

        Raises:
            ValidationError: If the tool is unknown or the arguments invalid.
        """
        spec = self._specs.get(name)
        handler = self.tool_handlers().get(name)
        if spec is None or handler is None:
            raise ValidationError(f"Unknown tool: {name}")

        validated = parse_arguments(spec, arguments)
        logger.info(f"Calling tool {name}")
        return await handler(validated)

    async def close(self) -> None:
        """Release resources held by the server."""

    async def run(self) -> None:
        """Run the MCP server using stdio transport."""
        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        finally:
            await self.close()
