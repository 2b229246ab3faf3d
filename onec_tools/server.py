"""Assembly of the tool server: toolsets, profiles and tool registration."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from onec_tools.common import Handler, OneCClient, Tool, ToolError, ToolResult
from onec_tools.configuration_info import (
    configuration_info_tool,
    new_configuration_info_handler,
)
from onec_tools.counterparties import (
    create_counterparty_tool,
    new_create_counterparty_handler,
    new_read_counterparties_handler,
    read_counterparties_tool,
)
from onec_tools.eventlog import event_log_tool, new_event_log_handler
from onec_tools.form import DumpLoader, form_structure_tool, new_form_structure_handler
from onec_tools.metadata import metadata_tool, new_metadata_handler
from onec_tools.object_structure import new_object_structure_handler, object_structure_tool
from onec_tools.query import new_query_handler, query_tool
from onec_tools.search import CodeIndex, new_search_code_handler, search_code_tool
from onec_tools.validate_query import new_validate_query_handler, validate_query_tool

SERVER_NAME = "mcp-1c"

PROFILE_BUH_3_0 = "buh_3_0"
PROFILE_GENERIC = "generic"

_BUSINESS_TOOL_PROFILES: dict[str, frozenset[str]] = {
    "read_counterparties": frozenset({PROFILE_BUH_3_0, PROFILE_GENERIC}),
    "create_counterparty": frozenset({PROFILE_BUH_3_0, PROFILE_GENERIC}),
}


class Toolset(Enum):
    """Which group of tools the server exposes."""

    DEVELOPER = "developer"
    BUSINESS = "business"
    ALL = "all"


@dataclass(frozen=True)
class Options:
    """Server settings: the toolset and the resolved configuration profile."""

    toolset: Toolset = Toolset.ALL
    profile: str = PROFILE_GENERIC


def parse_toolset(value: str) -> Toolset:
    """Parse a toolset name; an empty value means all tools."""
    normalized = value.strip().lower()
    if normalized in ("", Toolset.ALL.value):
        return Toolset.ALL
    if normalized in (Toolset.DEVELOPER.value, Toolset.BUSINESS.value):
        return Toolset(normalized)
    quoted = json.dumps(value, ensure_ascii=False)
    raise ValueError(f"unsupported toolset {quoted} (allowed: developer|business|all)")


def is_business_tool_supported(tool_name: str, profile: str) -> bool:
    """Tell whether a business tool works with the given configuration profile."""
    return profile in _BUSINESS_TOOL_PROFILES.get(tool_name, frozenset())


class Server:
    """A registry of tools that can be listed and called by name."""

    def __init__(self, name: str, version: str) -> None:
        self.name = name
        self.version = version
        self._tools: dict[str, tuple[Tool, Handler]] = {}

    def add_tool(self, tool: Tool, handler: Handler) -> None:
        """Register a tool, replacing any earlier tool of the same name."""
        self._tools[tool.name] = (tool, handler)

    def list_tools(self) -> list[Tool]:
        """Return the registered tools in registration order."""
        return [tool for tool, _ in self._tools.values()]

    def call_tool(self, name: str, arguments: Any = None) -> ToolResult:
        """Run the named tool with the given arguments."""
        try:
            _, handler = self._tools[name]
        except KeyError:
            raise ToolError(f"unknown tool {name!r}") from None
        return handler(arguments)


def _register_developer_tools(
    server: Server,
    client: OneCClient,
    dump_index: Optional[CodeIndex],
    form_dump_loader: Optional[DumpLoader],
) -> None:
    server.add_tool(metadata_tool(), new_metadata_handler(client))
    server.add_tool(object_structure_tool(), new_object_structure_handler(client))
    server.add_tool(query_tool(), new_query_handler(client))
    if dump_index is not None:
        server.add_tool(search_code_tool(), new_search_code_handler(dump_index))
    server.add_tool(form_structure_tool(), new_form_structure_handler(client, form_dump_loader))
    server.add_tool(validate_query_tool(), new_validate_query_handler(client))
    server.add_tool(event_log_tool(), new_event_log_handler(client))
    server.add_tool(configuration_info_tool(), new_configuration_info_handler(client))


def _register_business_tools(server: Server, client: OneCClient, profile: str) -> None:
    if not is_business_tool_supported("read_counterparties", profile):
        return
    server.add_tool(read_counterparties_tool(), new_read_counterparties_handler(client))
    server.add_tool(create_counterparty_tool(), new_create_counterparty_handler(client))


def new_server(
    version: str,
    client: OneCClient,
    dump_index: Optional[CodeIndex] = None,
    options: Optional[Options] = None,
    form_dump_loader: Optional[DumpLoader] = None,
) -> Server:
    """Create a server and register the tools of the chosen toolset.

    search_code is registered only when a code index is given.
    """
    options = options or Options()
    toolset: Union[Toolset, str, None] = options.toolset
    if isinstance(toolset, str):
        toolset = parse_toolset(toolset)
    if toolset is None:
        toolset = Toolset.ALL
    profile = options.profile or PROFILE_GENERIC

    server = Server(SERVER_NAME, version)
    if toolset is Toolset.DEVELOPER:
        _register_developer_tools(server, client, dump_index, form_dump_loader)
    elif toolset is Toolset.BUSINESS:
        _register_business_tools(server, client, profile)
    else:
        _register_developer_tools(server, client, dump_index, form_dump_loader)
        _register_business_tools(server, client, profile)
    return server