"""MCP tool server configuration consumed by the Claude streamer."""

from typing import Any, Dict, List, Optional, Protocol

McpServerConfig = Dict[str, Any]


class ToolServerProvider(Protocol):
    """Supplies MCP server definitions and the default allowed tools."""

    def get_server_configuration(self) -> Optional[Dict[str, McpServerConfig]]:
        """Map of server name to {command, args, env}, or None."""
        ...

    def get_default_allowed_tools(self) -> List[str]:
        ...


class StaticToolServerProvider:
    """ToolServerProvider over a fixed server map."""

    def __init__(
        self,
        servers: Optional[Dict[str, McpServerConfig]] = None,
        allowed_tools: Optional[List[str]] = None
    ):
        """
        Args:
            servers: Server name -> {command, args, env}
            allowed_tools: Allowed tools; defaults to "mcp__<name>" per server
        """
        self.servers = dict(servers or {})
        self.allowed_tools = allowed_tools

    def get_server_configuration(self) -> Optional[Dict[str, McpServerConfig]]:
        if not self.servers:
            return None
        return dict(self.servers)

    def get_default_allowed_tools(self) -> List[str]:
        if self.allowed_tools is not None:
            return list(self.allowed_tools)
        return [f"mcp__{name}" for name in self.servers]
