"""Workers - Claude CLI process streaming"""

from .claude import ClaudeStreamer
from .tool_servers import StaticToolServerProvider, ToolServerProvider

__all__ = [
    "ClaudeStreamer",
    "StaticToolServerProvider",
    "ToolServerProvider",
]
