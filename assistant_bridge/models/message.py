"""Claude CLI stream-json protocol models."""

from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field


class ProtocolMessage(BaseModel):
    """
    One decoded line of `claude --output-format stream-json` output.

    Only `type` is required and must be a string; every other field takes
    any JSON value. Keys that are not declared here are kept as
    model extras, so a message round-trips through `to_dict()` unchanged.
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(description="Message type: system, assistant, user, result, etc.")
    subtype: Optional[Any] = Field(None, description="Message subtype, e.g. init")
    session_id: Optional[Any] = Field(None, description="Resumable Claude session ID")
    content: Optional[Any] = Field(None, description="Message content")
    tool: Optional[Any] = Field(None, description="Tool name")
    tool_call_id: Optional[Any] = Field(None, description="Tool call ID")
    arguments: Optional[Any] = Field(None, description="Tool call arguments")
    output: Optional[Any] = Field(None, description="Tool call output")
    model: Optional[Any] = Field(None, description="Model reported by the init message")
    tools: Optional[Any] = Field(None, description="Tools reported by the init message")

    def is_init(self) -> bool:
        """Whether this is the system/init message carrying the session ID."""
        return self.type == "system" and self.subtype == "init"

    def to_dict(self) -> Dict[str, Any]:
        """Return the message with exactly the keys it was decoded from."""
        return self.model_dump(exclude_unset=True)


class CallerContext(BaseModel):
    """
    Messaging context of the caller.

    Its presence switches the CLI into interactive permission mode and adds
    the permission prompt MCP server.
    """

    model_config = ConfigDict(populate_by_name=True)

    channel: str = Field(description="Channel the request came from")
    thread_ts: Optional[str] = Field(None, alias="threadTs", description="Thread timestamp")
    user: str = Field(description="User who sent the request")

    def to_env_json(self) -> str:
        """Serialize for the SLACK_CONTEXT environment variable."""
        return self.model_dump_json(by_alias=True, exclude_none=True)
