"""HTTP API request and response models."""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from .directory import DirectoryScope, ResolveError


class QueryRequest(BaseModel):
    """Request model for running a Claude query."""

    user_id: str = Field(description="User ID", min_length=1)
    channel_id: str = Field(description="Channel ID", min_length=1)
    thread_ts: Optional[str] = Field(None, description="Thread timestamp")
    prompt: str = Field(description="Prompt for Claude", min_length=1)
    interactive: bool = Field(default=False, description="Route tool permissions through the permission prompt server")
    is_direct_message: Optional[bool] = Field(None, description="Explicit DM flag; inferred from the channel ID when omitted")


class DirectoryScopeRequest(BaseModel):
    """Identifies a working directory scope."""

    channel_id: str = Field(description="Channel ID", min_length=1)
    thread_ts: Optional[str] = Field(None, description="Thread timestamp")
    user_id: Optional[str] = Field(None, description="User ID")
    is_direct_message: Optional[bool] = Field(None, description="Explicit DM flag")


class SetDirectoryRequest(DirectoryScopeRequest):
    """Request model for assigning a working directory."""

    directory: str = Field(description="Absolute or relative directory path", min_length=1)


class DirectoryCommandRequest(DirectoryScopeRequest):
    """Request model for directory command text such as `cwd project`."""

    text: str = Field(description="Command text")


class DirectoryResponse(BaseModel):
    """Response model for the effective working directory."""

    directory: Optional[str] = Field(None, description="Absolute directory path")
    base_directory: Optional[str] = Field(None, description="Configured base directory")


class SetDirectoryResponse(BaseModel):
    """Response model for a successful assignment."""

    directory: str = Field(description="Resolved absolute directory path")


class DirectoryCommandResponse(BaseModel):
    """Response model for directory command text."""

    command: Optional[str] = Field(None, description="set, get, or None if the text is not a command")
    success: Optional[bool] = Field(None, description="Whether a set command succeeded")
    directory: Optional[str] = Field(None, description="Directory after the command")
    base_directory: Optional[str] = Field(None, description="Configured base directory")
    error: Optional[str] = Field(None, description="Error message of a failed set command")
    error_kind: Optional[ResolveError] = Field(None, description="Failure kind of a failed set command")


class DirectoryConfigResponse(BaseModel):
    """Response model for one stored assignment."""

    scope: DirectoryScope = Field(description="Assignment scope")
    channel_id: str = Field(description="Channel ID")
    thread_ts: Optional[str] = Field(None, description="Thread timestamp")
    user_id: Optional[str] = Field(None, description="User ID")
    directory: str = Field(description="Absolute directory path")
    set_at: datetime = Field(description="Assignment timestamp")


class DirectoryListResponse(BaseModel):
    """Response model for listing assignments."""

    directories: List[DirectoryConfigResponse] = Field(description="Stored assignments")
    total: int = Field(description="Number of assignments")


class SessionResponse(BaseModel):
    """Response model for a conversation session."""

    user_id: str = Field(description="User ID")
    channel_id: str = Field(description="Channel ID")
    thread_ts: Optional[str] = Field(None, description="Thread timestamp")
    session_id: Optional[str] = Field(None, description="Resumable Claude session ID")
    last_activity: datetime = Field(description="Last activity timestamp")


class SessionListResponse(BaseModel):
    """Response model for listing sessions."""

    sessions: List[SessionResponse] = Field(description="Active sessions")
    total: int = Field(description="Number of sessions")
