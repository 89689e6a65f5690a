"""Conversation session model."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class ConversationSession(BaseModel):
    """A conversation with Claude, keyed by user, channel and thread."""

    user_id: str = Field(description="User ID")
    channel_id: str = Field(description="Channel ID")
    thread_ts: Optional[str] = Field(None, description="Thread timestamp, None for direct conversations")
    session_id: Optional[str] = Field(None, description="Resumable Claude session ID, set by the init message")
    is_active: bool = Field(default=True, description="Whether the session is active")
    last_activity: datetime = Field(description="Last activity timestamp")
