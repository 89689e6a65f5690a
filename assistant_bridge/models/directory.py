"""Working directory models."""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


PERSISTENCE_VERSION = "1.0"


class DirectoryScope(str, Enum):
    """Scope a working directory is assigned to."""

    CHANNEL = "channel"
    DM = "dm"
    THREAD = "thread"


class ResolveError(str, Enum):
    """Why a directory could not be resolved."""

    NOT_FOUND = "not_found"
    NOT_A_DIRECTORY = "not_a_directory"


class ResolveResult(BaseModel):
    """Outcome of DirectoryResolver.resolve()."""

    path: Optional[str] = Field(None, description="Resolved absolute path")
    error: Optional[ResolveError] = Field(None, description="Failure kind")

    @property
    def ok(self) -> bool:
        return self.error is None and self.path is not None


class SetDirectoryResult(BaseModel):
    """Outcome of DirectoryStore.set_working_directory()."""

    success: bool = Field(description="Whether the directory was assigned")
    resolved_path: Optional[str] = Field(None, description="Resolved absolute path")
    error: Optional[str] = Field(None, description="Error message")
    error_kind: Optional[ResolveError] = Field(None, description="Failure kind")


class WorkingDirectoryConfig(BaseModel):
    """A working directory assigned to a channel, DM or thread."""

    channel_id: str = Field(description="Channel ID")
    thread_ts: Optional[str] = Field(None, description="Thread timestamp")
    user_id: Optional[str] = Field(None, description="User who set the directory")
    directory: str = Field(description="Absolute directory path")
    set_at: datetime = Field(description="Assignment timestamp")
    scope: DirectoryScope = Field(default=DirectoryScope.CHANNEL, description="Assignment scope")


class PersistedDirectoryEntry(BaseModel):
    """One entry of the persistence file."""

    model_config = ConfigDict(populate_by_name=True)

    type: DirectoryScope
    channel_id: str = Field(alias="channelId")
    # threadTs is what older files used
    thread_id: Optional[str] = Field(
        None,
        alias="threadId",
        validation_alias=AliasChoices("threadId", "threadTs"),
    )
    user_id: Optional[str] = Field(None, alias="userId")
    directory: str
    set_at: datetime = Field(alias="setAt")

    @classmethod
    def from_config(cls, config: WorkingDirectoryConfig) -> "PersistedDirectoryEntry":
        return cls(
            type=config.scope,
            channel_id=config.channel_id,
            thread_id=config.thread_ts,
            user_id=config.user_id,
            directory=config.directory,
            set_at=config.set_at,
        )

    def to_config(self) -> WorkingDirectoryConfig:
        return WorkingDirectoryConfig(
            channel_id=self.channel_id,
            thread_ts=self.thread_id,
            user_id=self.user_id,
            directory=self.directory,
            set_at=self.set_at,
            scope=self.type,
        )


class PersistedDirectoryDocument(BaseModel):
    """Versioned snapshot of all working directory assignments."""

    version: str
    directories: Dict[str, PersistedDirectoryEntry] = Field(default_factory=dict)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)
