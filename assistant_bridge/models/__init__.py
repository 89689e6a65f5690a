"""Data models."""

from .directory import (
    PERSISTENCE_VERSION,
    DirectoryScope,
    PersistedDirectoryDocument,
    PersistedDirectoryEntry,
    ResolveError,
    ResolveResult,
    SetDirectoryResult,
    WorkingDirectoryConfig,
)
from .message import CallerContext, ProtocolMessage
from .session import ConversationSession

__all__ = [
    "PERSISTENCE_VERSION",
    "DirectoryScope",
    "PersistedDirectoryDocument",
    "PersistedDirectoryEntry",
    "ResolveError",
    "ResolveResult",
    "SetDirectoryResult",
    "WorkingDirectoryConfig",
    "CallerContext",
    "ProtocolMessage",
    "ConversationSession",
]
