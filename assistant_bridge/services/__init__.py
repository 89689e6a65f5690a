"""Services package."""

from .debounce import Debouncer, LoopScheduler
from .directory_resolver import DirectoryResolver
from .directory_store import DirectoryStore
from .session_registry import SessionRegistry

__all__ = [
    "Debouncer",
    "LoopScheduler",
    "DirectoryResolver",
    "DirectoryStore",
    "SessionRegistry",
]
