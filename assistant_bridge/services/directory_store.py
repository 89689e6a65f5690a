"""Working directory assignments with debounced disk persistence.

Persistence file format:
  {"version": "1.0",
   "directories": {key: {"type", "channelId", "threadId", "userId",
                         "directory", "setAt"}}}
"""

import json
import os
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from ..models.directory import (
    PERSISTENCE_VERSION,
    DirectoryScope,
    PersistedDirectoryDocument,
    PersistedDirectoryEntry,
    ResolveError,
    SetDirectoryResult,
    WorkingDirectoryConfig,
)
from ..utils.file_writer import atomic_write_text
from ..utils.logger import get_component_logger
from .debounce import Debouncer, Scheduler
from .directory_resolver import DirectoryResolver

SAVE_DEBOUNCE_SECONDS = 1.0


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_dm_channel(channel_id: str) -> bool:
    """Slack direct message channel IDs start with "D"."""
    return channel_id.startswith("D")


class DirectoryStore:
    """
    Working directories keyed by thread, DM or channel.

    Lookups prefer the thread assignment and fall back to the channel (or
    DM) assignment. Every mutation schedules one debounced save of the
    whole map.
    """

    def __init__(
        self,
        resolver: DirectoryResolver,
        persistence_path: str,
        clock: Callable[[], datetime] = utcnow,
        scheduler: Optional[Scheduler] = None,
        save_debounce_seconds: float = SAVE_DEBOUNCE_SECONDS,
        load: bool = True
    ):
        """
        Initialize the store and load the persistence file.

        Args:
            resolver: Resolver used to validate directories on set
            persistence_path: JSON file the assignments are saved to
            clock: Source of the current time
            scheduler: Timer source for the debounced save
            save_debounce_seconds: Quiet period before a save
            load: Whether to load the persistence file immediately
        """
        self.resolver = resolver
        self.persistence_path = persistence_path
        self.clock = clock
        self.configs: Dict[str, WorkingDirectoryConfig] = {}
        self.logger = get_component_logger("DirectoryStore")
        self._saver = Debouncer(
            lambda: self.save_to_disk(),
            delay=save_debounce_seconds,
            scheduler=scheduler,
        )

        if load:
            self.load_from_disk()

    # === Keys ===

    @staticmethod
    def _is_dm(channel_id: str, is_direct_message: Optional[bool]) -> bool:
        if is_direct_message is not None:
            return is_direct_message
        return is_dm_channel(channel_id)

    def get_config_key(
        self,
        channel_id: str,
        thread_ts: Optional[str] = None,
        user_id: Optional[str] = None,
        is_direct_message: Optional[bool] = None
    ) -> str:
        """
        Get the storage key for a scope.

        Args:
            channel_id: Channel ID
            thread_ts: Thread timestamp; selects the thread scope
            user_id: User ID; selects the DM scope in direct message channels
            is_direct_message: Explicit DM flag; when None the channel ID
                prefix decides

        Returns:
            "<channel>-<thread>", "<channel>-<user>" or "<channel>"
        """
        if thread_ts:
            return f"{channel_id}-{thread_ts}"
        if user_id and self._is_dm(channel_id, is_direct_message):
            return f"{channel_id}-{user_id}"
        return channel_id

    # === Mutations ===

    def set_working_directory(
        self,
        channel_id: str,
        directory: str,
        thread_ts: Optional[str] = None,
        user_id: Optional[str] = None,
        is_direct_message: Optional[bool] = None
    ) -> SetDirectoryResult:
        """
        Resolve and assign a working directory.

        Args:
            channel_id: Channel ID
            directory: Path as typed by the user
            thread_ts: Thread timestamp for a thread-scoped assignment
            user_id: User who set the directory
            is_direct_message: Explicit DM flag

        Returns:
            SetDirectoryResult; resolution failures are reported, not raised
        """
        result = self.resolver.resolve(directory)

        if result.error == ResolveError.NOT_FOUND:
            message = f'Directory not found: "{directory}"'
            if self.resolver.base_directory:
                message += f" (checked in base directory: {self.resolver.base_directory})"
            return SetDirectoryResult(success=False, error=message, error_kind=result.error)

        if result.error == ResolveError.NOT_A_DIRECTORY:
            return SetDirectoryResult(
                success=False,
                error="Path is not a directory",
                error_kind=result.error
            )

        is_dm = self._is_dm(channel_id, is_direct_message)
        if thread_ts:
            scope = DirectoryScope.THREAD
        elif is_dm:
            scope = DirectoryScope.DM
        else:
            scope = DirectoryScope.CHANNEL

        key = self.get_config_key(channel_id, thread_ts, user_id, is_direct_message)
        self.configs[key] = WorkingDirectoryConfig(
            channel_id=channel_id,
            thread_ts=thread_ts,
            user_id=user_id,
            directory=result.path,
            set_at=self.clock(),
            scope=scope,
        )
        self.logger.info(
            f"Working directory set: key={key}, directory={result.path}, "
            f"input={directory}, scope={scope.value}"
        )

        self.schedule_save()
        return SetDirectoryResult(success=True, resolved_path=result.path)

    def remove_working_directory(
        self,
        channel_id: str,
        thread_ts: Optional[str] = None,
        user_id: Optional[str] = None,
        is_direct_message: Optional[bool] = None
    ) -> bool:
        """
        Remove the assignment for exactly this scope.

        Returns:
            True if an assignment was removed
        """
        key = self.get_config_key(channel_id, thread_ts, user_id, is_direct_message)
        if self.configs.pop(key, None) is None:
            return False

        self.logger.info(f"Working directory removed: key={key}")
        self.schedule_save()
        return True

    # === Lookups ===

    def get_working_directory(
        self,
        channel_id: str,
        thread_ts: Optional[str] = None,
        user_id: Optional[str] = None,
        is_direct_message: Optional[bool] = None
    ) -> Optional[str]:
        """
        Get the effective working directory for a conversation.

        The thread assignment wins; otherwise the channel or DM assignment
        is used. The thread ID never takes part in the fallback key.

        Returns:
            Absolute directory path, or None if nothing is configured
        """
        if thread_ts:
            thread_config = self.configs.get(self.get_config_key(channel_id, thread_ts))
            if thread_config:
                self.logger.debug(
                    f"Using thread working directory: {thread_config.directory} (thread={thread_ts})"
                )
                return thread_config.directory

        channel_key = self.get_config_key(channel_id, None, user_id, is_direct_message)
        channel_config = self.configs.get(channel_key)
        if channel_config:
            self.logger.debug(
                f"Using channel/DM working directory: {channel_config.directory} (channel={channel_id})"
            )
            return channel_config.directory

        self.logger.debug(f"No working directory configured: channel={channel_id}, thread={thread_ts}")
        return None

    def get_channel_working_directory(self, channel_id: str) -> Optional[str]:
        """Get the channel-scoped directory only, ignoring threads and DMs."""
        config = self.configs.get(self.get_config_key(channel_id))
        return config.directory if config else None

    def has_channel_working_directory(self, channel_id: str) -> bool:
        return self.get_channel_working_directory(channel_id) is not None

    def list_configurations(self) -> List[WorkingDirectoryConfig]:
        return list(self.configs.values())

    # === Persistence ===

    def schedule_save(self) -> None:
        """Schedule a save, restarting the quiet period."""
        self._saver.trigger()

    @property
    def save_pending(self) -> bool:
        return self._saver.pending

    async def flush(self) -> None:
        """Write any pending changes now."""
        await self._saver.flush()

    def close(self) -> None:
        """Drop a pending save without writing it."""
        self._saver.cancel()

    def _build_document(self) -> PersistedDirectoryDocument:
        return PersistedDirectoryDocument(
            version=PERSISTENCE_VERSION,
            directories={
                key: PersistedDirectoryEntry.from_config(config)
                for key, config in self.configs.items()
            },
        )

    async def save_to_disk(self) -> None:
        """
        Write the whole map to the persistence file.

        I/O errors are logged; the previous file is left untouched and the
        in-memory state keeps serving reads.
        """
        try:
            document = self._build_document()
            await atomic_write_text(self.persistence_path, document.to_json())
            self.logger.debug(
                f"Working directories persisted to disk: path={self.persistence_path}, "
                f"count={len(document.directories)}"
            )
        except OSError as e:
            self.logger.error(f"Failed to save working directories to disk: {e}")

    def load_from_disk(self) -> None:
        """
        Replace the in-memory map with the persistence file's contents.

        A missing file, a version mismatch or an unreadable file leaves the
        store empty. Entries whose directory no longer exists are skipped.
        """
        self.configs = {}

        if not os.path.exists(self.persistence_path):
            self.logger.info(f"No persistence file found, starting fresh: {self.persistence_path}")
            return

        try:
            with open(self.persistence_path, "r", encoding="utf-8") as f:
                data = json.load(f)

            version = data.get("version") if isinstance(data, dict) else None
            if version != PERSISTENCE_VERSION:
                self.logger.warning(
                    f"Persistence file version mismatch, starting fresh: "
                    f"expected={PERSISTENCE_VERSION}, found={version}"
                )
                return

            document = PersistedDirectoryDocument.model_validate(data)
        except (OSError, ValueError, ValidationError) as e:
            self.logger.error(f"Failed to load working directories from disk: {e}")
            self.logger.info("Starting with empty configuration")
            return

        for key, entry in document.directories.items():
            if not os.path.isdir(entry.directory):
                self.logger.warning(
                    f"Skipping non-existent directory from persistence: key={key}, "
                    f"directory={entry.directory}"
                )
                continue
            self.configs[key] = entry.to_config()

        self.logger.info(
            f"Working directories loaded from disk: path={self.persistence_path}, "
            f"count={len(self.configs)}"
        )
