"""In-memory registry of Claude conversation sessions."""

from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from ..models.session import ConversationSession
from ..utils.logger import get_component_logger

DEFAULT_MAX_AGE_SECONDS = 30 * 60


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionRegistry:
    """
    Conversation sessions keyed by (user, channel, thread).

    Expiry is not automatic: an external caller runs
    cleanup_inactive_sessions() periodically.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        """
        Initialize the registry.

        Args:
            clock: Source of the current time
        """
        self.clock = clock
        self.sessions: Dict[str, ConversationSession] = {}
        self.logger = get_component_logger("SessionRegistry")

    @staticmethod
    def get_session_key(user_id: str, channel_id: str, thread_ts: Optional[str] = None) -> str:
        return f"{user_id}-{channel_id}-{thread_ts or 'direct'}"

    def get_session(
        self,
        user_id: str,
        channel_id: str,
        thread_ts: Optional[str] = None
    ) -> Optional[ConversationSession]:
        """Get the session for a conversation, or None. Has no side effects."""
        return self.sessions.get(self.get_session_key(user_id, channel_id, thread_ts))

    def create_session(
        self,
        user_id: str,
        channel_id: str,
        thread_ts: Optional[str] = None
    ) -> ConversationSession:
        """
        Create a fresh session, replacing any existing one for the same key.

        Args:
            user_id: User ID
            channel_id: Channel ID
            thread_ts: Thread timestamp, None for direct conversations

        Returns:
            The new session
        """
        session = ConversationSession(
            user_id=user_id,
            channel_id=channel_id,
            thread_ts=thread_ts,
            is_active=True,
            last_activity=self.clock(),
        )
        self.sessions[self.get_session_key(user_id, channel_id, thread_ts)] = session
        return session

    def touch(self, session: ConversationSession) -> None:
        """Refresh a session's last activity time."""
        session.last_activity = self.clock()
        session.is_active = True

    def list_sessions(self) -> List[ConversationSession]:
        return list(self.sessions.values())

    def cleanup_inactive_sessions(self, max_age_seconds: float = DEFAULT_MAX_AGE_SECONDS) -> int:
        """
        Remove sessions idle for longer than max_age_seconds.

        Args:
            max_age_seconds: Maximum idle time

        Returns:
            Number of sessions removed
        """
        now = self.clock()
        expired = [
            key for key, session in self.sessions.items()
            if (now - session.last_activity).total_seconds() > max_age_seconds
        ]
        for key in expired:
            del self.sessions[key]

        if expired:
            self.logger.info(f"Cleaned up {len(expired)} inactive sessions")
        return len(expired)
